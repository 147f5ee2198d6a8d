"""
Platform-wide exception hierarchy.

Services raise these canonical types; blueprints map them to HTTP status
codes once, so callers never import ad-hoc exception classes from service
modules.

Usage:
    from safetyforms.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="FormTemplate", resource_id=template_id)
    raise ValidationError("Validation failed: ...", details={"errors": [...]})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist within the given scope.

    Args:
        resource: Human-readable model/entity name (e.g. "FormTemplate").
        resource_id: The PK that was looked up. Included in logs, not in HTTP response.
        company_id: Optional — the scope that was enforced. For debug logging only.
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        company_id: str | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.company_id = company_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        if company_id is not None:
            msg += f" (company={company_id})"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails structural or business-rule validation.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional structured breakdown for API responses
                 (the form importer puts the violation list under "errors").
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class FormImportError(Exception):
    """Raised when persisting a validated form configuration fails.

    The import runs inside one transaction; by the time this reaches the
    caller the partial write has been rolled back. If the rollback itself
    failed, the store error is kept on ``rollback_error`` and the template
    row (``template_id``) may survive until it is deleted explicitly.

    Maps to HTTP 500.

    Args:
        message: Step-prefixed message, e.g. 'Failed to create section "Main": ...'.
        stage: Which write failed: "template", "section", "fields",
               "workflow" or "commit".
        form_code: Code of the form being imported.
    """

    def __init__(self, message: str, stage: str, form_code: str | None = None) -> None:
        self.stage = stage
        self.form_code = form_code
        self.template_id: str | None = None
        self.rollback_error: Exception | None = None
        super().__init__(message)
