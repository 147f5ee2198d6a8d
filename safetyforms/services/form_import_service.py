"""
Form Template Import Service

Imports declarative JSON form configurations as persisted form templates.

Features:
  - Validate a configuration before any write (form_config_validation)
  - Create template → sections → fields → workflow in one transaction,
    rolled back as a whole when any step fails
  - Bulk import with per-form error reporting (never stops early)
  - Idempotent bulk import that skips codes already present in the scope
  - Existence check, delete by id, delete by codes

Company scope: ``company_id=None`` means a global template; any other value
scopes the template to that company. Lookups match the scope exactly, so a
company template is invisible to the global scope and vice versa.
"""

import logging

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from safetyforms.core.exceptions import FormImportError, NotFoundError, ValidationError
from safetyforms.models import db
from safetyforms.models.form_builder import FormField, FormSection, FormTemplate, FormWorkflow
from safetyforms.services.form_config_validation import normalize_options, validate_form_config
from safetyforms.tenant import CompanyScope

logger = logging.getLogger(__name__)


def _store_message(exc: SQLAlchemyError) -> str:
    """Driver message without SQLAlchemy's statement/parameter dump."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def _omit_none(values: dict, *keys) -> dict:
    """Drop ``keys`` whose value is None so the column default applies."""
    return {k: v for k, v in values.items() if not (k in keys and v is None)}


def _log_extra(config: dict, scope: CompanyScope, **extra) -> dict:
    return {"form_code": config.get("code"), "company_id": scope.company_id, **extra}


# ═══════════════════════════════════════════════════════════════
# Row writers (one flush per call)
# ═══════════════════════════════════════════════════════════════

def _insert_template(config: dict, scope: CompanyScope) -> FormTemplate:
    values = _omit_none(
        {
            "company_id": scope.company_id,
            "form_code": config["code"],
            "name": config["name"],
            "description": config.get("description"),
            "cor_element": config.get("cor_element"),
            "frequency": config.get("frequency"),
            "estimated_time_minutes": config.get("estimated_time_minutes"),
            "icon": config.get("icon"),
            "color": config.get("color"),
            "is_mandatory": bool(config.get("is_mandatory", False)),
            "is_active": True,
        },
        "frequency", "estimated_time_minutes", "icon", "color",
    )
    template = FormTemplate(**values)
    db.session.add(template)
    db.session.flush()
    return template


def _insert_section(template_id: str, section_config: dict) -> FormSection:
    section = FormSection(
        form_template_id=template_id,
        title=section_config["title"],
        description=section_config.get("description") or None,
        order_index=section_config.get("order_index", 0),
        is_repeatable=bool(section_config.get("is_repeatable", False)),
        conditional_logic=section_config.get("conditional_logic") or None,
    )
    db.session.add(section)
    db.session.flush()
    return section


def _insert_fields(section_id: str, field_configs: list[dict]) -> list[FormField]:
    """Insert all fields of one section as a single batched write."""
    fields = [
        FormField(
            form_section_id=section_id,
            field_code=fc["code"],
            label=fc["label"],
            field_type=fc["field_type"],
            placeholder=fc.get("placeholder") or None,
            help_text=fc.get("help_text") or None,
            default_value=fc.get("default_value") or None,
            options=normalize_options(fc.get("options")),
            validation_rules=fc.get("validation_rules") or {},
            conditional_logic=fc.get("conditional_logic") or None,
            order_index=fc.get("order_index", 0),
            width=fc.get("width") or "full",
        )
        for fc in field_configs
    ]
    db.session.add_all(fields)
    db.session.flush()
    return fields


def _insert_workflow(template_id: str, workflow_config: dict) -> FormWorkflow:
    workflow = FormWorkflow(
        **_omit_none(
            {
                "form_template_id": template_id,
                "submit_to_role": workflow_config.get("submit_to_role"),
                "notify_roles": workflow_config.get("notify_roles") or [],
                "creates_task": bool(workflow_config.get("creates_task", False)),
                "task_template": workflow_config.get("task_template") or None,
                "sync_priority": workflow_config.get("sync_priority"),
                "requires_approval": bool(workflow_config.get("requires_approval", False)),
            },
            "sync_priority",
        )
    )
    db.session.add(workflow)
    db.session.flush()
    return workflow


def _run_step(stage: str, message: str, form_code: str, write, *args):
    """Run one write; store errors become a FormImportError tagged with ``stage``."""
    try:
        return write(*args)
    except SQLAlchemyError as exc:
        raise FormImportError(f"{message}: {_store_message(exc)}", stage=stage, form_code=form_code) from exc


def _rollback_import(template_id: str, stage: str, extra: dict) -> SQLAlchemyError | None:
    """Discard the import transaction; the template and its children go with it.

    Returns the store error when the rollback itself failed, else None.
    """
    extra = {**extra, "template_id": template_id, "stage": stage}
    try:
        db.session.rollback()
    except SQLAlchemyError as exc:
        logger.error(
            "Rollback failed for form template id=%s, template may be orphaned: %s",
            template_id, exc, extra=extra,
        )
        return exc
    logger.warning("Rolled back form import at stage=%s template id=%s", stage, template_id, extra=extra)
    return None


# ═══════════════════════════════════════════════════════════════
# Single import
# ═══════════════════════════════════════════════════════════════

def import_form_from_json(config: dict, company_id: str | None = None) -> str:
    """Import one form configuration and return the new template id.

    Args:
        config: Form configuration dict (see form_config_validation).
        company_id: Owning company, or None for a global template.

    Returns:
        The generated FormTemplate id.

    Raises:
        ValidationError: The configuration is incomplete; nothing was written.
            ``details["errors"]`` holds the individual violations.
        FormImportError: A write failed. ``stage`` names the failing step;
            every row written by this call has been rolled back unless
            ``rollback_error`` is set.
        Any other exception raised while writing rows propagates unchanged,
        after the transaction has been rolled back.
    """
    errors = validate_form_config(config)
    if errors:
        raise ValidationError(f"Validation failed: {'; '.join(errors)}", details={"errors": errors})

    scope = CompanyScope.of(company_id)
    code = config["code"]
    extra = _log_extra(config, scope)

    try:
        template = _run_step("template", "Failed to create form template", code, _insert_template, config, scope)
    except Exception:
        db.session.rollback()
        raise
    template_id = template.id

    try:
        for section_config in config["sections"]:
            title = section_config["title"]
            section = _run_step(
                "section", f'Failed to create section "{title}"', code,
                _insert_section, template_id, section_config,
            )
            _run_step(
                "fields", f'Failed to create fields for section "{title}"', code,
                _insert_fields, section.id, section_config["fields"],
            )
        _run_step("workflow", "Failed to create workflow", code, _insert_workflow, template_id, config["workflow"])
        _run_step("commit", "Failed to commit form import", code, db.session.commit)
    except FormImportError as error:
        error.template_id = template_id
        error.rollback_error = _rollback_import(template_id, error.stage, extra)
        raise
    except Exception:
        # Non-store errors still leave flushed rows behind
        _rollback_import(template_id, "build", extra)
        raise

    logger.info("FormTemplate imported id=%s (%s)", template_id, scope,
                extra={**extra, "template_id": template_id})
    return template_id


# ═══════════════════════════════════════════════════════════════
# Bulk import
# ═══════════════════════════════════════════════════════════════

def _new_result() -> dict:
    return {
        "total": 0,
        "successful": 0,
        "failed": 0,
        "skipped": 0,
        "errors": [],
        "imported_ids": [],
        "skipped_codes": [],
    }


def _display_name(config) -> str:
    if isinstance(config, dict):
        return config.get("name") or config.get("code") or "<unnamed form>"
    return "<invalid form configuration>"


def _error_message(exc: Exception) -> str:
    if isinstance(exc, (ValidationError, FormImportError)):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"


def _import_into_result(config, company_id, result: dict) -> None:
    """Import one config and record the outcome; failures are captured, not raised."""
    name = _display_name(config)
    code = config.get("code") if isinstance(config, dict) else None
    extra = {"form_code": code, "company_id": CompanyScope.of(company_id).company_id}

    result["total"] += 1
    try:
        template_id = import_form_from_json(config, company_id)
    except Exception as exc:
        result["failed"] += 1
        result["errors"].append({"form": name, "error": _error_message(exc)})
        logger.error("Failed to import %s: %s", name, exc, extra=extra)
        return

    result["successful"] += 1
    result["imported_ids"].append(template_id)
    logger.info("Imported: %s (%s)", name, code, extra={**extra, "template_id": template_id})


def bulk_import_forms(configs: list[dict], company_id: str | None = None) -> dict:
    """Import every configuration in order, continuing past failures.

    Returns:
        {"total", "successful", "failed", "skipped", "errors": [{"form", "error"}],
         "imported_ids", "skipped_codes"} where total == successful + failed
        == len(configs).
    """
    result = _new_result()
    for config in configs:
        _import_into_result(config, company_id, result)

    logger.info("Bulk form import finished: %s/%s imported, %s failed",
                result["successful"], result["total"], result["failed"])
    return result


def bulk_import_forms_if_not_exists(
    configs: list[dict],
    company_id: str | None = None,
    skip_existing: bool = True,
) -> dict:
    """Like bulk_import_forms, but skip configurations whose code already exists.

    Skipped configurations are not processed: they count towards neither
    ``successful`` nor ``failed`` (nor ``total``) and are reported under
    ``skipped``/``skipped_codes`` instead. The existence check and the
    insert are separate statements, so two concurrent runs can still both
    import the same global code.
    """
    result = _new_result()
    for config in configs:
        code = config.get("code") if isinstance(config, dict) else None
        if skip_existing and code and form_exists(code, company_id):
            result["skipped"] += 1
            result["skipped_codes"].append(code)
            logger.info("Skipped (exists): %s (%s)", _display_name(config), code,
                        extra={"form_code": code, "company_id": CompanyScope.of(company_id).company_id})
            continue
        _import_into_result(config, company_id, result)

    logger.info("Bulk form import finished: %s/%s imported, %s failed, %s skipped",
                result["successful"], result["total"], result["failed"], result["skipped"])
    return result


# ═══════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════

def form_exists(code: str, company_id: str | None = None, *, fail_open: bool | None = None) -> bool:
    """Return True when a template with ``code`` exists in the company scope.

    Never raises on store errors. On error the answer follows ``fail_open``
    (default: the FORM_EXISTS_FAIL_OPEN config): fail-open reports "not
    found", fail-closed reports "exists".
    """
    scope = CompanyScope.of(company_id)
    try:
        count = FormTemplate.query_for_scope(scope).filter(FormTemplate.form_code == code).count()
    except SQLAlchemyError as exc:
        db.session.rollback()
        if fail_open is None:
            fail_open = current_app.config.get("FORM_EXISTS_FAIL_OPEN", True)
        logger.error(
            "Error checking form existence code=%s (%s), reporting %s: %s",
            code, scope, "not found" if fail_open else "exists", exc,
            extra={"form_code": code, "company_id": scope.company_id},
        )
        return not fail_open
    return count > 0


def get_form_template(template_id: str) -> dict:
    """Return a template with its ordered sections, fields and workflow.

    Raises:
        NotFoundError: If no template has that id.
    """
    template = db.session.get(FormTemplate, template_id)
    if not template:
        raise NotFoundError(resource="FormTemplate", resource_id=template_id)
    return template.to_dict(include_children=True)


def list_form_templates(company_id: str | None = None, include_global: bool = True) -> list[dict]:
    """List template summaries visible to a company, ordered by COR element then name.

    With a company id and ``include_global`` the company's own templates
    and the global ones are returned together; otherwise the scope is
    matched exactly.
    """
    scope = CompanyScope.of(company_id)
    if not scope.is_global and include_global:
        q = FormTemplate.query.filter(
            or_(FormTemplate.company_id == scope.company_id, FormTemplate.company_id.is_(None))
        )
    else:
        q = FormTemplate.query_for_scope(scope)
    q = q.order_by(FormTemplate.cor_element, FormTemplate.name)
    return [t.to_dict() for t in q.all()]


# ═══════════════════════════════════════════════════════════════
# Deletion
# ═══════════════════════════════════════════════════════════════

def delete_form_template(template_id: str) -> bool:
    """Delete one template; sections, fields and workflow cascade with it.

    Returns True when a template was deleted. A missing id and a store
    error both return False (the error is logged, not raised).
    """
    try:
        template = db.session.get(FormTemplate, template_id)
        if not template:
            logger.info("FormTemplate id=%s not found, nothing deleted", template_id)
            return False
        db.session.delete(template)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error deleting form template id=%s: %s", template_id, exc,
                     extra={"template_id": template_id})
        return False

    logger.info("FormTemplate deleted id=%s", template_id, extra={"template_id": template_id})
    return True


def delete_forms_by_code(codes: list[str], company_id: str | None = None) -> int:
    """Delete every template in the company scope whose code is in ``codes``.

    Returns:
        Number of templates deleted; 0 when nothing matched or the store
        failed (the error is logged, not raised).
    """
    if not codes:
        return 0

    scope = CompanyScope.of(company_id)
    try:
        templates = (
            FormTemplate.query_for_scope(scope)
            .filter(FormTemplate.form_code.in_(list(codes)))
            .all()
        )
        for template in templates:
            db.session.delete(template)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error deleting forms codes=%s (%s): %s", list(codes), scope, exc,
                     extra={"company_id": scope.company_id})
        return 0

    logger.info("Deleted %s form templates by code (%s)", len(templates), scope,
                extra={"company_id": scope.company_id})
    return len(templates)
