"""
Form configuration validation & option normalization.

Pure functions over the JSON form configuration (a plain dict, as loaded from
a seed file or a request body). Nothing here touches the database, so the
importer can reject a malformed configuration before the first insert.

Configuration shape:
    {
      "code": "DAILY_SAFETY_INSPECTION", "name": "...", "cor_element": 7,
      "frequency": "daily", "sections": [
        {"title": "...", "order_index": 0, "fields": [
          {"code": "...", "label": "...", "field_type": "radio",
           "options": ["Pass", "Fail"], "order_index": 0}
        ]}
      ],
      "workflow": {"submit_to_role": "supervisor", "notify_roles": [], "sync_priority": 3}
    }
"""

COR_ELEMENT_MIN = 2
COR_ELEMENT_MAX = 14

FREQUENCIES = ("daily", "weekly", "monthly", "quarterly", "annual", "as_needed")

FIELD_TYPES = (
    "text",
    "textarea",
    "number",
    "date",
    "time",
    "dropdown",
    "radio",
    "checkbox",
    "multiselect",
    "signature",
    "photo",
    "file",
    "gps",
    "worker_select",
    "jobsite_select",
    "equipment_select",
)

# Field types whose input is picked from a fixed option list
SELECTION_FIELD_TYPES = ("dropdown", "radio", "checkbox", "multiselect")

FIELD_WIDTHS = ("full", "half", "third", "quarter")

CONDITION_OPERATORS = ("equals", "not_equals", "contains", "greater_than", "less_than")

SYNC_PRIORITY_MIN = 1
SYNC_PRIORITY_MAX = 5


def _is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ═══════════════════════════════════════════════════════════════
# Option normalization
# ═══════════════════════════════════════════════════════════════

def normalize_options(options) -> list[dict] | None:
    """Return options as ``[{"value": ..., "label": ...}]``, or None when there are none.

    Accepts either a list of plain strings or a list of value/label dicts.
    The encoding is read from the first element only; one field's options
    are expected to use a single encoding. The input list is never mutated.
    """
    if not options:
        return None

    if isinstance(options[0], dict):
        return [dict(opt) for opt in options]

    return [{"value": opt, "label": opt} for opt in options]


# ═══════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════

def collect_field_codes(config: dict) -> set[str]:
    """All non-blank field codes declared anywhere in the form."""
    codes = set()
    for section in _as_list(_as_dict(config).get("sections")):
        for field in _as_list(_as_dict(section).get("fields")):
            code = _as_dict(field).get("code")
            if not _is_blank(code):
                codes.add(str(code))
    return codes


def _condition_errors(logic, owner: str, field_codes: set[str]) -> list[str]:
    """Check that a conditional rule names a known operator and an existing field."""
    if logic is None:
        return []
    if not isinstance(logic, dict):
        return [f"{owner}: Conditional logic must be an object"]

    errors = []
    ref = logic.get("field_code")
    if _is_blank(ref):
        errors.append(f"{owner}: Conditional logic field_code is required")
    elif str(ref) not in field_codes:
        errors.append(f'{owner}: Conditional logic references unknown field "{ref}"')

    operator = logic.get("operator")
    if operator not in CONDITION_OPERATORS:
        errors.append(f'{owner}: Unknown conditional operator "{operator}"')
    return errors


def _option_errors(options, owner: str) -> list[str]:
    """Options must be a list using one encoding: plain strings or value/label objects."""
    if not isinstance(options, list):
        return [f"{owner}: Options must be a list"]
    if all(isinstance(opt, str) for opt in options):
        return []
    if all(
        isinstance(opt, dict) and not _is_blank(opt.get("value")) and not _is_blank(opt.get("label"))
        for opt in options
    ):
        return []
    return [f"{owner}: Options must be all strings or all {{value, label}} objects"]


def validate_form_config(config: dict) -> list[str]:
    """Check a form configuration for structural completeness.

    Returns a list of human-readable violations; an empty list means the
    configuration can be imported. All violations are collected, the walk
    never stops at the first one, and nothing is raised.

    Sections are identified by title (or "Section N" when the title itself is
    missing) and fields by code (or "Field N"), so the caller can locate a
    problem without walking the structure again.
    """
    errors: list[str] = []
    config = _as_dict(config)

    if _is_blank(config.get("code")):
        errors.append("Form code is required")

    if _is_blank(config.get("name")):
        errors.append("Form name is required")

    cor_element = config.get("cor_element")
    if not _is_int(cor_element) or not COR_ELEMENT_MIN <= cor_element <= COR_ELEMENT_MAX:
        errors.append(f"COR element must be between {COR_ELEMENT_MIN} and {COR_ELEMENT_MAX}")

    sections = _as_list(config.get("sections"))
    if not sections:
        errors.append("At least one section is required")

    workflow = config.get("workflow")
    if not workflow:
        errors.append("Workflow configuration is required")

    for section_index, section in enumerate(sections):
        section = _as_dict(section)
        title = section.get("title")
        if _is_blank(title):
            errors.append(f"Section {section_index + 1}: Title is required")

        fields = _as_list(section.get("fields"))
        if not fields:
            errors.append(f'Section "{title}": At least one field is required')

        for field_index, field in enumerate(fields):
            field = _as_dict(field)
            if _is_blank(field.get("code")):
                errors.append(f'Section "{title}", Field {field_index + 1}: Code is required')

            if _is_blank(field.get("label")):
                errors.append(f'Section "{title}", Field {field_index + 1}: Label is required')

            field_type = field.get("field_type")
            if field_type in SELECTION_FIELD_TYPES and not field.get("options"):
                errors.append(f'Field "{field.get("code")}": Options are required for {field_type} fields')

    errors.extend(_extended_errors(config, sections, workflow))
    return errors


def _extended_errors(config: dict, sections: list, workflow) -> list[str]:
    """Enum, uniqueness, reference and range checks beyond structural completeness.

    Each check only fires when the value is present, so a minimal
    configuration that passes the structural checks still passes here.
    """
    errors: list[str] = []
    field_codes = collect_field_codes(config)

    frequency = config.get("frequency")
    if frequency is not None and frequency not in FREQUENCIES:
        errors.append(f'Unknown frequency "{frequency}"')

    for section_index, section in enumerate(sections):
        section = _as_dict(section)
        title = section.get("title")
        section_label = f'Section "{title}"' if not _is_blank(title) else f"Section {section_index + 1}"
        errors.extend(_condition_errors(section.get("conditional_logic"), section_label, field_codes))

        seen_codes: set[str] = set()
        for field_index, field in enumerate(_as_list(section.get("fields"))):
            field = _as_dict(field)
            code = field.get("code")
            field_label = f'Field "{code}"' if not _is_blank(code) else f"{section_label}, Field {field_index + 1}"

            field_type = field.get("field_type")
            if field_type not in FIELD_TYPES:
                errors.append(f'{field_label}: Unknown field type "{field_type}"')

            if field.get("options") is not None:
                errors.extend(_option_errors(field["options"], field_label))

            width = field.get("width")
            if width is not None and width not in FIELD_WIDTHS:
                errors.append(f'{field_label}: Unknown width "{width}"')

            if not _is_blank(code):
                if code in seen_codes:
                    errors.append(f'{section_label}: Duplicate field code "{code}"')
                seen_codes.add(code)

            errors.extend(_condition_errors(field.get("conditional_logic"), field_label, field_codes))

    if isinstance(workflow, dict):
        priority = workflow.get("sync_priority")
        if priority is not None and (
            not _is_int(priority) or not SYNC_PRIORITY_MIN <= priority <= SYNC_PRIORITY_MAX
        ):
            errors.append(
                f"Workflow sync_priority must be between {SYNC_PRIORITY_MIN} and {SYNC_PRIORITY_MAX}"
            )

    return errors
