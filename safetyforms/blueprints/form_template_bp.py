"""
Form Template Blueprint

JSON form configuration import and template housekeeping.

Endpoints:
  POST   /api/v1/form-templates/import        — Import one configuration
  POST   /api/v1/form-templates/bulk-import   — Import many (skips existing by default)
  GET    /api/v1/form-templates/exists        — Does a code exist in a company scope?
  GET    /api/v1/form-templates               — List templates (company_id filter)
  GET    /api/v1/form-templates/<id>          — Template with sections, fields, workflow
  DELETE /api/v1/form-templates/<id>          — Delete one template
  DELETE /api/v1/form-templates?codes=a,b     — Delete by codes within a company scope

``company_id`` is optional everywhere; omitted or empty means global templates.
"""

import logging

from flask import Blueprint, jsonify, request

from safetyforms.core.exceptions import FormImportError, NotFoundError, ValidationError
from safetyforms.services import form_import_service
from safetyforms.utils.errors import E, api_error

logger = logging.getLogger(__name__)

form_template_bp = Blueprint("form_template_bp", __name__, url_prefix="/api/v1/form-templates")


def _company_id_arg():
    return request.args.get("company_id") or None


def _bool_arg(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# ═══════════════════════════════════════════════════════════════
# Import
# ═══════════════════════════════════════════════════════════════
@form_template_bp.route("/import", methods=["POST"])
def import_template():
    """Import one form configuration: body ``{"config": {...}, "company_id": ...}``."""
    data = request.get_json(silent=True) or {}
    config = data.get("config")
    if not isinstance(config, dict):
        return api_error(E.VALIDATION_REQUIRED, "config object is required")

    try:
        template_id = form_import_service.import_form_from_json(config, data.get("company_id") or None)
    except ValidationError as e:
        return api_error(E.VALIDATION_INVALID, str(e), details=e.details)
    except FormImportError as e:
        return api_error(E.DATABASE, str(e), details={"stage": e.stage, "form_code": e.form_code})

    return jsonify({"id": template_id}), 201


@form_template_bp.route("/bulk-import", methods=["POST"])
def bulk_import_templates():
    """Import a list of configurations.

    Body: ``{"configs": [...], "company_id": ..., "skip_existing": true}``.
    With ``skip_existing`` false every configuration is imported, even when
    its code already exists.
    """
    data = request.get_json(silent=True) or {}
    configs = data.get("configs")
    if not isinstance(configs, list):
        return api_error(E.VALIDATION_REQUIRED, "configs list is required")

    company_id = data.get("company_id") or None
    if _bool_arg(data.get("skip_existing"), True):
        result = form_import_service.bulk_import_forms_if_not_exists(configs, company_id)
    else:
        result = form_import_service.bulk_import_forms(configs, company_id)
    return jsonify(result), 200


# ═══════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════
@form_template_bp.route("/exists", methods=["GET"])
def template_exists():
    code = request.args.get("code", "").strip()
    if not code:
        return api_error(E.VALIDATION_REQUIRED, "code is required")
    return jsonify({"exists": form_import_service.form_exists(code, _company_id_arg())})


@form_template_bp.route("", methods=["GET"])
def list_templates():
    """List template summaries; a company also sees global templates unless include_global=false."""
    items = form_import_service.list_form_templates(
        _company_id_arg(),
        include_global=_bool_arg(request.args.get("include_global"), True),
    )
    return jsonify({"items": items, "total": len(items)})


@form_template_bp.route("/<template_id>", methods=["GET"])
def get_template(template_id):
    try:
        return jsonify(form_import_service.get_form_template(template_id))
    except NotFoundError:
        return api_error(E.NOT_FOUND, "Form template not found")


# ═══════════════════════════════════════════════════════════════
# Deletion
# ═══════════════════════════════════════════════════════════════
@form_template_bp.route("/<template_id>", methods=["DELETE"])
def delete_template(template_id):
    if not form_import_service.delete_form_template(template_id):
        return api_error(E.NOT_FOUND, "Form template not found")
    return jsonify({"deleted": True}), 200


@form_template_bp.route("", methods=["DELETE"])
def delete_templates_by_code():
    codes = [c.strip() for c in request.args.get("codes", "").split(",") if c.strip()]
    if not codes:
        return api_error(E.VALIDATION_REQUIRED, "codes is required")

    deleted = form_import_service.delete_forms_by_code(codes, _company_id_arg())
    logger.info("Deleted %s form templates via API (codes=%s)", deleted, codes)
    return jsonify({"deleted": deleted}), 200
