"""
tests/test_form_template_api.py — /api/v1/form-templates endpoints.
"""

from sqlalchemy.exc import OperationalError

from safetyforms.models.form_builder import FormTemplate

BASE = "/api/v1/form-templates"


def _import(client, config, company_id=None):
    rv = client.post(f"{BASE}/import", json={"config": config, "company_id": company_id})
    assert rv.status_code == 201
    return rv.get_json()["id"]


class TestImportEndpoint:
    def test_import_returns_201_with_id(self, client, form_config):
        template_id = _import(client, form_config())

        rv = client.get(f"{BASE}/{template_id}")
        assert rv.status_code == 200
        body = rv.get_json()
        assert body["form_code"] == "daily-01"
        assert body["sections"][0]["fields"][0]["options"][0] == {"value": "yes", "label": "yes"}
        assert body["workflow"]["sync_priority"] == 3

    def test_missing_config_is_400(self, client):
        rv = client.post(f"{BASE}/import", json={})
        assert rv.status_code == 400
        assert rv.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_invalid_config_is_422_with_errors(self, client, form_config):
        rv = client.post(f"{BASE}/import", json={"config": form_config(sections=[])})

        assert rv.status_code == 422
        body = rv.get_json()
        assert body["code"] == "ERR_VALIDATION_INVALID"
        assert body["details"]["errors"] == ["At least one section is required"]

    def test_store_failure_is_500_with_stage(self, client, form_config, monkeypatch):
        def _boom(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr("safetyforms.services.form_import_service._insert_workflow", _boom)
        rv = client.post(f"{BASE}/import", json={"config": form_config()})

        assert rv.status_code == 500
        body = rv.get_json()
        assert body["error"] == "Failed to create workflow: disk full"
        assert body["details"]["stage"] == "workflow"
        assert FormTemplate.query.count() == 0


class TestBulkImportEndpoint:
    def test_skips_existing_by_default(self, client, form_config):
        payload = {"configs": [form_config(code="a"), form_config(code="b")], "company_id": "acme"}
        first = client.post(f"{BASE}/bulk-import", json=payload).get_json()
        second = client.post(f"{BASE}/bulk-import", json=payload).get_json()

        assert first["successful"] == 2
        assert second["skipped"] == 2
        assert second["skipped_codes"] == ["a", "b"]
        assert FormTemplate.query.count() == 2

    def test_skip_existing_false_reports_failures(self, client, form_config):
        payload = {"configs": [form_config()], "company_id": "acme"}
        client.post(f"{BASE}/bulk-import", json=payload)

        rv = client.post(f"{BASE}/bulk-import", json={**payload, "skip_existing": False})

        assert rv.status_code == 200
        body = rv.get_json()
        assert body["failed"] == 1
        assert body["errors"][0]["error"].startswith("Failed to create form template: ")

    def test_configs_must_be_a_list(self, client):
        rv = client.post(f"{BASE}/bulk-import", json={"configs": {"code": "x"}})
        assert rv.status_code == 400


class TestLookupEndpoints:
    def test_exists(self, client, form_config):
        _import(client, form_config(), "A")

        assert client.get(f"{BASE}/exists?code=daily-01&company_id=A").get_json() == {"exists": True}
        assert client.get(f"{BASE}/exists?code=daily-01&company_id=B").get_json() == {"exists": False}
        assert client.get(f"{BASE}/exists?code=daily-01").get_json() == {"exists": False}

    def test_exists_requires_code(self, client):
        assert client.get(f"{BASE}/exists").status_code == 400

    def test_list_filters_by_company(self, client, form_config):
        _import(client, form_config(code="g"))
        _import(client, form_config(code="a"), "A")

        body = client.get(f"{BASE}?company_id=A").get_json()
        assert body["total"] == 2

        body = client.get(f"{BASE}?company_id=A&include_global=false").get_json()
        assert [t["form_code"] for t in body["items"]] == ["a"]

    def test_get_unknown_is_404(self, client):
        rv = client.get(f"{BASE}/no-such-id")
        assert rv.status_code == 404
        assert rv.get_json()["code"] == "ERR_NOT_FOUND"


class TestDeleteEndpoints:
    def test_delete_by_id(self, client, form_config):
        template_id = _import(client, form_config())

        rv = client.delete(f"{BASE}/{template_id}")
        assert rv.status_code == 200
        assert rv.get_json() == {"deleted": True}
        assert client.delete(f"{BASE}/{template_id}").status_code == 404

    def test_delete_by_codes(self, client, form_config):
        _import(client, form_config(code="a"), "A")
        _import(client, form_config(code="b"), "A")
        _import(client, form_config(code="a"))

        rv = client.delete(f"{BASE}?codes=a,b&company_id=A")
        assert rv.get_json() == {"deleted": 2}
        assert FormTemplate.query.count() == 1

    def test_delete_by_codes_requires_codes(self, client):
        assert client.delete(f"{BASE}?codes=").status_code == 400


def test_health(client):
    assert client.get("/api/v1/health").get_json()["status"] == "ok"
