"""
Shared pytest fixtures for the Safety Forms Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - runner: Flask CLI runner (function-scoped)
    - form_config: Minimal valid form configuration factory
"""

import copy

import pytest

from safetyforms import create_app
from safetyforms.models import db as _db


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def runner(app):
    """Flask CLI runner."""
    return app.test_cli_runner()


# ── Form configuration fixtures ──────────────────────────────────────────

_DAILY_CHECK = {
    "code": "daily-01",
    "name": "Daily Check",
    "cor_element": 7,
    "frequency": "daily",
    "estimated_time_minutes": 10,
    "icon": "check",
    "color": "#000",
    "is_mandatory": True,
    "sections": [
        {
            "title": "Main",
            "order_index": 0,
            "fields": [
                {
                    "code": "ok",
                    "label": "All OK?",
                    "field_type": "radio",
                    "options": ["yes", "no"],
                    "order_index": 0,
                },
            ],
        },
    ],
    "workflow": {"submit_to_role": "supervisor", "notify_roles": [], "sync_priority": 3},
}


def make_form_config(**overrides):
    """Return a fresh copy of the single-section daily check config with overrides applied."""
    config = copy.deepcopy(_DAILY_CHECK)
    config.update(overrides)
    return config


@pytest.fixture()
def form_config():
    """Factory fixture: ``form_config(code="x")`` returns a new valid config."""
    return make_form_config
