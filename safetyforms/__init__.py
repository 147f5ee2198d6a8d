"""
Safety Forms Platform
Flask Application Factory.

Usage:
    from safetyforms import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_migrate import Migrate

from safetyforms.config import config
from safetyforms.models import db
from safetyforms.middleware.logging_config import configure_logging

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections (cascade deletes rely on it)."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from safetyforms.models import form_builder as _form_builder_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    db_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        os.makedirs(os.path.dirname(db_uri[len("sqlite:///"):]), exist_ok=True)
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from safetyforms.blueprints.form_template_bp import form_template_bp

    app.register_blueprint(form_template_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-forms")
    @click.option("--company-id", default=None, help="Seed for one company (default: global templates).")
    @click.option("--force", is_flag=True, help="Import even when a form code already exists.")
    @click.option("--configs-dir", default=None, help="Directory of JSON form configurations.")
    def seed_forms_cmd(company_id, force, configs_dir):
        """Seed the bundled COR form templates."""
        from safetyforms.services.form_catalog import COR_ELEMENT_DESCRIPTIONS, form_count_summary, load_form_configs
        from safetyforms.services.form_import_service import bulk_import_forms, bulk_import_forms_if_not_exists

        configs = load_form_configs(configs_dir)
        summary = form_count_summary(configs)
        click.echo(f"Seeding {summary['total']} forms "
                   f"({summary['mandatory']} mandatory) for "
                   f"{'company ' + company_id if company_id else 'global templates'}")
        for element, count in summary["by_element"].items():
            if count:
                click.echo(f"  Element {element} ({COR_ELEMENT_DESCRIPTIONS.get(element, '?')}): {count}")

        if force:
            result = bulk_import_forms(configs, company_id)
        else:
            result = bulk_import_forms_if_not_exists(configs, company_id)

        click.echo(f"Imported: {result['successful']}  Skipped: {result['skipped']}  Failed: {result['failed']}")
        for err in result["errors"]:
            click.echo(f"  - {err['form']}: {err['error']}", err=True)

        if result["failed"] > 0:
            raise SystemExit(1)

    # ── Health check ─────────────────────────────────────────────────────
    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Safety Forms Platform"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    return app
