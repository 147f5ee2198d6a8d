"""form_builder_tables

Creates the form builder tables:
  - form_templates   — master form definitions (company_id NULL = global)
  - form_sections    — ordered field groups per template
  - form_fields      — input definitions per section
  - form_workflows   — one submission workflow per template

Children reference their parent with ON DELETE CASCADE, so deleting a
template removes its sections, fields and workflow.

Tables created conditionally (IF NOT EXISTS semantics) to support idempotent
execution against databases that already received these tables via db.create_all()
in a development environment.

Revision ID: 5e1c2a9d7f30
Revises:
Create Date: 2026-10-18 09:12:44.108213
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = '5e1c2a9d7f30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── Form Templates ────────────────────────────────────────────────────
    if "form_templates" not in existing:
        op.create_table(
            "form_templates",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("company_id", sa.String(length=36), nullable=True,
                      comment="NULL = global template"),
            sa.Column("form_code", sa.String(length=100), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("cor_element", sa.Integer(), nullable=True),
            sa.Column("frequency", sa.String(length=20), nullable=True,
                      comment="daily | weekly | monthly | quarterly | annual | as_needed"),
            sa.Column("estimated_time_minutes", sa.Integer(), nullable=True),
            sa.Column("icon", sa.String(length=50), nullable=True),
            sa.Column("color", sa.String(length=20), nullable=True),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("is_mandatory", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("company_id", "form_code", name="uq_form_templates_company_code"),
            sa.CheckConstraint(
                "cor_element IS NULL OR (cor_element >= 2 AND cor_element <= 14)",
                name="ck_form_templates_cor_element",
            ),
        )
        op.create_index("ix_form_templates_company_id", "form_templates", ["company_id"])
        op.create_index("ix_form_templates_form_code", "form_templates", ["form_code"])

    # ── Form Sections ─────────────────────────────────────────────────────
    if "form_sections" not in existing:
        op.create_table(
            "form_sections",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("form_template_id", sa.String(length=36), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_repeatable", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("conditional_logic", sa.JSON(), nullable=True,
                      comment='{"field_code": "...", "operator": "equals", "value": "..."}'),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["form_template_id"], ["form_templates.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_form_sections_form_template_id", "form_sections", ["form_template_id"])

    # ── Form Fields ───────────────────────────────────────────────────────
    if "form_fields" not in existing:
        op.create_table(
            "form_fields",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("form_section_id", sa.String(length=36), nullable=False),
            sa.Column("field_code", sa.String(length=100), nullable=False),
            sa.Column("label", sa.Text(), nullable=False),
            sa.Column("field_type", sa.String(length=30), nullable=False),
            sa.Column("placeholder", sa.Text(), nullable=True),
            sa.Column("help_text", sa.Text(), nullable=True),
            sa.Column("default_value", sa.Text(), nullable=True),
            sa.Column("options", sa.JSON(), nullable=True,
                      comment='[{"value": "...", "label": "..."}]'),
            sa.Column("validation_rules", sa.JSON(), nullable=False),
            sa.Column("conditional_logic", sa.JSON(), nullable=True),
            sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("width", sa.String(length=10), nullable=False, server_default="full",
                      comment="full | half | third | quarter"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["form_section_id"], ["form_sections.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_form_fields_form_section_id", "form_fields", ["form_section_id"])

    # ── Form Workflows ────────────────────────────────────────────────────
    if "form_workflows" not in existing:
        op.create_table(
            "form_workflows",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("form_template_id", sa.String(length=36), nullable=False),
            sa.Column("submit_to_role", sa.String(length=50), nullable=True),
            sa.Column("notify_roles", sa.JSON(), nullable=False),
            sa.Column("creates_task", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("task_template", sa.JSON(), nullable=True),
            sa.Column("sync_priority", sa.Integer(), nullable=False, server_default="3",
                      comment="1 = sync first"),
            sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["form_template_id"], ["form_templates.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("form_template_id"),
            sa.CheckConstraint(
                "sync_priority >= 1 AND sync_priority <= 5",
                name="ck_form_workflows_sync_priority",
            ),
        )


def downgrade():
    op.drop_table("form_workflows")
    op.drop_index("ix_form_fields_form_section_id", table_name="form_fields")
    op.drop_table("form_fields")
    op.drop_index("ix_form_sections_form_template_id", table_name="form_sections")
    op.drop_table("form_sections")
    op.drop_index("ix_form_templates_form_code", table_name="form_templates")
    op.drop_index("ix_form_templates_company_id", table_name="form_templates")
    op.drop_table("form_templates")
