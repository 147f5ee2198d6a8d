"""Form builder models: template → sections → fields, plus one workflow per template."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from safetyforms.models import db
from safetyforms.models.base import CompanyScopedModel


def _utcnow():
    return datetime.now(timezone.utc)


def _uuid():
    return str(uuid.uuid4())


# ── Form Template ────────────────────────────────────────────────

class FormTemplate(CompanyScopedModel):
    """Master form definition. company_id=NULL means a global template."""

    __tablename__ = "form_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_code = Column(String(100), nullable=False, index=True)  # e.g. "DAILY_SAFETY_INSPECTION"
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    cor_element = Column(Integer, nullable=True)
    frequency = Column(
        String(20), default="as_needed"
    )  # daily | weekly | monthly | quarterly | annual | as_needed
    estimated_time_minutes = Column(Integer, default=5)
    icon = Column(String(50), default="file-text")  # lucide-react icon name
    color = Column(String(20), default="#3b82f6")
    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    is_mandatory = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    sections = relationship(
        "FormSection",
        backref="template",
        cascade="all, delete-orphan",
        order_by="FormSection.order_index",
    )
    workflow = relationship(
        "FormWorkflow",
        backref="template",
        cascade="all, delete-orphan",
        uselist=False,
    )

    __table_args__ = (
        # NULL company ids compare distinct, so global codes are not unique.
        UniqueConstraint("company_id", "form_code", name="uq_form_templates_company_code"),
        CheckConstraint(
            "cor_element IS NULL OR (cor_element >= 2 AND cor_element <= 14)",
            name="ck_form_templates_cor_element",
        ),
    )

    def to_dict(self, include_children=False):
        data = {
            "id": self.id,
            "company_id": self.company_id,
            "form_code": self.form_code,
            "name": self.name,
            "description": self.description,
            "cor_element": self.cor_element,
            "frequency": self.frequency,
            "estimated_time_minutes": self.estimated_time_minutes,
            "icon": self.icon,
            "color": self.color,
            "version": self.version,
            "is_active": self.is_active,
            "is_mandatory": self.is_mandatory,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_children:
            data["sections"] = [s.to_dict(include_fields=True) for s in self.sections]
            data["workflow"] = self.workflow.to_dict() if self.workflow else None
        return data


# ── Form Section ─────────────────────────────────────────────────

class FormSection(db.Model):
    """Ordered grouping of fields. Can be repeatable or conditional."""

    __tablename__ = "form_sections"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_template_id = Column(
        String(36),
        ForeignKey("form_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_repeatable = Column(Boolean, nullable=False, default=False)
    conditional_logic = Column(JSON(none_as_null=True), nullable=True)  # {field_code, operator, value}
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    fields = relationship(
        "FormField",
        backref="section",
        cascade="all, delete-orphan",
        order_by="FormField.order_index",
    )

    def to_dict(self, include_fields=False):
        data = {
            "id": self.id,
            "form_template_id": self.form_template_id,
            "title": self.title,
            "description": self.description,
            "order_index": self.order_index,
            "is_repeatable": self.is_repeatable,
            "conditional_logic": self.conditional_logic,
        }
        if include_fields:
            data["fields"] = [f.to_dict() for f in self.fields]
        return data


# ── Form Field ───────────────────────────────────────────────────

class FormField(db.Model):
    """Single input definition within a section."""

    __tablename__ = "form_fields"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_section_id = Column(
        String(36),
        ForeignKey("form_sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_code = Column(String(100), nullable=False)
    label = Column(Text, nullable=False)
    field_type = Column(String(30), nullable=False)
    placeholder = Column(Text, nullable=True)
    help_text = Column(Text, nullable=True)
    default_value = Column(Text, nullable=True)
    options = Column(JSON(none_as_null=True), nullable=True)  # [{"value": "v", "label": "l"}, ...]
    validation_rules = Column(JSON, nullable=False, default=dict)
    conditional_logic = Column(JSON(none_as_null=True), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    width = Column(String(10), nullable=False, default="full")  # full | half | third | quarter
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "form_section_id": self.form_section_id,
            "field_code": self.field_code,
            "label": self.label,
            "field_type": self.field_type,
            "placeholder": self.placeholder,
            "help_text": self.help_text,
            "default_value": self.default_value,
            "options": self.options,
            "validation_rules": self.validation_rules or {},
            "conditional_logic": self.conditional_logic,
            "order_index": self.order_index,
            "width": self.width,
        }


# ── Form Workflow ────────────────────────────────────────────────

class FormWorkflow(db.Model):
    """Post-submission routing, notifications and approvals (one per template)."""

    __tablename__ = "form_workflows"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_template_id = Column(
        String(36),
        ForeignKey("form_templates.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    submit_to_role = Column(String(50), nullable=True)  # supervisor | safety_manager | admin ...
    notify_roles = Column(JSON, nullable=False, default=list)
    creates_task = Column(Boolean, nullable=False, default=False)
    task_template = Column(JSON(none_as_null=True), nullable=True)
    sync_priority = Column(Integer, nullable=False, default=3)  # 1 = sync first
    requires_approval = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        CheckConstraint(
            "sync_priority >= 1 AND sync_priority <= 5",
            name="ck_form_workflows_sync_priority",
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "form_template_id": self.form_template_id,
            "submit_to_role": self.submit_to_role,
            "notify_roles": self.notify_roles or [],
            "creates_task": self.creates_task,
            "task_template": self.task_template,
            "sync_priority": self.sync_priority,
            "requires_approval": self.requires_approval,
        }
