"""
CompanyScopedModel — Abstract base class for company-scoped models.

Models that can belong to one company or be global inherit from
CompanyScopedModel instead of db.Model directly. This adds:
  - nullable company_id column with index (NULL = global)
  - query_for_scope(scope) classmethod
"""

from safetyforms.models import db
from safetyforms.tenant import CompanyScope


class CompanyScopedModel(db.Model):
    """Abstract base for tables owned by a company or shared globally."""
    __abstract__ = True

    company_id = db.Column(db.String(36), nullable=True, index=True)

    @classmethod
    def query_for_scope(cls, scope):
        """Return a query filtered to ``scope`` (a CompanyScope or raw company id)."""
        return CompanyScope.of(scope).apply(cls.query, cls.company_id)
