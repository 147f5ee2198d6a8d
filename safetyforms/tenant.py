"""
Safety Forms Platform — company scope for form templates.

A form template either belongs to one company or is global (available to
every company). The database stores this as a nullable ``company_id``;
callers pass ``company_id=None`` for global templates. Matching the two
cases needs different SQL (``= :id`` vs ``IS NULL``), so every scoped query
goes through :class:`CompanyScope` instead of filtering on the column
directly.

Usage:
    scope = CompanyScope.of(company_id)          # None -> global
    query = scope.apply(FormTemplate.query, FormTemplate.company_id)

    CompanyScope.global_scope().is_global        # True
    CompanyScope.for_company("acme").company_id  # "acme"
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CompanyScope:
    """Either a single company (``company_id`` set) or the global scope."""

    company_id: str | None = None

    @classmethod
    def global_scope(cls) -> "CompanyScope":
        return cls(None)

    @classmethod
    def for_company(cls, company_id) -> "CompanyScope":
        if company_id is None or str(company_id).strip() == "":
            raise ValueError("company_id is required for a company scope")
        return cls(str(company_id))

    @classmethod
    def of(cls, company_id) -> "CompanyScope":
        """Build a scope from an optional id; empty values mean global."""
        if isinstance(company_id, CompanyScope):
            return company_id
        if company_id is None or str(company_id).strip() == "":
            return cls.global_scope()
        return cls.for_company(company_id)

    @property
    def is_global(self) -> bool:
        return self.company_id is None

    def apply(self, query, column):
        """Filter ``query`` so ``column`` matches this scope exactly."""
        if self.is_global:
            return query.filter(column.is_(None))
        return query.filter(column == self.company_id)

    def __str__(self) -> str:
        return "global" if self.is_global else f"company={self.company_id}"
