"""Category aggregate for grouping products in the catalogue."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class Category:
    name: String(required=True, max_length=100)
    description: String(max_length=500)
    created_date: DateTime(default=lambda: datetime.now(UTC))
    updated_date: DateTime()
    is_active: Boolean(default=True)
    is_deleted: Boolean(default=False)
    deleted_date: DateTime()
    row_version: Integer(default=0)

    def update_details(self, name=None, description=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
