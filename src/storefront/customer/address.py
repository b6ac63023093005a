"""Customer address aggregate, used for shipping and billing at checkout."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Integer, String

from storefront.domain import storefront


class AddressType(Enum):
    SHIPPING = "Shipping"
    BILLING = "Billing"


@storefront.aggregate
class Address:
    user_id = String(required=True, max_length=450)
    title = String(required=True, max_length=100)
    address_line1 = String(required=True, max_length=200)
    address_line2 = String(max_length=200)
    city = String(required=True, max_length=100)
    district = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    country = String(required=True, max_length=100, default="Turkey")
    address_type = String(choices=AddressType)
    is_default = Boolean(default=False)
    created_date = DateTime(default=lambda: datetime.now(UTC))
    updated_date = DateTime()
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_date = DateTime()
    row_version = Integer(default=0)

    def belongs_to(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)
