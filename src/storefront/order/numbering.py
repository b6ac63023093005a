from datetime import UTC, datetime
from uuid import uuid4

from storefront.config import ORDER_NUMBER_PREFIX


def generate_order_number(now: datetime | None = None) -> str:
    """Human-readable order number, e.g. ``ORD-20250101-120000-1A2B3C``.

    Uniqueness is enforced when the order is committed; the random suffix only
    makes collisions unlikely.
    """
    now = now or datetime.now(UTC)
    return f"{ORDER_NUMBER_PREFIX}-{now:%Y%m%d-%H%M%S}-{uuid4().hex[:6].upper()}"
