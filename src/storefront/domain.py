"""Storefront bounded context: catalogue, cart, checkout and order fulfillment.

Entities are plain (non event-sourced) aggregates. All writes go through the
soft-delete repositories and the explicit unit of work in
``storefront.persistence``; protean provides the aggregate model, field
validation and the storage providers underneath.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
