"""Storefront bounded context: shopping carts, orders and the product stock they draw on.

Carts are priced on every read; checkout snapshots a cart into an Order which
then moves through a status history while stock is kept in step.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
