"""Stock movements driven by orders.

Checkout takes stock and cancellation gives it back. Both run inside the
calling command handler's unit of work but are separate product writes from
the order write itself; nothing links the two beyond that unit of work.
"""

from collections import defaultdict

from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.shared.errors import InsufficientStock


def requested_quantities(lines):
    """Sum requested quantities per product across ``(product_id, quantity)`` pairs."""
    totals = defaultdict(int)
    for product_id, quantity in lines:
        totals[str(product_id)] += quantity
    return dict(totals)


def load_products(product_ids):
    """Fetch each product once. A missing product raises ``ObjectNotFoundError``."""
    repo = current_domain.repository_for(Product)
    return {str(product_id): repo.get(product_id) for product_id in product_ids}


def check_stock(lines):
    """Verify live stock covers every product's requested quantity.

    Returns the loaded products keyed by id so callers can reuse them.
    Raises ``InsufficientStock`` naming the first product that falls short.
    """
    totals = requested_quantities(lines)
    products = load_products(totals)
    for product_id, quantity in totals.items():
        product = products[product_id]
        if product.stock < quantity:
            raise InsufficientStock(product_id, requested=quantity, available=product.stock, product_name=product.name)
    return products


def take_stock(lines, products, reason):
    repo = current_domain.repository_for(Product)
    for product_id, quantity in requested_quantities(lines).items():
        product = products[product_id]
        product.decrement_stock(quantity, reason=reason)
        repo.add(product)


def restore_stock(lines, reason):
    repo = current_domain.repository_for(Product)
    for product_id, quantity in requested_quantities(lines).items():
        product = repo.get(product_id)
        product.increment_stock(quantity, reason=reason)
        repo.add(product)
