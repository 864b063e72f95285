"""Typed failures raised by cart and order operations.

Each is a Protean ``ValidationError`` so existing handlers keep treating them as
domain rule violations, while callers that care about the kind can catch the
subclass and read its contextual attributes. Missing carts, orders and products
surface as Protean's ``ObjectNotFoundError``.
"""

from protean.exceptions import ValidationError


class ProductUnavailable(ValidationError):
    """The product exists but is not active in the catalogue."""

    def __init__(self, product_id, status):
        self.product_id = str(product_id)
        self.status = status
        super().__init__({"product_id": [f"Product {product_id} is not available ({status})"]})


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the product's live stock."""

    def __init__(self, product_id, requested, available, product_name=None):
        self.product_id = str(product_id)
        self.product_name = product_name
        self.requested = requested
        self.available = available
        label = product_name or product_id
        super().__init__({"stock": [f"Insufficient stock for {label}: requested {requested}, available {available}"]})


class EmptyCart(ValidationError):
    """The operation needs at least one item in the cart."""

    def __init__(self, cart_id=None):
        self.cart_id = str(cart_id) if cart_id else None
        super().__init__({"cart": ["Cart is empty"]})


class InvalidTransition(ValidationError):
    """The order's current status does not allow the requested change."""

    def __init__(self, current, target, allowed=()):
        self.current = current
        self.target = target
        self.allowed = tuple(allowed)
        message = f"Order cannot move from {current} to {target}"
        if self.allowed:
            message += f"; allowed only from: {', '.join(self.allowed)}"
        super().__init__({"status": [message]})
