"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)


@storefront.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock moved by ``delta`` units (negative for checkout, positive for restock)."""

    __version__ = 1

    product_id = Identifier(required=True)
    delta = Integer(required=True)
    stock = Integer(required=True)
    reason = String()
