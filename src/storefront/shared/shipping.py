from protean.fields import Float, String

from storefront.domain import storefront


@storefront.value_object
class ShippingMethod:
    """Delivery option picked at checkout; its price is the cart's shipping cost."""

    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    estimated_days = String(max_length=50)
