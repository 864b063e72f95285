"""Cart coupon management: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.lookup import get_cart
from storefront.coupon import get_coupon_source
from storefront.domain import storefront
from storefront.shared.errors import EmptyCart

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class ApplyCouponToCart:
    """Apply a coupon code to the owner's cart."""

    user_id = Identifier()
    guest_token = String(max_length=255)
    code = String(required=True, max_length=50)


@storefront.command(part_of="Cart")
class RemoveCouponFromCart:
    user_id = Identifier()
    guest_token = String(max_length=255)


@storefront.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        """Returns True when the code was recognised and applied."""
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        if not cart.items:
            raise EmptyCart(cart.id)

        code = command.code.strip()
        terms = get_coupon_source().resolve(code)
        if terms is None:
            logger.warning("Ignoring unknown coupon code", cart_id=str(cart.id), code=code)
            return False

        cart.apply_coupon(code=terms.code, discount=terms.discount, coupon_type=terms.coupon_type)
        current_domain.repository_for(Cart).add(cart)
        return True

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.remove_coupon()
        repo.add(cart)
