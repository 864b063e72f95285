"""Cart aggregate: the mutable basket a shopper builds before checkout.

A cart belongs to exactly one owner: a signed-in user or an anonymous guest
token. Guest carts lapse 30 days after their last change. Lines capture the
unit price at the moment they were added; subtotal, discount, shipping and
total are derived from the current lines on every read (see ``pricing``).
"""

from datetime import timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartsMerged,
    CheckoutDetailsUpdated,
)
from storefront.cart.pricing import price_cart
from storefront.domain import storefront
from storefront.shared.address import Address
from storefront.shared.clock import as_utc, utcnow
from storefront.shared.money import CouponType
from storefront.shared.shipping import ShippingMethod

GUEST_CART_LIFETIME = timedelta(days=30)
NOTES_MAX_LENGTH = 500


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CASH_ON_DELIVERY = "cash_on_delivery"


@storefront.value_object(part_of="Cart")
class SelectedVariant:
    """The product option a line was added with, priced at add time."""

    name = String(required=True, max_length=50)
    value = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)


@storefront.value_object(part_of="Cart")
class AppliedCoupon:
    code = String(required=True, max_length=50)
    discount = Float(required=True, min_value=0.0)
    coupon_type = String(choices=CouponType, default=CouponType.PERCENTAGE.value)


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    variant = ValueObject(SelectedVariant)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()


def _same_variant(left, right):
    if left is None or right is None:
        return left is None and right is None
    return left.name == right.name and left.value == right.value


@storefront.aggregate
class Cart:
    user_id = Identifier(unique=True)  # Null for guest carts
    guest_token = String(max_length=255, unique=True)  # Null for user carts
    items = HasMany(CartItem)
    coupon = ValueObject(AppliedCoupon)
    shipping_address = ValueObject(Address)
    shipping_method = ValueObject(ShippingMethod)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CREDIT_CARD.value)
    notes = String(max_length=NOTES_MAX_LENGTH)
    expires_at = DateTime()  # Guest carts only
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_has_exactly_one_owner(self):
        if bool(self.user_id) == bool(self.guest_token):
            raise ValidationError({"owner": ["A cart belongs to either a user or a guest token, never both or neither"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def for_user(cls, user_id):
        now = utcnow()
        return cls(user_id=user_id, created_at=now, updated_at=now)

    @classmethod
    def for_guest(cls, guest_token):
        now = utcnow()
        return cls(
            guest_token=guest_token,
            created_at=now,
            updated_at=now,
            expires_at=now + GUEST_CART_LIFETIME,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def totals(self):
        return price_cart(self.items, coupon=self.coupon, shipping_method=self.shipping_method)

    @property
    def subtotal(self):
        return self.totals.subtotal

    @property
    def shipping_cost(self):
        return self.totals.shipping_cost

    @property
    def discount_amount(self):
        return self.totals.discount_amount

    @property
    def total(self):
        return self.totals.total

    @property
    def item_count(self):
        return self.totals.item_count

    @property
    def is_guest(self):
        return bool(self.guest_token)

    def is_expired(self, as_of=None):
        if not self.is_guest or self.expires_at is None:
            return False
        return as_utc(self.expires_at) <= as_utc(as_of or utcnow())

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def find_line(self, product_id, variant=None):
        """The line holding ``product_id`` with the same variant name and value, if any."""
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and _same_variant(i.variant, variant)),
            None,
        )

    def _touch(self):
        now = utcnow()
        self.updated_at = now
        if self.is_guest:
            self.expires_at = now + GUEST_CART_LIFETIME
        return now

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, variant=None):
        """Add ``quantity`` of a product, merging into an existing identical line.

        Args:
            variant: Optional ``SelectedVariant`` (or dict with name, value, price).
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if isinstance(variant, dict):
            variant = SelectedVariant(**variant)

        existing = self.find_line(product_id, variant)
        now = self._touch()

        if existing:
            existing.quantity += quantity
            line = existing
        else:
            line = CartItem(
                product_id=product_id,
                quantity=quantity,
                variant=variant,
                unit_price=unit_price,
                added_at=now,
            )
            self.add_items(line)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(line.id),
                product_id=str(product_id),
                quantity=quantity,
                unit_price=line.unit_price,
                variant_name=variant.name if variant else None,
                variant_value=variant.value if variant else None,
            )
        )
        return line

    def update_item_quantity(self, item_id, quantity):
        """Set a line's quantity exactly. Zero or less removes the line.

        An unknown ``item_id`` is treated as already removed: nothing happens.
        """
        item = self.find_item(item_id)
        if item is None:
            return

        if quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self._touch()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        """Remove a line if present. Removing twice is harmless."""
        item = self.find_item(item_id)
        if item is None:
            return

        self.remove_items(item)
        self._touch()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
        )

    def clear(self):
        """Empty the cart and drop its coupon together."""
        for item in list(self.items):
            self.remove_items(item)
        self.coupon = None
        self._touch()

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def apply_coupon(self, code, discount, coupon_type):
        """Attach a coupon, replacing any coupon already on the cart."""
        self.coupon = AppliedCoupon(
            code=code,
            discount=discount,
            coupon_type=CouponType(coupon_type).value,
        )
        self._touch()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                code=code,
                discount=discount,
                coupon_type=self.coupon.coupon_type,
            )
        )

    def remove_coupon(self):
        code = self.coupon.code if self.coupon else None
        self.coupon = None
        self._touch()

        self.raise_(CartCouponRemoved(cart_id=str(self.id), code=code))

    # -------------------------------------------------------------------
    # Checkout details
    # -------------------------------------------------------------------
    def set_shipping_address(self, address):
        self.shipping_address = Address(**address) if isinstance(address, dict) else address
        self._details_changed("shipping_address")

    def set_shipping_method(self, method):
        self.shipping_method = ShippingMethod(**method) if isinstance(method, dict) else method
        self._details_changed("shipping_method")

    def set_payment_method(self, method):
        self.payment_method = PaymentMethod(method).value
        self._details_changed("payment_method")

    def set_notes(self, notes):
        self.notes = notes
        self._details_changed("notes")

    def _details_changed(self, detail):
        self._touch()
        self.raise_(CheckoutDetailsUpdated(cart_id=str(self.id), detail=detail))

    # -------------------------------------------------------------------
    # Guest cart merging
    # -------------------------------------------------------------------
    def merge_from(self, guest_cart):
        """Fold every line of ``guest_cart`` into this cart through ``add_item``.

        Lines keep the price captured in the guest cart; identical
        product+variant lines sum their quantities.
        """
        for line in guest_cart.items:
            self.add_item(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                variant=line.variant,
            )

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                guest_token=guest_cart.guest_token,
                items_merged_count=len(guest_cart.items),
            )
        )
