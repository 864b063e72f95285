"""Product aggregate: the catalogue entry carts price against and orders draw stock from.

Only the slice the storefront needs lives here: price and percent discount,
availability status, named variants with their own prices, and the stock
counter that checkout decrements and cancellation restores.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String

from storefront.domain import storefront
from storefront.product.events import ProductRegistered, ProductStatusChanged, StockAdjusted
from storefront.shared.errors import InsufficientStock
from storefront.shared.money import apply_percent_off


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


@storefront.entity(part_of="Product")
class ProductVariant:
    """A named option of a product (e.g. size: 1kg) with its own price."""

    name = String(required=True, max_length=50)
    value = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    sku = String(max_length=50)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)  # percent
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    stock = Integer(default=0, min_value=0)
    image_url = String(max_length=500)
    variants = HasMany(ProductVariant)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, price, stock=0, discount=0.0, status=None, image_url=None, variants=None):
        """Create a catalogue entry.

        Args:
            variants: Optional list of dicts with name, value, price and sku.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            discount=discount or 0.0,
            status=status or ProductStatus.ACTIVE.value,
            stock=stock,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        for variant in variants or []:
            product.add_variants(ProductVariant(**variant))

        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=name,
                price=price,
                stock=stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Pricing & availability
    # -------------------------------------------------------------------
    @property
    def discounted_price(self):
        return apply_percent_off(self.price, self.discount)

    @property
    def is_active(self):
        return self.status == ProductStatus.ACTIVE.value

    def find_variant(self, name, value):
        return next((v for v in self.variants if v.name == name and v.value == value), None)

    def change_status(self, status):
        previous = self.status
        self.status = ProductStatus(status).value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=previous,
                status=self.status,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity, reason=None):
        """Take ``quantity`` units out of stock. Never goes below zero."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.stock:
            raise InsufficientStock(self.id, requested=quantity, available=self.stock, product_name=self.name)
        self._adjust_stock(-quantity, reason)

    def increment_stock(self, quantity, reason=None):
        """Put ``quantity`` units back into stock (restock or cancellation)."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self._adjust_stock(quantity, reason)

    def _adjust_stock(self, delta, reason):
        self.stock = self.stock + delta
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                delta=delta,
                stock=self.stock,
                reason=reason,
            )
        )
