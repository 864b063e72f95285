"""Pydantic request/response schemas for the Storefront API.

These are external contracts: separate from the internal Protean commands
and aggregates they are translated into.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PaymentMethodName = Literal["credit_card", "paypal", "stripe", "cash_on_delivery"]
OrderStatusName = Literal[
    "pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded", "returned"
]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str
    last_name: str
    phone: str | None = None
    street: str
    apartment: str | None = None
    city: str
    state: str
    zip_code: str
    country: str = "United States"


class ShippingMethodSchema(BaseModel):
    name: str
    price: float = Field(ge=0)
    estimated_days: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    variant_name: str | None = None
    variant_value: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "5f0c4e8e-8c1b-4a4e-9a53-2b1d3c9e7f10",
                    "quantity": 2,
                    "variant_name": "size",
                    "variant_value": "1kg",
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int  # Zero or less removes the line


class ApplyCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)


class SetPaymentMethodRequest(BaseModel):
    payment_method: PaymentMethodName


class SetNotesRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=500)


class MergeCartRequest(BaseModel):
    guest_token: str


# ---------------------------------------------------------------------------
# Cart Response Schemas
# ---------------------------------------------------------------------------
class VariantResponse(BaseModel):
    name: str
    value: str
    price: float


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    quantity: int
    unit_price: float
    variant: VariantResponse | None = None


class CouponResponse(BaseModel):
    code: str
    discount: float
    coupon_type: str


class CartResponse(BaseModel):
    cart_id: str
    user_id: str | None = None
    guest_token: str | None = None
    items: list[CartItemResponse] = []
    coupon: CouponResponse | None = None
    shipping_address: AddressSchema | None = None
    shipping_method: ShippingMethodSchema | None = None
    payment_method: str | None = None
    notes: str | None = None
    subtotal: float = 0.0
    shipping_cost: float = 0.0
    discount_amount: float = 0.0
    total: float = 0.0
    item_count: int = 0
    expires_at: datetime | None = None


class ItemIdResponse(BaseModel):
    item_id: str


class CouponResultResponse(BaseModel):
    applied: bool


class MergeResultResponse(BaseModel):
    items_merged_count: int


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: AddressSchema | None = None  # Defaults to the cart's
    billing_address: AddressSchema | None = None  # Defaults to shipping
    payment_method: PaymentMethodName | None = None  # Defaults to the cart's
    notes: str | None = Field(default=None, max_length=500)
    is_gift: bool = False
    gift_message: str | None = Field(default=None, max_length=500)
    source: Literal["web", "mobile", "admin"] = "web"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "street": "12 Market St",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                    },
                    "payment_method": "credit_card",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatusName
    note: str | None = Field(default=None, max_length=500)


class AddTrackingRequest(BaseModel):
    tracking_number: str
    carrier: str | None = None


class RefundRequest(BaseModel):
    amount: float = Field(ge=0)
    reason: str = Field(min_length=1, max_length=500)


class RecordPaymentRequest(BaseModel):
    payment_status: Literal["pending", "completed", "failed", "refunded"]
    transaction_id: str | None = None


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderNumberResponse(BaseModel):
    order_number: str


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    quantity: int
    unit_price: float
    variant_name: str | None = None
    variant_value: str | None = None
    image: str | None = None


class StatusChangeResponse(BaseModel):
    status: str
    changed_at: datetime
    note: str | None = None
    updated_by: str | None = None


class OrderResponse(BaseModel):
    order_number: str
    customer_id: str
    status: str
    items: list[OrderItemResponse]
    subtotal: float
    shipping_cost: float
    discount: float
    coupon: CouponResponse | None = None
    total: float
    currency: str
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    shipping_method: ShippingMethodSchema | None = None
    payment_method: str
    payment_status: str
    transaction_id: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    actual_delivery: datetime | None = None
    notes: str | None = None
    is_gift: bool = False
    gift_message: str | None = None
    source: str
    placed_at: datetime
    status_history: list[StatusChangeResponse]
    can_cancel: bool
    can_return: bool


class OrderSummaryResponse(BaseModel):
    order_number: str
    customer_id: str
    status: str
    item_count: int
    total: float
    currency: str
    payment_status: str | None = None
    tracking_number: str | None = None
    placed_at: datetime | None = None


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    has_next_page: bool
    has_prev_page: bool


class OrderListResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    pagination: PaginationResponse


class RecentOrdersResponse(BaseModel):
    orders: list[OrderSummaryResponse]


class CustomerStatsResponse(BaseModel):
    total_orders: int
    total_spent: float
    average_order_value: float


class StatsOverviewResponse(BaseModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    total_refunds: float
    by_status: dict[str, int]


class DailyStatsResponse(BaseModel):
    date: str
    orders: int
    revenue: float


class AdminStatsResponse(BaseModel):
    period_days: int
    overview: StatsOverviewResponse
    daily: list[DailyStatsResponse]


class TrackingResponse(BaseModel):
    order_number: str
    status: str
    tracking_number: str | None = None
    carrier: str | None = None
    status_history: list[StatusChangeResponse]


# ---------------------------------------------------------------------------
# Product Schemas
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    name: str
    value: str
    price: float = Field(ge=0)
    sku: str | None = None


class RegisterProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    discount: float = Field(default=0.0, ge=0, le=100)
    stock: int = Field(default=0, ge=0)
    status: Literal["active", "inactive", "draft"] = "active"
    image_url: str | None = None
    variants: list[VariantSchema] = []


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class ChangeProductStatusRequest(BaseModel):
    status: Literal["active", "inactive", "draft"]


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    discount: float
    discounted_price: float
    status: str
    stock: int
    image_url: str | None = None
    variants: list[VariantSchema] = []


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------
class PurgeGuestCartsRequest(BaseModel):
    as_of: datetime | None = None


class PurgeGuestCartsResponse(BaseModel):
    purged_count: int
