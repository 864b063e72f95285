"""FastAPI routes for the Storefront: carts, orders, products and maintenance.

Carts are addressed by owner, taken from the ``X-User-Id`` header for signed-in
shoppers or the ``Guest-Id`` header for anonymous ones. Both are opaque keys;
authenticating them is the job of whatever sits in front of this service.
"""

import json

from fastapi import APIRouter, Depends, Header
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddressSchema,
    AddToCartRequest,
    AddTrackingRequest,
    AdminStatsResponse,
    ApplyCouponRequest,
    CancelOrderRequest,
    CartResponse,
    ChangeProductStatusRequest,
    CouponResultResponse,
    CustomerStatsResponse,
    ItemIdResponse,
    MergeCartRequest,
    MergeResultResponse,
    OrderListResponse,
    OrderNumberResponse,
    OrderResponse,
    OrderSummaryResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    PurgeGuestCartsRequest,
    PurgeGuestCartsResponse,
    RecentOrdersResponse,
    RecordPaymentRequest,
    RefundRequest,
    RegisterProductRequest,
    RestockRequest,
    SetNotesRequest,
    SetPaymentMethodRequest,
    ShippingMethodSchema,
    StatusResponse,
    TrackingResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from storefront.cart.details import SetCartNotes, SetPaymentMethod, SetShippingAddress, SetShippingMethod
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.cart.management import MergeGuestCart, OpenCart, PurgeExpiredGuestCarts
from storefront.order.cancellation import CancelOrder, ProcessRefund, load_order_for
from storefront.order.fulfillment import AddTracking, MarkOrderDelivered
from storefront.order.order import Order
from storefront.order.payment import RecordPayment
from storefront.order.placement import PlaceOrder
from storefront.order.status import UpdateOrderStatus
from storefront.product.management import ChangeProductStatus, RegisterProduct, RestockProduct
from storefront.product.product import Product
from storefront.projections.daily_order_stats import period_stats
from storefront.projections.order_summary import customer_stats, list_orders, recent_orders


# ---------------------------------------------------------------------------
# Request identity
# ---------------------------------------------------------------------------
def cart_owner(
    x_user_id: str | None = Header(default=None),
    guest_id: str | None = Header(default=None, alias="Guest-Id"),
) -> dict:
    """Owner key for cart commands. A signed-in user takes precedence over a guest token."""
    if x_user_id:
        return {"user_id": x_user_id}
    return {"guest_token": guest_id}


def current_user(x_user_id: str = Header()) -> str:
    return x_user_id


def admin_user(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def _cart_response(cart: Cart) -> CartResponse:
    totals = cart.totals
    return CartResponse(
        cart_id=str(cart.id),
        user_id=str(cart.user_id) if cart.user_id else None,
        guest_token=cart.guest_token,
        items=[
            {
                "item_id": str(item.id),
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "variant": item.variant.to_dict() if item.variant else None,
            }
            for item in cart.items
        ],
        coupon=cart.coupon.to_dict() if cart.coupon else None,
        shipping_address=cart.shipping_address.to_dict() if cart.shipping_address else None,
        shipping_method=cart.shipping_method.to_dict() if cart.shipping_method else None,
        payment_method=cart.payment_method,
        notes=cart.notes,
        subtotal=totals.subtotal,
        shipping_cost=totals.shipping_cost,
        discount_amount=totals.discount_amount,
        total=totals.total,
        item_count=totals.item_count,
        expires_at=cart.expires_at,
    )


def _history(order: Order) -> list[dict]:
    return [
        {
            "status": entry.status,
            "changed_at": entry.changed_at,
            "note": entry.note,
            "updated_by": entry.updated_by,
        }
        for entry in order.history
    ]


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        items=[
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "variant_name": item.variant_name,
                "variant_value": item.variant_value,
                "image": item.image,
            }
            for item in order.items
        ],
        subtotal=order.subtotal,
        shipping_cost=order.shipping_cost or 0.0,
        discount=order.discount or 0.0,
        coupon=order.coupon.to_dict() if order.coupon else None,
        total=order.total,
        currency=order.currency,
        shipping_address=order.shipping_address.to_dict(),
        billing_address=order.billing_address.to_dict() if order.billing_address else None,
        shipping_method=order.shipping_method.to_dict() if order.shipping_method else None,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        transaction_id=order.transaction_id,
        tracking_number=order.tracking_number,
        carrier=order.carrier,
        actual_delivery=order.actual_delivery,
        notes=order.notes,
        is_gift=bool(order.is_gift),
        gift_message=order.gift_message,
        source=order.source,
        placed_at=order.placed_at,
        status_history=_history(order),
        can_cancel=order.can_cancel,
        can_return=order.can_return(),
    )


def _summary_response(summary) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_number=summary.order_number,
        customer_id=str(summary.customer_id),
        status=summary.status,
        item_count=summary.item_count or 0,
        total=summary.total or 0.0,
        currency=summary.currency or "USD",
        payment_status=summary.payment_status,
        tracking_number=summary.tracking_number,
        placed_at=summary.placed_at,
    )


def _order_list_response(page) -> OrderListResponse:
    return OrderListResponse(
        orders=[_summary_response(summary) for summary in page["orders"]],
        pagination=page["pagination"],
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(owner: dict = Depends(cart_owner)) -> CartResponse:
    """The caller's cart, created empty on first visit."""
    cart_id = current_domain.process(OpenCart(**owner), asynchronous=False)
    return _cart_response(current_domain.repository_for(Cart).get(cart_id))


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(owner: dict = Depends(cart_owner)) -> StatusResponse:
    current_domain.process(ClearCart(**owner), asynchronous=False)
    return StatusResponse()


@cart_router.post("/items", status_code=201, response_model=ItemIdResponse)
async def add_cart_item(body: AddToCartRequest, owner: dict = Depends(cart_owner)) -> ItemIdResponse:
    command = AddToCart(
        **owner,
        product_id=body.product_id,
        quantity=body.quantity,
        variant_name=body.variant_name,
        variant_value=body.variant_value,
    )
    item_id = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=item_id)


@cart_router.put("/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, owner: dict = Depends(cart_owner)
) -> StatusResponse:
    command = UpdateCartItemQuantity(**owner, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, owner: dict = Depends(cart_owner)) -> StatusResponse:
    current_domain.process(RemoveFromCart(**owner, item_id=item_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/coupon", response_model=CouponResultResponse)
async def apply_coupon(body: ApplyCouponRequest, owner: dict = Depends(cart_owner)) -> CouponResultResponse:
    """Apply a coupon. Unknown codes leave the cart unchanged and report ``applied: false``."""
    applied = current_domain.process(ApplyCouponToCart(**owner, code=body.code), asynchronous=False)
    return CouponResultResponse(applied=bool(applied))


@cart_router.delete("/coupon", response_model=StatusResponse)
async def remove_coupon(owner: dict = Depends(cart_owner)) -> StatusResponse:
    current_domain.process(RemoveCouponFromCart(**owner), asynchronous=False)
    return StatusResponse()


@cart_router.put("/shipping-address", response_model=StatusResponse)
async def set_shipping_address(body: AddressSchema, owner: dict = Depends(cart_owner)) -> StatusResponse:
    command = SetShippingAddress(**owner, address=json.dumps(body.model_dump()))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/shipping-method", response_model=StatusResponse)
async def set_shipping_method(body: ShippingMethodSchema, owner: dict = Depends(cart_owner)) -> StatusResponse:
    command = SetShippingMethod(**owner, shipping_method=json.dumps(body.model_dump()))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/payment-method", response_model=StatusResponse)
async def set_payment_method(body: SetPaymentMethodRequest, owner: dict = Depends(cart_owner)) -> StatusResponse:
    command = SetPaymentMethod(**owner, payment_method=body.payment_method)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/notes", response_model=StatusResponse)
async def set_notes(body: SetNotesRequest, owner: dict = Depends(cart_owner)) -> StatusResponse:
    current_domain.process(SetCartNotes(**owner, notes=body.notes), asynchronous=False)
    return StatusResponse()


@cart_router.post("/merge", response_model=MergeResultResponse)
async def merge_guest_cart(body: MergeCartRequest, user_id: str = Depends(current_user)) -> MergeResultResponse:
    """Fold the guest cart identified by ``guest_token`` into the signed-in user's cart."""
    command = MergeGuestCart(user_id=user_id, guest_token=body.guest_token)
    merged = current_domain.process(command, asynchronous=False)
    return MergeResultResponse(items_merged_count=merged or 0)


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/orders/admin", tags=["orders-admin"])


@admin_router.get("/all", response_model=OrderListResponse)
async def list_all_orders(
    page: int = 1,
    limit: int = 20,
    status: str | None = None,
    user: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> OrderListResponse:
    return _order_list_response(
        list_orders(customer_id=user, status=status, since=date_from, until=date_to, page=page, limit=limit)
    )


@admin_router.get("/stats", response_model=AdminStatsResponse)
async def order_stats(period: int = 30) -> AdminStatsResponse:
    return AdminStatsResponse(period_days=period, **period_stats(days=period))


@admin_router.put("/{order_number}/status", response_model=StatusResponse)
async def update_order_status(
    order_number: str, body: UpdateOrderStatusRequest, admin_id: str | None = Depends(admin_user)
) -> StatusResponse:
    command = UpdateOrderStatus(
        order_number=order_number,
        status=body.status,
        note=body.note,
        updated_by=admin_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/{order_number}/tracking", response_model=StatusResponse)
async def add_tracking(order_number: str, body: AddTrackingRequest) -> StatusResponse:
    command = AddTracking(
        order_number=order_number,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/{order_number}/delivered", response_model=StatusResponse)
async def mark_delivered(order_number: str) -> StatusResponse:
    current_domain.process(MarkOrderDelivered(order_number=order_number), asynchronous=False)
    return StatusResponse()


@admin_router.post("/{order_number}/refund", response_model=StatusResponse)
async def process_refund(order_number: str, body: RefundRequest) -> StatusResponse:
    command = ProcessRefund(order_number=order_number, amount=body.amount, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/{order_number}/payment", response_model=StatusResponse)
async def record_payment(order_number: str, body: RecordPaymentRequest) -> StatusResponse:
    command = RecordPayment(
        order_number=order_number,
        payment_status=body.payment_status,
        transaction_id=body.transaction_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/{order_number}/cancel", response_model=StatusResponse)
async def admin_cancel_order(
    order_number: str, body: CancelOrderRequest, admin_id: str | None = Depends(admin_user)
) -> StatusResponse:
    command = CancelOrder(order_number=order_number, reason=body.reason, updated_by=admin_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Customer Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderNumberResponse)
async def place_order(
    body: PlaceOrderRequest,
    user_id: str = Depends(current_user),
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
) -> OrderNumberResponse:
    command = PlaceOrder(
        user_id=user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()) if body.shipping_address else None,
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        notes=body.notes,
        is_gift=body.is_gift,
        gift_message=body.gift_message,
        source=body.source,
        ip_address=x_forwarded_for.split(",")[0].strip() if x_forwarded_for else None,
        user_agent=user_agent,
    )
    order_number = current_domain.process(command, asynchronous=False)
    return OrderNumberResponse(order_number=order_number)


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    user_id: str = Depends(current_user),
) -> OrderListResponse:
    return _order_list_response(list_orders(customer_id=user_id, status=status, page=page, limit=limit))


@order_router.get("/recent", response_model=RecentOrdersResponse)
async def list_recent_orders(user_id: str = Depends(current_user)) -> RecentOrdersResponse:
    return RecentOrdersResponse(orders=[_summary_response(s) for s in recent_orders(user_id, limit=5)])


@order_router.get("/stats", response_model=CustomerStatsResponse)
async def my_order_stats(user_id: str = Depends(current_user)) -> CustomerStatsResponse:
    return CustomerStatsResponse(**customer_stats(user_id))


@order_router.get("/{order_number}", response_model=OrderResponse)
async def get_order(order_number: str, user_id: str = Depends(current_user)) -> OrderResponse:
    return _order_response(load_order_for(order_number, user_id))


@order_router.get("/{order_number}/tracking", response_model=TrackingResponse)
async def get_tracking(order_number: str, user_id: str = Depends(current_user)) -> TrackingResponse:
    order = load_order_for(order_number, user_id)
    return TrackingResponse(
        order_number=order.order_number,
        status=order.status,
        tracking_number=order.tracking_number,
        carrier=order.carrier,
        status_history=_history(order),
    )


@order_router.put("/{order_number}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_number: str, body: CancelOrderRequest, user_id: str = Depends(current_user)
) -> StatusResponse:
    command = CancelOrder(order_number=order_number, user_id=user_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        name=body.name,
        price=body.price,
        discount=body.discount,
        stock=body.stock,
        status=body.status,
        image_url=body.image_url,
        variants=json.dumps([variant.model_dump() for variant in body.variants]),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.put("/{product_id}/restock", response_model=StatusResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StatusResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/status", response_model=StatusResponse)
async def change_product_status(product_id: str, body: ChangeProductStatusRequest) -> StatusResponse:
    current_domain.process(ChangeProductStatus(product_id=product_id, status=body.status), asynchronous=False)
    return StatusResponse()


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        price=product.price,
        discount=product.discount or 0.0,
        discounted_price=product.discounted_price,
        status=product.status,
        stock=product.stock,
        image_url=product.image_url,
        variants=[
            {"name": v.name, "value": v.value, "price": v.price, "sku": v.sku} for v in product.variants
        ],
    )


# ---------------------------------------------------------------------------
# Maintenance: periodic background job endpoints
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/purge-guest-carts", response_model=PurgeGuestCartsResponse)
async def purge_guest_carts(body: PurgeGuestCartsRequest | None = None) -> PurgeGuestCartsResponse:
    """Delete guest carts whose 30-day lifetime has lapsed. Intended for a scheduler."""
    as_of = body.as_of if body else None
    purged = current_domain.process(PurgeExpiredGuestCarts(as_of=as_of), asynchronous=False)
    return PurgeGuestCartsResponse(purged_count=purged or 0)
