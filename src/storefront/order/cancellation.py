"""Order cancellation and refund: commands and handler.

Cancelling gives every line's quantity back to its product inside the same
unit of work as the status change. The stock writes and the order write are
still separate aggregate writes; nothing ties them together beyond that.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import ORDER_NUMBER_MAX_LENGTH, Order
from storefront.product.stock import restore_stock

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    user_id = Identifier()  # When set, the order must belong to this customer
    reason = String(max_length=500)
    updated_by = String(max_length=255)


@storefront.command(part_of="Order")
class ProcessRefund:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    amount = Float(required=True, min_value=0.0)
    reason = String(max_length=500)


def load_order_for(order_number, user_id=None):
    """Load an order, hiding other customers' orders behind ``ObjectNotFoundError``."""
    order = current_domain.repository_for(Order).get(order_number)
    if user_id and str(order.customer_id) != str(user_id):
        raise ObjectNotFoundError({"_entity": f"Order {order_number} not found"})
    return order


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order_for(command.order_number, command.user_id)
        order.cancel(reason=command.reason, updated_by=command.updated_by or command.user_id)
        current_domain.repository_for(Order).add(order)

        restore_stock(
            [(item.product_id, item.quantity) for item in order.items],
            reason=f"order {order.order_number} cancelled",
        )

        logger.info(
            "Order cancelled",
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            reason=command.reason,
        )

    @handle(ProcessRefund)
    def process_refund(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_number)
        order.process_refund(command.amount, reason=command.reason)
        repo.add(order)

        logger.info(
            "Refund processed",
            order_number=order.order_number,
            amount=command.amount,
            order_total=order.total,
        )
