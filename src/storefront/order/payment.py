"""Payment metadata: command and handler.

The storefront records what the payment provider reported. It never charges
or refunds money itself.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import ORDER_NUMBER_MAX_LENGTH, Order, PaymentStatus


@storefront.command(part_of="Order")
class RecordPayment:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    payment_status = String(required=True, choices=PaymentStatus)
    transaction_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class RecordPaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_number)
        order.record_payment(command.payment_status, transaction_id=command.transaction_id)
        repo.add(order)
