"""Admin status updates: command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import ORDER_NUMBER_MAX_LENGTH, Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    updated_by = String(max_length=255)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_number)
        order.update_status(
            command.status,
            note=command.note,
            updated_by=command.updated_by,
        )
        repo.add(order)
