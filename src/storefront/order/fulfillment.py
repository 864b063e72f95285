"""Shipment and delivery tracking: commands and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import ORDER_NUMBER_MAX_LENGTH, Order


@storefront.command(part_of="Order")
class AddTracking:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    tracking_number = String(required=True, max_length=255)
    carrier = String(max_length=100)


@storefront.command(part_of="Order")
class MarkOrderDelivered:
    order_number = String(required=True, max_length=ORDER_NUMBER_MAX_LENGTH)


@storefront.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(AddTracking)
    def add_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_number)
        order.add_tracking(command.tracking_number, carrier=command.carrier)
        repo.add(order)

    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_number)
        order.mark_delivered()
        repo.add(order)
