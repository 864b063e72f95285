"""BDD tests for order cancellation."""

from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.status import UpdateOrderStatus
from storefront.shared.errors import InvalidTransition

scenarios("features/order_cancellation.feature")


@given(parsers.cfparse('the order was moved to "{status}"'))
def _(ctx, status):
    current_domain.process(
        UpdateOrderStatus(order_number=ctx["order_number"], status=status, updated_by="admin-1"),
        asynchronous=False,
    )


@when(parsers.cfparse('the shopper cancels the order with reason "{reason}"'))
def _(ctx, reason):
    try:
        current_domain.process(
            CancelOrder(order_number=ctx["order_number"], user_id=ctx["user_id"], reason=reason),
            asynchronous=False,
        )
    except ValidationError as exc:
        ctx["error"] = exc


@when(parsers.cfparse('"{user_id}" cancels the order'))
def _(ctx, user_id):
    try:
        current_domain.process(CancelOrder(order_number=ctx["order_number"], user_id=user_id), asynchronous=False)
    except ObjectNotFoundError as exc:
        ctx["error"] = exc


@then(parsers.cfparse('the latest history note is "{note}"'))
def _(ctx, note):
    assert current_domain.repository_for(Order).get(ctx["order_number"]).history[-1].note == note


@then("cancellation is refused")
def _(ctx):
    assert isinstance(ctx["error"], InvalidTransition)


@then("the order is not found")
def _(ctx):
    assert isinstance(ctx["error"], ObjectNotFoundError)
