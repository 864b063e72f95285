"""Human-readable order numbers.

Format: ``YYMMDD`` of the UTC placement date followed by a zero padded
sequence that restarts every day (``2510180001``, ``2510180002``). The
sequence is padded to four digits and simply grows a digit on a day with
more than 9999 orders.
"""

from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.shared.clock import as_utc

SEQUENCE_WIDTH = 4


def format_order_number(day, sequence):
    return f"{day:%y%m%d}{sequence:0{SEQUENCE_WIDTH}d}"


def next_order_number(placed_at):
    """Number for an order placed at ``placed_at``: orders already placed that day + 1."""
    day = as_utc(placed_at).date()
    placed_today = current_domain.repository_for(Order)._dao.query.filter(placed_on=day.isoformat()).all().total
    return format_order_number(day, placed_today + 1)
