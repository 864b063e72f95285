"""Cart management: opening carts, merging guest carts at sign-in, and reaping
guest carts that have lapsed.

Purging is meant to be triggered periodically by an external scheduler
through the maintenance API endpoint or ``manage.py purge-guest-carts``.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.lookup import find_cart, owner_filter
from storefront.domain import storefront
from storefront.shared.clock import utcnow

PAGE_SIZE = 100

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class OpenCart:
    """Find the owner's cart, creating it on first use."""

    user_id = Identifier()
    guest_token = String(max_length=255)


@storefront.command(part_of="Cart")
class MergeGuestCart:
    """Fold a guest cart into a registered user's cart after sign-in."""

    user_id = Identifier(required=True)
    guest_token = String(required=True, max_length=255)


@storefront.command(part_of="Cart")
class PurgeExpiredGuestCarts:
    as_of = DateTime()  # Optional: defaults to now


def open_cart(user_id=None, guest_token=None):
    """Find-or-create the cart for an owner. The new cart is not yet persisted.

    An expired guest cart counts as already reaped: it is deleted and a fresh
    cart takes its place.
    """
    owner_filter(user_id, guest_token)
    cart = find_cart(user_id=user_id, guest_token=guest_token)
    if cart is not None and cart.is_expired():
        logger.info("Discarding expired guest cart", cart_id=str(cart.id), guest_token=guest_token)
        current_domain.repository_for(Cart)._dao.delete(cart)
        cart = None

    if cart is None:
        cart = Cart.for_user(user_id) if user_id else Cart.for_guest(guest_token)
    return cart


def _all_carts(repo):
    offset = 0
    while True:
        batch = repo._dao.query.offset(offset).limit(PAGE_SIZE).all()
        yield from batch.items
        offset += len(batch.items)
        if not batch.items or offset >= batch.total:
            return


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        cart = open_cart(user_id=command.user_id, guest_token=command.guest_token)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(Cart)
        guest_cart = find_cart(guest_token=command.guest_token)
        if guest_cart is None:
            return 0
        if guest_cart.is_expired():
            logger.info(
                "Discarding expired guest cart",
                cart_id=str(guest_cart.id),
                guest_token=command.guest_token,
            )
            repo._dao.delete(guest_cart)
            return 0

        cart = open_cart(user_id=command.user_id)
        merged_count = len(guest_cart.items)
        if merged_count:
            cart.merge_from(guest_cart)
        repo.add(cart)
        repo._dao.delete(guest_cart)

        logger.info(
            "Merged guest cart",
            cart_id=str(cart.id),
            user_id=str(command.user_id),
            guest_token=command.guest_token,
            items_merged_count=merged_count,
        )
        return merged_count

    @handle(PurgeExpiredGuestCarts)
    def purge_expired_guest_carts(self, command):
        as_of = command.as_of or utcnow()
        repo = current_domain.repository_for(Cart)

        logger.info("Purging expired guest carts", as_of=as_of.isoformat())

        expired = [cart for cart in _all_carts(repo) if cart.is_expired(as_of)]
        for cart in expired:
            repo._dao.delete(cart)
        purged = len(expired)

        logger.info("Guest cart purge complete", purged_count=purged)
        return purged
