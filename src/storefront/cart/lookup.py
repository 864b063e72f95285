"""Locate a shopper's cart by its owner key.

Carts are addressed by who owns them, not by cart id: a signed-in user id or
an anonymous guest token. There is at most one cart per key.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart


def owner_filter(user_id=None, guest_token=None):
    if user_id:
        return {"user_id": str(user_id)}
    if guest_token:
        return {"guest_token": guest_token}
    raise ValidationError({"owner": ["Either a user id or a guest token is required"]})


def find_cart(user_id=None, guest_token=None):
    """Return the owner's cart, or ``None`` when they have none yet."""
    criteria = owner_filter(user_id, guest_token)
    repo = current_domain.repository_for(Cart)
    results = repo._dao.query.filter(**criteria).all().items
    if not results:
        return None
    # Reload through the repository so child entities come back attached
    return repo.get(results[0].id)


def get_cart(user_id=None, guest_token=None):
    """Like ``find_cart`` but raises ``ObjectNotFoundError`` when there is no cart."""
    cart = find_cart(user_id, guest_token)
    if cart is None:
        raise ObjectNotFoundError({"_entity": "Cart not found"})
    return cart
