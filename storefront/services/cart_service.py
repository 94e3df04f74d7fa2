# storefront/services/cart_service.py
import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from storefront.core.errors import Conflict, Forbidden, NotFound
from storefront.models.cart import CartItem
from storefront.models.item import Item
from storefront.services.context import RequestContext

logger = logging.getLogger(__name__)


class CartService:
    """
    Cart use cases for the signed-in caller.

    add_to_cart is an atomic conditional increment followed by an insert
    guarded by the (user_id, item_id) unique constraint, so concurrent adds
    for the same item never produce duplicate rows.
    """

    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.db = ctx.db

    # query
    def get_cart(self) -> list[CartItem]:
        caller = self.ctx.require_caller()
        return (
            self.db.query(CartItem)
            .options(joinedload(CartItem.item))
            .filter(CartItem.user_id == caller.id)
            .order_by(CartItem.id)
            .all()
        )

    # commands
    def add_to_cart(self, item_id: int) -> CartItem:
        caller = self.ctx.require_caller()

        if self.db.get(Item, item_id) is None:
            raise NotFound(f"No item found for id {item_id}")

        if self._increment(caller.id, item_id):
            self.db.commit()
            logger.info(f"Incremented item {item_id} in cart of user {caller.id}")
            return self._get_row(caller.id, item_id)

        self.db.add(CartItem(user_id=caller.id, item_id=item_id, quantity=1))
        try:
            self.db.commit()
            logger.info(f"Added item {item_id} to cart of user {caller.id}")
        except IntegrityError:
            # a concurrent add inserted the row first
            self.db.rollback()
            logger.info(f"Lost insert race for item {item_id}, user {caller.id}; incrementing")
            if not self._increment(caller.id, item_id):
                self.db.rollback()
                raise Conflict("Cart was modified concurrently, please retry")
            self.db.commit()

        return self._get_row(caller.id, item_id)

    def remove_from_cart(self, cart_item_id: int) -> CartItem:
        caller = self.ctx.require_caller()

        cart_item = self.db.get(CartItem, cart_item_id, options=[joinedload(CartItem.item)])
        if cart_item is None:
            raise NotFound(f"No cart item found for id {cart_item_id}")

        if cart_item.user_id != caller.id:
            raise Forbidden("That cart item belongs to someone else")

        self.db.delete(cart_item)
        self.db.commit()

        logger.info(f"Removed cart item {cart_item_id} of user {caller.id}")
        return cart_item

    def _increment(self, user_id: int, item_id: int) -> bool:
        result = self.db.execute(
            update(CartItem)
            .where(CartItem.user_id == user_id, CartItem.item_id == item_id)
            .values(quantity=CartItem.quantity + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def _get_row(self, user_id: int, item_id: int) -> CartItem:
        cart_item = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.item_id == item_id)
            .populate_existing()
            .one()
        )
        return cart_item
