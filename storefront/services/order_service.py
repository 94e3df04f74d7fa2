# storefront/services/order_service.py
import logging

from sqlalchemy import and_, delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from storefront.core.config import settings
from storefront.core.errors import Conflict, Forbidden, NotFound, PaymentFailure, ValidationError
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.user import Permission
from storefront.services.context import RequestContext
from storefront.services.permissions import require_owner_or_permission

logger = logging.getLogger(__name__)


class OrderService:
    """
    Checkout and order history.

    create_order:
    1. loads the caller's cart with item snapshots
    2. computes the amount in integer minor units
    3. charges the payment gateway
    4. in one transaction: creates the order from the charged amount and
       deletes the consumed cart rows
    5. refunds the charge if the cart rows changed after they were charged
       or if that transaction fails
    """

    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.db = ctx.db

    def create_order(self, payment_token: str) -> Order:
        caller = self.ctx.require_caller()

        cart = (
            self.db.query(CartItem)
            .options(joinedload(CartItem.item))
            .filter(CartItem.user_id == caller.id)
            .order_by(CartItem.id)
            .all()
        )
        if not cart:
            raise ValidationError("Your cart is empty")

        amount = sum(ci.item.price * ci.quantity for ci in cart)
        logger.info(f"Checking out {len(cart)} cart rows for user {caller.id}, amount {amount}")

        charge = self.ctx.gateway.charge(amount, settings.CURRENCY, payment_token)
        if charge.amount != amount:
            logger.warning(
                f"Gateway charged {charge.amount} for computed amount {amount} (charge {charge.id})"
            )

        order_items = [
            OrderItem(
                user_id=caller.id,
                title=ci.item.title,
                description=ci.item.description,
                price=ci.item.price,
                image=ci.item.image,
                large_image=ci.item.large_image,
                quantity=ci.quantity,
            )
            for ci in cart
        ]
        order = Order(user_id=caller.id, total=charge.amount, charge=charge.id, items=order_items)
        try:
            self.db.add(order)
            # only the rows exactly as they were charged
            result = self.db.execute(
                delete(CartItem)
                .where(or_(*[
                    and_(CartItem.id == ci.id, CartItem.quantity == ci.quantity)
                    for ci in cart
                ]))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != len(cart):
                self.db.rollback()
                logger.warning(
                    f"Cart of user {caller.id} changed during checkout; refunding charge {charge.id}"
                )
                self._compensate(charge.id)
                raise Conflict("Your cart changed during checkout, please try again")
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error(
                f"Could not persist order for charge {charge.id}; refunding",
                exc_info=True,
            )
            self._compensate(charge.id)
            raise

        # rows were removed with a bulk delete
        for ci in cart:
            self.db.expunge(ci)

        self.db.refresh(order)
        logger.info(f"Order {order.id} created for user {caller.id}, total {order.total}")
        return order

    def _compensate(self, charge_id: str) -> None:
        try:
            self.ctx.gateway.refund(charge_id)
        except PaymentFailure:
            logger.critical(f"Refund failed for charge {charge_id}; manual action required")

    def get_order(self, order_id: int) -> Order:
        caller = self.ctx.require_caller()

        order = (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )
        if order is None:
            raise NotFound(f"No order found for id {order_id}")

        try:
            require_owner_or_permission(caller, order.user_id, [Permission.ADMIN])
        except Forbidden:
            raise Forbidden("You can't see this order")
        return order

    def list_orders(self) -> list[Order]:
        caller = self.ctx.require_caller()
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == caller.id)
            .order_by(Order.id.desc())
            .all()
        )
