import pytest
from sqlalchemy.exc import IntegrityError

from conftest import FakeGateway
from storefront.core.errors import (
    Conflict,
    Forbidden,
    NotFound,
    PaymentFailure,
    Unauthorized,
    ValidationError,
)
from storefront.models.cart import CartItem
from storefront.models.order import Order
from storefront.models.user import User
from storefront.services.cart_service import CartService
from storefront.services.context import RequestContext
from storefront.services.item_service import ItemService
from storefront.services.order_service import OrderService
from storefront.services.payment import PaymentGateway


@pytest.fixture
def filled_cart(make_ctx, user, create_item, admin):
    shoes = create_item(admin, title="Shoes", price=500)
    hat = create_item(admin, title="Hat", price=1250)
    cart = CartService(make_ctx(user))
    cart.add_to_cart(shoes.id)
    cart.add_to_cart(shoes.id)
    cart.add_to_cart(hat.id)
    return {"shoes": shoes, "hat": hat}


def test_checkout_charges_cart_total_and_empties_cart(make_ctx, user, filled_cart, gateway, db):
    order = OrderService(make_ctx(user)).create_order("tok_visa")

    assert gateway.charges == [{"amount": 2250, "currency": "usd", "source": "tok_visa"}]
    assert order.total == 2250
    assert order.charge == "ch_test_1"
    assert order.user_id == user.id
    assert sorted((i.title, i.price, i.quantity) for i in order.items) == [
        ("Hat", 1250, 1),
        ("Shoes", 500, 2),
    ]
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 0


def test_order_total_comes_from_the_gateway(make_ctx, user, filled_cart, gateway):
    gateway.settled_amount = 2000

    order = OrderService(make_ctx(user)).create_order("tok_visa")

    assert gateway.charges[0]["amount"] == 2250
    assert order.total == 2000


def test_order_items_are_snapshots(make_ctx, user, admin, filled_cart, db):
    order = OrderService(make_ctx(user)).create_order("tok_visa")

    items = ItemService(make_ctx(admin))
    items.update_item(filled_cart["shoes"].id, title="Old Shoes", price=1)
    items.delete_item(filled_cart["hat"].id)

    db.expire_all()
    stored = db.get(Order, order.id)
    assert sorted((i.title, i.price) for i in stored.items) == [("Hat", 1250), ("Shoes", 500)]


def test_declined_payment_leaves_no_trace(make_ctx, user, filled_cart, gateway, db):
    gateway.fail = True

    with pytest.raises(PaymentFailure):
        OrderService(make_ctx(user)).create_order("tok_declined")

    assert db.query(Order).count() == 0
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 2


def test_empty_cart_is_not_charged(make_ctx, user, gateway):
    with pytest.raises(ValidationError):
        OrderService(make_ctx(user)).create_order("tok_visa")
    assert gateway.charges == []


def test_checkout_requires_sign_in(make_ctx, gateway):
    with pytest.raises(Unauthorized):
        OrderService(make_ctx()).create_order("tok_visa")
    assert gateway.charges == []


def test_failed_order_write_refunds_the_charge(make_ctx, user, admin, filled_cart, gateway, db):
    # an existing order already holds the charge id the gateway will return next
    db.add(Order(user_id=admin.id, total=1, charge="ch_test_1"))
    db.commit()

    with pytest.raises(IntegrityError):
        OrderService(make_ctx(user)).create_order("tok_visa")

    assert gateway.refunds == ["ch_test_1"]
    assert db.query(Order).count() == 1
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 2


def test_order_visibility(make_ctx, user, admin, create_user, filled_cart):
    order = OrderService(make_ctx(user)).create_order("tok_visa")
    stranger = create_user(email="stranger@example.com")

    assert OrderService(make_ctx(user)).get_order(order.id).id == order.id
    assert OrderService(make_ctx(admin)).get_order(order.id).id == order.id
    with pytest.raises(Forbidden):
        OrderService(make_ctx(stranger)).get_order(order.id)
    with pytest.raises(NotFound):
        OrderService(make_ctx(user)).get_order(order.id + 100)


def test_list_orders_only_returns_own_orders(make_ctx, user, admin, filled_cart):
    OrderService(make_ctx(user)).create_order("tok_visa")

    assert len(OrderService(make_ctx(user)).list_orders()) == 1
    assert OrderService(make_ctx(admin)).list_orders() == []


class InterruptingGateway(FakeGateway):
    """Runs `during_charge` once, between loading the cart and settling the charge."""

    def __init__(self, during_charge):
        super().__init__()
        self.during_charge = during_charge

    def charge(self, amount, currency, source):
        hook, self.during_charge = self.during_charge, None
        if hook is not None:
            hook()
        return super().charge(amount, currency, source)


def other_request(session_factory, user_id, gateway, mailer):
    session = session_factory()
    ctx = RequestContext(db=session, gateway=gateway, mailer=mailer, caller=session.get(User, user_id))
    return session, ctx


def test_overlapping_checkouts_charge_once(make_ctx, session_factory, mailer, user, item, db):
    CartService(make_ctx(user)).add_to_cart(item.id)
    user_id = user.id

    def competing_checkout():
        session, ctx = other_request(session_factory, user_id, gateway, mailer)
        try:
            OrderService(ctx).create_order("tok_2")
        finally:
            session.close()

    gateway = InterruptingGateway(competing_checkout)
    ctx = RequestContext(db=db, gateway=gateway, mailer=mailer, caller=user)

    with pytest.raises(Conflict):
        OrderService(ctx).create_order("tok_1")

    # the competing checkout settled ch_test_1; the interrupted one is refunded
    assert gateway.refunds == ["ch_test_2"]
    orders = db.query(Order).all()
    assert [o.charge for o in orders] == ["ch_test_1"]
    assert db.query(CartItem).filter(CartItem.user_id == user_id).count() == 0


def test_item_added_during_checkout_stays_in_cart(make_ctx, session_factory, mailer, user, item, db):
    CartService(make_ctx(user)).add_to_cart(item.id)
    user_id, item_id = user.id, item.id

    def concurrent_add():
        session, ctx = other_request(session_factory, user_id, gateway, mailer)
        try:
            CartService(ctx).add_to_cart(item_id)
        finally:
            session.close()

    gateway = InterruptingGateway(concurrent_add)
    ctx = RequestContext(db=db, gateway=gateway, mailer=mailer, caller=user)

    with pytest.raises(Conflict):
        OrderService(ctx).create_order("tok_1")

    assert gateway.refunds == ["ch_test_1"]
    assert db.query(Order).count() == 0
    rows = db.query(CartItem).filter(CartItem.user_id == user_id).all()
    assert [r.quantity for r in rows] == [2]


def test_gateway_without_refund_cannot_be_built():
    class ChargeOnlyGateway(PaymentGateway):
        def charge(self, amount, currency, source):
            raise NotImplementedError

    with pytest.raises(TypeError):
        ChargeOnlyGateway()
