import asyncio
import re
from datetime import datetime, timezone

import pytest

import cart
import catalog
import checkout
from errors import (
    CheckoutInProgress,
    EmptyCart,
    InvalidStatusTransition,
    OrderNotFound,
    PaymentFailed,
    SessionNotFound,
    SignInRequired,
)
from schemas import Address, Cart, CheckoutStage, OrderStatus, PaymentResult, PaymentStatus, ProductUpdate, SignInIn


class SequenceRandom:
    def __init__(self, values):
        self._values = iter(values)

    def randint(self, a, b):
        return next(self._values)


@pytest.fixture
def scenario_cart(stethoscope, gel):
    c = cart.add_item(cart.add_item(Cart(), stethoscope), gel)
    return cart.update_quantity(c, gel.id, 2)


def test_build_order_totals(customer, scenario_cart):
    order = checkout.build_order(customer, scenario_cart)
    assert order.subtotal == 339
    assert order.tax == 27.12
    assert order.total == 366.12
    assert order.shipping == 0
    assert order.status == OrderStatus.PENDING
    assert re.fullmatch(r"KMX-\d{6}", order.id)
    assert order.user_id == customer.id
    assert order.items == scenario_cart.items
    assert order.payment_method == "Credit Card"


def test_build_order_uses_default_address_when_user_has_none(customer, scenario_cart):
    order = checkout.build_order(customer, scenario_cart)
    assert order.shipping_address == checkout.DEFAULT_SHIPPING_ADDRESS


def test_build_order_snapshots_user_address(customer, scenario_cart):
    home = Address(street="9 Elm St", city="Springfield", state="IL", zip="62701", country="USA")
    order = checkout.build_order(customer.model_copy(update={"address": home}), scenario_cart)
    assert order.shipping_address == home


def test_build_order_records_timestamp(customer, scenario_cart):
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert checkout.build_order(customer, scenario_cart, now=now).date == now


def test_build_order_rejects_empty_cart(customer):
    with pytest.raises(EmptyCart):
        checkout.build_order(customer, Cart())


def test_order_ids_avoid_existing_ones():
    rng = SequenceRandom([123456, 123456, 654321])
    assert checkout.generate_order_id(["KMX-123456"], rng) == "KMX-654321"


def test_order_total_is_not_recomputed_after_price_change(customer, stethoscope, gel, scenario_cart):
    order = checkout.build_order(customer, scenario_cart)
    repriced = catalog.update_product([stethoscope, gel], stethoscope.id, ProductUpdate(price=999))
    assert catalog.get_product(repriced, stethoscope.id).price == 999
    assert order.total == 366.12
    assert order.items[0].product.price == 300


def test_process_payment_success(customer, scenario_cart):
    result = asyncio.run(checkout.process_payment(customer, scenario_cart, delay=0))
    assert result.succeeded
    assert result.order.total == 366.12


def test_process_payment_failure_branch(customer, scenario_cart):
    async def declined(amount, delay):
        return PaymentResult(status=PaymentStatus.FAILED, reason="Card declined")

    result = asyncio.run(checkout.process_payment(customer, scenario_cart, delay=0, charge=declined))
    assert not result.succeeded
    assert result.order is None
    assert result.reason == "Card declined"


def test_process_payment_rejects_empty_cart(customer):
    with pytest.raises(EmptyCart):
        asyncio.run(checkout.process_payment(customer, Cart(), delay=0))


def test_strict_status_transitions(customer, scenario_cart):
    orders = [checkout.build_order(customer, scenario_cart)]
    order_id = orders[0].id

    orders = checkout.update_order_status(orders, order_id, OrderStatus.PENDING)
    orders = checkout.update_order_status(orders, order_id, OrderStatus.PROCESSING)
    orders = checkout.update_order_status(orders, order_id, OrderStatus.SHIPPED)
    with pytest.raises(InvalidStatusTransition):
        checkout.update_order_status(orders, order_id, OrderStatus.CANCELLED)
    orders = checkout.update_order_status(orders, order_id, OrderStatus.DELIVERED)
    with pytest.raises(InvalidStatusTransition):
        checkout.update_order_status(orders, order_id, OrderStatus.PENDING)
    assert orders[0].status == OrderStatus.DELIVERED


def test_cancel_allowed_from_pending_and_processing(customer, scenario_cart):
    order = checkout.build_order(customer, scenario_cart)
    assert checkout.can_transition(OrderStatus.PENDING, OrderStatus.CANCELLED)
    assert checkout.can_transition(OrderStatus.PROCESSING, OrderStatus.CANCELLED)
    cancelled = checkout.update_order_status([order], order.id, OrderStatus.CANCELLED)
    assert cancelled[0].status == OrderStatus.CANCELLED
    assert order.status == OrderStatus.PENDING


def test_unrestricted_status_overwrite(customer, scenario_cart):
    orders = [checkout.build_order(customer, scenario_cart)]
    orders = checkout.update_order_status(orders, orders[0].id, OrderStatus.DELIVERED, strict=False)
    orders = checkout.update_order_status(orders, orders[0].id, OrderStatus.PENDING, strict=False)
    assert orders[0].status == OrderStatus.PENDING


def test_update_status_unknown_order():
    with pytest.raises(OrderNotFound):
        checkout.update_order_status([], "KMX-000000", OrderStatus.SHIPPED)


def test_analytics(customer, scenario_cart, gel):
    first = checkout.build_order(customer, scenario_cart, existing_ids=[])
    second = checkout.build_order(customer, cart.add_item(Cart(), gel), existing_ids=[first.id])
    orders = checkout.update_order_status([first, second], second.id, OrderStatus.PROCESSING)

    stats = checkout.calculate_analytics(orders)
    assert stats.total_orders == 2
    assert stats.pending_orders == 1
    assert stats.total_revenue == pytest.approx(366.12 + 14.04)
    assert stats.average_order_value == pytest.approx((366.12 + 14.04) / 2, abs=0.01)
    assert checkout.calculate_analytics([]).average_order_value == 0


def test_render_invoice(customer, scenario_cart):
    order = checkout.build_order(customer, scenario_cart)
    text = checkout.render_invoice(order, customer)
    assert f"Order ID: {order.id}" in text
    assert "Gel x3 - Rs 39.00" in text
    assert "TOTAL: Rs 366.12" in text
    assert "Customer: Jordan Lee" in text


# Store-level checkout flow

def test_checkout_requires_sign_in_then_resumes(store):
    session = store.create_session()
    store.add_to_cart(session.id, "1")

    with pytest.raises(SignInRequired):
        asyncio.run(store.checkout(session.id))
    assert store.session(session.id).pending_checkout is True

    signed_in = asyncio.run(store.sign_in(session.id, SignInIn(email="user@khemixall.com", password="demo")))
    assert signed_in.pending_checkout is True

    order = asyncio.run(store.checkout(session.id))
    after = store.session(session.id)
    assert after.cart.is_empty()
    assert after.pending_checkout is False
    assert after.checkout_stage == CheckoutStage.CONFIRMED
    assert after.last_order == order
    assert store.orders == [order]
    assert order.shipping_address.street == "123 Medical Way"


def test_checkout_rejects_empty_cart(store):
    session = store.create_session()
    asyncio.run(store.sign_in(session.id, SignInIn(email="someone@khemixall.com", password="x")))
    with pytest.raises(EmptyCart):
        asyncio.run(store.checkout(session.id))


def test_failed_payment_keeps_cart(store, monkeypatch):
    async def declined(user, cart_, existing_ids=(), delay=0, tax_rate=0.08, charge=None):
        return PaymentResult(status=PaymentStatus.FAILED, reason="Card declined")

    monkeypatch.setattr(checkout, "process_payment", declined)
    session = store.create_session()
    store.add_to_cart(session.id, "8")
    asyncio.run(store.sign_in(session.id, SignInIn(email="someone@khemixall.com", password="x")))

    with pytest.raises(PaymentFailed):
        asyncio.run(store.checkout(session.id))
    after = store.session(session.id)
    assert after.cart.item_count == 1
    assert after.checkout_stage == CheckoutStage.IDLE
    assert store.orders == []


def test_newest_orders_first(store):
    session = store.create_session()
    asyncio.run(store.sign_in(session.id, SignInIn(email="someone@khemixall.com", password="x")))
    store.add_to_cart(session.id, "1")
    first = asyncio.run(store.checkout(session.id))
    store.add_to_cart(session.id, "2")
    second = asyncio.run(store.checkout(session.id))
    assert store.orders_for(session.id) == [second, first]
    assert first.id != second.id


def test_demo_shoppers_only_see_their_own_orders(store):
    alice = store.create_session()
    asyncio.run(store.sign_in(alice.id, SignInIn(email="alice@khemixall.com", password="x")))
    store.add_to_cart(alice.id, "1")
    order = asyncio.run(store.checkout(alice.id))

    bob = store.create_session()
    asyncio.run(store.sign_in(bob.id, SignInIn(email="bob@khemixall.com", password="x")))
    assert store.orders_for(bob.id) == []
    with pytest.raises(OrderNotFound):
        store.invoice(bob.id, order.id)
    assert store.orders_for(alice.id) == [order]

    alice_user = store.session(alice.id).user
    assert store.lookup_user(alice_user.id) == alice_user


def test_concurrent_checkout_is_refused(store):
    store.settings = store.settings.model_copy(update={"payment_delay": 0.05})
    session = store.create_session()
    asyncio.run(store.sign_in(session.id, SignInIn(email="someone@khemixall.com", password="x")))
    store.add_to_cart(session.id, "4")

    async def submit_twice():
        return await asyncio.gather(
            store.checkout(session.id), store.checkout(session.id), return_exceptions=True
        )

    results = asyncio.run(submit_twice())
    refused = [r for r in results if isinstance(r, CheckoutInProgress)]
    placed = [r for r in results if not isinstance(r, Exception)]
    assert len(refused) == 1
    assert len(placed) == 1
    assert store.orders == placed


def test_sign_out_does_not_release_a_pending_payment(store):
    store.settings = store.settings.model_copy(update={"payment_delay": 0.05})
    session = store.create_session()
    form = SignInIn(email="someone@khemixall.com", password="x")
    asyncio.run(store.sign_in(session.id, form))
    store.add_to_cart(session.id, "4")

    async def sign_out_mid_payment():
        pending = asyncio.create_task(store.checkout(session.id))
        await asyncio.sleep(0)
        assert store.sign_out(session.id).checkout_stage == CheckoutStage.PROCESSING
        await store.sign_in(session.id, form)
        with pytest.raises(CheckoutInProgress):
            await store.checkout(session.id)
        return await pending

    order = asyncio.run(sign_out_mid_payment())
    assert store.orders == [order]
    assert store.session(session.id).cart.is_empty()


def test_unknown_session_is_rejected(store):
    with pytest.raises(SessionNotFound):
        store.session("never-issued")
    with pytest.raises(SessionNotFound):
        store.add_to_cart("never-issued", "1")
    assert store.sign_out(store.create_session().id).checkout_stage == CheckoutStage.IDLE
