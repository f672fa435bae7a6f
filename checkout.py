"""
Order synthesis, payment and order lifecycle.

Checkout turns a signed-in user's cart into an Order. Payment goes through an
async charge callable returning a PaymentResult; the built-in simulated charge
only waits and always succeeds, so a real gateway can be dropped in without
changing the caller.
"""
import asyncio
import random
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Set

import structlog

from errors import EmptyCart, InvalidStatusTransition, OrderNotFound
from schemas import Address, Analytics, Cart, Order, OrderStatus, PaymentResult, PaymentStatus, User

logger = structlog.get_logger(__name__)

ORDER_ID_PREFIX = "KMX-"
TAX_RATE = 0.08
SHIPPING_COST = 0.0
DEFAULT_PAYMENT_METHOD = "Credit Card"
DEFAULT_SHIPPING_ADDRESS = Address(
    street="123 Tech Lane",
    city="Innovation",
    state="CA",
    zip="90000",
    country="USA",
)

ALLOWED_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

Charge = Callable[[float, float], Awaitable[PaymentResult]]


# -------
# Pricing
# -------

def calc_tax(subtotal: float, tax_rate: float = TAX_RATE) -> float:
    return round(subtotal * tax_rate, 2)


def calc_total(subtotal: float, tax_rate: float = TAX_RATE) -> float:
    # Flat tax, free shipping
    return round(subtotal * (1 + tax_rate) + SHIPPING_COST, 2)


# ---------------
# Order synthesis
# ---------------

def generate_order_id(existing_ids: Iterable[str] = (), rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    taken = set(existing_ids)
    while True:
        candidate = f"{ORDER_ID_PREFIX}{rng.randint(100000, 999999)}"
        if candidate not in taken:
            return candidate


def build_order(
    user: User,
    cart: Cart,
    existing_ids: Iterable[str] = (),
    tax_rate: float = TAX_RATE,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> Order:
    if cart.is_empty():
        raise EmptyCart("Your cart is empty")
    subtotal = round(cart.subtotal, 2)
    return Order(
        id=generate_order_id(existing_ids, rng),
        user_id=user.id,
        items=cart.items,
        subtotal=subtotal,
        tax=calc_tax(subtotal, tax_rate),
        shipping=SHIPPING_COST,
        total=calc_total(cart.subtotal, tax_rate),
        date=now or datetime.now(timezone.utc),
        status=OrderStatus.PENDING,
        shipping_address=user.address or DEFAULT_SHIPPING_ADDRESS,
        payment_method=DEFAULT_PAYMENT_METHOD,
    )


async def simulated_charge(amount: float, delay: float) -> PaymentResult:
    await asyncio.sleep(delay)
    return PaymentResult(status=PaymentStatus.SUCCEEDED)


async def process_payment(
    user: User,
    cart: Cart,
    existing_ids: Iterable[str] = (),
    delay: float = 2.0,
    tax_rate: float = TAX_RATE,
    charge: Charge = simulated_charge,
) -> PaymentResult:
    """Charge for ``cart`` and synthesize the order on success.

    The cart passed in is the snapshot that ends up in the order, whatever
    happens to the session's cart while the charge is pending.
    """
    if cart.is_empty():
        raise EmptyCart("Your cart is empty")
    amount = calc_total(cart.subtotal, tax_rate)
    logger.info("payment_started", user_id=user.id, amount=amount, items=cart.item_count)

    result = await charge(amount, delay)
    if not result.succeeded:
        logger.warning("payment_failed", user_id=user.id, amount=amount, reason=result.reason)
        return result

    order = build_order(user, cart, existing_ids, tax_rate=tax_rate)
    logger.info("order_created", order_id=order.id, user_id=user.id, total=order.total)
    return PaymentResult(status=PaymentStatus.SUCCEEDED, order=order)


# ---------------
# Order lifecycle
# ---------------

def find_order(orders: Iterable[Order], order_id: str) -> Order:
    order = next((o for o in orders if o.id == order_id), None)
    if order is None:
        raise OrderNotFound(f"Order not found: {order_id}")
    return order


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return current == new or new in ALLOWED_TRANSITIONS[current]


def update_order_status(
    orders: Sequence[Order],
    order_id: str,
    status: OrderStatus,
    strict: bool = True,
) -> List[Order]:
    """Set the status of one order.

    With ``strict`` the forward-only graph in ALLOWED_TRANSITIONS applies;
    otherwise any status may overwrite any other.
    """
    current = find_order(orders, order_id)
    if strict and not can_transition(current.status, status):
        raise InvalidStatusTransition(
            f"Cannot move order {order_id} from {current.status.value} to {status.value}"
        )
    logger.info("order_status_updated", order_id=order_id, old=current.status.value, new=status.value)
    updated = current.model_copy(update={"status": status})
    return [updated if o.id == order_id else o for o in orders]


def orders_for_user(orders: Iterable[Order], user_id: str) -> List[Order]:
    return [o for o in orders if o.user_id == user_id]


def calculate_analytics(orders: Sequence[Order]) -> Analytics:
    total_revenue = round(sum(o.total for o in orders), 2)
    total_orders = len(orders)
    pending_orders = sum(1 for o in orders if o.status == OrderStatus.PENDING)
    average = round(total_revenue / total_orders, 2) if total_orders > 0 else 0.0
    return Analytics(
        total_revenue=total_revenue,
        total_orders=total_orders,
        pending_orders=pending_orders,
        average_order_value=average,
    )


def render_invoice(order: Order, user: User) -> str:
    lines = [
        "KHEMIXALL MEDICAL SUPPLY - INVOICE",
        "-----------------------------------",
        f"Order ID: {order.id}",
        f"Date: {order.date.strftime('%Y-%m-%d')}",
        f"Status: {order.status.value}",
        "",
        f"Customer: {user.name}",
        f"Email: {user.email}",
        "",
        "Shipping Address:",
        order.shipping_address.street,
        f"{order.shipping_address.city}, {order.shipping_address.zip}",
        "",
        "ITEMS:",
        "-----------------------------------",
    ]
    for item in order.items:
        lines.append(f"{item.product.name} x{item.quantity} - Rs {item.line_total:.2f}")
    lines += [
        "-----------------------------------",
        f"Subtotal: Rs {order.subtotal:.2f}",
        f"Tax: Rs {order.tax:.2f}",
        f"TOTAL: Rs {order.total:.2f}",
        f"Payment Method: {order.payment_method}",
        "",
        "Thank you for your business.",
    ]
    return "\n".join(lines) + "\n"
