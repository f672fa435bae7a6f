"""
Application store.

Holds the catalog, orders, registered users, reviews and one SessionState per
shopper session. Every change runs a pure function from catalog/cart/wishlist/
checkout over the current value and swaps the result in whole, so readers
never see a half-applied update. All methods run on the event loop thread;
state is only replaced between awaits.
"""
import asyncio
import uuid
from typing import Dict, List, Optional, Sequence

import structlog

import auth
import cart
import catalog
import checkout
import wishlist
from errors import AuthError, CheckoutInProgress, EmptyCart, PaymentFailed, SessionNotFound, SignInRequired
from reviews import ReviewStore, new_review
from schemas import (
    Analytics,
    CheckoutStage,
    FilterState,
    Order,
    OrderStatus,
    Product,
    ProductIn,
    ProductUpdate,
    Review,
    ReviewIn,
    SessionState,
    SignInIn,
    SignUpIn,
    User,
)
from settings import Settings

logger = structlog.get_logger(__name__)


class Store:
    def __init__(
        self,
        settings: Settings,
        products: Optional[Sequence[Product]] = None,
        users: Optional[Sequence[User]] = None,
        reviews: Optional[Sequence[Review]] = None,
    ):
        self.settings = settings
        self.products: List[Product] = list(products or [])
        self.orders: List[Order] = []
        self.users: List[User] = list(users or [])
        self.reviews = ReviewStore()
        for review in reversed(list(reviews or [])):
            self.reviews.add(review)
        self._sessions: Dict[str, SessionState] = {}
        self._signed_in: Dict[str, User] = {}

    # --------
    # Sessions
    # --------

    def create_session(self) -> SessionState:
        return self._put(SessionState(id=uuid.uuid4().hex))

    def session(self, session_id: str) -> SessionState:
        existing = self._sessions.get(session_id)
        if existing is None:
            raise SessionNotFound("Unknown session, create one with POST /session")
        return existing

    def _put(self, session: SessionState) -> SessionState:
        self._sessions[session.id] = session
        return session

    def _update(self, session_id: str, **changes) -> SessionState:
        return self._put(self.session(session_id).model_copy(update=changes))

    # -------
    # Catalog
    # -------

    def visible_products(self, filters: FilterState) -> List[Product]:
        return catalog.filter_products(self.products, filters)

    def session_products(self, session_id: str) -> List[Product]:
        return self.visible_products(self.session(session_id).filters)

    def set_filters(self, session_id: str, filters: FilterState) -> SessionState:
        return self._update(session_id, filters=filters)

    def toggle_brand_filter(self, session_id: str, brand: str) -> SessionState:
        session = self.session(session_id)
        return self._update(session_id, filters=catalog.toggle_brand(session.filters, brand))

    def brands(self) -> List[str]:
        return catalog.unique_brands(self.products)

    def product(self, product_id: str) -> Product:
        return catalog.get_product(self.products, product_id)

    # ------------------
    # Cart and wishlist
    # ------------------

    def add_to_cart(self, session_id: str, product_id: str) -> SessionState:
        product = self.product(product_id)
        session = self.session(session_id)
        return self._update(session_id, cart=cart.add_item(session.cart, product), cart_open=True)

    def update_quantity(self, session_id: str, product_id: str, delta: int) -> SessionState:
        session = self.session(session_id)
        return self._update(session_id, cart=cart.update_quantity(session.cart, product_id, delta))

    def remove_from_cart(self, session_id: str, product_id: str) -> SessionState:
        session = self.session(session_id)
        return self._update(session_id, cart=cart.remove_item(session.cart, product_id))

    def close_cart(self, session_id: str) -> SessionState:
        return self._update(session_id, cart_open=False)

    def toggle_wishlist(self, session_id: str, product_id: str) -> SessionState:
        product = self.product(product_id)
        session = self.session(session_id)
        return self._update(session_id, wishlist=wishlist.toggle(session.wishlist, product))

    # ----
    # Auth
    # ----

    def _attach(self, session_id: str, user: User) -> SessionState:
        self._signed_in[user.id] = user
        return self._update(session_id, user=user)

    async def sign_in(self, session_id: str, form: SignInIn) -> SessionState:
        result = await auth.authenticate(self.users, form, self.settings)
        if not result.succeeded:
            raise AuthError(result.error)
        return self._attach(session_id, result.user)

    async def sign_up(self, session_id: str, form: SignUpIn) -> SessionState:
        self.users, result = await auth.register(self.users, form, self.settings)
        if not result.succeeded:
            raise AuthError(result.error)
        return self._attach(session_id, result.user)

    async def google_sign_in(self, session_id: str) -> SessionState:
        result = await auth.google_sign_in(self.settings)
        return self._attach(session_id, result.user)

    def sign_out(self, session_id: str) -> SessionState:
        session = self.session(session_id)
        if session.user is not None:
            logger.info("sign_out", user_id=session.user.id)
        changes = {"user": None, "pending_checkout": False}
        # an in-flight checkout() resets the stage itself
        if session.checkout_stage != CheckoutStage.PROCESSING:
            changes["checkout_stage"] = CheckoutStage.IDLE
        return self._update(session_id, **changes)

    def lookup_user(self, user_id: str) -> Optional[User]:
        if user_id == auth.ADMIN_USER_ID:
            return auth.admin_user(self.settings)
        registered = next((u for u in self.users if u.id == user_id), None)
        return registered or self._signed_in.get(user_id)

    # --------
    # Checkout
    # --------

    async def checkout(self, session_id: str) -> Order:
        session = self.session(session_id)
        if session.user is None:
            self._update(session_id, pending_checkout=True, cart_open=False)
            logger.info("checkout_needs_sign_in", session_id=session_id)
            raise SignInRequired("Please sign in to continue to checkout")
        if session.checkout_stage == CheckoutStage.PROCESSING:
            raise CheckoutInProgress("Payment is already being processed")
        if session.cart.is_empty():
            raise EmptyCart("Your cart is empty")

        self._update(session_id, checkout_stage=CheckoutStage.PROCESSING, cart_open=False)
        try:
            result = await checkout.process_payment(
                session.user,
                session.cart,
                existing_ids=[o.id for o in self.orders],
                delay=self.settings.payment_delay,
                tax_rate=self.settings.tax_rate,
            )
        finally:
            if self.session(session_id).checkout_stage == CheckoutStage.PROCESSING:
                self._update(session_id, checkout_stage=CheckoutStage.IDLE)

        if not result.succeeded:
            raise PaymentFailed(result.reason or "Payment was declined")

        order = result.order
        self.orders = [order, *self.orders]
        current = self.session(session_id)
        self._update(
            session_id,
            cart=cart.clear(current.cart),
            checkout_stage=CheckoutStage.CONFIRMED,
            pending_checkout=False,
            last_order=order,
        )
        return order

    def orders_for(self, session_id: str) -> List[Order]:
        session = self.session(session_id)
        if session.user is None:
            raise SignInRequired("Please sign in to view your orders")
        return checkout.orders_for_user(self.orders, session.user.id)

    def invoice(self, session_id: str, order_id: str) -> str:
        session = self.session(session_id)
        if session.user is None:
            raise SignInRequired("Please sign in to view your orders")
        order = checkout.find_order(checkout.orders_for_user(self.orders, session.user.id), order_id)
        return checkout.render_invoice(order, session.user)

    # -------
    # Reviews
    # -------

    def reviews_for(self, product_id: str) -> List[Review]:
        self.product(product_id)
        return self.reviews.for_product(product_id)

    async def add_review(self, product_id: str, payload: ReviewIn) -> Review:
        self.product(product_id)
        await asyncio.sleep(self.settings.review_delay)
        return self.reviews.add(new_review(product_id, payload))

    # -----
    # Admin
    # -----

    def create_product(self, payload: ProductIn) -> Product:
        self.products = catalog.create_product(self.products, payload)
        return self.products[0]

    def update_product(self, product_id: str, updates: ProductUpdate) -> Product:
        self.products = catalog.update_product(self.products, product_id, updates)
        return self.product(product_id)

    def delete_product(self, product_id: str) -> None:
        self.products = catalog.delete_product(self.products, product_id)

    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        self.orders = checkout.update_order_status(
            self.orders, order_id, status, strict=self.settings.strict_order_status
        )
        return checkout.find_order(self.orders, order_id)

    def analytics(self) -> Analytics:
        return checkout.calculate_analytics(self.orders)
