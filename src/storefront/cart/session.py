"""CartSession: the cart as the UI sees it.

A session owns one in-memory cart. While nobody is signed in the cart is a
guest cart persisted immediately to local storage. At sign-in the guest cart
is merged into the customer's stored cart and the session becomes bound to
that customer; from then on writes go to the remote cart through a debounced
save that carries the customer id captured when the edit was made.

Every edit reserves or releases stock before the cart changes. If the cart
then cannot be persisted, the stock movement is undone and the in-memory
cart keeps its previous state.

States::

    GUEST --sign-in--> RECONCILING --merge--> BOUND --sign-out--> GUEST
"""

import time
from contextlib import contextmanager
from enum import Enum

import structlog

from storefront.cart.debounce import Debouncer
from storefront.cart.lines import CartLine, lines_from_documents, lines_to_documents
from storefront.cart.persistence import CustomerCartStore
from storefront.cart.reconciler import CartReconciler
from storefront.catalogue.size_key import SizeKey
from storefront.catalogue.stock import StockAccessor, StockMutator
from storefront.config import GUEST_CART_KEY, get_settings
from storefront.exceptions import (
    AuthenticationError,
    ConcurrentCartEditError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    OutOfStockError,
    StockRestoreError,
)
from storefront.order.placement import OrderPlacement
from storefront.promotion.resolution import PromotionResolver
from storefront.utils.logging import add_context, remove_context

logger = structlog.get_logger(__name__)


class CartState(Enum):
    GUEST = "guest"
    RECONCILING = "reconciling"
    BOUND = "bound"


class CartSession:
    def __init__(
        self,
        identity_provider,
        storage,
        accessor=None,
        mutator=None,
        cart_store=None,
        resolver=None,
        placement=None,
        settings=None,
        clock=time.monotonic,
    ):
        settings = settings or get_settings()
        self._identity_provider = identity_provider
        self._storage = storage
        self._accessor = accessor or StockAccessor()
        self._mutator = mutator or StockMutator()
        self._cart_store = cart_store or CustomerCartStore()
        self._resolver = resolver or PromotionResolver()
        self._placement = placement or OrderPlacement()
        self._reconciler = CartReconciler(storage, self._cart_store)
        self._debouncer = Debouncer(self._write_remote, settings.cart_save_debounce_seconds, clock=clock)

        self._state = CartState.GUEST
        self._identity_id = None
        remove_context("identity_id")
        self._lines = []
        self._promo = None
        self._busy_keys = set()

        current = identity_provider.current_identity()
        if current is not None:
            self._bind(current)
        else:
            self._lines = lines_from_documents(storage.get(GUEST_CART_KEY))
        self._unsubscribe = identity_provider.subscribe(self._on_identity_changed)

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    @property
    def state(self) -> CartState:
        return self._state

    @property
    def identity_id(self):
        return self._identity_id

    @property
    def lines(self):
        return list(self._lines)

    @property
    def promo(self):
        return self._promo

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    def line_for(self, size_key):
        key = str(SizeKey.parse(size_key))
        return next((line for line in self._lines if line.size == key), None)

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def total_item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self._lines)

    @property
    def discount_amount(self) -> float:
        return self._promo.discount_for(self.subtotal) if self._promo else 0.0

    @property
    def total_price(self) -> float:
        return self.subtotal - self.discount_amount

    # -------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------
    def add_item(self, product, size, quantity=1, variant=None):
        """Reserve ``quantity`` units of a size and add them to the cart."""
        if not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")

        if variant is not None:
            key = str(SizeKey.for_variant(product.id, variant.id, size))
        else:
            key = str(SizeKey.flat(product.id, size))

        with self._editing(key):
            existing = self.line_for(key)
            current = existing.quantity if existing else 0

            available = self._accessor.get_available_stock(product.id, key)
            real_available = available + current
            if real_available <= 0:
                raise OutOfStockError()
            if current + quantity > real_available:
                raise InsufficientStockError(remaining=real_available - current)

            self._mutator.reserve(product.id, key, quantity)

            if existing is not None:
                line = existing.with_quantity(current + quantity)
                lines = [line if item.size == key else item for item in self._lines]
            else:
                line = CartLine.build(
                    product_id=product.id,
                    name=f"{product.name} - {variant.color}" if variant is not None else product.name,
                    price=product.price,
                    size=key,
                    quantity=quantity,
                    image=self._image_for(product, variant),
                )
                lines = [*self._lines, line]

            self._commit(lines, lambda: self._mutator.release(product.id, key, quantity))
            logger.debug("Item added to cart", size_key=key, quantity=quantity)
            return line

    def update_quantity(self, product_id, size_key, new_quantity):
        if new_quantity <= 0:
            return self.remove_item(product_id, size_key)

        key = str(SizeKey.parse(size_key))
        with self._editing(key):
            existing = self._require_line(key)
            delta = new_quantity - existing.quantity
            if delta == 0:
                return existing

            if delta > 0:
                available = self._accessor.get_available_stock(product_id, key)
                if available + existing.quantity <= 0:
                    raise OutOfStockError()
                if delta > available:
                    raise InsufficientStockError(remaining=available)

            self._mutator.adjust_stock(product_id, key, -delta)

            line = existing.with_quantity(new_quantity)
            lines = [line if item.size == key else item for item in self._lines]
            self._commit(lines, lambda: self._mutator.adjust_stock(product_id, key, delta))
            return line

    def remove_item(self, product_id, size_key):
        """Give the whole line back to stock and drop it from the cart."""
        key = str(SizeKey.parse(size_key))
        with self._editing(key):
            existing = self._require_line(key)
            self._mutator.release(product_id, key, existing.quantity)

            lines = [item for item in self._lines if item.size != key]
            self._commit(lines, lambda: self._mutator.reserve(product_id, key, existing.quantity))
            return None

    def clear(self):
        """Delete the stored cart, then release every line.

        Stock is only given back once the stored cart is gone, so a failed
        delete leaves cart and stock as they were. Each line is released on
        its own; failures are collected and raised together as
        ``StockRestoreError``.
        """
        self._ensure_idle()
        lines = self._lines

        self._delete_stored_cart()
        self._debouncer.cancel()
        self._lines = []
        self._promo = None

        failures = self._release_all(lines)
        if failures:
            raise StockRestoreError(failures)

    def clear_for_inactivity(self):
        """Release the customer's stored cart and sign them out, whatever fails on the way."""
        identity = self._identity_provider.current_identity()
        try:
            lines = self._lines
            if identity is not None:
                try:
                    self._debouncer.flush()
                except Exception:
                    logger.exception("Could not save cart before inactivity cleanup", identity_id=identity.uid)
                self._debouncer.cancel()
                try:
                    lines = self._cart_store.load(identity.uid)
                except Exception:
                    logger.exception("Could not read stored cart; using the session cart", identity_id=identity.uid)

            try:
                self._delete_stored_cart()
            except Exception:
                logger.exception("Could not delete stored cart; keeping its stock", identity_id=self._identity_id)
            else:
                self._release_all(lines)
            self._lines = []
            self._promo = None
        finally:
            if identity is not None:
                self._identity_provider.sign_out()

    def clear_after_order(self):
        """Empty the cart without touching stock; the order now owns it."""
        self._debouncer.cancel()
        self._delete_stored_cart()
        self._lines = []
        self._promo = None

    # -------------------------------------------------------------------
    # Promotions and checkout
    # -------------------------------------------------------------------
    def apply_promo(self, code):
        application = self._resolver.apply(code)
        self._promo = application.promo
        return application

    def remove_promo(self):
        self._promo = None

    def checkout(self, shipping, payment_method, shipping_cost=0.0):
        if self._state is not CartState.BOUND:
            raise AuthenticationError("Sign in to place an order")
        self._ensure_idle()

        order = self._placement.place(
            self._identity_id,
            self._lines,
            shipping=shipping,
            payment_method=payment_method,
            promo=self._promo,
            shipping_cost=shipping_cost,
        )
        self.clear_after_order()
        return order

    # -------------------------------------------------------------------
    # Host hooks
    # -------------------------------------------------------------------
    def tick(self, now=None):
        """Run the debounced remote save if it is due."""
        return self._debouncer.run_due(now)

    def flush(self):
        return self._debouncer.flush()

    def close(self):
        self._unsubscribe()
        self._debouncer.flush()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    @contextmanager
    def _editing(self, size_key):
        if self._state is CartState.RECONCILING:
            raise ConcurrentCartEditError("The cart is being merged; try again")
        if size_key in self._busy_keys:
            raise ConcurrentCartEditError(f"Another change to {size_key} is still in progress")
        self._busy_keys.add(size_key)
        try:
            yield
        finally:
            self._busy_keys.discard(size_key)

    def _ensure_idle(self):
        if self._busy_keys:
            raise ConcurrentCartEditError("Cart changes are still in progress")

    def _require_line(self, key):
        line = next((item for item in self._lines if item.size == key), None)
        if line is None:
            raise NotFoundError(f"No cart line for {key}")
        return line

    @staticmethod
    def _image_for(product, variant):
        images = (variant.image_urls if variant is not None else []) or product.image_urls
        return images[0] if images else None

    def _commit(self, lines, compensate):
        try:
            self._persist(lines)
        except Exception:
            try:
                compensate()
            except Exception:
                logger.exception("Could not undo stock change after a failed cart save")
            raise
        self._lines = lines

    def _persist(self, lines):
        if self._state is CartState.BOUND:
            self._debouncer.schedule(self._identity_id, list(lines))
        else:
            self._storage.set(GUEST_CART_KEY, lines_to_documents(lines))

    def _write_remote(self, identity_id, lines):
        self._cart_store.save(identity_id, lines)

    def _delete_stored_cart(self):
        if self._state is CartState.BOUND:
            self._cart_store.delete(self._identity_id)
        else:
            self._storage.delete(GUEST_CART_KEY)

    def _release_all(self, lines):
        failures = []
        for line in lines:
            try:
                self._mutator.release(line.product_id, line.size, line.quantity)
            except Exception as exc:
                logger.warning("Could not restore stock", size_key=line.size, quantity=line.quantity, error=str(exc))
                failures.append((line.size, exc))
        return failures

    def _on_identity_changed(self, identity):
        try:
            self._debouncer.flush()
        finally:
            self._debouncer.cancel()
            if identity is None:
                self._to_guest()
            else:
                self._bind(identity)

    def _bind(self, identity):
        self._state = CartState.RECONCILING
        self._identity_id = identity.uid
        add_context(identity_id=identity.uid)
        try:
            self._lines = self._reconciler.reconcile(identity.uid)
        except Exception:
            self._lines = []
            raise
        finally:
            self._state = CartState.BOUND
        logger.info("Cart bound to identity", lines=len(self._lines))

    def _to_guest(self):
        logger.info("Cart returned to guest", previous_identity_id=self._identity_id)
        self._state = CartState.GUEST
        self._identity_id = None
        remove_context("identity_id")
        self._lines = []
        self._promo = None
