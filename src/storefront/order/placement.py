"""Order placement: the all-or-nothing checkout unit.

Placing an order allocates the customer's next order number, writes the
order, turns every line's stock reservation into an order-attributed
consumption, counts a use of the applied promotion and deletes the
customer's stored cart. The writes happen in the unit of work of the
``PlaceOrder`` handler: either all of them commit or none do.

Cart lines are checked before anything is read or written, so a cart that
cannot be resolved to inventory slots never opens a unit of work at all.
"""

import json
from contextlib import contextmanager

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.lines import CartLine
from storefront.cart.persistence import CustomerCartStore
from storefront.catalogue.product import Product
from storefront.catalogue.size_key import SizeKey
from storefront.domain import storefront
from storefront.exceptions import (
    EmptyCartError,
    InvalidPromoError,
    MalformedCartItemError,
    MalformedSizeKeyError,
    NotFoundError,
    StorefrontError,
    TransactionAbortError,
)
from storefront.order.order import Order, OrderCounter
from storefront.promotion.promo_code import PromoCode

logger = structlog.get_logger(__name__)


def _as_document(item):
    return item.to_document() if isinstance(item, CartLine) else dict(item)


def validate_items(documents):
    """Resolve every line to an inventory slot, raising ``MalformedCartItemError`` on the first that cannot be."""
    for document in documents:
        name = document.get("name") or document.get("size") or "<unnamed>"
        product_id = document.get("productId")
        if not product_id:
            raise MalformedCartItemError(name, "missing product id")
        try:
            key = SizeKey.parse(document.get("size"))
        except MalformedSizeKeyError as exc:
            raise MalformedCartItemError(name, str(exc)) from exc
        if key.product_id != str(product_id):
            raise MalformedCartItemError(name, f"size key {key} does not belong to product {product_id}")
        if not isinstance(document.get("quantity"), int) or document["quantity"] < 1:
            raise MalformedCartItemError(name, "quantity must be a positive integer")


@contextmanager
def _step(step):
    try:
        yield
    except (MalformedCartItemError, TransactionAbortError):
        raise
    except Exception as exc:
        logger.warning("Order placement step failed", step=step, error=str(exc))
        raise TransactionAbortError(step, exc) from exc


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of cart line documents
    shipping = Text()  # JSON: customer and delivery details
    payment_method = String(max_length=50)
    promo_code_id = Identifier()
    shipping_cost = Float(default=0.0, min_value=0.0)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        documents = json.loads(command.items)
        validate_items(documents)
        if not documents:
            raise EmptyCartError("Cannot place an order for an empty cart")

        lines = [CartLine.from_document(document) for document in documents]
        shipping = json.loads(command.shipping) if command.shipping else {}

        with _step("allocate the order number"):
            counter_repo = current_domain.repository_for(OrderCounter)
            try:
                counter = counter_repo.get(command.customer_id)
            except ObjectNotFoundError:
                counter = OrderCounter(id=str(command.customer_id), count=0)
            number = counter.next_number()

        promo = None
        if command.promo_code_id:
            with _step("validate the promo"):
                promo = current_domain.repository_for(PromoCode).get(command.promo_code_id)
                if not promo.active:
                    raise InvalidPromoError(f"Code {promo.code} is no longer active")

        with _step("build the order"):
            order = Order.place(
                command.customer_id,
                number,
                lines,
                shipping_cost=command.shipping_cost,
                promo=promo,
                shipping=shipping,
                payment_method=command.payment_method,
            )

        products = {}
        for line in lines:
            with _step(f"consume stock for {line.name}"):
                product = products.get(line.product_id)
                if product is None:
                    product = current_domain.repository_for(Product).get(line.product_id)
                    products[line.product_id] = product
                product.commit_reservation(line.size, line.quantity, order_id=str(order.id))

        if promo is not None:
            with _step("record promo usage"):
                promo.record_usage(order_id=str(order.id))

        with _step("write the order"):
            counter_repo.add(counter)
            current_domain.repository_for(Order).add(order)
            for product in products.values():
                current_domain.repository_for(Product).add(product)
            if promo is not None:
                current_domain.repository_for(PromoCode).add(promo)

        with _step("clear the customer cart"):
            CustomerCartStore().delete(command.customer_id)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            total_amount=order.total_amount,
            lines=len(lines),
        )
        return str(order.id)


class OrderPlacement:
    def place(
        self,
        customer_id,
        items,
        shipping=None,
        payment_method=None,
        promo=None,
        shipping_cost=0.0,
    ) -> Order:
        """Place an order for ``items`` (cart lines or their documents).

        ``promo`` is the ``AppliedPromo`` the cart carries, if any.
        """
        documents = [_as_document(item) for item in items]
        validate_items(documents)
        if not documents:
            raise EmptyCartError("Cannot place an order for an empty cart")

        command = PlaceOrder(
            customer_id=str(customer_id),
            items=json.dumps(documents),
            shipping=json.dumps(shipping or {}),
            payment_method=payment_method,
            promo_code_id=promo.promo_code_id if promo else None,
            shipping_cost=shipping_cost or 0.0,
        )
        try:
            order_id = current_domain.process(command, asynchronous=False)
        except StorefrontError:
            raise
        except Exception as exc:
            raise TransactionAbortError("commit the order", exc) from exc

        return self.get_order(order_id)

    def get_order(self, order_id) -> Order:
        try:
            return current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError:
            raise NotFoundError(f"Order {order_id} not found") from None
