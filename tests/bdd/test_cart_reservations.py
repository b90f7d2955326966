"""BDD tests for cart reservations."""

from pytest_bdd import parsers, scenarios, when
from storefront.cart.session import CartSession
from storefront.catalogue.stock import StockAccessor
from storefront.client.identity import InMemoryIdentityProvider
from storefront.client.storage import MemoryStorage


scenarios("features/cart_reservations.feature")


class _FrozenAccessor(StockAccessor):
    def __init__(self, level):
        super().__init__()
        self.level = level

    def get_available_stock(self, product_id, size_key):
        return self.level


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the shopper adds {quantity:d} of size "{size}" of "{product_id}"'))
def shopper_adds(session, products, attempt, quantity, size, product_id):
    attempt(session.add_item, products[product_id], size, quantity)


@when(parsers.cfparse('the shopper adds {quantity:d} of variant "{variant_id}" size "{size}" of "{product_id}"'))
def shopper_adds_variant(session, products, attempt, quantity, size, variant_id, product_id):
    product = products[product_id]
    attempt(session.add_item, product, size, quantity, variant=product.find_variant(variant_id))


@when(
    parsers.cfparse(
        'another shopper who saw {level:d} unit adds {quantity:d} of variant "{variant_id}" size "{size}" of "{product_id}"'
    )
)
def stale_shopper_adds_variant(settings, clock, products, attempt, level, quantity, size, variant_id, product_id):
    other = CartSession(
        InMemoryIdentityProvider(),
        MemoryStorage(),
        accessor=_FrozenAccessor(level),
        settings=settings,
        clock=clock,
    )
    product = products[product_id]
    attempt(other.add_item, product, size, quantity, variant=product.find_variant(variant_id))


@when(parsers.cfparse('the shopper removes "{size_key}" of "{product_id}"'))
def shopper_removes(session, attempt, size_key, product_id):
    attempt(session.remove_item, product_id, size_key)


@when(parsers.cfparse('the shopper changes "{size_key}" of "{product_id}" to {quantity:d}'))
def shopper_changes(session, attempt, size_key, product_id, quantity):
    attempt(session.update_quantity, product_id, size_key, quantity)


@when("the shopper clears the cart")
def shopper_clears(session, attempt):
    attempt(session.clear)
