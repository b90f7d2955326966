"""BDD tests for merging the guest cart at sign-in."""

from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.lines import CartLine, lines_to_documents
from storefront.cart.persistence import CustomerCartStore
from storefront.config import GUEST_CART_KEY

scenarios("features/sign_in_merge.feature")


def _line(size_key, quantity):
    return CartLine.build(
        product_id=size_key.split("__")[0], name=size_key, price=100.0, size=size_key, quantity=quantity
    )


@given(parsers.cfparse('a guest cart with {quantity:d} of "{size_key}"'))
def guest_cart(storage, quantity, size_key):
    storage.set(GUEST_CART_KEY, lines_to_documents([_line(size_key, quantity)]))


@given(
    parsers.cfparse(
        'a saved cart for "{identity_id}" with {first_qty:d} of "{first_key}" and {second_qty:d} of "{second_key}"'
    )
)
def saved_cart(identity_id, first_qty, first_key, second_qty, second_key):
    CustomerCartStore().save(identity_id, [_line(first_key, first_qty), _line(second_key, second_qty)])


@when("the customer signs in")
def customer_signs_in(identity_provider, session):
    identity_provider.sign_in("ana@example.com", "secret-pass")


@when("the customer signs out")
def customer_signs_out(identity_provider):
    identity_provider.sign_out()


@then("the guest cart is gone from local storage")
def guest_cart_gone(storage):
    assert GUEST_CART_KEY not in storage


@then(parsers.cfparse('the saved cart for "{identity_id}" still holds {count:d} lines'))
def saved_cart_holds(identity_id, count):
    assert len(CustomerCartStore().load(identity_id)) == count
