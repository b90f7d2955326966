"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then
from storefront.catalogue.stock import StockAccessor
from storefront.exceptions import StorefrontError


@pytest.fixture()
def error():
    """Container for the error raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def attempt(error):
    """Run an action, keeping any storefront error for Then steps."""

    def _attempt(action, *args, **kwargs):
        try:
            return action(*args, **kwargs)
        except StorefrontError as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" with {quantity:d} units of size "{size}" at {price:g}'))
def product_with_stock(make_product, products, product_id, quantity, size, price):
    products[product_id] = make_product(product_id=product_id, price=price, sizes={size: quantity})


@given(parsers.cfparse('product "{product_id}" with variant "{variant_id}" holding {quantity:d} units of size "{size}"'))
def product_with_variant(make_product, products, product_id, variant_id, quantity, size):
    products[product_id] = make_product(
        product_id=product_id,
        sizes={},
        variants=[{"color": "Azul", "variant_id": variant_id, "sizes": {size: quantity}}],
    )


@given("the customer is signed in")
def customer_signed_in(identity_provider, session):
    identity_provider.sign_in("ana@example.com", "secret-pass")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('{quantity:d} units of "{size_key}" are available'))
def units_available(size_key, quantity):
    product_id = size_key.split("__")[0]
    assert StockAccessor().get_available_stock(product_id, size_key) == quantity


@then(parsers.cfparse("the operation fails with {error_name}"))
def operation_fails_with(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then(parsers.cfparse('the error message mentions "{text}"'))
def error_mentions(error, text):
    assert text in str(error["exc"])


@then(parsers.cfparse('the cart holds {quantity:d} of "{size_key}"'))
def cart_holds(session, quantity, size_key):
    line = session.line_for(size_key)
    assert line is not None
    assert line.quantity == quantity


@then("the cart is empty")
def cart_is_empty(session):
    assert session.lines == []
