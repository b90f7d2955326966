"""Application tests for back-office catalogue commands."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.catalogue.management import RegisterProduct, RestockProduct, ToggleProductFeatured
from storefront.catalogue.product import Product
from storefront.exceptions import NotFoundError


def _register(**overrides):
    document = {
        "id": "p7",
        "name": "Falda",
        "price": 320.0,
        "images": ["falda.jpg"],
        "inventory": {"new__S": 2},
        "variants": [{"id": "verde", "color": "Verde", "images": ["verde.jpg"], "inventory": {"M": 3}}],
    }
    document.update(overrides)
    return current_domain.process(RegisterProduct(document=json.dumps(document)), asynchronous=False)


def test_register_product_flattens_inventory():
    product_id = _register()
    product = current_domain.repository_for(Product).get(product_id)
    assert product.inventory_levels() == {"p7__S": 2, "p7__verde__M": 3}
    assert product.find_variant("verde").color == "Verde"


def test_restock_sets_level():
    _register()
    current_domain.process(RestockProduct(product_id="p7", size_key="p7__verde__M", quantity=9), asynchronous=False)
    product = current_domain.repository_for(Product).get("p7")
    assert product.stock_for("p7__verde__M") == 9


def test_restock_unknown_variant_is_rejected():
    _register()
    with pytest.raises(ValidationError):
        current_domain.process(RestockProduct(product_id="p7", size_key="p7__rojo__M", quantity=1), asynchronous=False)


def test_restock_unknown_product_is_not_found():
    with pytest.raises(NotFoundError):
        current_domain.process(RestockProduct(product_id="none", size_key="none__M", quantity=1), asynchronous=False)


def test_toggle_featured():
    _register()
    assert current_domain.process(ToggleProductFeatured(product_id="p7"), asynchronous=False) is True
    assert current_domain.repository_for(Product).get("p7").featured is True
