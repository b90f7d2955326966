"""Tests for the FavoriteList aggregate."""

from storefront.catalogue.product import Product
from storefront.favorites.events import FavoriteAdded, FavoriteRemoved
from storefront.favorites.favorite_list import FavoriteList


def _product():
    product = Product.create(name="Vestido Lino", price=100.0, product_id="p1", images=["lino.jpg"], sizes={"L": 1})
    product.add_variant(color="Azul", variant_id="v1", images=["azul.jpg"], sizes={"M": 1})
    return product


class TestAdd:
    def test_plain_product_is_saved(self):
        favorites = FavoriteList.create("user-1")
        assert favorites.add(_product()) is True

        [entry] = favorites.entries()
        assert entry["productId"] == "p1"
        assert entry["image"] == "lino.jpg"
        assert entry["variantId"] is None
        assert favorites.contains("p1")

    def test_variant_is_saved_separately_from_the_product(self):
        product = _product()
        favorites = FavoriteList.create("user-1")
        favorites.add(product, product.find_variant("v1"))

        assert favorites.contains("p1", "v1")
        assert not favorites.contains("p1")
        assert favorites.entries()[0]["color"] == "Azul"
        assert favorites.entries()[0]["image"] == "azul.jpg"

    def test_saving_twice_is_not_applied(self):
        favorites = FavoriteList.create("user-1")
        favorites.add(_product())
        assert favorites.add(_product()) is False
        assert len(favorites.entries()) == 1

    def test_add_raises_event(self):
        favorites = FavoriteList.create("user-1")
        favorites.add(_product())
        events = [e for e in favorites._events if isinstance(e, FavoriteAdded)]
        assert len(events) == 1
        assert events[0].identity_id == "user-1"


class TestRemove:
    def test_only_the_matching_entry_is_removed(self):
        product = _product()
        favorites = FavoriteList.create("user-1")
        favorites.add(product)
        favorites.add(product, product.find_variant("v1"))

        assert favorites.remove("p1", "v1") is True
        assert favorites.contains("p1")
        assert not favorites.contains("p1", "v1")
        assert any(isinstance(e, FavoriteRemoved) for e in favorites._events)

    def test_removing_a_missing_entry_is_not_applied(self):
        favorites = FavoriteList.create("user-1")
        assert favorites.remove("p1") is False
