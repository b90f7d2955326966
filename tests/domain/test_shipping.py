"""Tests for shipping cost rules."""

import pytest
from storefront.order.shipping import shipping_cost_for


@pytest.mark.parametrize(
    "meters, cost",
    [
        (0, 40.0),
        (2000, 40.0),
        (2001, 60.0),
        (4000, 60.0),
        (6000, 80.0),
        (8000, 100.0),
        (10000, 110.0),
        (13000, 120.0),
        (13001, 180.0),
        (40000, 180.0),
    ],
)
def test_home_delivery_is_priced_by_distance(meters, cost):
    assert shipping_cost_for("domicilio", meters) == cost


def test_home_delivery_without_distance_uses_base_cost():
    assert shipping_cost_for("domicilio") == 40.0


def test_metro_pickup_is_free():
    assert shipping_cost_for("Popotla", 50000) == 0.0


def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        shipping_cost_for("drone")
