"""Shipping cost rules for checkout."""

from storefront.config import get_settings

HOME_DELIVERY = "domicilio"
METRO_PICKUP = "popotla"

# (upper bound in km, cost)
DISTANCE_TIERS = (
    (2, 40.0),
    (4, 60.0),
    (6, 80.0),
    (8, 100.0),
    (10, 110.0),
    (13, 120.0),
)
MAX_TIER_COST = 180.0


def price_for_distance(distance_meters):
    km = distance_meters / 1000
    for limit, cost in DISTANCE_TIERS:
        if km <= limit:
            return cost
    return MAX_TIER_COST


def shipping_cost_for(method, distance_meters=None):
    """Cost of delivering an order with ``method``.

    Metro pick-up is free. Home delivery is priced by distance, or at the
    base cost when the distance is not known.
    """
    method = (method or "").strip().lower()
    if method == METRO_PICKUP:
        return 0.0
    if method != HOME_DELIVERY:
        raise ValueError(f"Unknown shipping method: {method!r}")
    if distance_meters is None:
        return get_settings().base_shipping_cost
    return price_for_distance(distance_meters)
