"""Storefront bounded context: catalogue stock, carts, promotions and orders.

Holds the cart/inventory reservation core: stock reservation at add-to-cart
time, guest/customer cart reconciliation, promotional discounts and the
atomic order placement that turns reservations into orders.
"""

import structlog
from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
