"""Stock accessor and mutator: the only way carts read and move inventory.

Reads always go to the store, never to a cached product. Writes are
read-check-write cycles made conditional on the product's version: if another
writer changed the product between the read and the write, the cycle is
retried against fresh data, so the availability check is always made against
what is actually stored.
"""

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.exceptions import InvalidQuantityError, NotFoundError, StockContentionError

logger = structlog.get_logger(__name__)


class StockAccessor:
    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(Product)

    def get_product(self, product_id) -> Product:
        try:
            return self.repository.get(product_id)
        except ObjectNotFoundError:
            raise NotFoundError(f"Product {product_id} not found") from None

    def get_available_stock(self, product_id, size_key) -> int:
        """Units available for a slot. Only a missing product is an error."""
        return self.get_product(product_id).stock_for(size_key)


class StockMutator:
    def __init__(self, repository=None, attempts=None):
        self._accessor = StockAccessor(repository)
        self._attempts = attempts or get_settings().stock_write_attempts

    def adjust_stock(self, product_id, size_key, delta) -> int:
        """Apply ``delta`` to the available units of a slot and return the new level."""
        for attempt in range(1, self._attempts + 1):
            product = self._accessor.get_product(product_id)
            new_available = product.adjust_stock(size_key, delta)
            try:
                self._accessor.repository.add(product)
            except ExpectedVersionError:
                logger.info(
                    "Stock write conflict, retrying",
                    product_id=str(product_id),
                    size_key=str(size_key),
                    attempt=attempt,
                )
                continue

            logger.debug(
                "Stock adjusted",
                product_id=str(product_id),
                size_key=str(size_key),
                delta=delta,
                new_available=new_available,
            )
            return new_available

        raise StockContentionError(
            f"Stock for {size_key} kept changing; gave up after {self._attempts} attempts"
        )

    def reserve(self, product_id, size_key, quantity) -> int:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity to reserve must be greater than 0")
        return self.adjust_stock(product_id, size_key, -quantity)

    def release(self, product_id, size_key, quantity) -> int:
        if quantity <= 0:
            raise InvalidQuantityError("Quantity to release must be greater than 0")
        return self.adjust_stock(product_id, size_key, quantity)
