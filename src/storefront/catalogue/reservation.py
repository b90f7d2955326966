"""Stock reservation: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String

from storefront.catalogue.product import Product
from storefront.catalogue.stock import StockMutator
from storefront.domain import storefront


@storefront.command(part_of="Product")
class ReserveStock:
    """Hold units of a slot for a cart."""

    product_id = Identifier(required=True)
    size_key = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ReleaseStock:
    """Return units held by a cart to available stock."""

    product_id = Identifier(required=True)
    size_key = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class ReservationHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        return StockMutator().reserve(command.product_id, command.size_key, command.quantity)

    @handle(ReleaseStock)
    def release_stock(self, command):
        return StockMutator().release(command.product_id, command.size_key, command.quantity)
