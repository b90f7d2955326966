"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    created_at = DateTime()


@storefront.event(part_of="Product")
class StockReserved:
    """Units of a slot were moved from available stock into the reserved ledger."""

    __version__ = 1

    product_id = Identifier(required=True)
    size_key = String(required=True)
    quantity = Integer(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """Reserved units of a slot were returned to available stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    size_key = String(required=True)
    quantity = Integer(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)


@storefront.event(part_of="Product")
class StockCommitted:
    """Reserved units were attributed to a placed order."""

    __version__ = 1

    product_id = Identifier(required=True)
    size_key = String(required=True)
    quantity = Integer(required=True)
    order_id = Identifier()


@storefront.event(part_of="Product")
class StockRestocked:
    """An administrator set the on-shelf quantity of a slot."""

    __version__ = 1

    product_id = Identifier(required=True)
    size_key = String(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
