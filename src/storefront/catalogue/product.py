"""Product aggregate root with its color Variant entity.

Inventory for flat sizes and for variant sizes lives in one key space on the
product (``inventory``), keyed by the storage form of ``SizeKey``. Keeping every
slot at the same level lets a single conditional write of the product protect
flat and variant stock alike. The nested per-variant shape used by older
documents is only produced or consumed at the storage boundary
(``to_legacy_document`` / ``from_legacy_document``).

Stock Model:
    inventory: units available to be put in a cart
    reserved:  units held by carts, not yet attributed to an order
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, String, Text

from storefront.catalogue.events import (
    ProductCreated,
    StockCommitted,
    StockReleased,
    StockReserved,
    StockRestocked,
)
from storefront.catalogue.size_key import SEPARATOR, SizeKey
from storefront.domain import storefront
from storefront.exceptions import InsufficientStockError, MalformedSizeKeyError, NotFoundError


def _load_map(raw):
    return json.loads(raw) if raw else {}


def _load_list(raw):
    return json.loads(raw) if raw else []


@storefront.entity(part_of="Product")
class Variant:
    """A color of a product, with its own images and its own size slots."""

    color = String(required=True, max_length=100)
    images = Text()  # JSON array of URLs

    @property
    def image_urls(self):
        return _load_list(self.images)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.01)
    category = String(max_length=100)
    images = Text()  # JSON array of URLs
    featured = Boolean(default=False)
    inventory = Text(default="{}")  # JSON: {size_key: available units}
    reserved = Text(default="{}")  # JSON: {size_key: units held by carts}
    variants = HasMany(Variant)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_levels_must_not_be_negative(self):
        for field_name in ("inventory", "reserved"):
            for key, quantity in _load_map(getattr(self, field_name)).items():
                if not isinstance(quantity, int) or quantity < 0:
                    raise ValidationError({field_name: [f"Quantity for {key} must be a non-negative integer"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, product_id=None, images=None, category=None, sizes=None):
        """Create a product. ``sizes`` maps a bare size label to its starting quantity."""
        now = datetime.now(UTC)
        identity = {"id": product_id} if product_id else {}
        product = cls(
            **identity,
            name=name,
            price=price,
            category=category,
            images=json.dumps(list(images or [])),
            created_at=now,
            updated_at=now,
        )
        if sizes:
            product.inventory = json.dumps({str(SizeKey.flat(product.id, size)): qty for size, qty in sizes.items()})

        product.raise_(ProductCreated(product_id=str(product.id), name=name, created_at=now))
        return product

    def add_variant(self, color, variant_id=None, images=None, sizes=None):
        identity = {"id": variant_id} if variant_id else {}
        variant = Variant(**identity, color=color, images=json.dumps(list(images or [])))
        self.add_variants(variant)

        inventory = self.inventory_levels()
        for size, quantity in (sizes or {}).items():
            inventory[str(SizeKey.for_variant(self.id, variant.id, size))] = quantity
        self.inventory = json.dumps(inventory)
        self.updated_at = datetime.now(UTC)
        return variant

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def image_urls(self):
        return _load_list(self.images)

    def inventory_levels(self):
        return _load_map(self.inventory)

    def reserved_levels(self):
        return _load_map(self.reserved)

    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def slot_for(self, size_key):
        """Resolve a key (or its storage form) to a slot of this product."""
        key = SizeKey.parse(size_key)
        if key.product_id != str(self.id):
            raise MalformedSizeKeyError(f"Size key {key} does not belong to product {self.id}")
        return key

    def stock_for(self, size_key):
        """Units available for the slot; 0 when the variant or size does not exist."""
        key = self.slot_for(size_key)
        if key.is_variant and self.find_variant(key.variant_id) is None:
            return 0
        return self.inventory_levels().get(str(key), 0)

    def reserved_for(self, size_key):
        return self.reserved_levels().get(str(self.slot_for(size_key)), 0)

    def variant_inventory(self, variant_id):
        """The ``size -> units`` map of one variant."""
        levels = {}
        for raw, quantity in self.inventory_levels().items():
            key = SizeKey.parse(raw)
            if key.variant_id == str(variant_id):
                levels[key.size] = quantity
        return levels

    def flat_inventory(self):
        return {key: qty for key, qty in self.inventory_levels().items() if not SizeKey.parse(key).is_variant}

    @property
    def is_in_stock(self) -> bool:
        if sum(self.flat_inventory().values()) > 0:
            return True
        return any(sum(self.variant_inventory(v.id).values()) > 0 for v in self.variants)

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def adjust_stock(self, size_key, delta):
        """Change the available units of a slot by ``delta``.

        A negative delta reserves units for a cart and fails if it would take
        the slot below zero. A positive delta releases units back; releases
        never fail on quantity grounds. A slot of a variant the product does
        not have raises ``NotFoundError``.
        """
        key = self.slot_for(size_key)
        if key.is_variant and self.find_variant(key.variant_id) is None:
            raise NotFoundError(f"Variant {key.variant_id} not found on product {self.id}")
        slot = str(key)
        inventory = self.inventory_levels()
        reserved = self.reserved_levels()
        available = inventory.get(slot, 0)

        if delta == 0:
            return available

        new_available = available + delta
        if new_available < 0:
            raise InsufficientStockError(remaining=available)

        inventory[slot] = new_available
        reserved[slot] = max(0, reserved.get(slot, 0) - delta)

        with atomic_change(self):
            self.inventory = json.dumps(inventory)
            self.reserved = json.dumps(reserved)
        self.updated_at = datetime.now(UTC)

        event_cls = StockReserved if delta < 0 else StockReleased
        self.raise_(
            event_cls(
                product_id=str(self.id),
                size_key=slot,
                quantity=abs(delta),
                previous_available=available,
                new_available=new_available,
            )
        )
        return new_available

    def commit_reservation(self, size_key, quantity, order_id=None):
        """Attribute ``quantity`` units of a slot to an order.

        Units come out of the reserved ledger first. Anything the ledger no
        longer holds (a reservation released elsewhere) must still be
        available, otherwise the commit fails.
        """
        key = self.slot_for(size_key)
        slot = str(key)
        inventory = self.inventory_levels()
        reserved = self.reserved_levels()

        held = reserved.get(slot, 0)
        from_reserved = min(held, quantity)
        shortfall = quantity - from_reserved
        available = inventory.get(slot, 0)
        if shortfall > available:
            raise InsufficientStockError(remaining=held + available)

        reserved[slot] = held - from_reserved
        if shortfall:
            inventory[slot] = available - shortfall

        with atomic_change(self):
            self.inventory = json.dumps(inventory)
            self.reserved = json.dumps(reserved)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockCommitted(
                product_id=str(self.id),
                size_key=slot,
                quantity=quantity,
                order_id=order_id,
            )
        )

    def restock(self, size_key, quantity):
        """Set the available units of a slot to an absolute value."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity must not be negative"]})

        key = self.slot_for(size_key)
        if key.is_variant and self.find_variant(key.variant_id) is None:
            raise ValidationError({"variants": [f"Variant {key.variant_id} not found"]})

        inventory = self.inventory_levels()
        previous = inventory.get(str(key), 0)
        inventory[str(key)] = quantity
        self.inventory = json.dumps(inventory)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestocked(
                product_id=str(self.id),
                size_key=str(key),
                previous_available=previous,
                new_available=quantity,
            )
        )

    def toggle_featured(self):
        self.featured = not self.featured
        self.updated_at = datetime.now(UTC)
        return self.featured

    # -------------------------------------------------------------------
    # Storage boundary
    # -------------------------------------------------------------------
    def to_legacy_document(self):
        """Render the product in its nested document shape (variant-local inventories)."""
        return {
            "id": str(self.id),
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "featured": bool(self.featured),
            "images": self.image_urls,
            "inventory": self.flat_inventory(),
            "variants": [
                {
                    "id": str(v.id),
                    "color": v.color,
                    "images": v.image_urls,
                    "inventory": self.variant_inventory(v.id),
                }
                for v in self.variants
            ],
        }

    @classmethod
    def from_legacy_document(cls, document):
        """Build a product from its nested document shape, flattening variant inventories."""
        product = cls.create(
            name=document["name"],
            price=document["price"],
            product_id=document.get("id"),
            images=document.get("images"),
            category=document.get("category"),
        )
        product.featured = bool(document.get("featured", False))

        # Flat keys may be bare sizes or carry a placeholder product id ("new__M")
        inventory = {}
        for raw_key, quantity in (document.get("inventory") or {}).items():
            size = raw_key.split(SEPARATOR)[-1] if isinstance(raw_key, str) else raw_key
            inventory[str(SizeKey.flat(product.id, size))] = quantity
        product.inventory = json.dumps(inventory)

        for variant in document.get("variants") or []:
            product.add_variant(
                color=variant["color"],
                variant_id=variant.get("id"),
                images=variant.get("images"),
                sizes=variant.get("inventory") or {},
            )
        return product
