"""SizeKey value object: addresses one inventory slot.

A slot is either a flat size of a product (``<productId>__<size>``) or a size
of one of its color variants (``<productId>__<variantId>__<size>``). The
``__``-joined string is the storage form; inside the domain the key is always
handled as this value object.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront
from storefront.exceptions import MalformedSizeKeyError

SEPARATOR = "__"


@storefront.value_object
class SizeKey:
    product_id = String(required=True, max_length=255)
    variant_id = String(max_length=255)
    size = String(required=True, max_length=50)

    @invariant.post
    def segments_must_not_contain_separator(self):
        for name in ("product_id", "variant_id", "size"):
            value = getattr(self, name)
            if value and SEPARATOR in value:
                raise ValidationError({name: [f"Must not contain '{SEPARATOR}'"]})

    @classmethod
    def flat(cls, product_id, size):
        return cls(product_id=str(product_id), size=str(size))

    @classmethod
    def for_variant(cls, product_id, variant_id, size):
        return cls(product_id=str(product_id), variant_id=str(variant_id), size=str(size))

    @classmethod
    def parse(cls, raw):
        """Build a key from its storage form, rejecting anything that is not 2 or 3 segments."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or SEPARATOR not in raw:
            raise MalformedSizeKeyError(f"Size key {raw!r} has no '{SEPARATOR}' separator")

        parts = raw.split(SEPARATOR)
        if len(parts) not in (2, 3) or not all(parts):
            raise MalformedSizeKeyError(f"Size key {raw!r} must have 2 or 3 non-empty segments")

        if len(parts) == 2:
            return cls.flat(parts[0], parts[1])
        return cls.for_variant(parts[0], parts[1], parts[2])

    @property
    def is_variant(self) -> bool:
        return bool(self.variant_id)

    def __str__(self) -> str:
        if self.is_variant:
            return SEPARATOR.join((self.product_id, self.variant_id, self.size))
        return SEPARATOR.join((self.product_id, self.size))
