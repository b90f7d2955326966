"""CartLine value object: one line of a cart, as stored and as snapshotted into orders."""

from datetime import UTC, datetime

from protean.fields import Float, Integer, String

from storefront.domain import storefront

# Storage form uses the document field names of the cart records.
_DOCUMENT_FIELDS = {
    "product_id": "productId",
    "name": "name",
    "price": "price",
    "size": "size",
    "quantity": "quantity",
    "image": "image",
    "created_at": "createdAt",
}


@storefront.value_object
class CartLine:
    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    size = String(required=True, max_length=255)  # storage form of the slot's SizeKey
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)
    created_at = String(max_length=40)

    @classmethod
    def build(cls, product_id, name, price, size, quantity, image=None):
        return cls(
            product_id=str(product_id),
            name=name,
            price=price,
            size=str(size),
            quantity=quantity,
            image=image or None,
            created_at=datetime.now(UTC).isoformat(),
        )

    @classmethod
    def from_document(cls, document):
        return cls(**{field: document.get(key) for field, key in _DOCUMENT_FIELDS.items()})

    def to_document(self):
        return {key: getattr(self, field) for field, key in _DOCUMENT_FIELDS.items()}

    def with_quantity(self, quantity):
        return CartLine(**{**self.to_dict(), "quantity": quantity})

    @property
    def line_total(self):
        return self.price * self.quantity


def lines_from_documents(documents):
    return [CartLine.from_document(document) for document in documents or []]


def lines_to_documents(lines):
    return [line.to_document() for line in lines]
