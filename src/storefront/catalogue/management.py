"""Catalogue management: commands and handler for the back office."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import NotFoundError


@storefront.command(part_of="Product")
class RegisterProduct:
    """Register a product from its document form (variants with nested inventories)."""

    document = Text(required=True)  # JSON: product document


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    size_key = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="Product")
class ToggleProductFeatured:
    product_id = Identifier(required=True)


def _get_product(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFoundError(f"Product {product_id} not found") from None


@storefront.command_handler(part_of=Product)
class ManageCatalogueHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        document = json.loads(command.document) if isinstance(command.document, str) else command.document
        product = Product.from_legacy_document(document)
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        product = _get_product(command.product_id)
        product.restock(command.size_key, command.quantity)
        current_domain.repository_for(Product).add(product)

    @handle(ToggleProductFeatured)
    def toggle_featured(self, command):
        product = _get_product(command.product_id)
        featured = product.toggle_featured()
        current_domain.repository_for(Product).add(product)
        return featured
