"""Customer cart persistence: the store used by sessions, plus commands for the API."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.customer_cart import CustomerCart
from storefront.cart.lines import lines_from_documents
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


class CustomerCartStore:
    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(CustomerCart)

    def _find(self, identity_id):
        try:
            return self.repository.get(str(identity_id))
        except ObjectNotFoundError:
            return None

    def load(self, identity_id):
        """Lines of the customer's cart; empty when no cart was ever saved."""
        record = self._find(identity_id)
        return record.lines() if record else []

    def save(self, identity_id, lines, merged=False):
        record = self._find(identity_id)
        if record is None:
            record = CustomerCart.create(identity_id, lines)
        else:
            record.replace_lines(lines, merged=merged)
        self.repository.add(record)
        logger.debug("Customer cart saved", identity_id=str(identity_id), line_count=len(lines))

    def delete(self, identity_id):
        record = self._find(identity_id)
        if record is None:
            return
        self.repository._dao.delete(record)
        logger.debug("Customer cart deleted", identity_id=str(identity_id))


@storefront.command(part_of="CustomerCart")
class SaveCustomerCart:
    identity_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of cart line documents


@storefront.command(part_of="CustomerCart")
class DeleteCustomerCart:
    identity_id = Identifier(required=True)


@storefront.command_handler(part_of=CustomerCart)
class CustomerCartHandler:
    @handle(SaveCustomerCart)
    def save_cart(self, command):
        documents = json.loads(command.items) if isinstance(command.items, str) else command.items
        CustomerCartStore().save(command.identity_id, lines_from_documents(documents))

    @handle(DeleteCustomerCart)
    def delete_cart(self, command):
        CustomerCartStore().delete(command.identity_id)
