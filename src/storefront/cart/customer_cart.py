"""CustomerCart aggregate: the remotely persisted cart of a signed-in customer.

The record is keyed by the customer's identity id. Guest carts never reach
this aggregate; they live in the client's local storage until sign-in.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Text

from storefront.cart.lines import lines_from_documents, lines_to_documents
from storefront.domain import storefront


@storefront.aggregate
class CustomerCart:
    items = Text(default="[]")  # JSON: list of cart line documents
    merged_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, identity_id, lines=None):
        return cls(
            id=str(identity_id),
            items=json.dumps(lines_to_documents(lines or [])),
            updated_at=datetime.now(UTC),
        )

    def lines(self):
        return lines_from_documents(json.loads(self.items or "[]"))

    def replace_lines(self, lines, merged=False):
        now = datetime.now(UTC)
        self.items = json.dumps(lines_to_documents(lines))
        self.updated_at = now
        if merged:
            self.merged_at = now
