"""Expansion of menu item references into menu item documents."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from canteen_service.models.canteen_models import MenuItem
from canteen_service.observability.metrics import record_dangling_references
from canteen_service.repositories.collection_store import Collection, CollectionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedReference:
    """A menu item reference paired with its target.

    Attributes:
        reference: The stored menu item identifier
        item: The referenced menu item, or None if it no longer exists
    """

    reference: str
    item: MenuItem | None = None

    @property
    def is_resolved(self) -> bool:
        return self.item is not None


class ReferenceResolver:
    """Joins menu item references against the menu item collection."""

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def resolve(self, references: Sequence[str]) -> list[ResolvedReference]:
        """Resolve references with a single batched lookup.

        The result has one entry per input reference, in input order.
        Duplicate references resolve to the same item.

        Raises:
            StoreError: If the lookup fails
        """
        if not references:
            return []

        documents = self.store.find_many_by_ids(Collection.MENU_ITEMS, references)
        items = {doc_id: MenuItem.from_dynamodb_item(doc) for doc_id, doc in documents.items()}
        return [ResolvedReference(reference, items.get(reference)) for reference in references]

    @staticmethod
    def filter_resolved(resolved: Sequence[ResolvedReference]) -> list[MenuItem]:
        """Drop dangling references, keeping the order of the rest."""
        items = [entry.item for entry in resolved if entry.item is not None]
        dangling = len(resolved) - len(items)
        if dangling:
            logger.info(f"Filtered {dangling} dangling menu item reference(s)")
            record_dangling_references(dangling)
        return items
