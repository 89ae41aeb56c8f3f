"""Menu item CRUD service."""

import logging
from typing import Any

from pydantic import ValidationError

from canteen_service.models.canteen_models import MenuItem, MenuItemFields, is_valid_identifier
from canteen_service.models.outcome import Outcome
from canteen_service.observability import traced
from canteen_service.observability.metrics import record_store_fault
from canteen_service.repositories.collection_store import Collection, CollectionStore, StoreError

logger = logging.getLogger(__name__)

MENU_ITEM_NOT_FOUND = "Menu item not found"
INVALID_MENU_ITEM_ID = "Invalid menu item id"


class MenuItemService:
    """Service for managing menu item documents.

    Deleting a menu item never touches the menus that reference it; those
    references are filtered out when menus are read.
    """

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def _store_fault(self, operation: str, error: StoreError) -> Outcome:
        logger.error(f"{operation} failed: {error}")
        record_store_fault(operation)
        return Outcome.store_fault(error.detail)

    @traced("menu_item.list")
    async def list_menu_items(self) -> Outcome:
        try:
            documents = self.store.find_all(Collection.MENU_ITEMS)
        except StoreError as e:
            return self._store_fault("menu_item.list", e)
        return Outcome.ok([MenuItem.from_dynamodb_item(doc) for doc in documents])

    @traced("menu_item.get")
    async def get_menu_item(self, menu_item_id: str) -> Outcome:
        if not is_valid_identifier(menu_item_id):
            return Outcome.bad_request(INVALID_MENU_ITEM_ID)
        try:
            document = self.store.find_by_id(Collection.MENU_ITEMS, menu_item_id)
        except StoreError as e:
            return self._store_fault("menu_item.get", e)
        if document is None:
            return Outcome.not_found(MENU_ITEM_NOT_FOUND)
        return Outcome.ok(MenuItem.from_dynamodb_item(document))

    @traced("menu_item.create")
    async def create_menu_item(self, fields: dict[str, Any]) -> Outcome:
        """Validate and store a new menu item.

        Args:
            fields: Raw name, description, price, ingredients and allergens

        Returns:
            Outcome carrying the created MenuItem, or BadRequest
        """
        try:
            validated = MenuItemFields.model_validate(fields)
        except ValidationError as e:
            logger.info(f"Rejected menu item: {e.error_count()} validation error(s)")
            return Outcome.bad_request()

        try:
            document = self.store.insert(Collection.MENU_ITEMS, validated.model_dump(by_alias=True))
        except StoreError as e:
            return self._store_fault("menu_item.create", e)

        item = MenuItem.from_dynamodb_item(document)
        logger.info(f"Created menu item {item.id}")
        return Outcome.created(item)

    @traced("menu_item.update")
    async def update_menu_item(self, menu_item_id: str, fields: dict[str, Any]) -> Outcome:
        """Replace every field of an existing menu item.

        Returns:
            Outcome carrying the updated MenuItem, BadRequest or NotFound
        """
        if not is_valid_identifier(menu_item_id):
            return Outcome.bad_request(INVALID_MENU_ITEM_ID)
        try:
            validated = MenuItemFields.model_validate(fields)
        except ValidationError:
            return Outcome.bad_request()

        try:
            document = self.store.replace_by_id(
                Collection.MENU_ITEMS, menu_item_id, validated.model_dump(by_alias=True)
            )
        except StoreError as e:
            return self._store_fault("menu_item.update", e)

        if document is None:
            return Outcome.not_found(MENU_ITEM_NOT_FOUND)
        return Outcome.ok(MenuItem.from_dynamodb_item(document))

    @traced("menu_item.delete")
    async def delete_menu_item(self, menu_item_id: str) -> Outcome:
        if not is_valid_identifier(menu_item_id):
            return Outcome.bad_request(INVALID_MENU_ITEM_ID)
        try:
            deleted = self.store.delete_by_id(Collection.MENU_ITEMS, menu_item_id)
        except StoreError as e:
            return self._store_fault("menu_item.delete", e)

        if not deleted:
            return Outcome.not_found(MENU_ITEM_NOT_FOUND)
        logger.info(f"Deleted menu item {menu_item_id}")
        return Outcome.ok(message="Menu item deleted")
