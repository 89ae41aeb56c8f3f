"""Menu assembly: day menus built from references to menu items.

A menu document exists per day and holds an ordered list of menu item
identifiers. Reads expand the references and silently drop any whose menu item
has since been deleted. Writes check that the referenced menu item exists.
Menus are never created here; provisioning seeds one per day.
"""

import logging
from typing import Any

from canteen_service.models.canteen_models import Menu, ResolvedMenu, is_valid_identifier
from canteen_service.models.outcome import Outcome
from canteen_service.observability import traced
from canteen_service.observability.metrics import (
    record_menu_update_conflict,
    record_reference_added,
    record_references_removed,
    record_store_fault,
)
from canteen_service.repositories.collection_store import Collection, CollectionStore, StoreError
from canteen_service.services.reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

MENU_NOT_FOUND = "Menu not found for the provided day"
MENU_ITEM_NOT_FOUND = "menuItemId does not exist"

WEEKDAY_ORDER = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def day_sort_key(day: str) -> tuple[int, str]:
    """Sort weekdays in calendar order, any other day keys after them."""
    try:
        return WEEKDAY_ORDER.index(day.capitalize()), ""
    except ValueError:
        return len(WEEKDAY_ORDER), day


class MenuService:
    """Service for reading and mutating day menus.

    Appends use the store's atomic list append. Removals rewrite the whole
    reference list behind a version check and retry when another writer got
    there first, so concurrent updates to the same day are never lost.
    """

    def __init__(
        self,
        store: CollectionStore,
        resolver: ReferenceResolver,
        max_retries: int = 5,
    ) -> None:
        """Initialize the MenuService.

        Args:
            store: Document store holding menus and menu items
            resolver: Resolver for menu item references
            max_retries: Attempts for an optimistic removal before giving up
        """
        self.store = store
        self.resolver = resolver
        self.max_retries = max_retries

    def _find_menu(self, day: str) -> Menu | None:
        document = self.store.find_one_by_field(Collection.MENUS, "day", day)
        return Menu.from_dynamodb_item(document) if document else None

    def _store_fault(self, operation: str, error: StoreError) -> Outcome:
        record_store_fault(operation)
        return Outcome.store_fault(error.detail)

    @traced("menu.get_all")
    async def get_all_menus(self) -> Outcome:
        """Get every menu with its references resolved.

        All references across all menus are resolved with one batched lookup.

        Returns:
            Outcome carrying a list of ResolvedMenu
        """
        try:
            menus = [Menu.from_dynamodb_item(doc) for doc in self.store.find_all(Collection.MENUS)]
            menus.sort(key=lambda menu: day_sort_key(menu.day))

            all_references = [reference for menu in menus for reference in menu.items]
            resolved = self.resolver.resolve(all_references)
        except StoreError as e:
            logger.error(f"Failed to read menus: {e}")
            return self._store_fault("menu.get_all", e)

        resolved_menus: list[ResolvedMenu] = []
        offset = 0
        for menu in menus:
            entries = resolved[offset : offset + len(menu.items)]
            offset += len(menu.items)
            resolved_menus.append(
                ResolvedMenu(
                    id=menu.id,
                    day=menu.day,
                    items=self.resolver.filter_resolved(entries),
                )
            )

        return Outcome.ok(resolved_menus)

    @traced("menu.get_by_day")
    async def get_menu(self, day: str) -> Outcome:
        """Get the menu for a day with its references resolved.

        Returns:
            Outcome carrying a ResolvedMenu, or NotFound
        """
        try:
            menu = self._find_menu(day)
            if menu is None:
                return Outcome.not_found(MENU_NOT_FOUND)
            resolved = self.resolver.resolve(menu.items)
        except StoreError as e:
            logger.error(f"Failed to read menu for {day}: {e}")
            return self._store_fault("menu.get_by_day", e)

        return Outcome.ok(
            ResolvedMenu(id=menu.id, day=menu.day, items=self.resolver.filter_resolved(resolved))
        )

    @traced("menu.add_item")
    async def add_item(self, day: Any, menu_item_id: Any) -> Outcome:
        """Append a menu item reference to the end of a day's menu.

        Duplicates are allowed. The menu item must exist at the time of the
        call; the day's menu must already exist and is never created.

        Args:
            day: Menu day
            menu_item_id: Identifier of an existing menu item

        Returns:
            Outcome with a confirmation message, BadRequest or NotFound
        """
        if not isinstance(day, str) or not day.strip() or not is_valid_identifier(menu_item_id):
            return Outcome.bad_request()

        try:
            if self.store.find_by_id(Collection.MENU_ITEMS, menu_item_id) is None:
                return Outcome.not_found(MENU_ITEM_NOT_FOUND)

            menu = self._find_menu(day)
            if menu is None:
                return Outcome.not_found(MENU_NOT_FOUND)

            appended = self.store.append_to_list(Collection.MENUS, menu.id, "items", menu_item_id)
        except StoreError as e:
            logger.error(f"Failed to add {menu_item_id} to menu for {day}: {e}")
            return self._store_fault("menu.add_item", e)

        if not appended:
            return Outcome.not_found(MENU_NOT_FOUND)

        record_reference_added(day)
        logger.info(f"Added menu item {menu_item_id} to menu for {day}")
        return Outcome.ok(message=f"Menu item added to {day}")

    @traced("menu.remove_item")
    async def remove_item(self, day: str, menu_item_id: str) -> Outcome:
        """Remove every reference to a menu item from a day's menu.

        Removing a reference that is not present still succeeds.

        Returns:
            Outcome with a confirmation message, NotFound or Conflict
        """
        try:
            for attempt in range(1, self.max_retries + 1):
                menu = self._find_menu(day)
                if menu is None:
                    return Outcome.not_found(MENU_NOT_FOUND)

                remaining = [reference for reference in menu.items if reference != menu_item_id]
                written = self.store.replace_list_if_version(
                    Collection.MENUS, menu.id, "items", remaining, menu.version
                )
                if written:
                    removed = len(menu.items) - len(remaining)
                    record_references_removed(day, removed)
                    logger.info(f"Removed {removed} reference(s) to {menu_item_id} from {day}")
                    return Outcome.ok(message=f"Menu item removed from {day}")

                record_menu_update_conflict(day)
                logger.warning(f"Menu for {day} changed during removal, attempt {attempt}")
        except StoreError as e:
            logger.error(f"Failed to remove {menu_item_id} from menu for {day}: {e}")
            return self._store_fault("menu.remove_item", e)

        return Outcome.conflict(f"Menu for {day} is being modified, please retry")
