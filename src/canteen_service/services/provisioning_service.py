"""Startup provisioning of day menus and settings singletons."""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any

from canteen_service.models.canteen_models import (
    Menu,
    MiscDocument,
    OpeningHours,
    keyed_identifier,
)
from canteen_service.repositories.collection_store import Collection, CollectionStore
from canteen_service.services.settings_service import FOOD_PANTRY, TOKEN_KEY

logger = logging.getLogger(__name__)


@dataclass
class ProvisioningReport:
    """What a provisioning run created."""

    tables: list[str] = field(default_factory=list)
    menus: list[str] = field(default_factory=list)
    opening_hours: list[str] = field(default_factory=list)
    settings: list[str] = field(default_factory=list)


class ProvisioningService:
    """Seeds the documents the rest of the service expects to exist.

    Menus are only ever created here, one per configured day. Every step is
    idempotent: existing documents are left untouched.
    """

    def __init__(
        self,
        store: CollectionStore,
        days: list[str],
        opening_time: str,
        closing_time: str,
        food_pantry_notice: str,
        token_key: str | None = None,
    ) -> None:
        """Initialize the ProvisioningService.

        Args:
            store: Document store to seed
            days: Days that get a menu and opening hours
            opening_time: Default opening time for new opening hours
            closing_time: Default closing time for new opening hours
            food_pantry_notice: Initial food pantry notice
            token_key: Token key to seed, or None to generate one
        """
        self.store = store
        self.days = days
        self.opening_time = opening_time
        self.closing_time = closing_time
        self.food_pantry_notice = food_pantry_notice
        self.token_key = token_key

    def _seed(
        self, collection: Collection, attribute: str, key: str, document: dict[str, Any]
    ) -> bool:
        """Insert document unless the collection already holds one for key.

        Documents seeded before keyed identifiers were used are found by attribute.
        Concurrent seeders race on the keyed identifier and only one insert
        succeeds.
        """
        if self.store.find_one_by_field(collection, attribute, key) is not None:
            return False
        if not self.store.insert_if_absent(collection, document):
            logger.info(f"{collection.value} document for {key} already provisioned")
            return False
        return True

    def provision(self, create_tables: bool = False) -> ProvisioningReport:
        """Seed missing menus, opening hours and settings documents.

        Args:
            create_tables: Whether to create missing collection tables first

        Returns:
            ProvisioningReport listing what was created

        Raises:
            StoreError: If the store cannot be read or written
        """
        report = ProvisioningReport()
        if create_tables:
            report.tables = self.store.ensure_collections()

        for day in self.days:
            menu = Menu(id=keyed_identifier(Collection.MENUS.value, day), day=day)
            if self._seed(Collection.MENUS, "day", day, menu.to_dynamodb_item()):
                report.menus.append(day)

            hours = OpeningHours(
                id=keyed_identifier(Collection.OPENING_HOURS.value, day),
                day=day,
                opening_time=self.opening_time,
                closing_time=self.closing_time,
            )
            if self._seed(Collection.OPENING_HOURS, "day", day, hours.to_dynamodb_item()):
                report.opening_hours.append(day)

        seeds = {
            FOOD_PANTRY: self.food_pantry_notice,
            TOKEN_KEY: self.token_key or secrets.token_urlsafe(32),
        }
        for document_name, information in seeds.items():
            document = MiscDocument(
                id=keyed_identifier(Collection.MISC.value, document_name),
                document_name=document_name,
                information=information,
            )
            item = document.to_dynamodb_item()
            if self._seed(Collection.MISC, "documentName", document_name, item):
                report.settings.append(document_name)

        logger.info(
            f"Provisioning complete - menus: {report.menus}, "
            f"opening hours: {report.opening_hours}, settings: {report.settings}"
        )
        return report
