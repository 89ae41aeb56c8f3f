"""Singleton settings documents: misc notices and opening hours."""

import logging
from typing import Any

from pydantic import ValidationError

from canteen_service.models.canteen_models import (
    MiscDocument,
    OpeningHours,
    OpeningHoursFields,
)
from canteen_service.models.outcome import Outcome
from canteen_service.observability import traced
from canteen_service.observability.metrics import record_store_fault
from canteen_service.repositories.collection_store import Collection, CollectionStore, StoreError

logger = logging.getLogger(__name__)

FOOD_PANTRY = "FoodPantry"
TOKEN_KEY = "TokenKey"

INFORMATION_NOT_FOUND = "Sorry, this information could not be found"
OPENING_HOURS_NOT_FOUND = "Opening hours not found for the provided day"


class SettingsService:
    """Service for singleton documents keyed by name or by day.

    Singletons are seeded by provisioning. Updates locate the existing
    document and never create a new one.
    """

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def _store_fault(self, operation: str, error: StoreError) -> Outcome:
        logger.error(f"{operation} failed: {error}")
        record_store_fault(operation)
        return Outcome.store_fault(error.detail)

    def _find_misc(self, document_name: str) -> MiscDocument | None:
        document = self.store.find_one_by_field(Collection.MISC, "documentName", document_name)
        return MiscDocument.from_dynamodb_item(document) if document else None

    @traced("settings.get_misc")
    async def get_misc_document(self, document_name: str) -> Outcome:
        try:
            document = self._find_misc(document_name)
        except StoreError as e:
            return self._store_fault("settings.get_misc", e)
        if document is None:
            return Outcome.not_found(INFORMATION_NOT_FOUND)
        return Outcome.ok(document)

    @traced("settings.update_misc")
    async def update_misc_document(self, document_name: str, information: Any) -> Outcome:
        """Overwrite the information of a named settings document.

        Args:
            document_name: Name of the singleton document
            information: Replacement text, must be non-empty

        Returns:
            Outcome with a confirmation message, BadRequest or NotFound
        """
        if not isinstance(information, str) or not information.strip():
            return Outcome.bad_request()

        try:
            document = self._find_misc(document_name)
            if document is None:
                return Outcome.not_found(INFORMATION_NOT_FOUND)

            updated = document.model_copy(update={"information": information.strip()})
            stored = self.store.replace_by_id(
                Collection.MISC, document.id, updated.to_dynamodb_item()
            )
        except StoreError as e:
            return self._store_fault("settings.update_misc", e)

        if stored is None:
            return Outcome.not_found(INFORMATION_NOT_FOUND)
        logger.info(f"Updated settings document {document_name}")
        return Outcome.ok(message=f"{document_name} updated")

    async def get_food_pantry(self) -> Outcome:
        return await self.get_misc_document(FOOD_PANTRY)

    async def update_food_pantry(self, information: Any) -> Outcome:
        return await self.update_misc_document(FOOD_PANTRY, information)

    def get_token_key(self) -> str | None:
        """Read the stored token key used by the credential gate.

        Raises:
            StoreError: If the settings store cannot be read
        """
        document = self._find_misc(TOKEN_KEY)
        return document.information if document else None

    @traced("settings.list_opening_hours")
    async def list_opening_hours(self) -> Outcome:
        try:
            documents = self.store.find_all(Collection.OPENING_HOURS)
        except StoreError as e:
            return self._store_fault("settings.list_opening_hours", e)
        return Outcome.ok([OpeningHours.from_dynamodb_item(doc) for doc in documents])

    @traced("settings.update_opening_hours")
    async def update_opening_hours(self, fields: dict[str, Any]) -> Outcome:
        """Replace the opening and closing time for an existing day.

        Both times are written in a single document replace, so the update is
        all-or-nothing.

        Returns:
            Outcome with a confirmation message, BadRequest or NotFound
        """
        try:
            validated = OpeningHoursFields.model_validate(fields)
        except ValidationError:
            return Outcome.bad_request()

        try:
            document = self.store.find_one_by_field(
                Collection.OPENING_HOURS, "day", validated.day
            )
            if document is None:
                return Outcome.not_found(OPENING_HOURS_NOT_FOUND)

            hours = OpeningHours(
                id=document["id"],
                day=validated.day,
                opening_time=validated.opening_time,
                closing_time=validated.closing_time,
            )
            stored = self.store.replace_by_id(
                Collection.OPENING_HOURS, hours.id, hours.to_dynamodb_item()
            )
        except StoreError as e:
            return self._store_fault("settings.update_opening_hours", e)

        if stored is None:
            return Outcome.not_found(OPENING_HOURS_NOT_FOUND)
        logger.info(f"Updated opening hours for {validated.day}")
        return Outcome.ok(message=f"Opening hours updated for {validated.day}")
