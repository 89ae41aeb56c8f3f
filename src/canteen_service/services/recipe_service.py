"""Recipe service: inline-image recipes and uploaded recipe documents."""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from canteen_service.models.canteen_models import Recipe, RecipeFields, UploadedRecipeFields
from canteen_service.models.outcome import Outcome
from canteen_service.observability import traced
from canteen_service.observability.metrics import record_store_fault
from canteen_service.repositories.collection_store import Collection, CollectionStore, StoreError
from canteen_service.repositories.file_store import FileStoreError, S3FileStore, file_name_for

logger = logging.getLogger(__name__)

RECIPE_NOT_FOUND = "Recipe not found"
PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class RecipeFile:
    """Downloaded recipe document."""

    file_name: str
    content: bytes
    content_type: str = PDF_CONTENT_TYPE


class RecipeService:
    """Service for recipe documents.

    Recipes have no update path. An uploaded recipe shares its identifier with
    the stored file, so deleting the recipe also deletes the file.
    """

    def __init__(self, store: CollectionStore, file_store: S3FileStore) -> None:
        self.store = store
        self.file_store = file_store

    def _store_fault(self, operation: str, error: Exception) -> Outcome:
        logger.error(f"{operation} failed: {error}")
        record_store_fault(operation)
        detail = error.detail if isinstance(error, StoreError) else str(error)
        return Outcome.store_fault(detail)

    @traced("recipe.list")
    async def list_recipes(self) -> Outcome:
        try:
            documents = self.store.find_all(Collection.RECIPES)
        except StoreError as e:
            return self._store_fault("recipe.list", e)
        return Outcome.ok([Recipe.from_dynamodb_item(doc) for doc in documents])

    @traced("recipe.get")
    async def get_recipe(self, recipe_id: str) -> Outcome:
        try:
            document = self.store.find_by_id(Collection.RECIPES, recipe_id)
        except StoreError as e:
            return self._store_fault("recipe.get", e)
        if document is None:
            return Outcome.not_found(RECIPE_NOT_FOUND)
        return Outcome.ok(Recipe.from_dynamodb_item(document))

    @traced("recipe.create")
    async def create_recipe(self, fields: dict[str, Any]) -> Outcome:
        """Store a recipe that references an inline image."""
        try:
            validated = RecipeFields.model_validate(fields)
        except ValidationError:
            return Outcome.bad_request()

        try:
            document = self.store.insert(Collection.RECIPES, validated.model_dump())
        except StoreError as e:
            return self._store_fault("recipe.create", e)
        return Outcome.created(Recipe.from_dynamodb_item(document))

    @traced("recipe.upload")
    async def upload_recipe(
        self,
        fields: dict[str, Any],
        content: bytes,
        content_type: str | None,
    ) -> Outcome:
        """Store an uploaded recipe PDF and its recipe document.

        Args:
            fields: Raw title, description and allergens
            content: PDF bytes
            content_type: Declared content type of the upload

        Returns:
            Outcome carrying the created Recipe, or BadRequest
        """
        try:
            validated = UploadedRecipeFields.model_validate(fields)
        except ValidationError:
            return Outcome.bad_request()

        media_type = (content_type or "").split(";")[0].strip().lower()
        if not content or media_type != PDF_CONTENT_TYPE:
            return Outcome.bad_request("A non-empty PDF document is required")

        try:
            file_id = self.file_store.save(content, PDF_CONTENT_TYPE)
        except FileStoreError as e:
            return self._store_fault("recipe.upload", e)

        recipe = Recipe(id=file_id, file_name=file_name_for(file_id), **validated.model_dump())
        try:
            self.store.insert(Collection.RECIPES, recipe.to_dynamodb_item())
        except StoreError as e:
            try:
                self.file_store.delete(file_id)
            except FileStoreError:
                logger.warning(f"Orphaned recipe file {file_id} left in file store")
            return self._store_fault("recipe.upload", e)

        logger.info(f"Uploaded recipe {file_id}")
        return Outcome.created(recipe)

    @traced("recipe.download")
    async def download_recipe(self, recipe_id: str) -> Outcome:
        """Fetch the stored PDF for an uploaded recipe.

        Returns:
            Outcome carrying a RecipeFile, or NotFound
        """
        try:
            document = self.store.find_by_id(Collection.RECIPES, recipe_id)
            if document is None:
                return Outcome.not_found(RECIPE_NOT_FOUND)
            recipe = Recipe.from_dynamodb_item(document)
            if not recipe.has_file:
                return Outcome.not_found("Recipe has no uploaded document")
            content = self.file_store.load(recipe.id)
        except (StoreError, FileStoreError) as e:
            return self._store_fault("recipe.download", e)

        if content is None:
            return Outcome.not_found("Recipe document not found")
        file_name = recipe.file_name or file_name_for(recipe.id)
        return Outcome.ok(RecipeFile(file_name=file_name, content=content))

    @traced("recipe.delete")
    async def delete_recipe(self, recipe_id: str) -> Outcome:
        try:
            document = self.store.find_by_id(Collection.RECIPES, recipe_id)
            if document is None:
                return Outcome.not_found(RECIPE_NOT_FOUND)
            recipe = Recipe.from_dynamodb_item(document)
            if not self.store.delete_by_id(Collection.RECIPES, recipe_id):
                return Outcome.not_found(RECIPE_NOT_FOUND)
            if recipe.has_file:
                self.file_store.delete(recipe.id)
        except (StoreError, FileStoreError) as e:
            return self._store_fault("recipe.delete", e)

        logger.info(f"Deleted recipe {recipe_id}")
        return Outcome.ok(message="Recipe deleted")
