"""Unit tests for RecipeService."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from canteen_service.models.canteen_models import Recipe
from canteen_service.models.outcome import OutcomeKind
from canteen_service.repositories.collection_store import Collection
from canteen_service.repositories.file_store import FileStoreError, S3FileStore
from canteen_service.services.recipe_service import RecipeFile, RecipeService
from tests.fakes import InMemoryCollectionStore

PDF = b"%PDF-1.4 flapjack"


@pytest.mark.unit
class TestRecipeService:
    """Test suite for RecipeService."""

    @pytest.fixture
    def file_store(self) -> MagicMock:
        mock = MagicMock(spec=S3FileStore)
        mock.save.return_value = "4a6f2f3e-5b1c-4d8e-9f00-1a2b3c4d5e6f"
        return mock

    @pytest.fixture
    def service(self, store: InMemoryCollectionStore, file_store: MagicMock) -> RecipeService:
        return RecipeService(store, file_store)  # type: ignore[arg-type]

    @pytest.fixture
    def metadata(self) -> dict[str, Any]:
        return {"title": "Flapjack", "description": "Oat bar", "allergens": "Oats"}

    @pytest.mark.asyncio
    async def test_create_inline_recipe(
        self, service: RecipeService, store: InMemoryCollectionStore, metadata: dict[str, Any]
    ) -> None:
        outcome = await service.create_recipe({**metadata, "image": "flapjack.png"})

        assert outcome.kind == OutcomeKind.CREATED
        recipe: Recipe = outcome.payload
        assert recipe.image == "flapjack.png"
        assert not recipe.has_file
        assert store.get(Collection.RECIPES, recipe.id)["title"] == "Flapjack"

    @pytest.mark.asyncio
    async def test_create_inline_recipe_requires_image(
        self, service: RecipeService, metadata: dict[str, Any]
    ) -> None:
        outcome = await service.create_recipe(metadata)

        assert outcome.kind == OutcomeKind.BAD_REQUEST

    @pytest.mark.asyncio
    async def test_upload_uses_file_identifier_as_recipe_id(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        outcome = await service.upload_recipe(metadata, PDF, "application/pdf")

        assert outcome.kind == OutcomeKind.CREATED
        recipe: Recipe = outcome.payload
        assert recipe.id == file_store.save.return_value
        assert recipe.file_name == f"{recipe.id}.pdf"
        assert store.get(Collection.RECIPES, recipe.id)["fileName"] == f"{recipe.id}.pdf"
        file_store.save.assert_called_once_with(PDF, "application/pdf")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("content", "content_type"),
        [(b"", "application/pdf"), (PDF, "text/plain"), (PDF, None)],
    )
    async def test_upload_rejects_non_pdf(
        self,
        service: RecipeService,
        file_store: MagicMock,
        metadata: dict[str, Any],
        content: bytes,
        content_type: str | None,
    ) -> None:
        outcome = await service.upload_recipe(metadata, content, content_type)

        assert outcome.kind == OutcomeKind.BAD_REQUEST
        file_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_rejects_missing_metadata(
        self, service: RecipeService, file_store: MagicMock
    ) -> None:
        outcome = await service.upload_recipe({"title": "Only"}, PDF, "application/pdf")

        assert outcome.kind == OutcomeKind.BAD_REQUEST
        file_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_cleans_up_file_when_insert_fails(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        store.fail_with = "table missing"

        outcome = await service.upload_recipe(metadata, PDF, "application/pdf; charset=binary")

        assert outcome.kind == OutcomeKind.STORE_FAULT
        file_store.delete.assert_called_once_with(file_store.save.return_value)

    @pytest.mark.asyncio
    async def test_upload_file_store_failure(
        self, service: RecipeService, file_store: MagicMock, metadata: dict[str, Any]
    ) -> None:
        file_store.save.side_effect = FileStoreError("bucket missing")

        outcome = await service.upload_recipe(metadata, PDF, "application/pdf")

        assert outcome.kind == OutcomeKind.STORE_FAULT
        assert outcome.message == "bucket missing"

    @pytest.mark.asyncio
    async def test_download_recipe(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "fileName": "r1.pdf"})
        file_store.load.return_value = PDF

        outcome = await service.download_recipe("r1")

        assert outcome.kind == OutcomeKind.OK
        assert outcome.payload == RecipeFile(file_name="r1.pdf", content=PDF)
        file_store.load.assert_called_once_with("r1")

    @pytest.mark.asyncio
    async def test_download_inline_recipe_has_no_file(
        self, service: RecipeService, store: InMemoryCollectionStore, metadata: dict[str, Any]
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "image": "x.png"})

        outcome = await service.download_recipe("r1")

        assert outcome.kind == OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_download_missing_file(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "fileName": "r1.pdf"})
        file_store.load.return_value = None

        outcome = await service.download_recipe("r1")

        assert outcome.kind == OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_and_list_recipes(
        self, service: RecipeService, store: InMemoryCollectionStore, metadata: dict[str, Any]
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "image": "x.png"})

        assert (await service.get_recipe("r1")).payload.title == "Flapjack"
        assert [r.id for r in (await service.list_recipes()).payload] == ["r1"]
        assert (await service.get_recipe("r2")).kind == OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_uploaded_recipe_removes_file(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "fileName": "r1.pdf"})

        outcome = await service.delete_recipe("r1")

        assert outcome.kind == OutcomeKind.OK
        assert store.get(Collection.RECIPES, "r1") is None
        file_store.delete.assert_called_once_with("r1")

    @pytest.mark.asyncio
    async def test_delete_inline_recipe_keeps_file_store_untouched(
        self,
        service: RecipeService,
        store: InMemoryCollectionStore,
        file_store: MagicMock,
        metadata: dict[str, Any],
    ) -> None:
        store.seed(Collection.RECIPES, {**metadata, "id": "r1", "image": "x.png"})

        outcome = await service.delete_recipe("r1")

        assert outcome.kind == OutcomeKind.OK
        file_store.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_missing_recipe(self, service: RecipeService) -> None:
        outcome = await service.delete_recipe("nope")

        assert outcome.kind == OutcomeKind.NOT_FOUND
