"""Component tests for the canteen API over an in-memory store.

Real services, resolver and credential gate; only the document store and the
recipe file store are replaced.
"""

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from canteen_service.handlers.api_handler import create_app
from canteen_service.repositories.collection_store import Collection
from canteen_service.repositories.file_store import S3FileStore
from canteen_service.services.menu_item_service import MenuItemService
from canteen_service.services.menu_service import MenuService
from canteen_service.services.provisioning_service import ProvisioningService
from canteen_service.services.recipe_service import RecipeService
from canteen_service.services.reference_resolver import ReferenceResolver
from canteen_service.services.settings_service import SettingsService
from tests.fakes import InMemoryCollectionStore

AUTH = {"Authorization": "Bearer staff-token"}


@pytest.fixture
def file_store() -> MagicMock:
    mock = MagicMock(spec=S3FileStore)
    mock.save.return_value = "0d9c7a52-8e0b-4b5f-a3a4-6a1f1c0f9e21"
    mock.load.return_value = b"%PDF-1.4 recipe"
    return mock


@pytest.fixture
def client(store: InMemoryCollectionStore, file_store: MagicMock) -> TestClient:
    """Create a client over a freshly provisioned store."""
    ProvisioningService(
        store=store,  # type: ignore[arg-type]
        days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        opening_time="08:00",
        closing_time="16:00",
        food_pantry_notice="Pantry open during lunch",
        token_key="staff-token",
    ).provision()

    settings_service = SettingsService(store)  # type: ignore[arg-type]
    app = create_app(
        menu_service=MenuService(
            store=store,  # type: ignore[arg-type]
            resolver=ReferenceResolver(store),  # type: ignore[arg-type]
        ),
        menu_item_service=MenuItemService(store),  # type: ignore[arg-type]
        recipe_service=RecipeService(store, file_store),  # type: ignore[arg-type]
        settings_service=settings_service,
        credentials=[settings_service.get_token_key() or ""],
    )
    return TestClient(app)


def create_item(client: TestClient, fields: dict[str, Any]) -> dict[str, Any]:
    response = client.post("/menu-items", json=fields, headers=AUTH)
    assert response.status_code == 201
    return response.json()


@pytest.mark.component
class TestMenuAssembly:
    """End-to-end menu assembly scenarios."""

    def test_soup_lifecycle(self, client: TestClient, soup_fields: dict[str, Any]) -> None:
        """Test that a deleted item disappears from the menu that references it."""
        soup = create_item(client, soup_fields)
        assert soup["price"] == "3.50"

        response = client.post("/menus/Monday/items", json={"menuItemId": soup["id"]}, headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"message": "Menu item added to Monday"}

        monday = client.get("/menus/Monday").json()
        assert [item["name"] for item in monday["items"]] == ["Soup"]

        assert client.delete(f"/menu-items/{soup['id']}", headers=AUTH).status_code == 200

        monday = client.get("/menus/Monday").json()
        assert monday["items"] == []

    def test_add_unknown_item_is_rejected(
        self, client: TestClient, store: InMemoryCollectionStore
    ) -> None:
        response = client.post(
            "/menus/Monday/items",
            json={"menuItemId": "6f1c2d3e-4b5a-4c7d-8e9f-0a1b2c3d4e5f"},
            headers=AUTH,
        )

        assert response.status_code == 404
        assert response.json() == {"message": "menuItemId does not exist"}
        assert all(not menu["items"] for menu in store.find_all(Collection.MENUS))

    def test_add_to_unprovisioned_day(
        self, client: TestClient, store: InMemoryCollectionStore, soup_fields: dict[str, Any]
    ) -> None:
        soup = create_item(client, soup_fields)

        response = client.post(
            "/menus/Sunday/items", json={"menuItemId": soup["id"]}, headers=AUTH
        )

        assert response.status_code == 404
        assert len(store.collections[Collection.MENUS]) == 5

    def test_remove_every_occurrence(
        self, client: TestClient, soup_fields: dict[str, Any]
    ) -> None:
        soup = create_item(client, soup_fields)
        for _ in range(2):
            client.post("/menus/Tuesday/items", json={"menuItemId": soup["id"]}, headers=AUTH)
        assert len(client.get("/menus/Tuesday").json()["items"]) == 2

        response = client.delete(f"/menus/Tuesday/items/{soup['id']}", headers=AUTH)

        assert response.status_code == 200
        assert client.get("/menus/Tuesday").json()["items"] == []

    def test_all_menus_in_weekday_order(self, client: TestClient) -> None:
        days = [menu["day"] for menu in client.get("/menus").json()]

        assert days == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

    def test_writes_require_token(self, client: TestClient, soup_fields: dict[str, Any]) -> None:
        response = client.post("/menu-items", json=soup_fields)

        assert response.status_code == 401
        assert client.get("/menu-items").json() == []


@pytest.mark.component
class TestSettingsAndRecipes:
    """End-to-end settings and recipe scenarios."""

    def test_opening_hours_unknown_day(self, client: TestClient) -> None:
        response = client.put(
            "/opening-hours",
            json={"day": "Sunday", "openingTime": "10:00", "closingTime": "12:00"},
            headers=AUTH,
        )

        assert response.status_code == 404
        days = [hours["day"] for hours in client.get("/opening-hours").json()]
        assert "Sunday" not in days

    def test_opening_hours_update(self, client: TestClient) -> None:
        response = client.put(
            "/opening-hours",
            json={"day": "Wednesday", "openingTime": "09:00", "closingTime": "14:00"},
            headers=AUTH,
        )

        assert response.status_code == 200
        wednesday = next(
            hours for hours in client.get("/opening-hours").json() if hours["day"] == "Wednesday"
        )
        assert (wednesday["openingTime"], wednesday["closingTime"]) == ("09:00", "14:00")

    def test_food_pantry_update(self, client: TestClient) -> None:
        assert client.get("/food-pantry").json()["information"] == "Pantry open during lunch"

        response = client.put("/food-pantry", json={"information": "Closed today"}, headers=AUTH)

        assert response.status_code == 200
        assert client.get("/food-pantry").json()["information"] == "Closed today"

    def test_recipe_upload_and_download(self, client: TestClient, file_store: MagicMock) -> None:
        response = client.post(
            "/recipes/upload",
            params={"title": "Flapjack", "description": "Oat bar", "allergens": "Oats"},
            content=b"%PDF-1.4 recipe",
            headers={**AUTH, "Content-Type": "application/pdf"},
        )
        assert response.status_code == 201
        recipe = response.json()
        assert recipe["fileName"] == f"{recipe['id']}.pdf"

        download = client.get(f"/recipes/{recipe['id']}/file")

        assert download.status_code == 200
        assert download.content == b"%PDF-1.4 recipe"
        file_store.load.assert_called_once_with(recipe["id"])

    def test_underscore_read_paths_match(self, client: TestClient) -> None:
        assert client.get("/food_pantry").json() == client.get("/food-pantry").json()
        assert client.get("/opening_hours").json() == client.get("/opening-hours").json()
        assert client.get("/menu").json() == client.get("/menu-items").json()
