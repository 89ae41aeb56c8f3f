"""Shared pytest fixtures and configuration for all tests."""

import os
from typing import Any

import pytest

os.environ.setdefault("ENVIRONMENT", "test")

from canteen_service.models.canteen_models import new_identifier  # noqa: E402
from canteen_service.repositories.collection_store import Collection  # noqa: E402
from tests.fakes import InMemoryCollectionStore  # noqa: E402


@pytest.fixture
def store() -> InMemoryCollectionStore:
    """Fixture providing an empty in-memory collection store."""
    return InMemoryCollectionStore()


@pytest.fixture
def soup_fields() -> dict[str, Any]:
    """Fixture providing valid raw fields for a menu item."""
    return {
        "name": "Soup",
        "description": "Tomato soup of the day",
        "price": "3.5",
        "ingredients": "Tomato, basil, cream",
        "allergens": "Milk",
    }


@pytest.fixture
def menu_item_document() -> dict[str, Any]:
    """Fixture providing a stored menu item document."""
    return {
        "id": new_identifier(),
        "name": "Lasagne",
        "description": "Beef lasagne",
        "price": "6.20",
        "ingredients": "Pasta, beef, tomato, cheese",
        "allergens": "Gluten, Milk",
    }


@pytest.fixture
def seeded_week(store: InMemoryCollectionStore) -> dict[str, dict[str, Any]]:
    """Fixture seeding an empty menu for Monday to Friday."""
    days = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    return {
        day: store.seed(Collection.MENUS, {"day": day, "items": [], "version": 0})
        for day in days
    }
