"""Canteen document models.

These models represent the documents stored in the canteen collections and the
validated inputs used to write them. Field names are camelCase on the wire and
in storage; Python attributes stay snake_case.
"""

import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

PRICE_QUANTUM = Decimal("0.01")
KEYED_NAMESPACE = uuid.UUID("5f0b7c1e-3a2d-4e8f-9b61-2c4d7a9e0f13")


def new_identifier() -> str:
    """Generate a document identifier."""
    return str(uuid.uuid4())


def keyed_identifier(collection: str, key: str) -> str:
    """Derive a stable identifier for the single document holding key.

    Every writer seeding the same key computes the same identifier, so a
    conditional insert lets exactly one of them win.
    """
    return str(uuid.uuid5(KEYED_NAMESPACE, f"{collection}:{key}"))


def is_valid_identifier(value: Any) -> bool:
    """Check that value is a canonical identifier string.

    Args:
        value: Candidate identifier

    Returns:
        bool: True if value is a lowercase hyphenated UUID string
    """
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def normalize_price(value: Any) -> Decimal:
    """Parse a price and normalize it to exactly two fractional digits.

    Raises:
        ValueError: If value is missing, non-numeric, non-finite, negative or too large
    """
    if value is None or isinstance(value, bool):
        raise ValueError("price is required")
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError("price must be numeric") from e
    if not price.is_finite():
        raise ValueError("price must be finite")
    if price < 0:
        raise ValueError("price must be non-negative")
    try:
        return price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError("price out of range") from e


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation using stored field names
        """
        return self.model_dump(by_alias=True, exclude_none=True)


class MenuItemFields(BaseModel):
    """Validated fields for creating or replacing a menu item."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Item name")
    description: str = Field(..., min_length=1, description="Item description")
    price: Decimal = Field(..., description="Item price, two fractional digits")
    ingredients: str = Field(..., min_length=1, description="Ingredient list")
    allergens: str = Field(..., min_length=1, description="Allergen information")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Decimal:
        """Validate that price is a finite non-negative number."""
        return normalize_price(v)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> str:
        return str(price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP))


class MenuItem(MenuItemFields, _Document):
    """Menu item document."""

    id: str = Field(..., description="Unique identifier for the menu item")

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        return cls(
            id=item["id"],
            name=item["name"],
            description=item["description"],
            price=item["price"],
            ingredients=item["ingredients"],
            allergens=item["allergens"],
        )


class Menu(_Document):
    """Day-keyed menu holding ordered references to menu items.

    The items list holds raw menu item identifiers. Duplicates are allowed and
    references may dangle once the referenced item is deleted.
    """

    id: str = Field(..., description="Unique identifier for the menu")
    day: str = Field(..., description="Day this menu is served on")
    items: list[str] = Field(default_factory=list, description="Menu item references")
    version: int = Field(default=0, description="Bumped on every item mutation", ge=0)

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Menu":
        return cls(
            id=item["id"],
            day=item["day"],
            items=[str(reference) for reference in item.get("items", [])],
            version=int(item.get("version", 0)),
        )


class ResolvedMenu(BaseModel):
    """Menu with its references expanded into menu items."""

    id: str
    day: str
    items: list[MenuItem]


class RecipeFields(BaseModel):
    """Validated fields for a recipe with an inline image reference."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    allergens: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1, description="Inline image reference")


class UploadedRecipeFields(BaseModel):
    """Validated metadata accompanying an uploaded recipe document."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    allergens: str = Field(..., min_length=1)


class Recipe(_Document):
    """Recipe document.

    Exactly one of image or file_name is set. For uploaded recipes the id is
    the file store identifier and file_name is its stored base name.
    """

    id: str
    title: str
    description: str
    allergens: str
    image: str | None = None
    file_name: str | None = Field(None, alias="fileName")

    @property
    def has_file(self) -> bool:
        return self.file_name is not None

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Recipe":
        return cls.model_validate(item)


class MiscDocument(_Document):
    """Single-value settings record keyed by document name."""

    id: str
    document_name: str = Field(..., alias="documentName")
    information: str

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MiscDocument":
        return cls.model_validate(item)


class OpeningHoursFields(BaseModel):
    """Validated fields for an opening hours update."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    day: str = Field(..., min_length=1)
    opening_time: str = Field(..., min_length=1, alias="openingTime")
    closing_time: str = Field(..., min_length=1, alias="closingTime")


class OpeningHours(_Document):
    """Opening and closing time for one day."""

    id: str
    day: str
    opening_time: str = Field(..., alias="openingTime")
    closing_time: str = Field(..., alias="closingTime")

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "OpeningHours":
        return cls.model_validate(item)
