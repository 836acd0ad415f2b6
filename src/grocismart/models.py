"""Core data models for GrociSmart."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

EXPIRING_SOON_DAYS = 15


def fold(text: str) -> str:
    """Case-fold a name or unit for case-insensitive matching."""
    return text.casefold()


def merge_key(name: str, unit: str) -> tuple[str, str]:
    """Build the pantry merge key for a (name, unit) pair."""
    return fold(name), fold(unit)


class WireModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpiryStatus(str, Enum):
    """Freshness classification of a pantry item."""

    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    FRESH = "fresh"
    NO_EXPIRY = "no_expiry"


class GroceryItem(WireModel):
    """An item on the grocery list."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: float = Field(gt=0, allow_inf_nan=False)
    unit: str
    purchased: bool = False

    @property
    def merge_key(self) -> tuple[str, str]:
        return merge_key(self.name, self.unit)


class PantryItem(WireModel):
    """An item in stock at home."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: float = Field(gt=0, allow_inf_nan=False)
    unit: str
    expiry_date: date | None = None

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _date_part_only(cls, value: Any) -> Any:
        # Older documents stored full timestamps; keep the calendar date as written.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @property
    def merge_key(self) -> tuple[str, str]:
        return merge_key(self.name, self.unit)

    def days_until_expiry(self, today: date | None = None) -> int | None:
        """Days until expiry, negative once expired."""
        if self.expiry_date is None:
            return None
        return (self.expiry_date - (today or date.today())).days

    def is_expired(self, today: date | None = None) -> bool:
        """Check if the expiry date lies before today."""
        if self.expiry_date is None:
            return False
        return self.expiry_date < (today or date.today())

    def expiry_status(self, today: date | None = None) -> ExpiryStatus:
        """Classify freshness the way the pantry view highlights rows."""
        if self.expiry_date is None:
            return ExpiryStatus.NO_EXPIRY
        today = today or date.today()
        if self.expiry_date < today:
            return ExpiryStatus.EXPIRED
        if self.expiry_date < today + timedelta(days=EXPIRING_SOON_DAYS):
            return ExpiryStatus.EXPIRING_SOON
        return ExpiryStatus.FRESH


class AppState(WireModel):
    """The complete durable application state."""

    model_config = ConfigDict(frozen=True)

    grocery_list: list[GroceryItem] = Field(default_factory=list)
    pantry: list[PantryItem] = Field(default_factory=list)
    past_purchases: list[str] = Field(default_factory=list)

    @field_validator("past_purchases")
    @classmethod
    def _dedupe_past_purchases(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        unique = []
        for name in value:
            if fold(name) not in seen:
                seen.add(fold(name))
                unique.append(name)
        return unique

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "AppState":
        for label, items in (("groceryList", self.grocery_list), ("pantry", self.pantry)):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate ids in {label}")
        return self

    def has_purchased(self, name: str) -> bool:
        """Check purchase history case-insensitively."""
        return any(fold(p) == fold(name) for p in self.past_purchases)


# --- Actions ---


class GroceryItemUpdates(WireModel):
    """Editable grocery item fields."""

    model_config = ConfigDict(frozen=True)

    quantity: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    unit: str | None = None

    def changes(self) -> dict[str, Any]:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class PantryItemUpdates(WireModel):
    """Editable pantry item fields.

    An explicitly supplied ``expiry_date=None`` clears the date; an omitted
    one leaves it untouched.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    quantity: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    unit: str | None = None
    expiry_date: date | None = None

    def changes(self) -> dict[str, Any]:
        changes = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if value is not None or key == "expiry_date":
                changes[key] = value
        return changes


class AddGroceryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["ADD_GROCERY_ITEM"] = "ADD_GROCERY_ITEM"
    name: str
    quantity: float = Field(gt=0, allow_inf_nan=False)
    unit: str


class EditGroceryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["EDIT_GROCERY_ITEM"] = "EDIT_GROCERY_ITEM"
    id: str
    updates: GroceryItemUpdates


class RemoveGroceryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["REMOVE_GROCERY_ITEM"] = "REMOVE_GROCERY_ITEM"
    id: str


class ToggleGroceryItemPurchased(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["TOGGLE_GROCERY_ITEM_PURCHASED"] = "TOGGLE_GROCERY_ITEM_PURCHASED"
    id: str


class AddPantryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["ADD_PANTRY_ITEM"] = "ADD_PANTRY_ITEM"
    name: str
    quantity: float = Field(gt=0, allow_inf_nan=False)
    unit: str
    expiry_date: date | None = None


class EditPantryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["EDIT_PANTRY_ITEM"] = "EDIT_PANTRY_ITEM"
    id: str
    updates: PantryItemUpdates


class RemovePantryItem(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["REMOVE_PANTRY_ITEM"] = "REMOVE_PANTRY_ITEM"
    id: str


class SetState(WireModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["SET_STATE"] = "SET_STATE"
    state: AppState


Action = Annotated[
    Union[
        AddGroceryItem,
        EditGroceryItem,
        RemoveGroceryItem,
        ToggleGroceryItemPurchased,
        AddPantryItem,
        EditPantryItem,
        RemovePantryItem,
        SetState,
    ],
    Field(discriminator="type"),
]

action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


# --- AI request/response payloads ---


class Meal(WireModel):
    name: str


class PlannerPantryItem(WireModel):
    """Pantry item passed to the meal planner; ``selected`` means already owned."""

    name: str
    quantity: float
    unit: str
    selected: bool = False


class MealPlannerInput(WireModel):
    number_of_people: int = Field(gt=0)
    meals: list[Meal]
    pantry_items: list[PlannerPantryItem] = Field(default_factory=list)


class SuggestedGroceryItem(WireModel):
    name: str = Field(description="Name of the grocery item.")
    quantity: float = Field(description="Quantity of the grocery item needed.")
    unit: str = Field(description="Unit of measurement (e.g., kg, l, pcs).")


class MealPlannerOutput(WireModel):
    grocery_list: list[SuggestedGroceryItem] = Field(
        description="Grocery items needed for the planned meals, accounting for pantry items."
    )


class ExpiringItem(WireModel):
    name: str
    quantity: float
    unit: str


class Recipe(WireModel):
    name: str = Field(description="The name of the dish/meal.")
    ingredients: str = Field(description="Ingredients, each on a new line.")
    instructions: str = Field(description="Cooking steps, each on a new line, not numbered.")


class SuggestRecipesInput(WireModel):
    expiring_items: list[ExpiringItem]
    number_of_people: int = Field(gt=0)


class SuggestRecipesOutput(WireModel):
    recipes: list[Recipe] = Field(
        description="Recipes that can be made from the expiring items."
    )


class FindRecipeInput(WireModel):
    dish_name: str
    number_of_people: int = Field(gt=0)


class FindRecipeOutput(WireModel):
    ingredients: str = Field(description="Ingredients, each on a new line.")
    instructions: str = Field(description="Cooking steps, each on a new line, not numbered.")


class SmartSuggestionsInput(WireModel):
    past_purchases: list[str]


class SmartSuggestionsOutput(WireModel):
    suggested_items: list[str] = Field(description="Grocery items suggested for the list.")
