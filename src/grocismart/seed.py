"""Seed state used when no persisted state is available."""

from datetime import date, timedelta

from .models import AppState, GroceryItem, PantryItem


def seed_state(today: date | None = None) -> AppState:
    """Build the fixed starter state, with expiry dates relative to today."""
    today = today or date.today()

    return AppState(
        grocery_list=[
            GroceryItem(id="g-1", name="Milk", quantity=1, unit="l", purchased=False),
            GroceryItem(id="g-2", name="Bread", quantity=1, unit="pack", purchased=False),
            GroceryItem(id="g-3", name="Eggs", quantity=12, unit="pcs", purchased=True),
        ],
        pantry=[
            PantryItem(
                id="p-1", name="Eggs", quantity=12, unit="pcs",
                expiry_date=today + timedelta(days=25),
            ),
            PantryItem(
                id="p-2", name="Chicken Breast", quantity=500, unit="g",
                expiry_date=today - timedelta(days=2),
            ),
            PantryItem(
                id="p-3", name="Tomatoes", quantity=5, unit="pcs",
                expiry_date=today + timedelta(days=5),
            ),
            PantryItem(
                id="p-4", name="Pasta", quantity=1, unit="box",
                expiry_date=today + timedelta(days=300),
            ),
        ],
        past_purchases=[
            "Eggs",
            "Milk",
            "Bread",
            "Chicken Breast",
            "Tomatoes",
            "Pasta",
            "Olive Oil",
            "Garlic",
            "Onions",
        ],
    )
