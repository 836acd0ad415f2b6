"""Grocery list management operations."""

from collections.abc import Sequence
from typing import TypeVar

from .models import (
    AddGroceryItem,
    EditGroceryItem,
    GroceryItem,
    GroceryItemUpdates,
    PantryItem,
    RemoveGroceryItem,
    ToggleGroceryItemPurchased,
    merge_key,
)
from .store import StateStore

ItemT = TypeVar("ItemT", GroceryItem, PantryItem)


class ItemNotFoundError(Exception):
    """Raised when an item is not found."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item with ID '{item_id}' not found")


class AmbiguousIdError(Exception):
    """Raised when an ID prefix matches more than one item."""

    def __init__(self, item_id: str, matches: Sequence[str]):
        self.item_id = item_id
        self.matches = list(matches)
        super().__init__(
            f"ID '{item_id}' is ambiguous, matches: {', '.join(self.matches)}"
        )


def resolve_item(items: Sequence[ItemT], item_id: str) -> ItemT:
    """Find an item by exact ID or unique ID prefix.

    Raises:
        ItemNotFoundError: If nothing matches
        AmbiguousIdError: If the prefix matches several items
    """
    for item in items:
        if item.id == item_id:
            return item

    matches = [item for item in items if item.id.startswith(item_id)]
    if not matches:
        raise ItemNotFoundError(item_id)
    if len(matches) > 1:
        raise AmbiguousIdError(item_id, [m.id for m in matches])
    return matches[0]


class ListManager:
    """Manages grocery list operations."""

    def __init__(self, store: StateStore | None = None):
        """Initialize list manager.

        Args:
            store: StateStore instance. Creates an in-memory one if not provided.
        """
        self.store = store or StateStore()

    def add_item(self, name: str, quantity: float = 1, unit: str = "pcs") -> dict:
        """Add an item to the grocery list.

        Duplicates by name are allowed; each add creates a new entry.

        Args:
            name: Item name
            quantity: Amount to buy
            unit: Unit of measurement

        Returns:
            Dict with success status and item data
        """
        state = self.store.dispatch(AddGroceryItem(name=name, quantity=quantity, unit=unit))
        item = state.grocery_list[-1]

        return {
            "success": True,
            "message": f"Added {name} to grocery list",
            "data": {"item": item.model_dump(mode="json", by_alias=True)},
        }

    def get_item(self, item_id: str) -> GroceryItem:
        """Get a specific item by ID or unique ID prefix.

        Raises:
            ItemNotFoundError: If item not found
        """
        return resolve_item(self.store.state.grocery_list, item_id)

    def update_item(
        self,
        item_id: str,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> dict:
        """Update quantity and/or unit of an item.

        Raises:
            ItemNotFoundError: If item not found
            ValueError: If nothing to update was given
        """
        if quantity is None and unit is None:
            raise ValueError("Must provide quantity or unit")

        item = self.get_item(item_id)
        updates = GroceryItemUpdates(quantity=quantity, unit=unit)
        self.store.dispatch(EditGroceryItem(id=item.id, updates=updates))
        updated = self.get_item(item.id)

        return {
            "success": True,
            "message": f"Updated {updated.name}",
            "data": {"item": updated.model_dump(mode="json", by_alias=True)},
        }

    def remove_item(self, item_id: str) -> dict:
        """Remove an item from the grocery list.

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        self.store.dispatch(RemoveGroceryItem(id=item.id))

        return {
            "success": True,
            "message": f"Removed {item.name} from grocery list",
            "data": {"item": item.model_dump(mode="json", by_alias=True)},
        }

    def toggle_purchased(self, item_id: str) -> dict:
        """Flip the purchased flag, moving stock into or out of the pantry.

        Returns:
            Dict with the updated item and its matching pantry entry, if any

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        state = self.store.dispatch(ToggleGroceryItemPurchased(id=item.id))
        updated = self.get_item(item.id)

        pantry_item = next(
            (p for p in state.pantry if p.merge_key == merge_key(updated.name, updated.unit)),
            None,
        )
        status = "purchased" if updated.purchased else "not purchased"

        return {
            "success": True,
            "message": f"Marked {updated.name} as {status}",
            "data": {
                "item": updated.model_dump(mode="json", by_alias=True),
                "pantry_item": (
                    pantry_item.model_dump(mode="json", by_alias=True) if pantry_item else None
                ),
            },
        }

    def get_list(self, purchased: bool | None = None) -> dict:
        """Get the grocery list, optionally filtered by purchased flag."""
        items = self.store.state.grocery_list

        if purchased is not None:
            items = [i for i in items if i.purchased == purchased]

        return {
            "success": True,
            "data": {
                "list": {
                    "items": [item.model_dump(mode="json", by_alias=True) for item in items],
                    "total_items": len(items),
                    "purchased_count": sum(1 for i in items if i.purchased),
                }
            },
        }

    def get_history(self) -> dict:
        """Get the purchase history in insertion order."""
        history = list(self.store.state.past_purchases)
        return {
            "success": True,
            "data": {"history": history},
        }
