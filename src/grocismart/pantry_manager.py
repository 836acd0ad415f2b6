"""Pantry management for GrociSmart."""

from datetime import date

from .list_manager import resolve_item
from .models import (
    AddPantryItem,
    EditPantryItem,
    PantryItem,
    PantryItemUpdates,
    RemovePantryItem,
    merge_key,
)
from .store import DEFAULT_EXPIRING_WITHIN_DAYS, StateStore


class PantryManager:
    """Manages pantry stock tracking."""

    def __init__(self, store: StateStore | None = None):
        self.store = store or StateStore()

    def add_item(
        self,
        name: str,
        quantity: float = 1.0,
        unit: str = "pcs",
        expiry_date: date | None = None,
    ) -> PantryItem:
        """Add stock to the pantry.

        Stock with the same name and unit (ignoring case) is merged into the
        existing entry.

        Args:
            name: Name of the item
            quantity: Quantity added
            unit: Unit of measurement
            expiry_date: Optional expiry date; replaces the existing one when given

        Returns:
            The created or merged PantryItem
        """
        state = self.store.dispatch(
            AddPantryItem(name=name, quantity=quantity, unit=unit, expiry_date=expiry_date)
        )
        key = merge_key(name, unit)
        return next(item for item in state.pantry if item.merge_key == key)

    def get_item(self, item_id: str) -> PantryItem:
        """Get a pantry item by ID or unique ID prefix.

        Raises:
            ItemNotFoundError: If item not found
        """
        return resolve_item(self.store.state.pantry, item_id)

    def remove_item(self, item_id: str) -> PantryItem:
        """Remove an item from the pantry.

        Returns:
            The removed item

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        self.store.dispatch(RemovePantryItem(id=item.id))
        return item

    def update_item(
        self,
        item_id: str,
        name: str | None = None,
        quantity: float | None = None,
        unit: str | None = None,
        expiry_date: date | None = None,
        treat_none_as_unset: bool = True,
    ) -> PantryItem:
        """Update editable pantry fields.

        Args:
            item_id: ID of item
            name: New name
            quantity: New quantity
            unit: New unit
            expiry_date: New expiry date (None clears if treat_none_as_unset is False)
            treat_none_as_unset: When True, None means "leave unchanged"

        Returns:
            Updated item

        Raises:
            ItemNotFoundError: If item not found
            ValueError: If no field is given
        """
        fields: dict = {}
        if name is not None:
            fields["name"] = name
        if quantity is not None:
            fields["quantity"] = quantity
        if unit is not None:
            fields["unit"] = unit
        if expiry_date is not None or not treat_none_as_unset:
            fields["expiry_date"] = expiry_date

        if not fields:
            raise ValueError("Must provide name, quantity, unit or expiry date")

        item = self.get_item(item_id)
        self.store.dispatch(EditPantryItem(id=item.id, updates=PantryItemUpdates(**fields)))
        return self.get_item(item.id)

    def get_pantry(self) -> list[PantryItem]:
        """Get all pantry items in stored order."""
        return list(self.store.state.pantry)

    def get_expiring(
        self,
        days: int = DEFAULT_EXPIRING_WITHIN_DAYS,
        today: date | None = None,
    ) -> list[PantryItem]:
        """Get items expiring within a number of days, expired ones included.

        Args:
            days: Number of days to look ahead
            today: Reference date, defaults to today

        Returns:
            List of expiring items sorted by expiry date
        """
        return self.store.expiring_items(within_days=days, today=today)
