"""Pure state transitions for the grocery list, pantry and purchase history.

``reduce`` never performs I/O. The only source of non-determinism is the
injected ``id_factory`` used to name newly created items.
"""

from collections.abc import Callable, Sequence
from uuid import uuid4

from .models import (
    AddGroceryItem,
    AddPantryItem,
    AppState,
    EditGroceryItem,
    EditPantryItem,
    GroceryItem,
    PantryItem,
    RemoveGroceryItem,
    RemovePantryItem,
    SetState,
    ToggleGroceryItemPurchased,
    merge_key,
)

IdFactory = Callable[[str], str]

GROCERY_ID_PREFIX = "g-"
PANTRY_ID_PREFIX = "p-"
QUANTITY_PRECISION = 9


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier with an optional prefix."""
    return f"{prefix}{uuid4()}"


def _round_quantity(quantity: float) -> float:
    """Round a computed stock quantity to QUANTITY_PRECISION decimal places."""
    return round(quantity, QUANTITY_PRECISION)


def _index_by_id(items: Sequence[GroceryItem | PantryItem], item_id: str) -> int:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    return -1


def _index_by_merge_key(pantry: Sequence[PantryItem], name: str, unit: str) -> int:
    key = merge_key(name, unit)
    for i, item in enumerate(pantry):
        if item.merge_key == key:
            return i
    return -1


def _replace_at(items: list, index: int, item) -> list:
    return [*items[:index], item, *items[index + 1 :]]


def _add_grocery_item(state: AppState, action: AddGroceryItem, id_factory: IdFactory) -> AppState:
    item = GroceryItem(
        id=id_factory(GROCERY_ID_PREFIX),
        name=action.name,
        quantity=action.quantity,
        unit=action.unit,
        purchased=False,
    )
    return state.model_copy(update={"grocery_list": [*state.grocery_list, item]})


def _edit_grocery_item(state: AppState, action: EditGroceryItem, id_factory: IdFactory) -> AppState:
    index = _index_by_id(state.grocery_list, action.id)
    if index < 0:
        return state

    updated = state.grocery_list[index].model_copy(update=action.updates.changes())
    return state.model_copy(update={"grocery_list": _replace_at(state.grocery_list, index, updated)})


def _remove_grocery_item(
    state: AppState, action: RemoveGroceryItem, id_factory: IdFactory
) -> AppState:
    index = _index_by_id(state.grocery_list, action.id)
    if index < 0:
        return state

    grocery_list = [*state.grocery_list[:index], *state.grocery_list[index + 1 :]]
    return state.model_copy(update={"grocery_list": grocery_list})


def _toggle_grocery_item_purchased(
    state: AppState, action: ToggleGroceryItemPurchased, id_factory: IdFactory
) -> AppState:
    index = _index_by_id(state.grocery_list, action.id)
    if index < 0:
        return state

    grocery_item = state.grocery_list[index]
    is_now_purchased = not grocery_item.purchased
    grocery_list = _replace_at(
        state.grocery_list, index, grocery_item.model_copy(update={"purchased": is_now_purchased})
    )

    pantry = list(state.pantry)
    past_purchases = list(state.past_purchases)
    pantry_index = _index_by_merge_key(pantry, grocery_item.name, grocery_item.unit)

    if is_now_purchased:
        if pantry_index >= 0:
            existing = pantry[pantry_index]
            pantry[pantry_index] = existing.model_copy(
                update={"quantity": _round_quantity(existing.quantity + grocery_item.quantity)}
            )
        else:
            pantry.append(
                PantryItem(
                    id=id_factory(PANTRY_ID_PREFIX),
                    name=grocery_item.name,
                    quantity=grocery_item.quantity,
                    unit=grocery_item.unit,
                    expiry_date=None,
                )
            )

        if not state.has_purchased(grocery_item.name):
            past_purchases.append(grocery_item.name)
    elif pantry_index >= 0:
        # Purchase history is an audit trail and is left alone on reversal.
        existing = pantry[pantry_index]
        remaining = _round_quantity(existing.quantity - grocery_item.quantity)
        if remaining > 0:
            pantry[pantry_index] = existing.model_copy(update={"quantity": remaining})
        else:
            del pantry[pantry_index]

    return state.model_copy(
        update={
            "grocery_list": grocery_list,
            "pantry": pantry,
            "past_purchases": past_purchases,
        }
    )


def _add_pantry_item(state: AppState, action: AddPantryItem, id_factory: IdFactory) -> AppState:
    index = _index_by_merge_key(state.pantry, action.name, action.unit)

    if index >= 0:
        existing = state.pantry[index]
        merged = existing.model_copy(
            update={
                "quantity": _round_quantity(existing.quantity + action.quantity),
                "expiry_date": action.expiry_date or existing.expiry_date,
            }
        )
        return state.model_copy(update={"pantry": _replace_at(state.pantry, index, merged)})

    item = PantryItem(
        id=id_factory(PANTRY_ID_PREFIX),
        name=action.name,
        quantity=action.quantity,
        unit=action.unit,
        expiry_date=action.expiry_date,
    )
    return state.model_copy(update={"pantry": [*state.pantry, item]})


def _edit_pantry_item(state: AppState, action: EditPantryItem, id_factory: IdFactory) -> AppState:
    # No re-merge: an edit may leave two entries sharing a merge key.
    index = _index_by_id(state.pantry, action.id)
    if index < 0:
        return state

    updated = state.pantry[index].model_copy(update=action.updates.changes())
    return state.model_copy(update={"pantry": _replace_at(state.pantry, index, updated)})


def _remove_pantry_item(state: AppState, action: RemovePantryItem, id_factory: IdFactory) -> AppState:
    index = _index_by_id(state.pantry, action.id)
    if index < 0:
        return state

    return state.model_copy(update={"pantry": [*state.pantry[:index], *state.pantry[index + 1 :]]})


def _set_state(state: AppState, action: SetState, id_factory: IdFactory) -> AppState:
    return action.state


_HANDLERS: dict[type, Callable[[AppState, object, IdFactory], AppState]] = {
    AddGroceryItem: _add_grocery_item,
    EditGroceryItem: _edit_grocery_item,
    RemoveGroceryItem: _remove_grocery_item,
    ToggleGroceryItemPurchased: _toggle_grocery_item_purchased,
    AddPantryItem: _add_pantry_item,
    EditPantryItem: _edit_pantry_item,
    RemovePantryItem: _remove_pantry_item,
    SetState: _set_state,
}


def reduce(state: AppState, action: object, id_factory: IdFactory = generate_id) -> AppState:
    """Compute the next state for an action.

    Args:
        state: Current application state
        action: One of the action models
        id_factory: Called with an id prefix whenever a new item is created

    Returns:
        The next AppState. Actions addressing a missing id, and unknown
        actions, return ``state`` itself.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action, id_factory)
