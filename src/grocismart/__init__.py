"""GrociSmart - Grocery list and pantry tracking with AI suggestions."""

from .assistant import AssistantError, GroceryAssistant, PendingRequest, submit
from .config import ConfigManager
from .data_store import (
    BackendType,
    JSONStateStore,
    PersistenceError,
    StatePersistence,
    create_state_store,
)
from .list_manager import AmbiguousIdError, ItemNotFoundError, ListManager
from .models import (
    Action,
    AddGroceryItem,
    AddPantryItem,
    AppState,
    EditGroceryItem,
    EditPantryItem,
    ExpiryStatus,
    GroceryItem,
    GroceryItemUpdates,
    PantryItem,
    PantryItemUpdates,
    RemoveGroceryItem,
    RemovePantryItem,
    SetState,
    ToggleGroceryItemPurchased,
)
from .pantry_manager import PantryManager
from .reducer import generate_id, reduce
from .seed import seed_state
from .sqlite_store import SQLiteStateStore
from .store import StateStore

__version__ = "0.1.0"

__all__ = [
    "Action",
    "AddGroceryItem",
    "AddPantryItem",
    "AmbiguousIdError",
    "AppState",
    "AssistantError",
    "BackendType",
    "ConfigManager",
    "create_state_store",
    "EditGroceryItem",
    "EditPantryItem",
    "ExpiryStatus",
    "generate_id",
    "GroceryAssistant",
    "GroceryItem",
    "GroceryItemUpdates",
    "ItemNotFoundError",
    "JSONStateStore",
    "ListManager",
    "PantryItem",
    "PantryItemUpdates",
    "PantryManager",
    "PendingRequest",
    "PersistenceError",
    "reduce",
    "RemoveGroceryItem",
    "RemovePantryItem",
    "seed_state",
    "SetState",
    "SQLiteStateStore",
    "StatePersistence",
    "StateStore",
    "submit",
    "ToggleGroceryItemPurchased",
]
