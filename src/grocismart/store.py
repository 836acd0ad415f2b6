"""State store owning the AppState.

The store is an explicit object passed to whatever needs it. Every dispatch
runs the reducer and then writes the complete new state through to the
persistence port.
"""

import logging
from collections.abc import Callable
from datetime import date, timedelta

from .data_store import StatePersistence
from .models import AppState, GroceryItem, PantryItem, SetState
from .reducer import IdFactory, generate_id, reduce
from .seed import seed_state

logger = logging.getLogger(__name__)

Listener = Callable[[AppState], None]

DEFAULT_EXPIRING_WITHIN_DAYS = 30


class StateStore:
    """Holds the current state and applies actions one at a time."""

    def __init__(
        self,
        persistence: StatePersistence | None = None,
        id_factory: IdFactory = generate_id,
        seed: AppState | None = None,
    ):
        """Initialize the store and hydrate it from persistence.

        Args:
            persistence: Load/save port. Without one the store is memory-only.
            id_factory: Identifier generator passed to the reducer
            seed: State used when nothing can be loaded. Defaults to seed_state()
        """
        self.persistence = persistence
        self.id_factory = id_factory
        self._listeners: list[Listener] = []
        self._state = seed if seed is not None else seed_state()
        self._hydrate()

    @property
    def state(self) -> AppState:
        """The current state."""
        return self._state

    def _hydrate(self) -> None:
        if self.persistence is None:
            return

        try:
            loaded = self.persistence.load()
        except Exception as e:
            logger.warning("state_load_failed_using_seed", extra={"error": str(e)})
            return

        if loaded is None:
            logger.info("state_not_found_using_seed")
            return

        self._state = reduce(self._state, SetState(state=loaded), self.id_factory)
        logger.info(
            "state_hydrated",
            extra={
                "grocery_items": len(loaded.grocery_list),
                "pantry_items": len(loaded.pantry),
            },
        )

    def dispatch(self, action: object) -> AppState:
        """Apply an action, persist the result and notify listeners.

        Args:
            action: One of the action models

        Returns:
            The new current state
        """
        new_state = reduce(self._state, action, self.id_factory)
        if new_state is self._state:
            logger.debug("action_no_op", extra={"action": getattr(action, "type", None)})
            return new_state

        self._state = new_state
        self._save(new_state)

        for listener in list(self._listeners):
            listener(new_state)

        return new_state

    def _save(self, state: AppState) -> None:
        if self.persistence is None:
            return

        try:
            self.persistence.save(state)
        except Exception as e:
            # In-memory state stays correct; only durability of this write is lost.
            logger.error("state_save_failed", extra={"error": str(e)})

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback run after every state change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Selectors ---

    def find_grocery_item(self, item_id: str) -> GroceryItem | None:
        for item in self._state.grocery_list:
            if item.id == item_id:
                return item
        return None

    def find_pantry_item(self, item_id: str) -> PantryItem | None:
        for item in self._state.pantry:
            if item.id == item_id:
                return item
        return None

    def expiring_items(
        self,
        within_days: int = DEFAULT_EXPIRING_WITHIN_DAYS,
        today: date | None = None,
    ) -> list[PantryItem]:
        """Get pantry items whose expiry date falls before today + within_days.

        Already expired items are included. Results are sorted by expiry date.
        """
        cutoff = (today or date.today()) + timedelta(days=within_days)
        expiring = [
            item
            for item in self._state.pantry
            if item.expiry_date is not None and item.expiry_date < cutoff
        ]
        return sorted(expiring, key=lambda i: i.expiry_date)  # type: ignore[arg-type, return-value]
