"""Data persistence for GrociSmart.

The whole AppState is stored as one JSON document. JSON files are the default
backend, SQLite is available as an alternative key-value store.
Use create_state_store() to get the appropriate backend based on configuration.
"""

import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .models import AppState

logger = logging.getLogger(__name__)

STATE_KEY = "grociSmartState"


class PersistenceError(Exception):
    """Raised when persisted state cannot be read or written."""


class BackendType(str, Enum):
    """Data storage backend types."""

    JSON = "json"
    SQLITE = "sqlite"


class StatePersistence(Protocol):
    """Load/save port consumed by the state store."""

    def load(self) -> AppState | None: ...
    def save(self, state: AppState) -> None: ...


def state_to_document(state: AppState) -> dict[str, Any]:
    """Serialize state into its JSON document layout (ISO dates, camelCase keys)."""
    return state.model_dump(mode="json", by_alias=True)


def state_from_document(data: Any) -> AppState:
    """Rebuild state from a decoded JSON document.

    Raises:
        PersistenceError: If the document does not describe a valid state
    """
    try:
        return AppState.model_validate(data)
    except ValidationError as e:
        raise PersistenceError(f"Invalid state document: {e}") from e


class JSONStateStore:
    """Manages JSON file persistence for the application state."""

    def __init__(self, data_dir: Path | None = None):
        """Initialize JSON state store.

        Args:
            data_dir: Directory for the state file. Defaults to ./data
        """
        self.data_dir = data_dir or Path.cwd() / "data"
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Path to the state document."""
        return self.data_dir / "state.json"

    def load(self) -> AppState | None:
        """Load the persisted state.

        Returns:
            AppState, or None if nothing has been saved yet

        Raises:
            PersistenceError: If the file is unreadable or corrupt
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

        return state_from_document(data)

    def save(self, state: AppState) -> None:
        """Replace the persisted state with ``state``.

        The document is written to a temporary file first and moved into
        place, so a failed write never truncates the previous state.
        """
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state_to_document(state), f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

        logger.debug("state_saved", extra={"path": str(self.path)})


def create_state_store(
    backend: BackendType = BackendType.JSON,
    data_dir: Path | None = None,
    db_path: Path | None = None,
) -> StatePersistence:
    """Create a state store with the specified backend.

    Args:
        backend: Which backend to use (json or sqlite)
        data_dir: Directory for data files (used by JSON backend, also used
                  as base path for SQLite if db_path not specified)
        db_path: Path to SQLite database file (only used by SQLite backend)

    Returns:
        A JSONStateStore or SQLiteStateStore instance

    Example:
        # Use JSON backend (default)
        store = create_state_store()

        # Use SQLite with custom path
        store = create_state_store(
            BackendType.SQLITE,
            db_path=Path("./my_data/grocismart.db")
        )
    """
    if backend == BackendType.SQLITE:
        from .sqlite_store import SQLiteStateStore

        if db_path is None and data_dir is not None:
            db_path = data_dir / "grocismart.db"

        return SQLiteStateStore(db_path=db_path)
    else:
        return JSONStateStore(data_dir=data_dir)
