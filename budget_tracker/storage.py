"""Local key-value storage for the budget state.

Each storage key maps to one JSON document in the data directory, so the
whole budget state lives under a single key (``budgetTrackerData`` by
default).
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .config import DATA_DIR, STORAGE_KEY
from .errors import PersistenceFailure
from .log import get_logger

logger = get_logger(__name__)


def safe_key(key: str, default: str = 'state') -> str:
    """Turn a storage key into a safe file stem.

    Example:
        >>> safe_key("budget Tracker/Data!")
        'budget_TrackerData'
    """
    cleaned = ''.join(c for c in key if c.isalnum() or c in {' ', '_', '-'})
    cleaned = cleaned.strip().replace(' ', '_')
    while '__' in cleaned:
        cleaned = cleaned.replace('__', '_')
    return cleaned.rstrip('_') or default


class StateStorage:
    """Handles reading and writing the serialized state under one key."""

    def __init__(self, data_dir: Optional[Path] = None, key: str = STORAGE_KEY):
        """Initialize storage.

        Args:
            data_dir: Optional custom directory for the state file.
                Defaults to DATA_DIR from config.
            key: Storage key naming the state document.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.key = key

    @property
    def path(self) -> Path:
        return self.data_dir / f"{safe_key(self.key)}.json"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[Dict[str, Any]]:
        """Read the stored document.

        Returns:
            The parsed JSON object, or ``None`` when nothing usable is stored.
        """
        target = self.path
        if not target.exists():
            return None
        try:
            with target.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.warning("Could not read stored state at %s: %s", target, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Stored state at %s is not an object, ignoring it", target)
            return None
        return data

    def save(self, payload: Dict[str, Any]) -> None:
        """Write the document, replacing the previous one atomically.

        Raises:
            PersistenceFailure: If the payload cannot be serialized or written.
        """
        target = self.path
        try:
            content = json.dumps(payload, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceFailure(f"Error saving data: {exc}") from exc

        temp_name: Optional[str] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding='utf-8',
                prefix=target.name + '-',
                suffix='.tmp',
                dir=target.parent,
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, target)
        except OSError as exc:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise PersistenceFailure(f"Error saving data: {exc}") from exc
        logger.debug("Saved state to %s", target)

    def clear(self) -> bool:
        """Remove the stored document. Missing files are ignored.

        Returns:
            True if a document was removed.
        """
        target = self.path
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as exc:
            raise PersistenceFailure(f"Failed to clear stored data at {target}: {exc}") from exc
        return True
