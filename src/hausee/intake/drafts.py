"""Local draft persistence for in-progress wizards.

Drafts live in a string key-value store under a fixed key, scoped to the
device rather than the account. A missing or unreadable draft is treated as
"no draft" and never raised.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from hausee.intake.models import WizardState

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "agentMatchingForm"


@runtime_checkable
class DraftStore(Protocol):
    """Protocol for a string key-value store."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryDraftStore:
    """In-memory dict store. Suitable for tests and single-process use."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileDraftStore:
    """Stores each key as a JSON file in a directory."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self._dir / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def save_draft(store: DraftStore, key: str, state: WizardState) -> bool:
    """Overwrite the draft with ``state``. Submitted states are never saved."""
    if state.is_submitted:
        return False
    store.set_item(key, state.model_dump_json(by_alias=True))
    return True


def load_draft(store: DraftStore, key: str) -> WizardState | None:
    """Rehydrate a draft, or return None if absent, unreadable or malformed."""
    try:
        raw = store.get_item(key)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Discarding unreadable draft %r: %s", key, exc)
        return None
    if not raw:
        return None
    try:
        state = WizardState.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Discarding malformed draft %r: %s", key, exc.error_count())
        return None
    if state.is_submitted:
        logger.warning("Discarding submitted draft %r", key)
        return None
    return state


def clear_draft(store: DraftStore, key: str) -> None:
    store.remove_item(key)
