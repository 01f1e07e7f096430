"""Debounced autosave of wizard state to the draft store."""

from __future__ import annotations

import asyncio
import logging

from hausee.intake.drafts import DraftStore, save_draft
from hausee.intake.models import WizardState

logger = logging.getLogger(__name__)


class AutosaveScheduler:
    """Batches state-changed events into draft writes.

    Each event replaces the pending snapshot and restarts the delay, so a
    burst of edits produces a single write. A submitted snapshot cancels any
    pending write. Without a running event loop, or with a zero delay, writes
    happen immediately.
    Storage failures are logged and otherwise ignored.
    """

    def __init__(self, store: DraftStore, key: str, delay_seconds: float = 0.5) -> None:
        self._store = store
        self._key = key
        self._delay = delay_seconds
        self._pending: WizardState | None = None
        self._timer: asyncio.TimerHandle | None = None
        self.writes = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __call__(self, state: WizardState) -> None:
        self.notify(state)

    def notify(self, state: WizardState) -> None:
        """Record a state change and (re)schedule the write."""
        if state.is_submitted:
            self.cancel()
            return

        self._pending = state
        if self._delay <= 0:
            self.flush()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return

        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._delay, self.flush)

    def flush(self) -> None:
        """Write the pending snapshot now, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        state, self._pending = self._pending, None
        if state is None:
            return
        try:
            save_draft(self._store, self._key, state)
        except OSError as exc:
            logger.warning("Autosave of draft %r failed: %s", self._key, exc)
            return
        self.writes += 1

    def cancel(self) -> None:
        """Drop any pending write without touching the store."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
