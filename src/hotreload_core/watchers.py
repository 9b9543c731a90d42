"""Abstract watcher protocol for hot-reload watching implementations."""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from hotreload_core.models import CodeUpdatedEvent

DEFAULT_WATCH_INTERVAL_MS = 700
"""Default debounce interval for file change detection (milliseconds)."""

EventSink = Callable[[CodeUpdatedEvent], None]
"""Receives accepted change events. Must not block."""


class ReloadWatcher(Protocol):
    """Protocol for hot-reload watcher implementations."""

    def start_watching(self) -> bool:
        """Start watching. Returns whether the watcher is active."""
        ...

    def stop_watching(self) -> None:
        """Stop watching and release every watch handle."""
        ...

    @property
    def is_watching(self) -> bool:
        """Whether watches are currently active."""
        ...

    @property
    def watched_paths(self) -> list[Path]:
        """Directories with an active watch."""
        ...
