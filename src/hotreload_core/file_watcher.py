"""Hot-reload file watcher implementation using watchdog."""

import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from hotreload_core.config import HotReloadingConfig
from hotreload_core.models import CodeUpdatedEvent, WatchTarget
from hotreload_core.targets import build_watch_targets
from hotreload_core.watchers import DEFAULT_WATCH_INTERVAL_MS, EventSink

logger = logging.getLogger(__name__)


@dataclass
class _WatchEntry:
    """Registry entry for one watched directory."""

    path: Path
    targets: list[WatchTarget] = field(default_factory=list)
    last_accepted: float = 0.0
    watch: ObservedWatch | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)


class _DirectoryHandler(FileSystemEventHandler):
    """Forwards file events under one watched directory to the watcher."""

    def __init__(self, watcher: "HotReloadWatcher", entry: _WatchEntry):
        self.watcher = watcher
        self.entry = entry

    def _forward(self, event: FileSystemEvent, src_path) -> None:
        if event.is_directory:
            return
        self.watcher.handle_change(self.entry, os.fsdecode(src_path) if src_path else "")

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        self._forward(event, event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        self._forward(event, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file deletion events."""
        self._forward(event, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle renames; the destination is the file that now holds the code."""
        self._forward(event, getattr(event, "dest_path", None) or event.src_path)


class HotReloadWatcher:
    """Watches function code directories and emits debounced change events.

    One recursive watch is registered per distinct directory, however many
    functions point at it. Debouncing is per directory: a burst of edits to
    any files under it yields at most one accepted change per interval.
    Extension filters stay per function, so each accepted change is emitted
    once for every function whose extensions match the file.
    """

    def __init__(
        self,
        config: HotReloadingConfig,
        sink: EventSink,
        project_root: str | Path | None = None,
        clock: Callable[[], float] = time.monotonic,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        """Initialize watcher.

        Args:
            config: The ``[hot_reloading]`` settings
            sink: Receives accepted events; called on watchdog's thread
            project_root: Base for relative lambda paths (defaults to cwd)
            clock: Monotonic time source in seconds
            observer_factory: Builds the watchdog observer on each start
        """
        self.config = config
        self.sink = sink
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.clock = clock
        self.observer_factory = observer_factory
        self.observer: BaseObserver | None = None
        self._registry: dict[Path, _WatchEntry] = {}
        self._targets: list[WatchTarget] = []

    @property
    def is_watching(self) -> bool:
        return self.observer is not None

    @property
    def watched_paths(self) -> list[Path]:
        return list(self._registry)

    @property
    def targets(self) -> list[WatchTarget]:
        return list(self._targets)

    @property
    def interval(self) -> float:
        """Debounce interval in seconds."""
        return (self.config.watch_interval_ms or DEFAULT_WATCH_INTERVAL_MS) / 1000.0

    def start_watching(self) -> bool:
        """Start watching every configured function directory.

        Missing or non-directory paths are skipped. A no-op when disabled or
        already watching.

        Returns:
            True if at least one directory is being watched
        """
        if not self.config.enabled or self.is_watching:
            return self.is_watching

        if not self.config.lambda_paths:
            logger.debug("No Lambda paths configured for hot reloading")
            return False

        self._targets = build_watch_targets(
            self.config.lambda_paths,
            self.project_root,
            self.config.runtime_file_extensions,
            self.config.default_file_extensions,
        )
        logger.debug(f"Starting hot reload watching for {len(self._targets)} Lambda function(s)")

        observer = self.observer_factory()
        for target in self._targets:
            self._add_target(observer, target)

        if not self._registry:
            logger.debug("No existing Lambda directories to watch")
            return False

        observer.start()
        self.observer = observer
        logger.info(f"Hot reload watching started ({len(self._registry)} director(ies))")
        return True

    def _add_target(self, observer: BaseObserver, target: WatchTarget) -> None:
        path = target.local_path
        if not path.exists():
            logger.debug(f"Lambda path does not exist: {path}")
            return
        if not path.is_dir():
            logger.debug(f"Lambda path is not a directory: {path}")
            return

        entry = self._registry.get(path)
        if entry is not None:
            entry.targets.append(target)
            logger.debug(f"Reusing watch on {path} for {target.function_name}")
            return

        entry = _WatchEntry(path=path, targets=[target], last_accepted=self.clock())
        try:
            entry.watch = observer.schedule(_DirectoryHandler(self, entry), str(path), recursive=True)
        except OSError as e:
            logger.warning(f"Failed to watch {path} for {target.function_name}: {e}")
            return

        self._registry[path] = entry
        logger.debug(
            f"Started watching {path} for {target.function_name} "
            f"(extensions: {', '.join(target.file_extensions)})"
        )

    def stop_watching(self) -> None:
        """Close every watch and clear debounce state. Safe to call repeatedly."""
        observer, self.observer = self.observer, None
        if observer is not None:
            observer.unschedule_all()
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=2.0)
            logger.info("Hot reload watching stopped")

        for path in self._registry:
            logger.debug(f"Stopped watching {path}")
        self._registry.clear()

    def handle_change(self, entry: _WatchEntry, src_path: str) -> list[CodeUpdatedEvent]:
        """Filter, debounce and emit a raw file change under *entry*.

        Returns:
            The events emitted (empty if the change was ignored or suppressed)
        """
        if not src_path:
            return []

        try:
            relative = Path(src_path).relative_to(entry.path)
        except ValueError:
            relative = Path(src_path)
        if not relative.name:
            return []
        changed_file = entry.path / relative

        qualifying = [target for target in entry.targets if target.matches(changed_file)]
        if not qualifying:
            return []

        with entry.lock:
            now = self.clock()
            if now - entry.last_accepted < self.interval:
                logger.debug(f"Suppressed change within debounce interval: {changed_file}")
                return []
            entry.last_accepted = now

        logger.debug(f"File change detected: {changed_file}")
        events = [
            CodeUpdatedEvent(
                function_name=target.function_name,
                local_path=target.local_path,
                changed_file=changed_file,
                handler=target.handler,
                runtime=target.runtime,
            )
            for target in qualifying
        ]
        for event in events:
            try:
                self.sink(event)
            except Exception as e:
                logger.error(f"Failed to deliver change event for {event.function_name}: {e}")
            logger.info(f"Code updated for {event.function_name}: {changed_file.name}")
        return events
