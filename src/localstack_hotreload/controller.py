"""Non-UI controller for LocalStack hot reloading. Primary embed point."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from hotreload_core.config import HotReloadSettings, load_config
from hotreload_core.errors import BackendAlreadyRunning, BackendNotRunning, ConfigError
from hotreload_core.events import EventChannel
from hotreload_core.expander import expand, find_unresolved
from hotreload_core.file_watcher import HotReloadWatcher
from hotreload_core.models import CodeUpdatedEvent, ConfigValidationResult
from hotreload_core.notifier import NoOpNotifier, Notifier
from hotreload_core.readiness import ReadinessProbe
from hotreload_core.targets import build_watch_targets
from hotreload_core.watchers import ReloadWatcher

logger = logging.getLogger(__name__)


class HotReloadController:
    """Wires the readiness probe, the watcher and event delivery to an event loop.

    Stable methods: attach(), detach(), wait_until_ready(), ensure_running(),
    ensure_not_running(), validate_config(), on_code_updated.
    """

    def __init__(
        self,
        config_path: str | Path,
        notifier: Notifier | None = None,
        enable_watcher: bool = True,
        probe: ReadinessProbe | None = None,
        channel_size: int = 256,
    ):
        """Initialize controller.

        Args:
            config_path: Path to TOML config
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            enable_watcher: If True, watching auto-starts on attach(). If False, host controls lifecycle.
            probe: Readiness probe (defaults to one against localhost)
            channel_size: Capacity of the pending change event channel
        """
        self.config_path = Path(config_path)
        self.notifier = notifier or NoOpNotifier()
        self.enable_watcher = enable_watcher
        self.probe = probe or ReadinessProbe()
        self.channel: EventChannel[CodeUpdatedEvent] = EventChannel(maxsize=channel_size)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watcher: ReloadWatcher | None = None

        try:
            self.settings: HotReloadSettings = load_config(self.config_path)
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

        # Outbound event (host wires this); invoked on the loop thread
        self.on_code_updated: Callable[[CodeUpdatedEvent], None] | None = None

    @property
    def port(self) -> int:
        return self.settings.port

    @property
    def is_attached(self) -> bool:
        return self._loop is not None

    @property
    def watcher(self) -> ReloadWatcher | None:
        return self._watcher

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to event loop and start watching if enabled.

        Idempotent - guards against double-attach and non-running loop.
        """
        if self._loop is not None:
            return

        if not loop.is_running():
            raise RuntimeError(
                "Event loop must be running before attach(). "
                "Call attach() from within a coroutine or after the loop started."
            )

        self._loop = loop

        if self.enable_watcher:
            self.start_watching()

    def start_watching(self) -> bool:
        """Start the file watcher (requires attach()). Returns whether it is active."""
        if self._loop is None:
            raise RuntimeError("Controller not attached to event loop. Call attach() first.")

        hot = self.settings.hot_reloading
        if not hot.enabled:
            logger.debug("Hot reloading disabled in config")
            return False

        if self._watcher is None:
            self._watcher = HotReloadWatcher(
                hot,
                sink=self._on_file_change,
                project_root=self.settings.project_root,
            )

        try:
            active = self._watcher.start_watching()
        except Exception as e:
            logger.error(f"Failed to start hot reload watcher: {e}")
            self.notifier.error(f"Hot reload watcher initialization failed: {e}")
            return False

        if active:
            self.notifier.info(f"Hot reloading is active ({len(self._watcher.watched_paths)} director(ies))")
        else:
            self.notifier.warning("Hot reloading enabled but no Lambda directories could be watched")
        return active

    def detach(self) -> None:
        """Stop watching and cleanup."""
        if self._watcher:
            try:
                self._watcher.stop_watching()
            except Exception as e:
                logger.error(f"Error stopping hot reload watcher: {e}")
            self._watcher = None
            self.notifier.info("Hot reloading stopped")
        self.channel.clear()
        self._loop = None

    def _on_file_change(self, event: CodeUpdatedEvent) -> None:
        """Handle accepted changes from the watchdog thread.

        Never blocks: the event is queued and delivery is scheduled on the loop.
        """
        self.channel.publish(event)
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning(f"Change for '{event.function_name}' queued - controller not attached")
            return
        loop.call_soon_threadsafe(self._dispatch_pending)

    def _dispatch_pending(self) -> None:
        """Deliver queued events to on_code_updated (runs on the loop thread)."""
        for event in self.channel.drain():
            if self.on_code_updated is None:
                continue
            try:
                self.on_code_updated(event)
            except Exception as e:
                logger.exception(f"Error in code updated callback for '{event.function_name}': {e}")

    async def wait_until_ready(self, cancel_event: asyncio.Event | None = None) -> int:
        """Wait for the backend health endpoint using the configured retry policy.

        Raises:
            ReadinessTimeout: If the backend never became healthy
            ReadinessCancelled: If cancel_event was set
        """
        wait = self.settings.wait_for_ready
        logger.debug(
            f"Waiting for LocalStack to be ready "
            f"(max_attempts: {wait.max_attempts}, retry_delay_ms: {wait.retry_delay_ms})"
        )
        attempts = await self.probe.wait_for_ready(
            self.port,
            wait.max_attempts,
            wait.retry_delay_ms,
            cancel_event=cancel_event,
        )
        self.notifier.info("LocalStack is ready")
        return attempts

    async def ensure_running(self) -> None:
        """Raise BackendNotRunning unless the backend answers its health check."""
        if not await self.probe.is_healthy(self.port):
            raise BackendNotRunning(
                f"LocalStack is not running on port {self.port}.\n"
                "Start it manually with: localstack start"
            )
        self.notifier.info("LocalStack is already running")

    async def ensure_not_running(self) -> None:
        """Raise BackendAlreadyRunning if something already answers on the port."""
        if await self.probe.is_healthy(self.port):
            raise BackendAlreadyRunning(
                f"LocalStack is already running on port {self.port}.\n"
                "To stop the existing instance, run: localstack stop\n"
                "Or configure a different port using the GATEWAY_LISTEN environment variable."
            )

    def reload_config(self) -> None:
        """Reload configuration from disk; takes effect on the next start."""
        try:
            self.settings = load_config(self.config_path)
            self.notifier.info("Configuration reloaded")
        except Exception as e:
            logger.error(f"Failed to reload config: {e}")
            self.notifier.error(f"Failed to reload config: {e}")

    def validate_config(self) -> ConfigValidationResult:
        """Validate configuration and return structured results.

        Hosts display results, they do not re-derive them.
        """
        hot = self.settings.hot_reloading
        result = ConfigValidationResult(
            targets_configured=len(hot.lambda_paths),
            watchers_active=len(self._watcher.watched_paths) if self._watcher else 0,
        )

        try:
            self.settings.port
        except ConfigError as e:
            result.errors.append(str(e))

        if not hot.enabled:
            return result

        if not hot.lambda_paths:
            result.warnings.append("Hot reloading enabled but no Lambda paths configured")
            return result

        for config in hot.lambda_paths:
            for field_name in ("function_name", "local_path", "handler"):
                for name in find_unresolved(expand(getattr(config, field_name))):
                    result.warnings.append(
                        f"Unresolved variable '{name}' in {field_name} of '{config.function_name}'"
                    )

        targets = build_watch_targets(
            hot.lambda_paths,
            self.settings.project_root,
            hot.runtime_file_extensions,
            hot.default_file_extensions,
        )
        for target in targets:
            if not target.local_path.exists():
                result.warnings.append(f"Lambda path does not exist: {target.local_path} ({target.function_name})")
            elif not target.local_path.is_dir():
                result.warnings.append(f"Lambda path is not a directory: {target.local_path} ({target.function_name})")

        return result
