"""hotreload-core: runtime-aware hot-reload watching for emulated functions."""

__version__ = "0.1.0"

# Config
from hotreload_core.config import (
    HotReloadingConfig,
    HotReloadSettings,
    WaitForReadyConfig,
    load_config,
    parse_gateway_port,
)

# Errors
from hotreload_core.errors import (
    BackendAlreadyRunning,
    BackendNotRunning,
    ConfigError,
    HotReloadError,
    ReadinessCancelled,
    ReadinessError,
    ReadinessTimeout,
)
from hotreload_core.events import EventChannel, OverflowPolicy

# Expansion and resolution
from hotreload_core.expander import expand, expand_deep, find_unresolved

# Watching
from hotreload_core.file_watcher import HotReloadWatcher

# Models
from hotreload_core.models import (
    CODE_UPDATED_EVENT,
    CodeUpdatedEvent,
    ConfigValidationResult,
    WatchTarget,
    WatchTargetConfig,
)
from hotreload_core.notifier import LoggingNotifier, NoOpNotifier, Notifier
from hotreload_core.readiness import HEALTH_PATH, ReadinessProbe
from hotreload_core.runtime_config import (
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_RUNTIME_FILE_EXTENSIONS,
    get_file_extensions_for_runtime,
)
from hotreload_core.targets import build_watch_targets
from hotreload_core.watchers import DEFAULT_WATCH_INTERVAL_MS, ReloadWatcher

__all__ = [
    "__version__",
    # Models
    "CODE_UPDATED_EVENT",
    "CodeUpdatedEvent",
    "ConfigValidationResult",
    "WatchTarget",
    "WatchTargetConfig",
    # Expansion and resolution
    "expand",
    "expand_deep",
    "find_unresolved",
    "DEFAULT_FILE_EXTENSIONS",
    "DEFAULT_RUNTIME_FILE_EXTENSIONS",
    "get_file_extensions_for_runtime",
    "build_watch_targets",
    # Watching
    "DEFAULT_WATCH_INTERVAL_MS",
    "EventChannel",
    "HotReloadWatcher",
    "OverflowPolicy",
    "ReloadWatcher",
    # Readiness
    "HEALTH_PATH",
    "ReadinessProbe",
    # Config
    "HotReloadSettings",
    "HotReloadingConfig",
    "WaitForReadyConfig",
    "load_config",
    "parse_gateway_port",
    # Notifications
    "LoggingNotifier",
    "NoOpNotifier",
    "Notifier",
    # Errors
    "BackendAlreadyRunning",
    "BackendNotRunning",
    "ConfigError",
    "HotReloadError",
    "ReadinessCancelled",
    "ReadinessError",
    "ReadinessTimeout",
]
