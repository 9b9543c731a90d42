"""Configuration parsing for hot reloading."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from hotreload_core.errors import ConfigError
from hotreload_core.expander import expand_deep
from hotreload_core.models import WatchTargetConfig
from hotreload_core.watchers import DEFAULT_WATCH_INTERVAL_MS

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_LISTEN = "127.0.0.1:4566"


@dataclass
class HotReloadingConfig:
    """The ``[hot_reloading]`` table."""

    enabled: bool = False
    """Whether file watching is active at all."""

    watch_interval_ms: int = DEFAULT_WATCH_INTERVAL_MS
    """Debounce interval per watched directory."""

    lambda_paths: list[WatchTargetConfig] = field(default_factory=list)
    """Functions whose code directories are watched."""

    runtime_file_extensions: dict[str, list[str]] = field(default_factory=dict)
    """Overrides merged over the built-in runtime extension table."""

    default_file_extensions: list[str] | None = None
    """Fallback extensions for unknown runtimes."""


@dataclass
class WaitForReadyConfig:
    """The ``[wait_for_ready]`` table."""

    max_attempts: int = 30
    retry_delay_ms: int = 2000


@dataclass
class HotReloadSettings:
    """Everything loaded from a config file."""

    project_root: Path
    """Directory relative lambda paths resolve against."""

    debug: bool = False
    environment: dict[str, str] = field(default_factory=dict)
    wait_for_ready: WaitForReadyConfig = field(default_factory=WaitForReadyConfig)
    hot_reloading: HotReloadingConfig = field(default_factory=HotReloadingConfig)

    @property
    def port(self) -> int:
        """Gateway port taken from GATEWAY_LISTEN."""
        return parse_gateway_port(self.environment)


def parse_gateway_port(environment: dict[str, str]) -> int:
    """Extract the gateway port from a ``host:port`` GATEWAY_LISTEN value.

    Raises:
        ConfigError: If the port is not a number between 1 and 65535
    """
    listen = environment.get("GATEWAY_LISTEN") or DEFAULT_GATEWAY_LISTEN
    raw = listen.rsplit(":", 1)[-1].strip()
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"Invalid port number: {raw!r}. Port must be between 1 and 65535.") from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"Invalid port number: {port}. Port must be between 1 and 65535.")
    return port


def _table(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a table, got {type(value).__name__}")
    return value


def _bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _int(raw: dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    return value


def _str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
    return list(value)


def _parse_lambda_path(raw: Any, index: int) -> WatchTargetConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"lambda_paths[{index}] must be a table, got {type(raw).__name__}")
    missing = [key for key in ("function_name", "local_path", "handler", "runtime") if key not in raw]
    if missing:
        raise ConfigError(f"lambda_paths[{index}] is missing {', '.join(missing)}")
    for key in ("function_name", "local_path", "handler", "runtime"):
        if not isinstance(raw[key], str):
            raise ConfigError(f"lambda_paths[{index}].{key} must be a string, got {raw[key]!r}")
    extensions = raw.get("file_extensions")
    return WatchTargetConfig(
        function_name=raw["function_name"],
        local_path=raw["local_path"],
        handler=raw["handler"],
        runtime=raw["runtime"],
        file_extensions=(
            _str_list(extensions, f"lambda_paths[{index}].file_extensions") if extensions is not None else None
        ),
    )


def parse_hot_reloading(raw: dict[str, Any]) -> HotReloadingConfig:
    """Parse the ``[hot_reloading]`` table.

    Raises:
        ConfigError: If a value has the wrong type
    """
    lambda_paths = raw.get("lambda_paths", [])
    if not isinstance(lambda_paths, list):
        raise ConfigError(f"'lambda_paths' must be an array of tables, got {type(lambda_paths).__name__}")
    overrides = _table(raw, "runtime_file_extensions")
    defaults = raw.get("default_file_extensions")
    return HotReloadingConfig(
        enabled=_bool(raw, "enabled", False),
        # 0 or a missing value means "use the default"
        watch_interval_ms=_int(raw, "watch_interval_ms", 0) or DEFAULT_WATCH_INTERVAL_MS,
        lambda_paths=[_parse_lambda_path(p, i) for i, p in enumerate(lambda_paths)],
        runtime_file_extensions={
            k: _str_list(v, f"runtime_file_extensions.{k}") for k, v in overrides.items()
        },
        default_file_extensions=(
            _str_list(defaults, "default_file_extensions") if defaults is not None else None
        ),
    )


def load_config(path: str | Path) -> HotReloadSettings:
    """Load hot-reload settings from a TOML file.

    Args:
        path: Path to TOML config file

    Returns:
        Parsed settings; relative lambda paths resolve against the file's directory

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file cannot be parsed or holds invalid entries
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Run 'localstack-hotreload' without arguments to auto-create a default config."
        )

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    wait_raw = _table(raw, "wait_for_ready")
    settings = HotReloadSettings(
        project_root=path.resolve().parent,
        debug=_bool(raw, "debug", False),
        environment={k: str(v) for k, v in expand_deep(_table(raw, "environment")).items()},
        wait_for_ready=WaitForReadyConfig(
            max_attempts=_int(wait_raw, "max_attempts", 30),
            retry_delay_ms=_int(wait_raw, "retry_delay_ms", 2000),
        ),
        hot_reloading=parse_hot_reloading(_table(raw, "hot_reloading")),
    )

    logger.debug(
        f"Loaded {path}: hot reloading {'enabled' if settings.hot_reloading.enabled else 'disabled'}, "
        f"{len(settings.hot_reloading.lambda_paths)} lambda path(s)"
    )
    return settings
