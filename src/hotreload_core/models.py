"""Shared data models for hotreload_core."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

CODE_UPDATED_EVENT = "localstack:hot-reload:code-updated"
"""Name of the event emitted when function code changes."""


@dataclass
class WatchTargetConfig:
    """One function entry from the ``lambda_paths`` config list.

    String fields may still contain ``${NAME}`` references.
    """

    function_name: str
    """Function name as registered with the emulator."""

    local_path: str
    """Directory holding the function code (absolute or project-relative)."""

    handler: str
    """Handler reference, e.g. ``handler.main``."""

    runtime: str
    """Runtime identifier, e.g. ``python3.12``."""

    file_extensions: list[str] | None = None
    """Explicit extensions to watch; resolved from the runtime when unset."""


@dataclass(frozen=True)
class WatchTarget:
    """A fully resolved, watchable function directory."""

    function_name: str
    local_path: Path
    handler: str
    runtime: str
    file_extensions: tuple[str, ...]

    def matches(self, path: str | Path) -> bool:
        """Check whether a changed file is relevant to this target."""
        return Path(path).suffix.lower() in self.file_extensions


@dataclass(frozen=True)
class CodeUpdatedEvent:
    """Emitted once per target when a qualifying change is accepted."""

    function_name: str
    local_path: Path
    changed_file: Path
    handler: str
    runtime: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, str]:
        return {
            "functionName": self.function_name,
            "localPath": str(self.local_path),
            "changedFile": str(self.changed_file),
            "handler": self.handler,
            "runtime": self.runtime,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ConfigValidationResult:
    """Results from startup configuration validation.

    Built by the controller, consumed by hosts for display only.
    """

    targets_configured: int = 0
    """Number of lambda_paths entries."""

    watchers_active: int = 0
    """Number of distinct directories currently watched."""

    warnings: list[str] = field(default_factory=list)
    """Config issues found (non-fatal)."""

    errors: list[str] = field(default_factory=list)
    """Config errors (should be fatal)."""
