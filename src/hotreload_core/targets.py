"""Turn raw lambda_paths entries into resolved WatchTargets."""

import logging
import os.path
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from hotreload_core.expander import expand
from hotreload_core.models import WatchTarget, WatchTargetConfig
from hotreload_core.runtime_config import (
    DEFAULT_FILE_EXTENSIONS,
    get_file_extensions_for_runtime,
    normalize_extensions,
)

logger = logging.getLogger(__name__)


def resolve_local_path(local_path: str, project_root: str | Path) -> Path:
    """Resolve an expanded path against the project root if it is relative."""
    path = Path(local_path)
    if not path.is_absolute():
        path = Path(project_root) / path
    # Collapse "." and ".." without following symlinks or requiring existence.
    return Path(os.path.normpath(path.absolute()))


def build_watch_target(
    config: WatchTargetConfig,
    project_root: str | Path,
    overrides: Mapping[str, Iterable[str]] | None = None,
    default_extensions: Iterable[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> WatchTarget:
    """Build a single WatchTarget from its config entry.

    Args:
        config: Raw entry, possibly holding variable references
        project_root: Absolute directory relative paths are resolved against
        overrides: Runtime extension overrides from config
        default_extensions: Fallback extensions for unknown runtimes
        env: Variable bindings (defaults to ``os.environ``)

    Returns:
        Resolved WatchTarget with a non-empty extension set
    """
    default = normalize_extensions(default_extensions or ()) or DEFAULT_FILE_EXTENSIONS

    if config.file_extensions is not None:
        extensions = normalize_extensions(config.file_extensions)
    else:
        extensions = normalize_extensions(
            get_file_extensions_for_runtime(config.runtime, overrides, default)
        )

    return WatchTarget(
        function_name=expand(config.function_name, env),
        local_path=resolve_local_path(expand(config.local_path, env), project_root),
        handler=expand(config.handler, env),
        runtime=config.runtime,
        file_extensions=extensions or default,
    )


def build_watch_targets(
    configs: Sequence[WatchTargetConfig],
    project_root: str | Path,
    overrides: Mapping[str, Iterable[str]] | None = None,
    default_extensions: Iterable[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> list[WatchTarget]:
    """Build one WatchTarget per config entry.

    No deduplication happens here: two functions may share a directory and
    both must be notified. The watcher deduplicates at the watch level.
    """
    targets = [
        build_watch_target(config, project_root, overrides, default_extensions, env)
        for config in configs
    ]
    for target in targets:
        logger.debug(
            f"Resolved {target.function_name} -> {target.local_path} "
            f"({', '.join(target.file_extensions)})"
        )
    return targets
