"""CLI entry point for localstack-hotreload: auto-generates default config and watches."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from hotreload_core.errors import HotReloadError
from hotreload_core.models import CodeUpdatedEvent
from hotreload_core.notifier import LoggingNotifier
from localstack_hotreload import __version__
from localstack_hotreload.controller import HotReloadController

logger = logging.getLogger(__name__)

# Default config template for a Python Lambda project
DEFAULT_CONFIG_TEMPLATE = """\
# Auto-generated hotreload.toml for localstack-hotreload

debug = false

[environment]
GATEWAY_LISTEN = "127.0.0.1:4566"

[wait_for_ready]
max_attempts = 30
retry_delay_ms = 2000

[hot_reloading]
enabled = true
watch_interval_ms = 700

[[hot_reloading.lambda_paths]]
function_name = "my-function"
local_path = "lambda"
handler = "handler.main"
runtime = "python3.12"
"""


def create_default_config(config_path: Path) -> bool:
    """
    Create a default hotreload.toml if it doesn't exist.

    Args:
        config_path: Path where config should be created

    Returns:
        True if config was created, False if it already exists

    Raises:
        PermissionError: If unable to write to the directory
        OSError: If other file system errors occur
    """
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE)
    return True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="localstack-hotreload",
        description="Watch Lambda code directories and signal LocalStack hot reloads.",
        epilog="Examples:\n"
        "  localstack-hotreload                        # Auto-create hotreload.toml and watch\n"
        "  localstack-hotreload --config dev.toml      # Use custom config\n"
        "  localstack-hotreload --wait-ready           # Wait for LocalStack health first\n"
        "  localstack-hotreload --version              # Show version",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c",
        "--config",
        default="hotreload.toml",
        help="Path to config file (default: hotreload.toml)",
    )

    parser.add_argument(
        "--wait-ready",
        action="store_true",
        help="Wait for the LocalStack health endpoint before watching",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def configure_logging(debug: bool) -> None:
    """Set up console logging for the CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    level = logging.DEBUG if debug else logging.INFO
    for name in ("hotreload_core", "localstack_hotreload"):
        logging.getLogger(name).setLevel(level)


def print_event(event: CodeUpdatedEvent) -> None:
    print(f"[localstack:hot-reload] Code updated for {event.function_name}: {event.changed_file.name}")


async def run(controller: HotReloadController, wait_ready: bool, stop_event: asyncio.Event | None = None) -> int:
    """Watch until stop_event is set (or forever).

    Returns:
        Process exit code
    """
    stop_event = stop_event or asyncio.Event()

    if wait_ready:
        await controller.wait_until_ready(cancel_event=stop_event)

    controller.on_code_updated = print_event
    controller.attach(asyncio.get_running_loop())
    try:
        if controller.watcher is None or not controller.watcher.is_watching:
            print("Nothing to watch - check hot_reloading settings", file=sys.stderr)
            return 1
        await stop_event.wait()
    finally:
        controller.detach()
    return 0


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for localstack-hotreload CLI.

    Handles:
    - Argument parsing
    - Auto-creation of hotreload.toml
    - Config validation output
    - Watching until Ctrl+C
    - Error handling and exit codes
    """
    args = parse_args(argv)
    config_path = Path(args.config).resolve()

    try:
        if create_default_config(config_path):
            print(f"Created default config at: {config_path}")

        controller = HotReloadController(config_path, notifier=LoggingNotifier())
        configure_logging(args.debug or controller.settings.debug)

        validation = controller.validate_config()
        for warning in validation.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        if validation.errors:
            for error in validation.errors:
                print(f"Error: {error}", file=sys.stderr)
            sys.exit(1)

        sys.exit(asyncio.run(run(controller, args.wait_ready)))

    except KeyboardInterrupt:
        sys.exit(130)
    except (PermissionError, OSError) as e:
        print(f"Error: Failed to create config: {e}", file=sys.stderr)
        sys.exit(1)
    except HotReloadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
