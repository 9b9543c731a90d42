"""Pluggable notification protocol for hotreload_core.

Allows the controller to decouple user-facing messages from logging.
Can be replaced with custom handlers for testing, embedding, or UI integration.
"""

import logging
from typing import Protocol

logger = logging.getLogger("localstack_hotreload")


class Notifier(Protocol):
    """Protocol for notifications - host can provide custom implementation."""

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...


class NoOpNotifier:
    """Silent no-op notifier - default for embedded mode."""

    def info(self, msg: str) -> None:
        pass

    def warning(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class LoggingNotifier:
    """Implementation using stdlib logging - for the CLI and development."""

    def info(self, msg: str) -> None:
        logger.info(msg)

    def warning(self, msg: str) -> None:
        logger.warning(msg)

    def error(self, msg: str) -> None:
        logger.error(msg)
