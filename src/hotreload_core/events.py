"""Bounded, non-blocking channel between the watcher thread and consumers."""

import logging
import threading
from collections import deque
from enum import Enum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OverflowPolicy(Enum):
    """What to discard when the channel is full."""

    DROP_OLDEST = "drop_oldest"
    DROP_NEW = "drop_new"


class EventChannel(Generic[T]):
    """Thread-safe bounded queue whose publish side never blocks.

    The watcher publishes from watchdog's thread; a slow consumer only costs
    queued events (per the overflow policy), never a stalled watcher.
    """

    def __init__(self, maxsize: int = 256, overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST):
        """Initialize channel.

        Args:
            maxsize: Maximum number of queued events (must be positive)
            overflow: Policy applied when publishing into a full channel
        """
        if maxsize < 1:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.maxsize = maxsize
        self.overflow = overflow
        self.dropped = 0
        self._items: deque[T] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)

    def publish(self, event: T) -> bool:
        """Queue an event without blocking.

        Returns:
            False if the incoming event was discarded (DROP_NEW on a full channel)
        """
        with self._lock:
            if len(self._items) >= self.maxsize:
                self.dropped += 1
                if self.overflow is OverflowPolicy.DROP_NEW:
                    logger.warning("Event channel full, dropping new event")
                    return False
                self._items.popleft()
                logger.warning("Event channel full, dropped oldest event")
            self._items.append(event)
            self._not_empty.notify()
            return True

    def get(self, timeout: float | None = None) -> T | None:
        """Pop the oldest event, waiting up to *timeout* seconds.

        Returns:
            The event, or None if nothing arrived in time
        """
        with self._not_empty:
            if not self._not_empty.wait_for(lambda: self._items, timeout=timeout):
                return None
            return self._items.popleft()

    def drain(self) -> list[T]:
        """Pop every queued event in arrival order."""
        with self._lock:
            items = list(self._items)
            self._items.clear()
            return items

    def clear(self) -> None:
        """Discard queued events without delivering them."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
