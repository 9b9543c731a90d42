"""Exception hierarchy for hotreload_core."""


class HotReloadError(Exception):
    """Base class for all hot-reload errors."""


class ConfigError(HotReloadError):
    """Configuration file could not be read or holds an invalid value."""


class ReadinessError(HotReloadError):
    """Base class for readiness probe failures."""


class ReadinessTimeout(ReadinessError):
    """The backend never reported healthy within the allowed attempts."""

    def __init__(self, port: int, attempts: int):
        self.port = port
        self.attempts = attempts
        super().__init__(f"Backend on port {port} not ready after {attempts} attempt(s)")


class ReadinessCancelled(ReadinessError):
    """Readiness wait was aborted by the caller."""

    def __init__(self, port: int, attempts: int):
        self.port = port
        self.attempts = attempts
        super().__init__(f"Readiness wait for port {port} cancelled after {attempts} attempt(s)")


class BackendNotRunning(HotReloadError):
    """Health check failed where a running backend was required."""


class BackendAlreadyRunning(HotReloadError):
    """Health check succeeded where no backend was expected."""
