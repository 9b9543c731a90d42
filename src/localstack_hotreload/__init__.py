"""localstack-hotreload: embeddable hot-reload watcher for LocalStack Lambdas."""

__version__ = "0.1.0"

# Public API
from localstack_hotreload.controller import HotReloadController

__all__ = [
    "__version__",
    "HotReloadController",
]
