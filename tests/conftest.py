"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lambda_dir(tmp_path):
    """Create a function code directory with a handler file."""
    code = tmp_path / "lambdas" / "orders"
    code.mkdir(parents=True)
    (code / "handler.py").write_text("def main(event, context):\n    return event\n")
    return code


@pytest.fixture
def write_config(tmp_path):
    """Write a TOML config into tmp_path and return its path."""

    def _write(content: str, name: str = "hotreload.toml") -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write
