"""Value assertions that abort the run on failure."""

from typing import Any

from dbsmoke.exceptions import ScenarioAssertionError


def assert_equals(actual: Any, expected: Any, message: str = "") -> None:
    """Raise ScenarioAssertionError unless ``actual == expected``."""
    if actual != expected:
        detail = f"expected {expected!r}, got {actual!r}"
        raise ScenarioAssertionError(f"{message}: {detail}" if message else detail)


def assert_not_equals(actual: Any, unexpected: Any, message: str = "") -> None:
    """Raise ScenarioAssertionError if ``actual == unexpected``."""
    if actual == unexpected:
        detail = f"did not expect {unexpected!r}"
        raise ScenarioAssertionError(f"{message}: {detail}" if message else detail)
