"""Test fake implementations for dependency injection testing."""

from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_mysql_client import FakeMysqlClient
from tests.fakes.fake_runtime import FakeRuntime

__all__ = ["FakeClock", "FakeMysqlClient", "FakeRuntime"]
