"""Pytest configuration and fixtures for dbsmoke tests."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from dbsmoke.core.config import HarnessConfig
from dbsmoke.core.env_file import EnvFile
from dbsmoke.core.runner import ScenarioRunner
from dbsmoke.core.waiter import Waiter
from tests.fakes import FakeClock, FakeMysqlClient, FakeRuntime


@pytest.fixture(autouse=True)
def clean_dbsmoke_env() -> Generator[None, None, None]:
    """Remove DBSMOKE_* variables so host settings don't leak into tests.

    Yields
    ------
    None
        Control back to test after clearing the variables
    """
    saved = {key: value for key, value in os.environ.items() if key.startswith("DBSMOKE_")}
    for key in saved:
        del os.environ[key]

    yield

    for key in [key for key in os.environ if key.startswith("DBSMOKE_")]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def harness_config(tmp_path: Path) -> HarnessConfig:
    """Harness settings pointing all temporary files into tmp_path."""
    return HarnessConfig(
        env_file=str(tmp_path / "mariadb_alpine_test_env"),
        volume_root=str(tmp_path),
        ready_attempts=5,
        ready_interval=1.0,
        settle_seconds=3.0,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def fake_client() -> FakeMysqlClient:
    return FakeMysqlClient()


@pytest.fixture
def make_runner(harness_config: HarnessConfig, fake_clock: FakeClock):
    """Factory building a ScenarioRunner on fakes with an instant clock.

    Returns
    -------
    callable
        Function taking (runtime, client) and returning a ScenarioRunner
    """

    def _make(runtime: FakeRuntime, client: FakeMysqlClient) -> ScenarioRunner:
        return ScenarioRunner(
            harness_config,
            runtime,
            client,
            env_file=EnvFile(harness_config.env_file),
            waiter=Waiter(
                harness_config.ready_attempts,
                harness_config.ready_interval,
                clock=fake_clock,
                sleep=fake_clock.sleep,
            ),
            sleep=fake_clock.sleep,
        )

    return _make


@pytest.fixture
def runner(make_runner, fake_runtime: FakeRuntime, fake_client: FakeMysqlClient) -> ScenarioRunner:
    return make_runner(fake_runtime, fake_client)
