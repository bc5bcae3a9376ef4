"""Data types describing scenarios and the credentials they run with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Mapping, Union

if TYPE_CHECKING:
    from dbsmoke.core.runner import ScenarioRunner
    from dbsmoke.services.docker_runtime import DockerRuntime


@dataclass(frozen=True)
class Credentials:
    """Credentials used by the database client.

    Attributes
    ----------
    root_password : str
        Root password; empty means "no password"
    user : str | None
        Application user that replaces root when set
    password : str
        Password of the application user
    """

    root_password: str = ""
    user: str | None = None
    password: str = ""

    @property
    def login(self) -> str:
        return self.user or "root"

    @property
    def secret(self) -> str:
        return self.password if self.user else self.root_password


@dataclass
class ScenarioContext:
    """State handed to a lifecycle check while its container is up."""

    runner: ScenarioRunner
    scenario: str
    credentials: Credentials


Check = Callable[[ScenarioContext], None]

EnvSource = Union[Mapping[str, str], Callable[["DockerRuntime"], Mapping[str, str]]]


@dataclass(frozen=True)
class Lifecycle:
    """One container start/check/teardown cycle within a scenario.

    Attributes
    ----------
    label : str
        Human readable description logged before the start
    check : Check
        Assertions to run once the container has been started
    env : EnvSource
        Settings written to the env file, or a callable computing them from
        the runtime (e.g. when a value depends on the host network)
    root_password : str | None
        Value forwarded as MYSQL_ROOT_PASSWORD. None means the server
        generates one that must be scraped from the container log.
    user : str | None
        Application user the client authenticates as
    password : str
        Application user password
    use_volume : bool
        Mount the scenario's persistent volume at the data directory
    """

    label: str
    check: Check
    env: EnvSource = field(default_factory=dict)
    root_password: str | None = ""
    user: str | None = None
    password: str = ""
    use_volume: bool = False

    def resolve_env(self, runtime: DockerRuntime) -> dict[str, str]:
        source = self.env(runtime) if callable(self.env) else self.env
        return dict(source)


@dataclass(frozen=True)
class Scenario:
    """Named end-to-end case made of one or more lifecycles."""

    name: str
    description: str
    lifecycles: tuple[Lifecycle, ...]

    @property
    def uses_volume(self) -> bool:
        return any(lifecycle.use_volume for lifecycle in self.lifecycles)
