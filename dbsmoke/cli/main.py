"""CLI entry point for dbsmoke."""

from __future__ import annotations

import logging
import os
import sys

import docker
import fire

from dbsmoke.core.signals import setup_signal_handlers
from dbsmoke.exceptions import HarnessError
from dbsmoke.logging import configure_logging

logger = logging.getLogger(__name__)


def get_dbsmoke_class() -> type:
    """Get the DbSmoke class on demand to avoid circular imports.

    Returns
    -------
    type
        DbSmoke class
    """
    from dbsmoke.__main__ import DbSmoke

    return DbSmoke


def handle_harness_error(error: HarnessError, debug_mode: bool) -> None:
    """Abort the run and report why.

    Raises
    ------
    HarnessError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    logger.debug("Aborting on %s", type(error).__name__)
    print(f"Test run aborted: {error}", file=sys.stderr)
    sys.exit(1)


def handle_value_error(error: ValueError, debug_mode: bool) -> None:
    """Report an invalid configuration or option.

    Raises
    ------
    ValueError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print(f"Configuration error: {error}", file=sys.stderr)
    sys.exit(1)


def handle_docker_error(error: docker.errors.DockerException, debug_mode: bool) -> None:
    """Report a Docker daemon or API failure outside scenario checks.

    Raises
    ------
    docker.errors.DockerException
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print("Docker error\n", file=sys.stderr)
    print(f"  {error}\n", file=sys.stderr)
    print("This usually means:", file=sys.stderr)
    print("  - The Docker daemon is not running", file=sys.stderr)
    print("  - The current user cannot access the Docker socket", file=sys.stderr)
    sys.exit(1)


def main() -> None:
    """Entry point for the Fire CLI.

    Fire maps the public methods of DbSmoke to subcommands (``run``,
    ``list``). Every harness failure exits with status 1. Set
    ``DBSMOKE_DEBUG=1`` to get the original traceback instead.
    """
    configure_logging()
    setup_signal_handlers()

    debug_mode = os.environ.get("DBSMOKE_DEBUG") == "1"

    try:
        fire.Fire(get_dbsmoke_class()())
    except HarnessError as e:
        handle_harness_error(e, debug_mode)
    except ValueError as e:
        handle_value_error(e, debug_mode)
    except docker.errors.DockerException as e:
        handle_docker_error(e, debug_mode)
    except KeyboardInterrupt:
        if debug_mode:
            raise
        print("Interrupted", file=sys.stderr)
        sys.exit(1)
