"""CLI argument parsing helpers."""

from __future__ import annotations


def parse_scenario_names(only: str | list | tuple | None) -> list[str] | None:
    """Parse the ``--only`` option into scenario names.

    Fire turns ``--only a,b`` into a tuple and ``--only a`` into a string,
    so both forms are accepted.

    Parameters
    ----------
    only : str | list | tuple | None
        Raw option value

    Returns
    -------
    list[str] | None
        Scenario names, or None to run everything

    Raises
    ------
    ValueError
        If the value has an unsupported type
    """
    if only is None:
        return None

    if isinstance(only, str):
        names = [part.strip() for part in only.split(",")]
    elif isinstance(only, (list, tuple)):
        names = [str(part).strip() for part in only]
    else:
        raise ValueError(f"--only must be a scenario name or comma-separated list, got: {only!r}")

    return [name for name in names if name] or None
