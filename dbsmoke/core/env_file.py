"""Env-file configuration sink consumed at container start."""

import logging
import os
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)


class EnvFile:
    """Newline-separated ``KEY=VALUE`` file holding one scenario's settings.

    The file is overwritten before every container start and removed when
    the run ends.

    Parameters
    ----------
    path : str | Path
        Location of the env file
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, payload: Mapping[str, str]) -> None:
        """Overwrite the file with the given settings.

        An empty payload leaves a single blank line in the file.

        Parameters
        ----------
        payload : Mapping[str, str]
            Environment variable names and values

        Raises
        ------
        ValueError
            If a key is empty or contains ``=`` or a newline, or a value
            contains a newline
        """
        lines = []
        for key, value in payload.items():
            if not key or "=" in key or "\n" in key:
                raise ValueError(f"Invalid env file key: {key!r}")
            if "\n" in value:
                raise ValueError(f"Env file value for {key} must be a single line")
            lines.append(f"{key}={value}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(lines) + "\n")
        logger.debug("Wrote %d setting(s) to %s", len(lines), self.path)

    def read(self) -> dict[str, str]:
        """Parse the file back into a mapping.

        Blank lines and ``#`` comments are skipped. Each remaining line is
        split on its first ``=``; values are kept verbatim. A bare name
        without ``=`` takes its value from the current process environment
        and is dropped when unset there, as with ``docker run --env-file``.

        Returns
        -------
        dict[str, str]
            Parsed settings, or an empty dict if the file does not exist
        """
        if not self.path.exists():
            return {}

        payload: dict[str, str] = {}
        for line in self.path.read_text().splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep:
                if key in os.environ:
                    payload[key] = os.environ[key]
                continue
            payload[key] = value

        return payload

    def remove(self) -> None:
        """Delete the file if it exists."""
        self.path.unlink(missing_ok=True)
        logger.debug("Removed env file %s", self.path)
