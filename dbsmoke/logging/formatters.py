"""Logging formatters for scenario output."""

import logging


class StreamFormatter(logging.Formatter):
    """Logging formatter that prefixes records with their scenario name.

    Records logged with ``extra={"scenario": name}`` are rendered as
    ``[name] message``. Records without a scenario are left untouched.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scenario prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional scenario prefix
        """
        msg = super().format(record)
        scenario = getattr(record, "scenario", None)

        if scenario:
            return f"[{scenario}] {msg}"

        return msg
