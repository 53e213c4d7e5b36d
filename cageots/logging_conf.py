"""Logging setup shared by the CLI and the API."""
import logging
import sys

from cageots.config import config
from cageots.parse.redact import redact_string

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "cageots"


class RedactingFilter(logging.Filter):
    """Masks passwords, session cookies and e-mail addresses in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        record.msg = redact_string(message)
        record.args = None
        return True


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once."""
    root = logging.getLogger()
    root.setLevel((level or config.LOG_LEVEL).upper())

    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RedactingFilter())
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
