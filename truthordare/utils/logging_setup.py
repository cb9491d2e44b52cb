"""Logging setup with secret redaction."""

from __future__ import annotations

import logging
import re
import sys
from typing import Iterable, Optional

from truthordare.config import AppSettings

REDACTED = "xxxxxxxxxxxx"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that replaces known secret values in log records.

    Matching is case-insensitive and applied to the fully formatted message,
    so secrets passed as %-style arguments are caught as well.
    """

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets: set[str] = set()
        for secret in secrets:
            self.add_secret(secret)

    def add_secret(self, value: Optional[str]) -> None:
        if value:
            self._secrets.add(value)

    def redact(self, text: str) -> str:
        # Longest first, so a secret containing another is replaced whole.
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = re.sub(re.escape(secret), REDACTED, text, flags=re.IGNORECASE)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(settings: AppSettings) -> SensitiveDataFilter:
    """Configure the root logger and attach a filter hiding the database password."""
    logging.basicConfig(
        level=settings.log_level_value,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    sensitive = SensitiveDataFilter([settings.db.password.get_secret_value()])
    for handler in logging.getLogger().handlers:
        handler.addFilter(sensitive)
    return sensitive
