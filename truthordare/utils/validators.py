"""Validation helpers used across the project."""

from __future__ import annotations

import re
from typing import Any, Final, Iterable

from truthordare.db.exceptions import InvalidIdentifierError

# Table, schema and column names. ASCII letters, digits and underscores only.
IDENTIFIER_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_]+")

QUESTION_MIN_LENGTH: Final[int] = 5
QUESTION_MAX_LENGTH: Final[int] = 500
QUESTION_TYPES: Final[frozenset[str]] = frozenset({"truth", "dare"})


def is_valid_identifier(name: Any) -> bool:
    """Checks if *name* may be embedded in SQL text as an identifier."""
    if not isinstance(name, str):
        return False
    return IDENTIFIER_PATTERN.fullmatch(name) is not None


def validate_identifier(name: Any, kind: str = "identifier") -> str:
    """
    Return *name* unchanged if it is a safe identifier.

    Raises InvalidIdentifierError otherwise. Nothing is stripped or escaped:
    a name that does not match exactly is rejected.
    """
    if not is_valid_identifier(name):
        raise InvalidIdentifierError(f"Invalid {kind} name: {name}")
    return name


def validate_identifiers(names: Iterable[Any], kind: str = "column") -> list[str]:
    """Validate every name in *names*, preserving order."""
    return [validate_identifier(name, kind) for name in names]


def validate_question_text(text: str) -> str:
    """Ensure a submitted question has an acceptable length."""
    if len(text) < QUESTION_MIN_LENGTH:
        raise ValueError(f"Question must be at least {QUESTION_MIN_LENGTH} characters long")
    if len(text) > QUESTION_MAX_LENGTH:
        raise ValueError(f"Question must be {QUESTION_MAX_LENGTH} characters or less")
    return text


def validate_question_type(value: str) -> str:
    """Ensure *value* is one of the supported question types."""
    if value not in QUESTION_TYPES:
        raise ValueError(f"Unknown question type: {value}")
    return value
