"""Tests for identifier and question validation helpers."""

import pytest

from truthordare.db.exceptions import InvalidIdentifierError
from truthordare.utils.validators import (
    is_valid_identifier,
    validate_identifier,
    validate_identifiers,
    validate_question_text,
    validate_question_type,
)


@pytest.mark.parametrize("name", ["users", "Users", "user_settings", "t1", "_private", "A", "2024_archive"])
def test_valid_identifiers_pass(name):
    assert is_valid_identifier(name)
    assert validate_identifier(name) == name


@pytest.mark.parametrize(
    "name",
    [
        "",
        "users;",
        "users; DROP TABLE users",
        "o'brien",
        'quoted"name',
        "core.questions",
        "name--",
        "count(*)",
        "first name",
        "tab\tname",
        "users\n",
        "usérs",
        "用户",
        "`users`",
    ],
)
def test_invalid_identifiers_fail(name):
    assert not is_valid_identifier(name)
    with pytest.raises(InvalidIdentifierError):
        validate_identifier(name)


@pytest.mark.parametrize("name", [None, 42, b"users", ["users"]])
def test_non_string_identifiers_fail(name):
    with pytest.raises(InvalidIdentifierError):
        validate_identifier(name)


def test_error_message_names_kind_and_value():
    with pytest.raises(InvalidIdentifierError, match=r"^Invalid column name: bad-col$"):
        validate_identifier("bad-col", "column")


def test_invalid_identifier_is_value_error():
    with pytest.raises(ValueError):
        validate_identifier("a b", "table")


def test_validate_identifiers_preserves_order():
    assert validate_identifiers(["b", "a", "c"]) == ["b", "a", "c"]
    with pytest.raises(InvalidIdentifierError, match="Invalid column name: a.b"):
        validate_identifiers(["ok", "a.b"])


def test_question_text_length_bounds():
    assert validate_question_text("x" * 5) == "x" * 5
    assert validate_question_text("x" * 500) == "x" * 500
    with pytest.raises(ValueError, match="at least 5 characters"):
        validate_question_text("abcd")
    with pytest.raises(ValueError, match="500 characters or less"):
        validate_question_text("x" * 501)


def test_question_type():
    assert validate_question_type("truth") == "truth"
    assert validate_question_type("dare") == "dare"
    with pytest.raises(ValueError, match="Unknown question type: both"):
        validate_question_type("both")
