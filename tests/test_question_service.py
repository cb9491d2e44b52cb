"""Tests for QuestionService."""

from unittest.mock import AsyncMock

import pytest

from truthordare.core.question_service import QuestionService
from truthordare.db.models import MutationResult, Question

pytestmark = pytest.mark.asyncio


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.insert.return_value = MutationResult(
        affected_rows=1,
        insert_id=5,
        rows=[
            {
                "id": 5,
                "type": "dare",
                "question": "Sing the chorus of your favourite song",
                "user_id": 123456789012345678,
                "server_id": 987654321098765432,
                "is_approved": 0,
                "is_banned": 0,
                "is_deleted": 0,
                "created": "2026-10-19 12:00:00",
            }
        ],
    )
    return db


async def test_create_question_inserts_pending_record(mock_db):
    service = QuestionService(mock_db)

    question = await service.create_question(
        "dare", "Sing the chorus of your favourite song", "123456789012345678", "987654321098765432"
    )

    mock_db.insert.assert_awaited_once_with(
        "questions",
        {
            "type": "dare",
            "question": "Sing the chorus of your favourite song",
            "user_id": "123456789012345678",
            "server_id": "987654321098765432",
            "is_approved": False,
            "is_banned": False,
        },
        schema="core",
    )
    assert isinstance(question, Question)
    assert question.id == 5
    assert question.user_id == "123456789012345678"
    assert question.is_approved is False


@pytest.mark.parametrize(
    "type_, text, message",
    [
        ("both", "A perfectly fine question", "Unknown question type"),
        ("truth", "Why", "at least 5 characters"),
        ("truth", "x" * 501, "500 characters or less"),
    ],
)
async def test_create_question_validation(mock_db, type_, text, message):
    service = QuestionService(mock_db)

    with pytest.raises(ValueError, match=message):
        await service.create_question(type_, text, "1", "2")

    mock_db.insert.assert_not_awaited()


async def test_create_question_without_insert_id(mock_db):
    mock_db.insert.return_value = MutationResult(affected_rows=0)
    service = QuestionService(mock_db)

    with pytest.raises(RuntimeError, match="Failed to insert question"):
        await service.create_question("truth", "What is your secret?", "1", "2")


async def test_create_question_without_returned_row(mock_db):
    mock_db.insert.return_value = MutationResult(affected_rows=1, insert_id=9)
    service = QuestionService(mock_db)

    with pytest.raises(RuntimeError, match="No question returned after insert"):
        await service.create_question("truth", "What is your secret?", "1", "2")


async def test_create_question_in_database(questions_db):
    service = QuestionService(questions_db)

    first = await service.create_question("truth", "Who was your first crush?", "111", "222")
    second = await service.create_question("dare", "Do ten push-ups right now", "111", "222")

    assert (first.id, second.id) == (1, 2)
    assert first.type == "truth"
    assert first.is_approved is False and first.is_banned is False
    assert first.created is not None
    assert await questions_db.count("questions", {"server_id": "222"}, schema="core") == 2
