"""Tests for ModerationService against an in-memory questions table."""

import pytest
import pytest_asyncio

from truthordare.core import ModerationService, QuestionService
from truthordare.db.models import QueryOptions

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def seeded(questions_db):
    questions = QuestionService(questions_db)
    for server_id, text in [
        ("222", "Who was your first crush?"),
        ("222", "What is your biggest fear?"),
        ("333", "What is the last lie you told?"),
    ]:
        await questions.create_question("truth", text, "111", server_id)
    return questions_db


async def test_approve_question(seeded):
    moderation = ModerationService(seeded)

    question = await moderation.approve_question(1, "999")

    assert question.id == 1
    assert question.is_approved is True
    assert question.approved_by == "999"
    assert question.datetime_approved is not None
    assert seeded.pool.available == seeded.pool.size


async def test_ban_question(seeded):
    moderation = ModerationService(seeded)

    question = await moderation.ban_question(2, "999", "  offensive  ")

    assert question.is_banned is True
    assert question.ban_reason == "offensive"
    assert question.banned_by == "999"
    assert question.datetime_banned is not None


@pytest.mark.parametrize("reason", ["", "   "])
async def test_ban_requires_reason(seeded, reason):
    moderation = ModerationService(seeded)

    with pytest.raises(ValueError, match="Ban reason cannot be empty"):
        await moderation.ban_question(1, "999", reason)

    assert (await seeded.get("questions", {"id": 1}, schema="core"))["is_banned"] == 0


async def test_missing_question(seeded):
    moderation = ModerationService(seeded)

    with pytest.raises(LookupError, match="Question 42 not found"):
        await moderation.approve_question(42, "999")


async def test_deleted_question_cannot_be_moderated(seeded):
    await seeded.update("questions", {"is_deleted": True}, {"id": 3}, schema="core")
    moderation = ModerationService(seeded)

    with pytest.raises(LookupError):
        await moderation.ban_question(3, "999", "spam")


async def test_list_pending(seeded):
    moderation = ModerationService(seeded)
    await moderation.approve_question(1, "999")

    pending = await moderation.list_pending()
    assert [q.id for q in pending] == [2, 3]

    on_server = await moderation.list_pending(server_id="222")
    assert [q.id for q in on_server] == [2]

    page = await moderation.list_pending(options=QueryOptions(limit=1, offset=1))
    assert [q.id for q in page] == [3]
