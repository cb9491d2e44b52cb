"""Question submission workflow."""

from __future__ import annotations

import logging
from typing import Optional

from truthordare.db.models import Question
from truthordare.db.service import DatabaseOperations
from truthordare.utils.validators import validate_question_text, validate_question_type

logger = logging.getLogger(__name__)

QUESTIONS_TABLE = "questions"
QUESTIONS_SCHEMA = "core"


class QuestionService:
    """Stores user-submitted questions pending moderation."""

    def __init__(self, db: DatabaseOperations, schema: Optional[str] = QUESTIONS_SCHEMA):
        self._db = db
        self._schema = schema

    async def create_question(self, type: str, question: str, user_id: str, server_id: str) -> Question:
        """
        Validate and store a new question, returning the stored record.

        Raises ValueError for a bad type or text length.
        """
        validate_question_type(type)
        validate_question_text(question)

        result = await self._db.insert(
            QUESTIONS_TABLE,
            {
                "type": type,
                "question": question,
                "user_id": user_id,
                "server_id": server_id,
                "is_approved": False,
                "is_banned": False,
            },
            schema=self._schema,
        )

        if not result.insert_id:
            raise RuntimeError("Failed to insert question")

        if not result.rows:
            raise RuntimeError("No question returned after insert")

        logger.info("Question %d submitted by user %s on server %s", result.insert_id, user_id, server_id)
        return Question(**result.rows[0])
