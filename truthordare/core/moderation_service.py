"""Moderation workflow for submitted questions."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from truthordare.db.models import QueryOptions, Question
from truthordare.db.service import DatabaseService, TransactionHandle

from .question_service import QUESTIONS_SCHEMA, QUESTIONS_TABLE

logger = logging.getLogger(__name__)


class ModerationService:
    """Approves and bans questions."""

    def __init__(self, db: DatabaseService, schema: Optional[str] = QUESTIONS_SCHEMA):
        self._db = db
        self._schema = schema

    async def approve_question(self, question_id: int, moderator_id: str) -> Question:
        """Mark a question as approved by *moderator_id*."""
        question = await self._moderate(
            question_id,
            {
                "is_approved": True,
                "approved_by": moderator_id,
                "datetime_approved": _now(),
            },
        )
        logger.info("Question %d approved by %s", question_id, moderator_id)
        return question

    async def ban_question(self, question_id: int, moderator_id: str, reason: str) -> Question:
        """Ban a question with a specific reason."""
        if not reason or not reason.strip():
            raise ValueError("Ban reason cannot be empty")
        question = await self._moderate(
            question_id,
            {
                "is_banned": True,
                "ban_reason": reason.strip(),
                "banned_by": moderator_id,
                "datetime_banned": _now(),
            },
        )
        logger.info("Question %d banned by %s", question_id, moderator_id)
        return question

    async def list_pending(
        self,
        server_id: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> List[Question]:
        """List questions still waiting for a moderation decision."""
        conditions: Dict[str, Any] = {"is_approved": False, "is_banned": False, "is_deleted": False}
        if server_id is not None:
            conditions["server_id"] = server_id
        rows = await self._db.list(QUESTIONS_TABLE, conditions, options, schema=self._schema)
        return [Question(**row) for row in rows]

    async def _moderate(self, question_id: int, changes: Dict[str, Any]) -> Question:
        async def apply(tx: TransactionHandle) -> Optional[Dict[str, Any]]:
            key = {"id": question_id, "is_deleted": False}
            result = await tx.update(QUESTIONS_TABLE, changes, key, schema=self._schema)
            if result.affected_rows == 0:
                return None
            return await tx.get(QUESTIONS_TABLE, {"id": question_id}, schema=self._schema)

        row = await self._db.transaction(apply)
        if row is None:
            raise LookupError(f"Question {question_id} not found")
        return Question(**row)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
