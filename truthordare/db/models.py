import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

QuestionType = Literal["truth", "dare"]

Record = Dict[str, Any]


class QueryOptions(BaseModel):
    """Pagination options for get and list operations."""

    limit: Optional[int] = Field(None, ge=0)
    offset: Optional[int] = Field(None, ge=0)


class MutationResult(BaseModel):
    """Outcome of an insert, update, delete or raw execute."""

    affected_rows: int = 0
    insert_id: Optional[int] = None
    changed_rows: Optional[int] = None
    rows: List[Record] = Field(default_factory=list)


class Question(BaseModel):
    """Represents a submitted truth or dare question."""

    id: int
    type: QuestionType
    question: str
    user_id: str
    server_id: str
    is_approved: bool = False
    approved_by: Optional[str] = None
    datetime_approved: Optional[datetime.datetime] = None
    is_banned: bool = False
    ban_reason: Optional[str] = None
    banned_by: Optional[str] = None
    datetime_banned: Optional[datetime.datetime] = None
    message_id: Optional[str] = None
    is_deleted: bool = False
    datetime_deleted: Optional[datetime.datetime] = None
    created: datetime.datetime = Field(default_factory=datetime.datetime.now)

    @field_validator("user_id", "server_id", "approved_by", "banned_by", "message_id", mode="before")
    def snowflake_as_str(cls, v):
        # Snowflakes may be stored in BIGINT columns
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v
