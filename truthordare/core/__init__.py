from .moderation_service import ModerationService
from .question_service import QuestionService

__all__ = ["ModerationService", "QuestionService"]
