"""Abstract persistence interface shared by every storage adapter."""

from abc import ABC, abstractmethod
from typing import Optional

from agora.db.models import Answer, Question
from agora.schemas.forum import TagCount

RECENT_LIMIT = 10
POPULAR_TAGS_LIMIT = 10


class StorageError(Exception):
    """The backing store failed (unreachable, constraint violation, ...)."""


class ForumStorage(ABC):
    """Create/read/search questions; create/list/like/delete answers.

    Not-found is signalled with None (or False for delete), never an
    exception. StorageError is reserved for the store itself failing.
    """

    # ─── Questions ──────────────────────────────────────

    @abstractmethod
    async def list_questions(self) -> list[Question]:
        """All questions, oldest first."""

    @abstractmethod
    async def get_question(self, question_id: int) -> Optional[Question]:
        ...

    @abstractmethod
    async def create_question(
        self, title: str, description: str, tags: Optional[str] = None
    ) -> Question:
        ...

    @abstractmethod
    async def search_questions(self, keyword: str) -> list[Question]:
        """Case-insensitive substring match over title or description."""

    @abstractmethod
    async def questions_by_tag(self, tag: str) -> list[Question]:
        """Case-insensitive substring match over the raw tags string."""

    @abstractmethod
    async def recent_questions(self, limit: int = RECENT_LIMIT) -> list[Question]:
        """Newest first, at most `limit`."""

    @abstractmethod
    async def popular_tags(self, limit: int = POPULAR_TAGS_LIMIT) -> list[TagCount]:
        ...

    # ─── Answers ────────────────────────────────────────

    @abstractmethod
    async def list_answers(self, question_id: int) -> list[Answer]:
        """Answers for one question, newest first."""

    @abstractmethod
    async def create_answer(self, question_id: int, answer_text: str) -> Answer:
        ...

    @abstractmethod
    async def like_answer(self, answer_id: int) -> Optional[Answer]:
        """Increment likes by one. None if the answer does not exist."""

    @abstractmethod
    async def delete_answer(self, answer_id: int) -> bool:
        """True if an answer was removed."""
