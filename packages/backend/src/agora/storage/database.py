"""SQL storage adapter — SQLAlchemy 2.0 async over PostgreSQL.

Learn: One DatabaseStorage wraps one AsyncSession (one per request).
Writes commit immediately; there is no cross-entity transaction.

The like counter is incremented in SQL (likes = likes + 1 ... RETURNING)
rather than read-modify-write in Python, so concurrent likes from
separate requests always sum correctly.

Any SQLAlchemyError is rolled back and re-raised as StorageError, which
the API maps to a 500.
"""

import functools
from typing import Optional

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agora.db.models import Answer, Question
from agora.schemas.forum import TagCount
from agora.storage.base import (
    POPULAR_TAGS_LIMIT,
    RECENT_LIMIT,
    ForumStorage,
    StorageError,
)
from agora.storage.tags import count_tags

logger = structlog.get_logger()


def _contains(column, needle: str):
    """Case-insensitive substring match (ILIKE on PostgreSQL)."""
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def _wrap_errors(method):
    @functools.wraps(method)
    async def wrapper(self: "DatabaseStorage", *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("storage.error", operation=method.__name__, error=str(e))
            await self.db.rollback()
            raise StorageError(str(e)) from e

    return wrapper


class DatabaseStorage(ForumStorage):
    """PostgreSQL-backed store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Questions ──────────────────────────────────────

    @_wrap_errors
    async def list_questions(self) -> list[Question]:
        result = await self.db.execute(select(Question).order_by(Question.id))
        return list(result.scalars().all())

    @_wrap_errors
    async def get_question(self, question_id: int) -> Optional[Question]:
        return await self.db.get(Question, question_id)

    @_wrap_errors
    async def create_question(
        self, title: str, description: str, tags: Optional[str] = None
    ) -> Question:
        question = Question(title=title, description=description, tags=tags)
        self.db.add(question)
        await self.db.flush()
        await self.db.commit()
        return question

    @_wrap_errors
    async def search_questions(self, keyword: str) -> list[Question]:
        result = await self.db.execute(
            select(Question)
            .where(or_(
                _contains(Question.title, keyword),
                _contains(Question.description, keyword),
            ))
            .order_by(Question.id)
        )
        return list(result.scalars().all())

    @_wrap_errors
    async def questions_by_tag(self, tag: str) -> list[Question]:
        result = await self.db.execute(
            select(Question)
            .where(_contains(Question.tags, tag))
            .order_by(Question.id)
        )
        return list(result.scalars().all())

    @_wrap_errors
    async def recent_questions(self, limit: int = RECENT_LIMIT) -> list[Question]:
        result = await self.db.execute(
            select(Question)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @_wrap_errors
    async def popular_tags(self, limit: int = POPULAR_TAGS_LIMIT) -> list[TagCount]:
        result = await self.db.execute(
            select(Question.tags)
            .where(Question.tags.is_not(None))
            .order_by(Question.id)
        )
        return count_tags(result.scalars().all(), limit)

    # ─── Answers ────────────────────────────────────────

    @_wrap_errors
    async def list_answers(self, question_id: int) -> list[Answer]:
        result = await self.db.execute(
            select(Answer)
            .where(Answer.question_id == question_id)
            .order_by(Answer.created_at.desc(), Answer.id.desc())
        )
        return list(result.scalars().all())

    @_wrap_errors
    async def create_answer(self, question_id: int, answer_text: str) -> Answer:
        answer = Answer(question_id=question_id, answer_text=answer_text, likes=0)
        self.db.add(answer)
        await self.db.flush()
        await self.db.commit()
        return answer

    @_wrap_errors
    async def like_answer(self, answer_id: int) -> Optional[Answer]:
        result = await self.db.execute(
            update(Answer)
            .where(Answer.id == answer_id)
            .values(likes=Answer.likes + 1)
            .returning(Answer)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        answer = result.scalars().first()
        await self.db.commit()
        return answer

    @_wrap_errors
    async def delete_answer(self, answer_id: int) -> bool:
        result = await self.db.execute(
            delete(Answer)
            .where(Answer.id == answer_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0
