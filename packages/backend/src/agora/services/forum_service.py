"""Forum service — persistence plus live-update broadcasting.

Learn: Service layer separates business logic from HTTP routing.
API routes call the service, the service calls the store and, for the
three mutations other clients care about, the broadcaster:

    create_question → NEW_QUESTION
    create_answer   → NEW_ANSWER
    like_answer     → LIKE_ANSWER

The broadcast only happens after the store call returned successfully.
If the store raises, the exception propagates and nothing is sent.
Broadcaster.broadcast() never raises, so delivery problems can't change
the response the original caller gets.
"""

from typing import Optional

from agora.realtime.broadcaster import Broadcaster
from agora.realtime.events import (
    LikeAnswerEvent,
    NewAnswerEvent,
    NewAnswerPayload,
    NewQuestionEvent,
)
from agora.schemas.forum import AnswerRead, QuestionRead, TagCount
from agora.storage.base import POPULAR_TAGS_LIMIT, RECENT_LIMIT, ForumStorage


class ForumService:
    """Business logic for questions, answers, and likes."""

    def __init__(self, storage: ForumStorage, broadcaster: Broadcaster):
        self.storage = storage
        self.broadcaster = broadcaster

    # ─── Questions ──────────────────────────────────────

    async def list_questions(self) -> list[QuestionRead]:
        return _questions(await self.storage.list_questions())

    async def get_question(self, question_id: int) -> Optional[QuestionRead]:
        question = await self.storage.get_question(question_id)
        return QuestionRead.model_validate(question) if question else None

    async def create_question(
        self, title: str, description: str, tags: Optional[str] = None
    ) -> QuestionRead:
        question = await self.storage.create_question(
            title=title, description=description, tags=tags
        )
        record = QuestionRead.model_validate(question)
        await self.broadcaster.broadcast(NewQuestionEvent(payload=record))
        return record

    async def search_questions(self, keyword: str) -> list[QuestionRead]:
        return _questions(await self.storage.search_questions(keyword))

    async def questions_by_tag(self, tag: str) -> list[QuestionRead]:
        return _questions(await self.storage.questions_by_tag(tag))

    async def recent_questions(self, limit: int = RECENT_LIMIT) -> list[QuestionRead]:
        return _questions(await self.storage.recent_questions(limit))

    async def popular_tags(self, limit: int = POPULAR_TAGS_LIMIT) -> list[TagCount]:
        return await self.storage.popular_tags(limit)

    # ─── Answers ────────────────────────────────────────

    async def list_answers(self, question_id: int) -> list[AnswerRead]:
        return _answers(await self.storage.list_answers(question_id))

    async def create_answer(
        self, question_id: int, answer_text: str
    ) -> Optional[AnswerRead]:
        """Answer a question. Returns None if the question doesn't exist."""
        question = await self.storage.get_question(question_id)
        if question is None:
            return None

        answer = await self.storage.create_answer(
            question_id=question_id, answer_text=answer_text
        )
        record = AnswerRead.model_validate(answer)
        await self.broadcaster.broadcast(
            NewAnswerEvent(
                payload=NewAnswerPayload(answer=record, questionId=question_id)
            )
        )
        return record

    async def like_answer(self, answer_id: int) -> Optional[AnswerRead]:
        """Add one like. Unbounded — the same caller may like repeatedly."""
        answer = await self.storage.like_answer(answer_id)
        if answer is None:
            return None

        record = AnswerRead.model_validate(answer)
        await self.broadcaster.broadcast(LikeAnswerEvent(payload=record))
        return record

    async def delete_answer(self, answer_id: int) -> bool:
        return await self.storage.delete_answer(answer_id)


def _questions(rows) -> list[QuestionRead]:
    return [QuestionRead.model_validate(q) for q in rows]


def _answers(rows) -> list[AnswerRead]:
    return [AnswerRead.model_validate(a) for a in rows]
