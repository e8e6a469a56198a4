"""In-memory storage adapter.

Learn: Everything lives in two dicts keyed by id. There are no awaits
between reading and writing a record, so on a single event loop each
operation is atomic — concurrent likes can't lose increments.

Records are plain (transient) ORM instances, so the API serializes them
exactly like rows loaded from PostgreSQL.
"""

import itertools
from typing import Optional

from agora.db.models import Answer, Question, utcnow
from agora.schemas.forum import TagCount
from agora.storage.base import POPULAR_TAGS_LIMIT, RECENT_LIMIT, ForumStorage
from agora.storage.tags import count_tags, matches_tag


class MemoryStorage(ForumStorage):
    """Process-local store. Lost on restart; ids start at 1."""

    def __init__(self):
        self._questions: dict[int, Question] = {}
        self._answers: dict[int, Answer] = {}
        self._question_ids = itertools.count(1)
        self._answer_ids = itertools.count(1)

    # ─── Questions ──────────────────────────────────────

    async def list_questions(self) -> list[Question]:
        return list(self._questions.values())

    async def get_question(self, question_id: int) -> Optional[Question]:
        return self._questions.get(question_id)

    async def create_question(
        self, title: str, description: str, tags: Optional[str] = None
    ) -> Question:
        question = Question(
            id=next(self._question_ids),
            title=title,
            description=description,
            tags=tags,
            created_at=utcnow(),
        )
        self._questions[question.id] = question
        return question

    async def search_questions(self, keyword: str) -> list[Question]:
        needle = keyword.lower()
        return [
            q for q in self._questions.values()
            if needle in q.title.lower() or needle in q.description.lower()
        ]

    async def questions_by_tag(self, tag: str) -> list[Question]:
        return [q for q in self._questions.values() if matches_tag(q.tags, tag)]

    async def recent_questions(self, limit: int = RECENT_LIMIT) -> list[Question]:
        # id breaks ties between questions created in the same microsecond
        ordered = sorted(
            self._questions.values(),
            key=lambda q: (q.created_at, q.id),
            reverse=True,
        )
        return ordered[:limit]

    async def popular_tags(self, limit: int = POPULAR_TAGS_LIMIT) -> list[TagCount]:
        return count_tags((q.tags for q in self._questions.values()), limit)

    # ─── Answers ────────────────────────────────────────

    async def list_answers(self, question_id: int) -> list[Answer]:
        answers = [a for a in self._answers.values() if a.question_id == question_id]
        answers.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return answers

    async def create_answer(self, question_id: int, answer_text: str) -> Answer:
        answer = Answer(
            id=next(self._answer_ids),
            question_id=question_id,
            answer_text=answer_text,
            likes=0,
            created_at=utcnow(),
        )
        self._answers[answer.id] = answer
        return answer

    async def like_answer(self, answer_id: int) -> Optional[Answer]:
        answer = self._answers.get(answer_id)
        if answer is None:
            return None
        answer.likes += 1
        return answer

    async def delete_answer(self, answer_id: int) -> bool:
        return self._answers.pop(answer_id, None) is not None
