"""Pydantic schemas for questions, answers, and tags.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
Read schemas use from_attributes so both ORM rows and in-memory records
serialize the same way.

Values are kept exactly as submitted — min_length rejects empty strings
but nothing is stripped or normalized.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ─── Questions ──────────────────────────────────────────

class QuestionCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    tags: Optional[str] = None


class QuestionRead(BaseModel):
    id: int
    title: str
    description: str
    tags: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Answers ────────────────────────────────────────────

class AnswerCreate(BaseModel):
    answer_text: str = Field(..., min_length=1)


class AnswerRead(BaseModel):
    id: int
    question_id: int
    answer_text: str
    likes: int
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Tags ───────────────────────────────────────────────

class TagCount(BaseModel):
    tag: str
    count: int
