"""Question API routes.

Learn: FastAPI routers define HTTP endpoints. Each route function
receives the ForumService via Depends() and delegates to it. Routes
handle HTTP concerns (status codes, error responses), the service
handles persistence and live-update broadcasts.

Route order matters: /questions/search, /questions/recent and
/questions/tag/{tag} are declared before /questions/{question_id} so
"search" and "recent" are never parsed as ids.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from agora.api.deps import get_forum_service as _svc
from agora.config import settings
from agora.schemas.forum import QuestionCreate, QuestionRead
from agora.services.forum_service import ForumService

router = APIRouter()


@router.get("/questions", response_model=list[QuestionRead])
async def list_questions(svc: ForumService = Depends(_svc)):
    return await svc.list_questions()


@router.post("/questions", response_model=QuestionRead, status_code=201)
async def create_question(body: QuestionCreate, svc: ForumService = Depends(_svc)):
    """Create a question and push NEW_QUESTION to live clients."""
    return await svc.create_question(
        title=body.title,
        description=body.description,
        tags=body.tags,
    )


@router.get("/questions/search", response_model=list[QuestionRead])
async def search_questions(
    keyword: Optional[str] = Query(default=None),
    svc: ForumService = Depends(_svc),
):
    if not keyword:
        raise HTTPException(status_code=400, detail="Search keyword is required")
    return await svc.search_questions(keyword)


@router.get("/questions/recent", response_model=list[QuestionRead])
async def recent_questions(svc: ForumService = Depends(_svc)):
    return await svc.recent_questions(settings.recent_questions_limit)


@router.get("/questions/tag/{tag}", response_model=list[QuestionRead])
async def questions_by_tag(tag: str, svc: ForumService = Depends(_svc)):
    return await svc.questions_by_tag(tag)


@router.get("/questions/{question_id}", response_model=QuestionRead)
async def get_question(question_id: int, svc: ForumService = Depends(_svc)):
    question = await svc.get_question(question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question
