"""Answer API routes — list, create, like, delete."""

from fastapi import APIRouter, Depends, HTTPException, Response

from agora.api.deps import get_forum_service as _svc
from agora.schemas.forum import AnswerCreate, AnswerRead
from agora.services.forum_service import ForumService

router = APIRouter()


@router.get("/questions/{question_id}/answers", response_model=list[AnswerRead])
async def list_answers(question_id: int, svc: ForumService = Depends(_svc)):
    return await svc.list_answers(question_id)


@router.post(
    "/questions/{question_id}/answers", response_model=AnswerRead, status_code=201
)
async def create_answer(
    question_id: int,
    body: AnswerCreate,
    svc: ForumService = Depends(_svc),
):
    """Answer a question and push NEW_ANSWER to live clients."""
    answer = await svc.create_answer(question_id, body.answer_text)
    if not answer:
        raise HTTPException(status_code=404, detail="Question not found")
    return answer


@router.put("/answers/{answer_id}/reaction", response_model=AnswerRead)
async def like_answer(answer_id: int, svc: ForumService = Depends(_svc)):
    """Add one like and push LIKE_ANSWER to live clients."""
    answer = await svc.like_answer(answer_id)
    if not answer:
        raise HTTPException(status_code=404, detail="Answer not found")
    return answer


@router.delete("/answers/{answer_id}", status_code=204)
async def delete_answer(answer_id: int, svc: ForumService = Depends(_svc)):
    if not await svc.delete_answer(answer_id):
        raise HTTPException(status_code=404, detail="Answer not found")
    return Response(status_code=204)
