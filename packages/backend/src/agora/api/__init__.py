"""API route aggregation.

All routers registered here get mounted in main.py under /api.
There is no authentication — every route is open.
"""

from fastapi import APIRouter

from agora.api.answers import router as answers_router
from agora.api.health import router as health_router
from agora.api.questions import router as questions_router
from agora.api.tags import router as tags_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(questions_router, tags=["questions"])
api_router.include_router(answers_router, tags=["answers"])
api_router.include_router(tags_router, tags=["tags"])
