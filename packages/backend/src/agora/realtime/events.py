"""Live-update event types.

Learn: Every message on /ws is {"type": ..., "payload": ...}. The mutation
events form a discriminated union on `type`, so a client (or a test) can
parse any frame with LiveEventAdapter.validate_json() and get the right
model back.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from agora.schemas.forum import AnswerRead, QuestionRead

CONNECTED = "CONNECTED"
NEW_QUESTION = "NEW_QUESTION"
NEW_ANSWER = "NEW_ANSWER"
LIKE_ANSWER = "LIKE_ANSWER"

WELCOME_MESSAGE = "Connected to discussion forum WebSocket server"


class ConnectedPayload(BaseModel):
    message: str = WELCOME_MESSAGE


class ConnectedEvent(BaseModel):
    """Acknowledgment sent to a single client right after it registers."""
    type: Literal["CONNECTED"] = CONNECTED
    payload: ConnectedPayload = Field(default_factory=ConnectedPayload)


class NewQuestionEvent(BaseModel):
    type: Literal["NEW_QUESTION"] = NEW_QUESTION
    payload: QuestionRead


class NewAnswerPayload(BaseModel):
    answer: AnswerRead
    questionId: int


class NewAnswerEvent(BaseModel):
    type: Literal["NEW_ANSWER"] = NEW_ANSWER
    payload: NewAnswerPayload


class LikeAnswerEvent(BaseModel):
    type: Literal["LIKE_ANSWER"] = LIKE_ANSWER
    payload: AnswerRead


LiveEvent = Annotated[
    Union[NewQuestionEvent, NewAnswerEvent, LikeAnswerEvent],
    Field(discriminator="type"),
]

LiveEventAdapter: TypeAdapter[LiveEvent] = TypeAdapter(LiveEvent)
