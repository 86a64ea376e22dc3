"""
Assistant endpoint.

Forwards rules/strategy questions to the assistant backend, attaching a
snapshot of the selected deck.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.api.identity import OptionalUser
from riftbound.db import load_deck_items, require_deck
from riftbound.db.database import get_session
from riftbound.services.assistant import AskResponse, AssistantMode, ask, build_ask_request

router = APIRouter(prefix="/assistant", tags=["assistant"])


class QuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    mode: AssistantMode = AssistantMode.COACH
    deck_id: str | None = None
    selection: list[str] | None = Field(
        default=None,
        description="Card ids the question is about",
    )


@router.post("/ask", response_model=AskResponse, response_model_by_alias=True)
async def ask_question(
    request: QuestionRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: OptionalUser,
) -> AskResponse:
    """Ask the coach or judge a question, optionally about a deck."""
    deck = None
    items = None
    if request.deck_id is not None:
        deck = await require_deck(session, request.deck_id, user_id)
        items = await load_deck_items(session, deck)

    ask_request = build_ask_request(
        question=request.question,
        mode=request.mode,
        deck=deck,
        items=items,
        selection=request.selection,
    )
    return await ask(ask_request)
