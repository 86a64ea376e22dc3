"""
Public deck endpoints.

Browsing published decks and voting on them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.api.decks import DeckResponse
from riftbound.api.identity import CurrentUser, OptionalUser
from riftbound.db import list_public_decks, toggle_vote
from riftbound.db.database import get_session
from riftbound.services.aggregation import PublicDeckSort

router = APIRouter(prefix="/public", tags=["public"])


class PublicDeckResponse(BaseModel):
    deck: DeckResponse
    vote_count: int
    has_user_voted: bool
    trending_score: float


class PublicDeckListResponse(BaseModel):
    sort: PublicDeckSort
    decks: list[PublicDeckResponse]
    count: int


class VoteResponse(BaseModel):
    deck_id: str
    voted: bool


@router.get("/decks", response_model=PublicDeckListResponse)
async def get_public_decks(
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: OptionalUser,
    sort: Annotated[PublicDeckSort, Query()] = PublicDeckSort.TRENDING,
) -> PublicDeckListResponse:
    """
    List published decks.

    Sorted by trending score (votes decayed by age), recency, or votes.
    """
    ranked = await list_public_decks(session, current_user_id=user_id, sort=sort)
    decks = [
        PublicDeckResponse(
            deck=DeckResponse.from_model(entry.deck),
            vote_count=entry.vote_count,
            has_user_voted=entry.has_user_voted,
            trending_score=entry.trending_score,
        )
        for entry in ranked
    ]
    return PublicDeckListResponse(sort=sort, decks=decks, count=len(decks))


@router.post("/decks/{deck_id}/vote", response_model=VoteResponse)
async def vote_for_deck(
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: CurrentUser,
) -> VoteResponse:
    """Toggle the caller's vote on a public deck."""
    voted = await toggle_vote(session, deck_id, user_id)
    return VoteResponse(deck_id=deck_id, voted=voted)
