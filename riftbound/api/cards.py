"""
Card catalog endpoints.

Browsing and searching the card catalog, and bulk-loading card data.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.db import card_sync_times, list_cards, upsert_cards
from riftbound.db.database import get_session
from riftbound.models.card import Card
from riftbound.services.card_catalog import (
    CardFilters,
    CardSortOption,
    filter_cards,
    should_refresh_cache,
)

router = APIRouter(prefix="/cards", tags=["cards"])


class CardModel(BaseModel):
    """Card data as exchanged over the API."""

    id: str
    name: str
    type: str
    domains: list[str] = Field(default_factory=list)
    energy_cost: int | None = Field(default=None, ge=0)
    might: int | None = Field(default=None, ge=0)
    keywords: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    rules_text: str = ""
    is_signature: bool = False
    champion_tag: str | None = None
    is_battlefield: bool = False
    is_rune: bool = False
    set_code: str = ""
    number: str = ""
    rarity: str | None = None

    @classmethod
    def from_model(cls, card: Card) -> "CardModel":
        return cls(
            id=card.id,
            name=card.name,
            type=card.type,
            domains=sorted(card.domains),
            energy_cost=card.energy_cost,
            might=card.might,
            keywords=list(card.keywords),
            tags=list(card.tags),
            rules_text=card.rules_text,
            is_signature=card.is_signature,
            champion_tag=card.champion_tag,
            is_battlefield=card.is_battlefield,
            is_rune=card.is_rune,
            set_code=card.set_code,
            number=card.number,
            rarity=card.rarity,
        )

    def to_model(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            type=self.type,
            domains=frozenset(self.domains),
            energy_cost=self.energy_cost,
            might=self.might,
            keywords=tuple(self.keywords),
            tags=tuple(self.tags),
            rules_text=self.rules_text,
            is_signature=self.is_signature,
            champion_tag=self.champion_tag,
            is_battlefield=self.is_battlefield,
            is_rune=self.is_rune,
            set_code=self.set_code,
            number=self.number,
            rarity=self.rarity,
        )


class CardListResponse(BaseModel):
    cards: list[CardModel]
    count: int
    stale: bool = Field(
        default=False,
        description="True if the catalog is empty or has not been refreshed recently",
    )


class CardUpsertResponse(BaseModel):
    saved: int


@router.get("", response_model=CardListResponse)
async def search_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(description="Search name, rules text and keywords")] = "",
    domain: Annotated[list[str] | None, Query()] = None,
    card_type: Annotated[list[str] | None, Query(alias="type")] = None,
    min_cost: Annotated[int | None, Query(ge=0)] = None,
    max_cost: Annotated[int | None, Query(ge=0)] = None,
    min_might: Annotated[int | None, Query(ge=0)] = None,
    max_might: Annotated[int | None, Query(ge=0)] = None,
    signatures_only: bool = False,
    runes_only: bool = False,
    battlefields_only: bool = False,
    sort: CardSortOption = CardSortOption.NAME,
) -> CardListResponse:
    """Search the catalog with optional filters."""
    filters = CardFilters(
        search=q,
        domains=set(domain or ()),
        types=set(card_type or ()),
        min_cost=min_cost,
        max_cost=max_cost,
        min_might=min_might,
        max_might=max_might,
        signatures_only=signatures_only,
        runes_only=runes_only,
        battlefields_only=battlefields_only,
    )
    cards = filter_cards(await list_cards(session), filters, sort)
    stale = should_refresh_cache(await card_sync_times(session), datetime.now(timezone.utc))
    return CardListResponse(
        cards=[CardModel.from_model(card) for card in cards],
        count=len(cards),
        stale=stale,
    )


@router.put("", response_model=CardUpsertResponse)
async def load_cards(
    cards: list[CardModel],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardUpsertResponse:
    """Insert or replace catalog cards."""
    saved = await upsert_cards(session, [card.to_model() for card in cards])
    return CardUpsertResponse(saved=saved)
