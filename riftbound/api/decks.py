"""
Deck API endpoints.

Deck CRUD, item editing, legality checks and import/export for the
signed-in user's decks.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.api.identity import CurrentUser, OptionalUser
from riftbound.config import settings
from riftbound.db import (
    add_cards,
    adjust_quantity,
    create_deck,
    delete_deck,
    list_my_decks,
    load_deck_contents,
    load_deck_items,
    move_item,
    remove_item,
    require_deck,
    require_owned_deck,
    save_imported_deck,
    set_public,
)
from riftbound.db.database import get_session
from riftbound.models.card import Card
from riftbound.models.deck import Deck, DeckItem, DeckSection, join_items
from riftbound.services.deck_codec import export_deck, import_deck
from riftbound.services.deck_validator import validate

router = APIRouter(prefix="/decks", tags=["decks"])

Session = Annotated[AsyncSession, Depends(get_session)]


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: str
    owner_user_id: str
    title: str
    description: str | None = None
    legend_champion_tag: str
    legend_domains: list[str]
    is_public: bool
    count_main: int
    count_side: int
    count_runes: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, deck: Deck) -> "DeckResponse":
        return cls(
            id=deck.id,
            owner_user_id=deck.owner_user_id,
            title=deck.title,
            description=deck.description,
            legend_champion_tag=deck.legend_champion_tag,
            legend_domains=list(deck.legend_domains),
            is_public=deck.is_public,
            count_main=deck.count_main,
            count_side=deck.count_side,
            count_runes=deck.count_runes,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
        )


class DeckItemResponse(BaseModel):
    """A deck item, with the card name when the card is known."""

    id: str
    card_id: str
    section: DeckSection
    qty: int
    card_name: str | None = Field(
        default=None,
        description="Card name, or null if the card id is not in the catalog",
    )


class DeckDetailResponse(BaseModel):
    deck: DeckResponse
    items: list[DeckItemResponse]


class DeckListResponse(BaseModel):
    decks: list[DeckResponse]
    count: int


class DeckCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    legend_champion_tag: str = Field(..., min_length=1)
    legend_domains: list[str] = Field(..., min_length=1)


class AddCardsRequest(BaseModel):
    card_ids: list[str] = Field(..., min_length=1)
    section: DeckSection = DeckSection.MAIN
    quantity: int = Field(default=1, ge=1)


class AdjustQuantityRequest(BaseModel):
    delta: int = Field(..., description="Change in quantity; reaching 0 removes the item")


class MoveItemRequest(BaseModel):
    section: DeckSection


class VisibilityRequest(BaseModel):
    is_public: bool


class ValidationResponse(BaseModel):
    """Legality report for a deck."""

    deck_id: str
    is_valid: bool
    errors: list[dict[str, Any]]
    warnings: list[dict[str, Any]]
    unknown_card_ids: list[str] = Field(
        default_factory=list,
        description="Item card ids missing from the catalog (excluded from validation)",
    )


class ImportRequest(BaseModel):
    text: str = Field(..., description="Deck export JSON")


def _detail(deck: Deck, items: list[DeckItem], cards: dict[str, Card]) -> DeckDetailResponse:
    return DeckDetailResponse(
        deck=DeckResponse.from_model(deck),
        items=[
            DeckItemResponse(
                id=item.id,
                card_id=item.card_id,
                section=item.section,
                qty=item.qty,
                card_name=cards[item.card_id].name if item.card_id in cards else None,
            )
            for item in items
        ],
    )


async def _items_detail(session: AsyncSession, deck: Deck) -> DeckDetailResponse:
    items, cards = await load_deck_contents(session, deck)
    return _detail(deck, items, cards)


@router.get("", response_model=DeckListResponse)
async def get_my_decks(session: Session, user_id: CurrentUser) -> DeckListResponse:
    """List the caller's decks, most recently updated first."""
    decks = await list_my_decks(session, user_id)
    return DeckListResponse(decks=[DeckResponse.from_model(d) for d in decks], count=len(decks))


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_new_deck(
    request: DeckCreateRequest, session: Session, user_id: CurrentUser
) -> DeckResponse:
    """Create an empty private deck."""
    deck = Deck.create(
        owner_user_id=user_id,
        title=request.title,
        description=request.description,
        legend_champion_tag=request.legend_champion_tag,
        legend_domains=request.legend_domains,
    )
    await create_deck(session, deck)
    return DeckResponse.from_model(deck)


@router.post("/import", response_model=DeckDetailResponse, status_code=status.HTTP_201_CREATED)
async def import_deck_json(
    request: ImportRequest, session: Session, user_id: CurrentUser
) -> DeckDetailResponse:
    """
    Import a deck from export JSON.

    The imported deck is new, private and owned by the caller.
    """
    deck, items = import_deck(request.text, user_id)
    await save_imported_deck(session, deck, items)
    return await _items_detail(session, deck)


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck_detail(
    deck_id: str, session: Session, user_id: OptionalUser
) -> DeckDetailResponse:
    """Get a deck with its items. Private decks are visible to their owner only."""
    deck = await require_deck(session, deck_id, user_id)
    return await _items_detail(session, deck)


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_deck(deck_id: str, session: Session, user_id: CurrentUser) -> Response:
    """Delete a deck, its items and its votes."""
    deck = await require_owned_deck(session, deck_id, user_id)
    await delete_deck(session, deck)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{deck_id}/items", response_model=DeckDetailResponse)
async def add_deck_cards(
    deck_id: str, request: AddCardsRequest, session: Session, user_id: CurrentUser
) -> DeckDetailResponse:
    """Add cards to a section, increasing quantities of cards already there."""
    deck = await require_owned_deck(session, deck_id, user_id)
    await add_cards(session, deck, request.card_ids, request.section, request.quantity)
    return await _items_detail(session, deck)


@router.patch("/{deck_id}/items/{item_id}", response_model=DeckDetailResponse)
async def adjust_item_quantity(
    deck_id: str,
    item_id: str,
    request: AdjustQuantityRequest,
    session: Session,
    user_id: CurrentUser,
) -> DeckDetailResponse:
    deck = await require_owned_deck(session, deck_id, user_id)
    await adjust_quantity(session, deck, item_id, request.delta)
    return await _items_detail(session, deck)


@router.post("/{deck_id}/items/{item_id}/move", response_model=DeckDetailResponse)
async def move_deck_item(
    deck_id: str,
    item_id: str,
    request: MoveItemRequest,
    session: Session,
    user_id: CurrentUser,
) -> DeckDetailResponse:
    deck = await require_owned_deck(session, deck_id, user_id)
    await move_item(session, deck, item_id, request.section)
    return await _items_detail(session, deck)


@router.delete("/{deck_id}/items/{item_id}", response_model=DeckDetailResponse)
async def remove_deck_item(
    deck_id: str, item_id: str, session: Session, user_id: CurrentUser
) -> DeckDetailResponse:
    deck = await require_owned_deck(session, deck_id, user_id)
    await remove_item(session, deck, item_id)
    return await _items_detail(session, deck)


@router.post("/{deck_id}/visibility", response_model=DeckResponse)
async def change_visibility(
    deck_id: str, request: VisibilityRequest, session: Session, user_id: CurrentUser
) -> DeckResponse:
    """Publish or unpublish a deck. Unpublishing clears its votes."""
    deck = await require_owned_deck(session, deck_id, user_id)
    await set_public(session, deck, request.is_public)
    return DeckResponse.from_model(deck)


@router.get("/{deck_id}/validation", response_model=ValidationResponse)
async def validate_deck(
    deck_id: str, session: Session, user_id: OptionalUser
) -> ValidationResponse:
    """
    Check a deck against the construction rules.

    Counts are taken from the stored items, never from the deck's cached
    counters. Items whose card is unknown are left out and listed.
    """
    deck = await require_deck(session, deck_id, user_id)
    items, cards = await load_deck_contents(session, deck)

    result = validate(
        main_cards=join_items(items, cards, DeckSection.MAIN),
        side_cards=join_items(items, cards, DeckSection.SIDE),
        rune_cards=join_items(items, cards, DeckSection.RUNE),
        legend_champion_tag=deck.legend_champion_tag,
        legend_domains=deck.legend_domains,
        rules=settings.deck_rules(),
    )

    return ValidationResponse(
        deck_id=deck.id,
        is_valid=result.is_valid,
        errors=[error.to_dict() for error in result.errors],
        warnings=[warning.to_dict() for warning in result.warnings],
        unknown_card_ids=sorted({item.card_id for item in items if item.card_id not in cards}),
    )


@router.get("/{deck_id}/export")
async def export_deck_json(deck_id: str, session: Session, user_id: OptionalUser) -> Response:
    """Export a deck as portable JSON."""
    deck = await require_deck(session, deck_id, user_id)
    items = await load_deck_items(session, deck)
    return Response(content=export_deck(deck, items), media_type="application/json")

