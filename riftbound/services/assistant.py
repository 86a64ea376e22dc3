"""
AI rules/strategy assistant client.

Builds the request payload (including the deck snapshot, which uses the same
[card_id, quantity] encoding as the export codec) and posts it to the
assistant backend.
"""

import logging
from collections.abc import Iterable
from enum import Enum

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from riftbound.config import settings
from riftbound.models.deck import Deck, DeckItem, DeckSection
from riftbound.models.failure import FailureKind, KnownError
from riftbound.services.deck_codec import encode_entries

logger = logging.getLogger(__name__)


class AssistantMode(str, Enum):
    """Which persona answers the question."""

    COACH = "coach"
    JUDGE = "judge"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotLegend(_CamelModel):
    champion_tag: str
    domains: list[str]


class DeckSnapshot(_CamelModel):
    """Deck contents sent along with a question."""

    legend: SnapshotLegend
    main: list[list[str]] = Field(default_factory=list)
    side: list[list[str]] = Field(default_factory=list)
    runes: list[list[str]] = Field(default_factory=list)


class AskRequest(_CamelModel):
    mode: AssistantMode
    question: str
    deck_id: str | None = None
    deck_snapshot: DeckSnapshot | None = None
    selection: list[str] | None = None
    rules_edition: str


class Citation(_CamelModel):
    type: str
    ref: str
    id: str | None = None


class AskResponse(_CamelModel):
    answer_markdown: str
    citations: list[Citation] = Field(default_factory=list)


class AssistantError(KnownError):
    """The assistant backend failed or returned an unusable response."""

    retryable = True

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="Try asking again in a moment.",
            status_code=502,
        )


def build_deck_snapshot(deck: Deck, items: Iterable[DeckItem]) -> DeckSnapshot:
    """Snapshot a deck's legend and sections for the assistant."""
    items = list(items)
    return DeckSnapshot(
        legend=SnapshotLegend(
            champion_tag=deck.legend_champion_tag,
            domains=list(deck.legend_domains),
        ),
        main=encode_entries(items, DeckSection.MAIN),
        side=encode_entries(items, DeckSection.SIDE),
        runes=encode_entries(items, DeckSection.RUNE),
    )


def build_ask_request(
    question: str,
    mode: AssistantMode,
    deck: Deck | None = None,
    items: Iterable[DeckItem] | None = None,
    selection: list[str] | None = None,
    rules_edition: str | None = None,
) -> AskRequest:
    """
    Build an assistant request.

    A deck snapshot is attached only when the deck's items are supplied.
    """
    snapshot = None
    if deck is not None and items is not None:
        snapshot = build_deck_snapshot(deck, items)

    return AskRequest(
        mode=mode,
        question=question,
        deck_id=deck.id if deck is not None else None,
        deck_snapshot=snapshot,
        selection=selection,
        rules_edition=rules_edition or settings.rules_edition,
    )


async def ask(
    request: AskRequest,
    client: httpx.AsyncClient | None = None,
) -> AskResponse:
    """
    Send a question to the assistant backend.

    Args:
        request: The question payload
        client: Optional client to reuse (a short-lived one is created otherwise)

    Returns:
        The assistant's markdown answer and citations

    Raises:
        AssistantError: Transport failure, non-200 status or undecodable body
    """
    url = f"{settings.ai_api_base_url.rstrip('/')}/ai/ask"
    payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)

    if client is None:
        async with httpx.AsyncClient(timeout=settings.ai_api_timeout) as owned:
            return await _post(owned, url, payload)
    return await _post(client, url, payload)


async def _post(client: httpx.AsyncClient, url: str, payload: dict) -> AskResponse:
    try:
        response = await client.post(url, json=payload)
    except httpx.HTTPError as e:
        logger.warning("Assistant request failed: %s", e)
        raise AssistantError("The assistant is unreachable", str(e)) from e

    if response.status_code != 200:
        logger.warning("Assistant returned status %d", response.status_code)
        raise AssistantError(
            "The assistant returned an error",
            f"Server error: {response.status_code}",
        )

    try:
        return AskResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise AssistantError("Failed to decode the assistant's response", str(e)) from e
