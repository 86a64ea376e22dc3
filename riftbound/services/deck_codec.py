"""
Deck export/import codec.

Export format (keys sorted, pretty-printed):

    {
      "description": null,
      "legend": {"championTag": "jinx", "domains": ["Fury", "Chaos"]},
      "main": [["card_ogn_001", "3"], ...],
      "runes": [["card_rune_fury", "6"], ...],
      "side": [],
      "title": "Jinx Aggro"
    }

Quantities are written as strings. Imports are all-or-nothing: any bad entry
fails the whole import and no deck is produced.
"""

import json
import logging
import re
from collections.abc import Iterable
from typing import Any

from riftbound.models.deck import Deck, DeckItem, DeckSection
from riftbound.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_TITLE = "Imported Deck"

# ASCII digits with an optional sign; no whitespace, underscores or other numerals
_QUANTITY_PATTERN = re.compile(r"[+-]?[0-9]+")

# Export document key for each section
SECTION_KEYS: dict[DeckSection, str] = {
    DeckSection.MAIN: "main",
    DeckSection.SIDE: "side",
    DeckSection.RUNE: "runes",
}


class DeckFormatError(KnownError):
    """Raised when an imported deck document cannot be decoded."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            suggestion="Check that the full deck export was pasted.",
            status_code=400,
        )


class InvalidFormatError(DeckFormatError):
    """The document is not valid JSON or is missing required structure."""

    def __init__(self, detail: str | None = None):
        super().__init__("Invalid JSON format", detail)


class InvalidItemFormatError(DeckFormatError):
    """A section entry is not a [card_id, quantity] pair."""

    def __init__(self, detail: str | None = None):
        super().__init__("Invalid item format in imported deck", detail)


def encode_entries(items: Iterable[DeckItem], section: DeckSection) -> list[list[str]]:
    """Encode one section's items as [card_id, quantity] string pairs."""
    return [[item.card_id, str(item.qty)] for item in items if item.section == section]


def encode_legend(deck: Deck) -> dict[str, Any]:
    return {"championTag": deck.legend_champion_tag, "domains": list(deck.legend_domains)}


def export_deck(deck: Deck, items: Iterable[DeckItem]) -> str:
    """
    Serialize a deck and its items to the portable export format.

    Args:
        deck: Deck providing legend, title and description
        items: The deck's items; sections are taken from each item

    Returns:
        Pretty-printed JSON with sorted keys
    """
    items = list(items)
    document: dict[str, Any] = {
        "legend": encode_legend(deck),
        "title": deck.title,
        "description": deck.description,
    }
    for section, key in SECTION_KEYS.items():
        document[key] = encode_entries(items, section)

    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)


def import_deck(text: str, owner_user_id: str) -> tuple[Deck, list[DeckItem]]:
    """
    Build a new private deck from an exported document.

    Args:
        text: Export document
        owner_user_id: Importing user; becomes the new deck's owner

    Returns:
        Tuple of (deck, items). The deck has a fresh id, is private, and has
        its section counts computed from the items.

    Raises:
        InvalidFormatError: Malformed JSON or missing legend/section structure
        InvalidItemFormatError: An entry is not a [card_id, integer-string] pair
    """
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidFormatError(str(e)) from e

    if not isinstance(document, dict):
        raise InvalidFormatError("Top-level value must be an object")

    champion_tag, domains = _decode_legend(document.get("legend"))
    title = _optional_string(document, "title")
    description = _optional_string(document, "description")

    sections: dict[DeckSection, list[tuple[str, int]]] = {}
    for section, key in SECTION_KEYS.items():
        sections[section] = [_decode_entry(entry, key) for entry in _entry_list(document, key)]

    deck = Deck.create(
        owner_user_id=owner_user_id,
        title=title if title is not None else DEFAULT_IMPORT_TITLE,
        description=description,
        legend_champion_tag=champion_tag,
        legend_domains=domains,
        is_public=False,
    )

    # Repeated entries for a card within a section collapse into one item
    items: list[DeckItem] = []
    for section, entries in sections.items():
        merged: dict[str, int] = {}
        for card_id, qty in entries:
            merged[card_id] = merged.get(card_id, 0) + qty
        for card_id, qty in merged.items():
            items.append(DeckItem(deck_id=deck.id, card_id=card_id, section=section, qty=qty))

    deck.recompute_counts(items)
    logger.info("Imported deck %s with %d items for %s", deck.id, len(items), owner_user_id)
    return deck, items


def _decode_legend(legend: Any) -> tuple[str, list[str]]:
    if not isinstance(legend, dict):
        raise InvalidFormatError("Missing legend")

    champion_tag = legend.get("championTag")
    domains = legend.get("domains")
    if not isinstance(champion_tag, str):
        raise InvalidFormatError("legend.championTag must be a string")
    if (
        not isinstance(domains, list)
        or not domains
        or not all(isinstance(d, str) for d in domains)
    ):
        raise InvalidFormatError("legend.domains must be a non-empty list of strings")
    return champion_tag, domains


def _optional_string(document: dict[str, Any], key: str) -> str | None:
    value = document.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidFormatError(f"{key} must be a string or null")
    return value


def _entry_list(document: dict[str, Any], key: str) -> list[Any]:
    entries = document.get(key)
    if not isinstance(entries, list):
        raise InvalidFormatError(f"{key} must be a list")
    return entries


def _decode_entry(entry: Any, key: str) -> tuple[str, int]:
    if (
        not isinstance(entry, list)
        or len(entry) != 2
        or not all(isinstance(part, str) for part in entry)
    ):
        raise InvalidItemFormatError(f"{key} entry {entry!r} is not a [card_id, quantity] pair")

    card_id, qty_text = entry
    if not _QUANTITY_PATTERN.fullmatch(qty_text):
        raise InvalidItemFormatError(f"{key} entry {entry!r} has a non-integer quantity")

    try:
        qty = int(qty_text)
    except ValueError as e:
        raise InvalidItemFormatError(f"{key} entry has an out-of-range quantity") from e

    if qty < 1:
        raise InvalidItemFormatError(f"{key} entry {entry!r} has a quantity below 1")
    return card_id, qty
