"""Card catalog search, filtering and sorting."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from riftbound.config import CARD_CACHE_MAX_AGE_HOURS
from riftbound.models.card import Card

# Stand-in bound for cards without a cost/might when filtering by a maximum
_MISSING_STAT_CEILING = 999


class CardSortOption(str, Enum):
    NAME = "name"
    COST = "cost"
    MIGHT = "might"
    SET_NUMBER = "set_number"


@dataclass
class CardFilters:
    """
    Catalog filters. Empty/None fields don't filter.

    Attributes:
        search: Case-insensitive match on name, rules text or keywords
        domains: Match cards sharing at least one of these domains
        types: Match cards of any of these types
        min_cost / max_cost: Energy cost bounds
        min_might / max_might: Might bounds
        signatures_only / runes_only / battlefields_only: Flag filters
    """

    search: str = ""
    domains: set[str] = field(default_factory=set)
    types: set[str] = field(default_factory=set)
    min_cost: int | None = None
    max_cost: int | None = None
    min_might: int | None = None
    max_might: int | None = None
    signatures_only: bool = False
    runes_only: bool = False
    battlefields_only: bool = False

    @property
    def is_active(self) -> bool:
        return bool(
            self.search
            or self.domains
            or self.types
            or self.min_cost is not None
            or self.max_cost is not None
            or self.min_might is not None
            or self.max_might is not None
            or self.signatures_only
            or self.runes_only
            or self.battlefields_only
        )


def _matches_search(card: Card, needle: str) -> bool:
    needle = needle.casefold()
    return (
        needle in card.name.casefold()
        or needle in card.rules_text.casefold()
        or any(needle in keyword.casefold() for keyword in card.keywords)
    )


def matches(card: Card, filters: CardFilters) -> bool:
    """True if the card passes every active filter."""
    if filters.search and not _matches_search(card, filters.search):
        return False
    if filters.domains and card.domains.isdisjoint(filters.domains):
        return False
    if filters.types and card.type not in filters.types:
        return False

    cost = card.energy_cost
    if filters.min_cost is not None and (cost or 0) < filters.min_cost:
        return False
    if filters.max_cost is not None:
        if (cost if cost is not None else _MISSING_STAT_CEILING) > filters.max_cost:
            return False

    might = card.might
    if filters.min_might is not None and (might or 0) < filters.min_might:
        return False
    if filters.max_might is not None:
        if (might if might is not None else _MISSING_STAT_CEILING) > filters.max_might:
            return False

    if filters.signatures_only and not card.is_signature:
        return False
    if filters.runes_only and not card.is_rune:
        return False
    if filters.battlefields_only and not card.is_battlefield:
        return False
    return True


def sort_cards(cards: Iterable[Card], option: CardSortOption = CardSortOption.NAME) -> list[Card]:
    if option == CardSortOption.COST:
        return sorted(cards, key=lambda c: c.energy_cost or 0)
    if option == CardSortOption.MIGHT:
        return sorted(cards, key=lambda c: c.might or 0)
    if option == CardSortOption.SET_NUMBER:
        return sorted(cards, key=lambda c: (c.set_code, c.number))
    return sorted(cards, key=lambda c: c.name)


def filter_cards(
    cards: Iterable[Card],
    filters: CardFilters,
    sort: CardSortOption = CardSortOption.NAME,
) -> list[Card]:
    """Apply filters, then sort."""
    return sort_cards((card for card in cards if matches(card, filters)), sort)


def should_refresh_cache(synced_at: Iterable[datetime], now: datetime) -> bool:
    """
    True if a cached catalog needs refreshing.

    An empty cache, or one whose oldest entry is older than the max age,
    is stale.
    """
    oldest = min(synced_at, default=None)
    if oldest is None:
        return True
    return now - oldest > timedelta(hours=CARD_CACHE_MAX_AGE_HOURS)
