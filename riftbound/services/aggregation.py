"""
Quantity aggregation and public deck ranking.

Shared by the validator (quantity sums, signature counting) and the public
deck listing (vote summaries, trending score).
"""

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from riftbound.models.deck import Deck, DeckCard, DeckItem, DeckSection, Vote


def total_quantity(cards: Iterable[DeckCard]) -> int:
    """Sum of quantities across the given cards."""
    return sum(deck_card.quantity for deck_card in cards)


def section_count(items: Iterable[DeckItem], section: DeckSection) -> int:
    """Number of cards (counting quantities) in one section."""
    return sum(item.qty for item in items if item.section == section)


def section_counts(items: Iterable[DeckItem]) -> dict[DeckSection, int]:
    """Number of cards in every section, including empty ones."""
    counts = {section: 0 for section in DeckSection}
    for item in items:
        counts[item.section] += item.qty
    return counts


def signature_count(cards: Iterable[DeckCard], legend_champion_tag: str) -> int:
    """Number of signature cards belonging to the legend's champion."""
    return sum(
        deck_card.quantity
        for deck_card in cards
        if deck_card.card.is_signature and deck_card.card.champion_tag == legend_champion_tag
    )


def trending_score(vote_count: int, created_at: datetime, now: datetime) -> float:
    """
    Vote count decayed by deck age.

    score = votes / ln(hours_since_creation + 2)

    A brand-new deck scores votes / ln(2). Creation times in the future are
    treated as zero age.
    """
    hours = max(0.0, (now - created_at).total_seconds() / 3600)
    return vote_count / math.log(hours + 2)


class PublicDeckSort(str, Enum):
    """Orderings for the public deck listing."""

    TRENDING = "trending"
    RECENT = "recent"
    TOP = "top"


@dataclass(frozen=True, slots=True)
class DeckWithVotes:
    """A public deck with its vote summary."""

    deck: Deck
    vote_count: int
    has_user_voted: bool
    trending_score: float

    @property
    def id(self) -> str:
        return self.deck.id


def summarize_votes(
    decks: Iterable[Deck],
    votes: Iterable[Vote],
    current_user_id: str | None,
    now: datetime,
) -> list[DeckWithVotes]:
    """
    Attach vote counts and trending scores to decks.

    Args:
        decks: Public decks
        votes: Votes on any decks (votes for other decks are ignored)
        current_user_id: Viewer, used to flag decks they already voted for
        now: Reference time for the trending score

    Returns:
        One DeckWithVotes per deck, in input order
    """
    voters_by_deck: dict[str, set[str]] = defaultdict(set)
    for vote in votes:
        voters_by_deck[vote.deck_id].add(vote.voter_user_id)

    summaries: list[DeckWithVotes] = []
    for deck in decks:
        voters = voters_by_deck.get(deck.id, set())
        summaries.append(
            DeckWithVotes(
                deck=deck,
                vote_count=len(voters),
                has_user_voted=current_user_id is not None and current_user_id in voters,
                trending_score=trending_score(len(voters), deck.created_at, now),
            )
        )
    return summaries


def rank_decks(
    decks: Sequence[DeckWithVotes],
    sort: PublicDeckSort = PublicDeckSort.TRENDING,
) -> list[DeckWithVotes]:
    """Order decks for display, highest first. Ties keep input order."""
    if sort == PublicDeckSort.TRENDING:
        return sorted(decks, key=lambda d: d.trending_score, reverse=True)
    if sort == PublicDeckSort.RECENT:
        return sorted(decks, key=lambda d: d.deck.updated_at, reverse=True)
    return sorted(decks, key=lambda d: d.vote_count, reverse=True)
