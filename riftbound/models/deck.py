import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from riftbound.models.card import Card


class DeckSection(str, Enum):
    """The three card groupings of a deck."""

    MAIN = "main"
    SIDE = "side"
    RUNE = "rune"

    @property
    def label(self) -> str:
        """Human-readable section name."""
        return _SECTION_LABELS[self]


_SECTION_LABELS = {
    DeckSection.MAIN: "Main",
    DeckSection.SIDE: "Sideboard",
    DeckSection.RUNE: "Runes",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_deck_id() -> str:
    """Generate a fresh deck id."""
    return f"deck_{uuid.uuid4()}"


def deck_item_id(deck_id: str, card_id: str, section: DeckSection) -> str:
    """Derive the record id for a (deck, card, section) triple."""
    return f"deckitem_{deck_id}_{card_id}_{section.value}"


def vote_id(deck_id: str, voter_user_id: str) -> str:
    """Derive the record id for a voter's vote on a deck."""
    return f"vote_{deck_id}_{voter_user_id}"


@dataclass(frozen=True, slots=True)
class DeckItem:
    """
    One card entry in one section of a deck.

    At most one item exists per (deck, card, section); quantity changes
    replace the item rather than adding a second one.
    """

    deck_id: str
    card_id: str
    section: DeckSection
    qty: int

    def __post_init__(self) -> None:
        if self.qty < 1:
            raise ValueError(f"Deck item quantity must be at least 1, got {self.qty}")

    @property
    def id(self) -> str:
        return deck_item_id(self.deck_id, self.card_id, self.section)


@dataclass(frozen=True, slots=True)
class DeckCard:
    """A card joined with its quantity in one section."""

    card: Card
    quantity: int


@dataclass
class Deck:
    """
    A user's deck.

    Attributes:
        id: Record id ("deck_<uuid>")
        owner_user_id: Opaque id of the owning user
        title: Deck title
        legend_champion_tag: Champion tag of the chosen legend
        legend_domains: Domain identity of the legend
        description: Optional free text
        is_public: Whether the deck lives in the shared partition
        count_main: Cached main deck size (recomputed on every mutation)
        count_side: Cached sideboard size
        count_runes: Cached rune deck size
        created_at: Creation time (UTC)
        updated_at: Last modification time (UTC)
    """

    id: str
    owner_user_id: str
    title: str
    legend_champion_tag: str
    legend_domains: list[str]
    description: str | None = None
    is_public: bool = False
    count_main: int = 0
    count_side: int = 0
    count_runes: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        owner_user_id: str,
        title: str,
        legend_champion_tag: str,
        legend_domains: Iterable[str],
        description: str | None = None,
        is_public: bool = False,
    ) -> "Deck":
        """Create a new, empty deck with a fresh id."""
        domains = list(legend_domains)
        if not domains:
            raise ValueError("A deck's legend must have at least one domain")

        now = _utcnow()
        return cls(
            id=new_deck_id(),
            owner_user_id=owner_user_id,
            title=title,
            legend_champion_tag=legend_champion_tag,
            legend_domains=domains,
            description=description,
            is_public=is_public,
            created_at=now,
            updated_at=now,
        )

    def recompute_counts(self, items: Iterable[DeckItem]) -> "Deck":
        """Recalculate the cached section counts from item quantities."""
        counts = {section: 0 for section in DeckSection}
        for item in items:
            counts[item.section] += item.qty

        self.count_main = counts[DeckSection.MAIN]
        self.count_side = counts[DeckSection.SIDE]
        self.count_runes = counts[DeckSection.RUNE]
        return self

    def touch(self) -> None:
        """Mark the deck as modified now."""
        self.updated_at = _utcnow()


@dataclass(frozen=True, slots=True)
class Vote:
    """An upvote on a public deck. One per voter per deck."""

    deck_id: str
    voter_user_id: str
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def id(self) -> str:
        return vote_id(self.deck_id, self.voter_user_id)


def join_items(
    items: Iterable[DeckItem],
    cards_by_id: Mapping[str, Card],
    section: DeckSection,
) -> list[DeckCard]:
    """
    Join one section's items with their cards.

    Items referencing a card id missing from the lookup are skipped.
    """
    joined: list[DeckCard] = []
    for item in items:
        if item.section != section:
            continue
        card = cards_by_id.get(item.card_id)
        if card is None:
            continue
        joined.append(DeckCard(card=card, quantity=item.qty))
    return joined
