"""
Deck, card and vote operations.

Async workflows over the record store. Every item mutation recomputes the
deck's cached section counts from the stored items and saves the deck.
Failures propagate as RecordStoreError so callers can surface them.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.db.records import RecordStore
from riftbound.models.card import Card
from riftbound.models.db import CardDB, DeckDB, DeckItemDB, Partition, VoteDB
from riftbound.models.deck import Deck, DeckItem, DeckSection, Vote, vote_id
from riftbound.models.failure import PermissionDeniedError, RecordNotFoundError
from riftbound.services.aggregation import (
    DeckWithVotes,
    PublicDeckSort,
    rank_decks,
    summarize_votes,
)

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo)."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def partition_for(deck: Deck) -> Partition:
    return Partition.PUBLIC if deck.is_public else Partition.PRIVATE


# --- Conversions ---


def card_to_model(row: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=row.id,
        name=row.name,
        type=row.type,
        domains=frozenset(row.domains or ()),
        energy_cost=row.energy_cost,
        might=row.might,
        keywords=tuple(row.keywords or ()),
        tags=tuple(row.tags or ()),
        rules_text=row.rules_text or "",
        is_signature=row.is_signature,
        champion_tag=row.champion_tag,
        is_battlefield=row.is_battlefield,
        is_rune=row.is_rune,
        set_code=row.set_code,
        number=row.number,
        rarity=row.rarity,
    )


def card_to_db(card: Card, synced_at: datetime) -> CardDB:
    return CardDB(
        id=card.id,
        partition=Partition.PUBLIC.value,
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
        synced_at=synced_at,
    )


def deck_to_model(row: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    return Deck(
        id=row.id,
        owner_user_id=row.owner_user_id,
        title=row.title,
        description=row.description,
        legend_champion_tag=row.legend_champion_tag,
        legend_domains=list(row.legend_domains or ()),
        is_public=row.is_public,
        count_main=row.count_main,
        count_side=row.count_side,
        count_runes=row.count_runes,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def deck_to_db(deck: Deck, partition: Partition | None = None) -> DeckDB:
    return DeckDB(
        id=deck.id,
        partition=(partition or partition_for(deck)).value,
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


def item_to_model(row: DeckItemDB) -> DeckItem:
    return DeckItem(
        deck_id=row.deck_id,
        card_id=row.card_id,
        section=DeckSection(row.section),
        qty=row.qty,
    )


def item_to_db(item: DeckItem, partition: Partition) -> DeckItemDB:
    return DeckItemDB(
        id=item.id,
        partition=partition.value,
        deck_id=item.deck_id,
        card_id=item.card_id,
        section=item.section.value,
        qty=item.qty,
    )


def vote_to_model(row: VoteDB) -> Vote:
    return Vote(
        deck_id=row.deck_id,
        voter_user_id=row.voter_user_id,
        created_at=_aware(row.created_at),
    )


def vote_to_db(vote: Vote) -> VoteDB:
    return VoteDB(
        id=vote.id,
        partition=Partition.PUBLIC.value,
        deck_id=vote.deck_id,
        voter_user_id=vote.voter_user_id,
        created_at=vote.created_at,
    )


# --- Card Operations ---


async def upsert_cards(
    session: AsyncSession, cards: Iterable[Card], synced_at: datetime | None = None
) -> int:
    """Insert or replace catalog cards. Returns the number saved."""
    synced_at = synced_at or datetime.now(timezone.utc)
    saved = await RecordStore(session).save(card_to_db(card, synced_at) for card in cards)
    logger.info("Saved %d cards to catalog", len(saved))
    return len(saved)


async def list_cards(session: AsyncSession) -> list[Card]:
    rows = await RecordStore(session).query(CardDB, partition=Partition.PUBLIC)
    return [card_to_model(row) for row in rows]


async def card_sync_times(session: AsyncSession) -> list[datetime]:
    """When each cached card was last synced."""
    rows = await RecordStore(session).query(CardDB, partition=Partition.PUBLIC)
    return [_aware(row.synced_at) for row in rows]


async def load_cards(session: AsyncSession, card_ids: Iterable[str]) -> dict[str, Card]:
    """
    Look up cards by id.

    Ids with no matching card are left out of the result; callers treat
    them as unknown cards.
    """
    card_ids = set(card_ids)
    rows = await RecordStore(session).fetch_many(CardDB, card_ids, Partition.PUBLIC)
    missing = card_ids - rows.keys()
    if missing:
        logger.warning("Unknown card ids referenced by deck items: %s", sorted(missing))
    return {card_id: card_to_model(row) for card_id, row in rows.items()}


# --- Deck Operations ---


async def create_deck(session: AsyncSession, deck: Deck) -> Deck:
    """Save a new deck in the partition matching its visibility."""
    await RecordStore(session).save([deck_to_db(deck)])
    logger.info("Created deck %s for %s", deck.id, deck.owner_user_id)
    return deck


async def get_deck(session: AsyncSession, deck_id: str, user_id: str | None = None) -> Deck | None:
    """
    Find a deck by id.

    Looks in the user's private partition first, then the public one.
    Private decks are only visible to their owner.
    """
    store = RecordStore(session)
    if user_id is not None:
        row = await store.fetch(DeckDB, deck_id, Partition.PRIVATE)
        if row is not None and row.owner_user_id == user_id:
            return deck_to_model(row)

    row = await store.fetch(DeckDB, deck_id, Partition.PUBLIC)
    return deck_to_model(row) if row is not None else None


async def require_deck(session: AsyncSession, deck_id: str, user_id: str | None = None) -> Deck:
    """Like get_deck, but raises RecordNotFoundError if the deck isn't visible."""
    deck = await get_deck(session, deck_id, user_id)
    if deck is None:
        raise RecordNotFoundError(f"Deck '{deck_id}' not found")
    return deck


async def require_owned_deck(session: AsyncSession, deck_id: str, user_id: str) -> Deck:
    """Fetch a deck the user is allowed to modify."""
    deck = await require_deck(session, deck_id, user_id)
    if deck.owner_user_id != user_id:
        raise PermissionDeniedError(f"Deck '{deck_id}' belongs to another user")
    return deck


async def list_my_decks(session: AsyncSession, owner_user_id: str) -> list[Deck]:
    """All of a user's decks, private and published, most recently updated first."""
    store = RecordStore(session)
    decks: list[Deck] = []
    for partition in (Partition.PRIVATE, Partition.PUBLIC):
        rows = await store.query(DeckDB, DeckDB.owner_user_id == owner_user_id, partition=partition)
        decks.extend(deck_to_model(row) for row in rows)
    return sorted(decks, key=lambda d: d.updated_at, reverse=True)


async def load_deck_items(session: AsyncSession, deck: Deck) -> list[DeckItem]:
    rows = await RecordStore(session).query(
        DeckItemDB, DeckItemDB.deck_id == deck.id, partition=partition_for(deck)
    )
    return [item_to_model(row) for row in rows]


async def load_deck_contents(
    session: AsyncSession, deck: Deck
) -> tuple[list[DeckItem], dict[str, Card]]:
    """Load a deck's items and the cards they reference."""
    items = await load_deck_items(session, deck)
    cards = await load_cards(session, (item.card_id for item in items))
    return items, cards


async def delete_deck(session: AsyncSession, deck: Deck) -> None:
    """Delete a deck with its items and votes."""
    store = RecordStore(session)
    partition = partition_for(deck)
    items = await store.delete_where(DeckItemDB, DeckItemDB.deck_id == deck.id, partition=partition)
    votes = await store.delete_where(VoteDB, VoteDB.deck_id == deck.id, partition=Partition.PUBLIC)
    await store.delete(DeckDB, [deck.id], partition)
    logger.info("Deleted deck %s (%d items, %d votes)", deck.id, items, votes)


async def save_imported_deck(
    session: AsyncSession, deck: Deck, items: Iterable[DeckItem]
) -> Deck:
    """Persist a deck produced by the import codec."""
    items = list(items)
    partition = partition_for(deck)
    deck.recompute_counts(items)
    await RecordStore(session).save(
        [deck_to_db(deck), *(item_to_db(item, partition) for item in items)]
    )
    logger.info("Saved imported deck %s with %d items", deck.id, len(items))
    return deck


async def _refresh_counts(store: RecordStore, deck: Deck) -> list[DeckItem]:
    """Recompute cached counts from stored items and save the deck."""
    rows = await store.query(
        DeckItemDB, DeckItemDB.deck_id == deck.id, partition=partition_for(deck)
    )
    items = [item_to_model(row) for row in rows]
    deck.recompute_counts(items)
    deck.touch()
    await store.save([deck_to_db(deck)])
    return items


async def _require_item(store: RecordStore, deck: Deck, item_id: str) -> DeckItem:
    row = await store.fetch(DeckItemDB, item_id, partition_for(deck))
    if row is None or row.deck_id != deck.id:
        raise RecordNotFoundError(f"Item '{item_id}' not found in deck '{deck.id}'")
    return item_to_model(row)


async def add_cards(
    session: AsyncSession,
    deck: Deck,
    card_ids: Iterable[str],
    section: DeckSection,
    quantity: int = 1,
) -> list[DeckItem]:
    """
    Add cards to a section.

    A card already in the section has its quantity increased in place.

    Returns:
        The deck's items after the change
    """
    if quantity < 1:
        raise ValueError(f"Quantity to add must be at least 1, got {quantity}")

    store = RecordStore(session)
    partition = partition_for(deck)
    card_ids = list(dict.fromkeys(card_ids))
    existing = await store.fetch_many(
        DeckItemDB,
        (DeckItem(deck.id, card_id, section, 1).id for card_id in card_ids),
        partition,
    )

    updated: list[DeckItem] = []
    for card_id in card_ids:
        item = DeckItem(deck_id=deck.id, card_id=card_id, section=section, qty=quantity)
        row = existing.get(item.id)
        if row is not None:
            item = replace(item, qty=row.qty + quantity)
        updated.append(item)

    await store.save(item_to_db(item, partition) for item in updated)
    logger.info("Added %d cards to %s of deck %s", len(updated), section.value, deck.id)
    return await _refresh_counts(store, deck)


async def remove_item(session: AsyncSession, deck: Deck, item_id: str) -> list[DeckItem]:
    """Remove an item from the deck. Returns the remaining items."""
    store = RecordStore(session)
    await _require_item(store, deck, item_id)
    await store.delete(DeckItemDB, [item_id], partition_for(deck))
    logger.info("Removed item %s from deck %s", item_id, deck.id)
    return await _refresh_counts(store, deck)


async def adjust_quantity(
    session: AsyncSession, deck: Deck, item_id: str, delta: int
) -> list[DeckItem]:
    """
    Change an item's quantity by delta.

    Reaching zero or below removes the item.
    """
    store = RecordStore(session)
    item = await _require_item(store, deck, item_id)
    new_qty = item.qty + delta

    if new_qty < 1:
        await store.delete(DeckItemDB, [item_id], partition_for(deck))
        logger.info("Removed item %s from deck %s (quantity reached %d)", item_id, deck.id, new_qty)
    else:
        await store.save([item_to_db(replace(item, qty=new_qty), partition_for(deck))])

    return await _refresh_counts(store, deck)


async def move_item(
    session: AsyncSession, deck: Deck, item_id: str, to_section: DeckSection
) -> list[DeckItem]:
    """
    Move an item to another section.

    If the card is already in the target section the quantities are merged.
    """
    store = RecordStore(session)
    partition = partition_for(deck)
    item = await _require_item(store, deck, item_id)
    if item.section == to_section:
        return await _refresh_counts(store, deck)

    moved = replace(item, section=to_section)
    target = await store.fetch(DeckItemDB, moved.id, partition)
    if target is not None:
        moved = replace(moved, qty=target.qty + item.qty)

    await store.delete(DeckItemDB, [item_id], partition)
    await store.save([item_to_db(moved, partition)])
    logger.info("Moved item %s to %s in deck %s", item_id, to_section.value, deck.id)
    return await _refresh_counts(store, deck)


async def set_public(session: AsyncSession, deck: Deck, is_public: bool) -> Deck:
    """
    Publish or unpublish a deck.

    Copies the deck and its items into the target partition, then deletes
    them from the source. Unpublishing also deletes the deck's votes.
    """
    if deck.is_public == is_public:
        return deck

    store = RecordStore(session)
    source = partition_for(deck)
    rows = await store.query(DeckItemDB, DeckItemDB.deck_id == deck.id, partition=source)
    items = [item_to_model(row) for row in rows]

    deck.is_public = is_public
    deck.recompute_counts(items)
    deck.touch()
    target = partition_for(deck)

    await store.save([deck_to_db(deck, target), *(item_to_db(item, target) for item in items)])

    if not is_public:
        await store.delete_where(VoteDB, VoteDB.deck_id == deck.id, partition=Partition.PUBLIC)
    await store.delete(DeckItemDB, [item.id for item in items], source)
    await store.delete(DeckDB, [deck.id], source)

    logger.info("Deck %s is now %s", deck.id, "public" if is_public else "private")
    return deck


# --- Vote Operations ---


async def toggle_vote(session: AsyncSession, deck_id: str, voter_user_id: str) -> bool:
    """
    Add the user's vote on a public deck, or remove it if already present.

    Returns:
        True if the user has now voted, False if the vote was removed
    """
    store = RecordStore(session)
    if await store.fetch(DeckDB, deck_id, Partition.PUBLIC) is None:
        raise RecordNotFoundError(f"Public deck '{deck_id}' not found")

    existing = await store.fetch(VoteDB, vote_id(deck_id, voter_user_id), Partition.PUBLIC)
    if existing is not None:
        await store.delete(VoteDB, [existing.id], Partition.PUBLIC)
        logger.info("Removed vote by %s on deck %s", voter_user_id, deck_id)
        return False

    await store.save([vote_to_db(Vote(deck_id=deck_id, voter_user_id=voter_user_id))])
    logger.info("Recorded vote by %s on deck %s", voter_user_id, deck_id)
    return True


async def list_public_decks(
    session: AsyncSession,
    current_user_id: str | None = None,
    sort: PublicDeckSort = PublicDeckSort.TRENDING,
    now: datetime | None = None,
) -> list[DeckWithVotes]:
    """Public decks with vote summaries, ranked by the requested order."""
    store = RecordStore(session)
    deck_rows = await store.query(
        DeckDB,
        DeckDB.is_public.is_(True),
        partition=Partition.PUBLIC,
        order_by=(DeckDB.updated_at.desc(),),
    )
    decks = [deck_to_model(row) for row in deck_rows]
    if not decks:
        return []

    vote_rows = await store.query(
        VoteDB, VoteDB.deck_id.in_([deck.id for deck in decks]), partition=Partition.PUBLIC
    )
    votes = [vote_to_model(row) for row in vote_rows]

    summaries = summarize_votes(decks, votes, current_user_id, now or datetime.now(timezone.utc))
    return rank_decks(summaries, sort)
