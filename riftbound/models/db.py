"""
SQLAlchemy ORM models for the record store.

Every record is keyed by its derived string id plus the partition it lives
in ("public" or "private"). A deck being published or unpublished briefly
exists in both partitions, so the partition is part of the primary key.

Relationships are plain string ids; a referenced record may not exist.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Partition(str, Enum):
    """Storage partitions of the record store."""

    PUBLIC = "public"
    PRIVATE = "private"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """A catalog card. Cards live in the public partition."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    partition: Mapped[str] = mapped_column(
        String(16), primary_key=True, default=Partition.PUBLIC.value
    )
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(50))
    domains: Mapped[list[Any]] = mapped_column(JSON, default=list)
    energy_cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    might: Mapped[int | None] = mapped_column(Integer, nullable=True)
    keywords: Mapped[list[Any]] = mapped_column(JSON, default=list)
    tags: Mapped[list[Any]] = mapped_column(JSON, default=list)
    rules_text: Mapped[str] = mapped_column(Text, default="")
    is_signature: Mapped[bool] = mapped_column(Boolean, default=False)
    champion_tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_battlefield: Mapped[bool] = mapped_column(Boolean, default=False)
    is_rune: Mapped[bool] = mapped_column(Boolean, default=False)
    set_code: Mapped[str] = mapped_column(String(20), default="")
    number: Mapped[str] = mapped_column(String(20), default="")
    rarity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class DeckDB(Base):
    """A deck record."""

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    partition: Mapped[str] = mapped_column(String(16), primary_key=True)
    owner_user_id: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    legend_champion_tag: Mapped[str] = mapped_column(String(100))
    legend_domains: Mapped[list[Any]] = mapped_column(JSON, default=list)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # Cached section sizes, recomputed on every mutation
    count_main: Mapped[int] = mapped_column(Integer, default=0)
    count_side: Mapped[int] = mapped_column(Integer, default=0)
    count_runes: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, partition={self.partition})>"


class DeckItemDB(Base):
    """A (deck, card, section) quantity record."""

    __tablename__ = "deck_items"

    id: Mapped[str] = mapped_column(String(600), primary_key=True)
    partition: Mapped[str] = mapped_column(String(16), primary_key=True)
    deck_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(255))
    section: Mapped[str] = mapped_column(String(8))
    qty: Mapped[int] = mapped_column(Integer, default=1)

    def __repr__(self) -> str:
        return f"<DeckItemDB(id={self.id}, qty={self.qty})>"


class VoteDB(Base):
    """One user's vote on a public deck."""

    __tablename__ = "votes"

    id: Mapped[str] = mapped_column(String(600), primary_key=True)
    partition: Mapped[str] = mapped_column(String(16), primary_key=True)
    deck_id: Mapped[str] = mapped_column(String(255), index=True)
    voter_user_id: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<VoteDB(deck={self.deck_id}, voter={self.voter_user_id})>"
