import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from riftbound.db.database import get_session
from riftbound.main import app
from riftbound.models.db import Base
from riftbound.models.deck import Deck, DeckCard, DeckItem, DeckSection

from factories import make_card, make_rune


@pytest.fixture
def main_cards() -> list[DeckCard]:
    """A legal 40-card main deck for a Fury/Chaos legend."""
    cards = [
        DeckCard(make_card(f"card_main_{i:02d}", domains=("Fury",)), 3) for i in range(12)
    ]
    cards.append(DeckCard(make_card("card_main_12", domains=("Chaos",)), 3))
    cards.append(DeckCard(make_card("card_main_13", domains=("Fury", "Chaos")), 1))
    return cards


@pytest.fixture
def rune_cards() -> list[DeckCard]:
    """A legal 12-rune deck for a Fury/Chaos legend, at most 3 copies per rune."""
    return [
        DeckCard(make_rune("card_rune_fury_a", "Fury", "Fury Rune A"), 3),
        DeckCard(make_rune("card_rune_fury_b", "Fury", "Fury Rune B"), 3),
        DeckCard(make_rune("card_rune_chaos_a", "Chaos", "Chaos Rune A"), 3),
        DeckCard(make_rune("card_rune_chaos_b", "Chaos", "Chaos Rune B"), 3),
    ]


@pytest.fixture
def legend_domains() -> list[str]:
    return ["Fury", "Chaos"]


@pytest.fixture
def sample_deck() -> Deck:
    return Deck.create(
        owner_user_id="user_owner",
        title="Jinx Aggro",
        description="Fast Fury/Chaos pressure",
        legend_champion_tag="jinx",
        legend_domains=["Fury", "Chaos"],
    )


@pytest.fixture
def sample_items(sample_deck: Deck) -> list[DeckItem]:
    return [
        DeckItem(sample_deck.id, "card_ogn_001", DeckSection.MAIN, 3),
        DeckItem(sample_deck.id, "card_ogn_002", DeckSection.MAIN, 2),
        DeckItem(sample_deck.id, "card_ogn_003", DeckSection.SIDE, 1),
        DeckItem(sample_deck.id, "card_rune_fury", DeckSection.RUNE, 6),
        DeckItem(sample_deck.id, "card_rune_chaos", DeckSection.RUNE, 6),
    ]


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
