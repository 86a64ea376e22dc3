from riftbound.api.assistant import router as assistant_router
from riftbound.api.cards import router as cards_router
from riftbound.api.decks import router as decks_router
from riftbound.api.health import router as health_router
from riftbound.api.public import router as public_router

__all__ = [
    "assistant_router",
    "cards_router",
    "decks_router",
    "health_router",
    "public_router",
]
