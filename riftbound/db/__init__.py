from riftbound.db.database import get_session, init_db
from riftbound.db.operations import (
    add_cards,
    adjust_quantity,
    card_sync_times,
    create_deck,
    delete_deck,
    get_deck,
    list_cards,
    list_my_decks,
    list_public_decks,
    load_cards,
    load_deck_contents,
    load_deck_items,
    move_item,
    remove_item,
    require_deck,
    require_owned_deck,
    save_imported_deck,
    set_public,
    toggle_vote,
    upsert_cards,
)
from riftbound.db.records import RecordStore

__all__ = [
    "RecordStore",
    "add_cards",
    "adjust_quantity",
    "card_sync_times",
    "create_deck",
    "delete_deck",
    "get_deck",
    "get_session",
    "init_db",
    "list_cards",
    "list_my_decks",
    "list_public_decks",
    "load_cards",
    "load_deck_contents",
    "load_deck_items",
    "move_item",
    "remove_item",
    "require_deck",
    "require_owned_deck",
    "save_imported_deck",
    "set_public",
    "toggle_vote",
    "upsert_cards",
]
