"""Tests for deck API endpoints."""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from riftbound.db import upsert_cards

from factories import make_card, make_rune

OWNER = {"X-User-ID": "user_owner"}
OTHER = {"X-User-ID": "user_other"}

RUNES = [
    ("card_rune_fury_a", "Fury", "Fury Rune A"),
    ("card_rune_fury_b", "Fury", "Fury Rune B"),
    ("card_rune_chaos_a", "Chaos", "Chaos Rune A"),
    ("card_rune_chaos_b", "Chaos", "Chaos Rune B"),
]

NEW_DECK = {
    "title": "Jinx Aggro",
    "description": "Fast Fury/Chaos pressure",
    "legend_champion_tag": "jinx",
    "legend_domains": ["Fury", "Chaos"],
}


@pytest.fixture
async def seeded_cards(async_engine):
    """Seed the catalog with a legal deck's worth of cards."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    cards = [make_card(f"card_main_{i:02d}") for i in range(14)]
    cards.append(make_card("card_calm", name="Quiet Monk", domains=("Calm",)))
    cards.extend(make_rune(card_id, domain, name) for card_id, domain, name in RUNES)

    async with async_session() as session:
        await upsert_cards(session, cards)
        await session.commit()

    return cards


async def _create_deck(client: AsyncClient) -> dict:
    response = await client.post("/decks", json=NEW_DECK, headers=OWNER)
    assert response.status_code == 201
    return response.json()


class TestCreateAndListDecks:
    async def test_create_deck(self, client: AsyncClient) -> None:
        """New decks are private and empty."""
        deck = await _create_deck(client)

        assert deck["id"].startswith("deck_")
        assert deck["owner_user_id"] == "user_owner"
        assert deck["is_public"] is False
        assert deck["count_main"] == 0

    async def test_create_requires_user(self, client: AsyncClient) -> None:
        response = await client.post("/decks", json=NEW_DECK)

        assert response.status_code == 401

    async def test_create_requires_domains(self, client: AsyncClient) -> None:
        response = await client.post(
            "/decks", json={**NEW_DECK, "legend_domains": []}, headers=OWNER
        )

        assert response.status_code == 422

    async def test_list_my_decks(self, client: AsyncClient) -> None:
        await _create_deck(client)
        await client.post("/decks", json={**NEW_DECK, "title": "Theirs"}, headers=OTHER)

        response = await client.get("/decks", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["decks"][0]["title"] == "Jinx Aggro"


class TestDeckDetail:
    async def test_get_deck_with_items(
        self,
        client: AsyncClient,
        seeded_cards: list,  # noqa: ARG002
    ) -> None:
        deck = await _create_deck(client)
        await client.post(
            f"/decks/{deck['id']}/items",
            json={"card_ids": ["card_main_00", "card_unknown"], "quantity": 2},
            headers=OWNER,
        )

        response = await client.get(f"/decks/{deck['id']}", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["deck"]["count_main"] == 4
        names = {item["card_id"]: item["card_name"] for item in data["items"]}
        assert names == {"card_main_00": "Card Main 00", "card_unknown": None}

    async def test_private_deck_is_hidden(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)

        response = await client.get(f"/decks/{deck['id']}", headers=OTHER)

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    async def test_delete_deck(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)

        response = await client.delete(f"/decks/{deck['id']}", headers=OWNER)

        assert response.status_code == 204
        assert (await client.get(f"/decks/{deck['id']}", headers=OWNER)).status_code == 404


class TestItemEditing:
    async def test_adjust_move_and_remove(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)
        base = f"/decks/{deck['id']}/items"
        response = await client.post(base, json={"card_ids": ["card_1"]}, headers=OWNER)
        item_id = response.json()["items"][0]["id"]

        response = await client.patch(f"{base}/{item_id}", json={"delta": 2}, headers=OWNER)
        assert response.json()["items"][0]["qty"] == 3

        response = await client.post(
            f"{base}/{item_id}/move", json={"section": "side"}, headers=OWNER
        )
        data = response.json()
        assert data["items"][0]["section"] == "side"
        assert (data["deck"]["count_main"], data["deck"]["count_side"]) == (0, 3)

        moved_id = data["items"][0]["id"]
        response = await client.delete(f"{base}/{moved_id}", headers=OWNER)
        assert response.json()["items"] == []
        assert response.json()["deck"]["count_side"] == 0

    async def test_adjust_to_zero_removes_item(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)
        base = f"/decks/{deck['id']}/items"
        response = await client.post(base, json={"card_ids": ["card_1"]}, headers=OWNER)
        item_id = response.json()["items"][0]["id"]

        response = await client.patch(f"{base}/{item_id}", json={"delta": -1}, headers=OWNER)

        assert response.status_code == 200
        assert response.json()["items"] == []

    async def test_other_users_cannot_edit_public_deck(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)
        await client.post(
            f"/decks/{deck['id']}/visibility", json={"is_public": True}, headers=OWNER
        )

        response = await client.post(
            f"/decks/{deck['id']}/items", json={"card_ids": ["card_1"]}, headers=OTHER
        )

        assert response.status_code == 403
        assert response.json()["failure"]["kind"] == "permission"

    async def test_unknown_item(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)

        response = await client.patch(
            f"/decks/{deck['id']}/items/deckitem_nope", json={"delta": 1}, headers=OWNER
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_non_positive_add_quantity_is_rejected(
        self, client: AsyncClient, quantity: int
    ) -> None:
        deck = await _create_deck(client)

        response = await client.post(
            f"/decks/{deck['id']}/items",
            json={"card_ids": ["card_1"], "quantity": quantity},
            headers=OWNER,
        )

        assert response.status_code == 422
        items = await client.get(f"/decks/{deck['id']}", headers=OWNER)
        assert items.json()["items"] == []


class TestValidation:
    async def test_legal_deck(
        self,
        client: AsyncClient,
        seeded_cards: list,  # noqa: ARG002
    ) -> None:
        deck = await _create_deck(client)
        base = f"/decks/{deck['id']}/items"
        main_ids = [f"card_main_{i:02d}" for i in range(13)]
        await client.post(base, json={"card_ids": main_ids, "quantity": 3}, headers=OWNER)
        await client.post(base, json={"card_ids": ["card_main_13"]}, headers=OWNER)
        await client.post(
            base,
            json={"card_ids": [r[0] for r in RUNES], "section": "rune", "quantity": 3},
            headers=OWNER,
        )

        response = await client.get(f"/decks/{deck['id']}/validation", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["errors"] == []

    async def test_illegal_deck_reports_every_error(
        self,
        client: AsyncClient,
        seeded_cards: list,  # noqa: ARG002
    ) -> None:
        deck = await _create_deck(client)
        await client.post(
            f"/decks/{deck['id']}/items",
            json={"card_ids": ["card_calm", "card_ghost"], "quantity": 4},
            headers=OWNER,
        )

        response = await client.get(f"/decks/{deck['id']}/validation", headers=OWNER)

        data = response.json()
        assert data["is_valid"] is False
        assert {e["id"] for e in data["errors"]} == {
            "main_deck_size",
            "copies_Quiet Monk_Main",
            "domain_Quiet Monk",
            "rune_deck_size",
        }
        assert data["unknown_card_ids"] == ["card_ghost"]


class TestExportImport:
    async def test_export_then_import(self, client: AsyncClient) -> None:
        deck = await _create_deck(client)
        await client.post(
            f"/decks/{deck['id']}/items",
            json={"card_ids": ["card_1"], "quantity": 2},
            headers=OWNER,
        )

        exported = await client.get(f"/decks/{deck['id']}/export", headers=OWNER)
        assert exported.status_code == 200
        assert exported.headers["content-type"] == "application/json"
        assert json.loads(exported.text)["main"] == [["card_1", "2"]]

        response = await client.post("/decks/import", json={"text": exported.text}, headers=OTHER)

        assert response.status_code == 201
        data = response.json()
        assert data["deck"]["owner_user_id"] == "user_other"
        assert data["deck"]["id"] != deck["id"]
        assert data["deck"]["title"] == "Jinx Aggro"
        assert [(i["card_id"], i["qty"]) for i in data["items"]] == [("card_1", 2)]

    async def test_import_bad_item(self, client: AsyncClient) -> None:
        text = json.dumps(
            {
                "legend": {"championTag": "jinx", "domains": ["Fury"]},
                "title": "Broken",
                "main": [["card_1"]],
                "side": [],
                "runes": [],
            }
        )

        response = await client.post("/decks/import", json={"text": text}, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["failure"]["message"] == "Invalid item format in imported deck"
        assert (await client.get("/decks", headers=OWNER)).json()["count"] == 0
