"""Tests for public deck endpoints."""

from httpx import AsyncClient

OWNER = {"X-User-ID": "user_owner"}
FAN = {"X-User-ID": "user_fan"}


async def _publish(client: AsyncClient, title: str) -> str:
    response = await client.post(
        "/decks",
        json={"title": title, "legend_champion_tag": "jinx", "legend_domains": ["Fury"]},
        headers=OWNER,
    )
    deck_id = response.json()["id"]
    response = await client.post(
        f"/decks/{deck_id}/visibility", json={"is_public": True}, headers=OWNER
    )
    assert response.json()["is_public"] is True
    return deck_id


class TestPublicDecks:
    async def test_empty_listing(self, client: AsyncClient) -> None:
        response = await client.get("/public/decks")

        assert response.status_code == 200
        assert response.json() == {"sort": "trending", "decks": [], "count": 0}

    async def test_private_decks_are_not_listed(self, client: AsyncClient) -> None:
        await client.post(
            "/decks",
            json={"title": "Secret", "legend_champion_tag": "jinx", "legend_domains": ["Fury"]},
            headers=OWNER,
        )

        response = await client.get("/public/decks")

        assert response.json()["count"] == 0

    async def test_top_sort_orders_by_votes(self, client: AsyncClient) -> None:
        quiet = await _publish(client, "Quiet")
        loud = await _publish(client, "Loud")
        await client.post(f"/public/decks/{loud}/vote", headers=FAN)

        response = await client.get("/public/decks?sort=top", headers=FAN)

        data = response.json()
        assert data["sort"] == "top"
        assert [d["deck"]["id"] for d in data["decks"]] == [loud, quiet]
        assert data["decks"][0]["vote_count"] == 1
        assert data["decks"][0]["has_user_voted"] is True
        assert data["decks"][1]["has_user_voted"] is False

    async def test_invalid_sort(self, client: AsyncClient) -> None:
        response = await client.get("/public/decks?sort=oldest")

        assert response.status_code == 422


class TestVoting:
    async def test_vote_toggles(self, client: AsyncClient) -> None:
        deck_id = await _publish(client, "Votable")

        first = await client.post(f"/public/decks/{deck_id}/vote", headers=FAN)
        second = await client.post(f"/public/decks/{deck_id}/vote", headers=FAN)

        assert first.json() == {"deck_id": deck_id, "voted": True}
        assert second.json() == {"deck_id": deck_id, "voted": False}

    async def test_vote_requires_user(self, client: AsyncClient) -> None:
        deck_id = await _publish(client, "Votable")

        response = await client.post(f"/public/decks/{deck_id}/vote")

        assert response.status_code == 401

    async def test_vote_on_missing_deck(self, client: AsyncClient) -> None:
        response = await client.post("/public/decks/deck_missing/vote", headers=FAN)

        assert response.status_code == 404

    async def test_unpublishing_clears_votes(self, client: AsyncClient) -> None:
        deck_id = await _publish(client, "Votable")
        await client.post(f"/public/decks/{deck_id}/vote", headers=FAN)

        await client.post(f"/decks/{deck_id}/visibility", json={"is_public": False}, headers=OWNER)
        await client.post(f"/decks/{deck_id}/visibility", json={"is_public": True}, headers=OWNER)

        response = await client.get("/public/decks", headers=FAN)
        assert response.json()["decks"][0]["vote_count"] == 0
