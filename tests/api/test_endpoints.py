"""Tests for API endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from api.main import app
from api.routes import game as game_routes
from api.session import get_session_store
from tests.helpers import stacked_game


@pytest_asyncio.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def session(client):
    """A fresh game session header."""
    response = await client.post("/api/game/new")
    return {"X-Session-ID": response.json()["session_id"]}


def hand(*ranks):
    return [{"rank": r} for r in ranks]


@pytest.mark.asyncio
async def test_health_check(client):
    """Test health check endpoint."""
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestStrategyEndpoints:
    """Stateless strategy endpoints."""

    @pytest.mark.asyncio
    async def test_evaluate(self, client):
        response = await client.post("/api/strategy/evaluate", json={"cards": hand("A", "A", "9")})
        assert response.status_code == 200
        assert response.json() == {
            "total": 21,
            "soft": True,
            "is_pair": False,
            "is_blackjack": False,
            "classification": "unknown",
        }

    @pytest.mark.asyncio
    async def test_evaluate_empty_hand_rejected(self, client):
        response = await client.post("/api/strategy/evaluate", json={"cards": []})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_recommend(self, client):
        response = await client.post(
            "/api/strategy/recommend",
            json={
                "player_cards": hand("A", "7"),
                "dealer_upcard": {"rank": "9", "suit": "♥"},
                "can_double": True,
                "can_split": True,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"action": "HIT", "reason": "A7 hit vs 9,10,A."}

    @pytest.mark.asyncio
    async def test_recommend_degrades_double(self, client):
        response = await client.post(
            "/api/strategy/recommend",
            json={
                "player_cards": hand("6", "5"),
                "dealer_upcard": {"rank": "6"},
                "can_double": False,
                "can_split": False,
            },
        )
        assert response.json()["action"] == "HIT"

    @pytest.mark.asyncio
    async def test_recommend_requires_flags_and_upcard(self, client):
        response = await client.post(
            "/api/strategy/recommend",
            json={"player_cards": hand("10", "6"), "dealer_upcard": {"rank": "10"}},
        )
        assert response.status_code == 422

        response = await client.post(
            "/api/strategy/recommend",
            json={"player_cards": hand("10", "6"), "can_double": True, "can_split": True},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_recommend_bad_rank(self, client):
        response = await client.post(
            "/api/strategy/recommend",
            json={
                "player_cards": hand("1", "6"),
                "dealer_upcard": {"rank": "10"},
                "can_double": True,
                "can_split": True,
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_settle_blackjack_truncates(self, client):
        response = await client.post(
            "/api/strategy/settle",
            json={"player_cards": hand("A", "K"), "dealer_cards": hand("10", "7"), "wager": 33},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "blackjack"
        assert data["delta"] == 82

    @pytest.mark.asyncio
    async def test_settle_negative_wager(self, client):
        response = await client.post(
            "/api/strategy/settle",
            json={"player_cards": hand("A", "K"), "dealer_cards": hand("10", "7"), "wager": -5},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_settle_round(self, client):
        response = await client.post(
            "/api/strategy/settle-round",
            json={
                "hands": [
                    {"cards": hand("8", "K"), "wager": 50},
                    {"cards": hand("8", "3", "10"), "wager": 100},
                ],
                "dealer_cards": hand("10", "8"),
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert [r["outcome"] for r in data["results"]] == ["push", "win"]
        assert data["total_return"] == 250
        assert data["total_wager"] == 150
        assert data["net"] == 100


class TestGameEndpoints:
    """Session-backed game endpoints."""

    @pytest.mark.asyncio
    async def test_new_game(self, client):
        response = await client.post("/api/game/new", json={"allowed_types": ["soft"]})
        assert response.status_code == 200
        assert "session_id" in response.json()

    @pytest.mark.asyncio
    async def test_game_state(self, client, session):
        response = await client.get("/api/game/state", headers=session)
        assert response.status_code == 200
        data = response.json()

        assert data["state"] == "WAITING_FOR_BET"
        assert data["bankroll"] == 1000
        assert data["player_hands"] == []

    @pytest.mark.asyncio
    async def test_unsigned_session_rejected(self, client):
        response = await client.get("/api/game/state", headers={"X-Session-ID": "forged"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_session_header(self, client):
        response = await client.get("/api/game/state")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_place_bet(self, client, session):
        response = await client.post("/api/game/bet", json={"amount": 100}, headers=session)
        assert response.status_code == 200
        data = response.json()

        assert data["state"] in ["PLAYER_TURN", "WAITING_FOR_BET", "GAME_OVER"]
        assert len(data["player_hands"][0]["cards"]) == 2

    @pytest.mark.asyncio
    async def test_default_bet(self, client, session):
        game_routes._games[session["X-Session-ID"]] = stacked_game(["10", "6", "10", "7"])
        response = await client.post("/api/game/bet", json={}, headers=session)
        assert response.status_code == 200
        assert response.json()["player_hands"][0]["wager"] == 25
        assert response.json()["bankroll"] == 975

    @pytest.mark.asyncio
    async def test_invalid_bet_amount(self, client, session):
        response = await client.post("/api/game/bet", json={"amount": 5000}, headers=session)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_hole_card_hidden_until_reveal(self, client, session):
        game_routes._games[session["X-Session-ID"]] = stacked_game(["10", "6", "10", "7", "K"])

        response = await client.post("/api/game/bet", json={"amount": 100}, headers=session)
        data = response.json()
        assert data["state"] == "PLAYER_TURN"
        assert len(data["dealer_hand"]["cards"]) == 1
        assert data["dealer_showing"]["rank"] == "10"
        assert data["can_hit"] and not data["can_split"]

        response = await client.post("/api/game/action", json={"action": "hit"}, headers=session)
        data = response.json()
        assert data["state"] == "WAITING_FOR_BET"
        assert len(data["dealer_hand"]["cards"]) == 2
        assert data["bankroll"] == 900
        assert data["last_assessment"]["correct"] is True
        assert data["last_round_messages"] == ["Busted. (You: 26, Dealer: 17) -$100"]

    @pytest.mark.asyncio
    async def test_hint(self, client, session):
        game_routes._games[session["X-Session-ID"]] = stacked_game(["A", "7", "9", "8"])
        await client.post("/api/game/bet", json={"amount": 10}, headers=session)

        response = await client.get("/api/game/hint", headers=session)

        assert response.status_code == 200
        assert response.json() == {"action": "HIT", "reason": "A7 hit vs 9,10,A."}

    @pytest.mark.asyncio
    async def test_hint_without_hand(self, client, session):
        response = await client.get("/api/game/hint", headers=session)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_action_not_allowed(self, client, session):
        response = await client.post("/api/game/action", json={"action": "stand"}, headers=session)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_history(self, client, session):
        game_routes._games[session["X-Session-ID"]] = stacked_game(["10", "6", "10", "7"])
        await client.post("/api/game/bet", json={"amount": 50}, headers=session)
        await client.post("/api/game/action", json={"action": "stand"}, headers=session)

        response = await client.get("/api/game/history", headers=session)

        assert response.status_code == 200
        data = response.json()
        assert len(data["rounds"]) == 1
        assert data["rounds"][0]["net"] == -50
        assert data["total_decisions"] == 1
        assert data["accuracy"] == 0.0
        assert data["mistakes"] == [{"situation": "hard 16 vs 10", "correct_action": "HIT", "count": 1}]

    @pytest.mark.asyncio
    async def test_expired_session_drops_cached_game(self, client, session):
        session_id = session["X-Session-ID"]
        game_routes._games[session_id] = stacked_game(["10", "6", "10", "7"])
        await client.post("/api/game/bet", json={"amount": 100}, headers=session)

        await (await get_session_store()).delete(session_id)
        await client.post("/api/game/new")
        assert session_id not in game_routes._games

        response = await client.get("/api/game/state", headers=session)
        assert response.json()["state"] == "WAITING_FOR_BET"
        assert response.json()["bankroll"] == 1000

    @pytest.mark.asyncio
    async def test_game_restored_from_store(self, client, session):
        session_id = session["X-Session-ID"]
        await client.post("/api/game/bet", json={"amount": 100}, headers=session)
        before = (await client.get("/api/game/state", headers=session)).json()

        game_routes._games.pop(session_id)
        after = (await client.get("/api/game/state", headers=session)).json()

        assert after == before


class TestTrainingEndpoints:
    """Strategy drill endpoints."""

    @pytest.mark.asyncio
    async def test_drill_and_verify(self, client, session):
        response = await client.post(
            "/api/training/strategy/drill",
            json={"allowed_types": ["pairs"], "seed": 7},
            headers=session,
        )
        assert response.status_code == 200
        drill = response.json()
        assert drill["hand_type"] == "pairs"
        assert drill["is_pair"]
        assert len(drill["player_cards"]) == 2

        response = await client.post(
            "/api/training/strategy/verify",
            json={"action": "SPLIT"},
            headers=session,
        )
        assert response.status_code == 200
        result = response.json()
        assert result["correct"] == (result["correct_action"] == "SPLIT")
        assert result["text"].startswith("Correct" if result["correct"] else "Incorrect")

    @pytest.mark.asyncio
    async def test_seeded_drill_repeats(self, client, session):
        body = {"allowed_types": ["soft", "hard"], "seed": 3}
        first = (await client.post("/api/training/strategy/drill", json=body, headers=session)).json()
        second = (await client.post("/api/training/strategy/drill", json=body, headers=session)).json()

        assert [c["rank"] for c in first["player_cards"]] == [c["rank"] for c in second["player_cards"]]
        assert first["hand_type"] in ("soft", "hard")

    @pytest.mark.asyncio
    async def test_verify_without_drill(self, client, session):
        response = await client.post(
            "/api/training/strategy/verify",
            json={"action": "HIT"},
            headers=session,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_drill_rejects_unknown_type(self, client, session):
        response = await client.post(
            "/api/training/strategy/drill",
            json={"allowed_types": ["unknown"]},
            headers=session,
        )
        assert response.status_code == 422
