"""
Integration Tests: HTTP API

Drives the FastAPI app through httpx.ASGITransport with the database
dependency pointed at the test session factory.

Test cases:
- X-User-Id authentication
- League creation and listing
- Offer / accept / opposite view over HTTP
- Domain errors rendered as {"error": ...}
- Settlement and admin routes behind the service key
- Request validation (422)
"""

import httpx
import pytest_asyncio

from config import settings
from conftest import ALICE, BOB, CAROL, OUTSIDER, SEASON, WEEK
from database.dependencies import get_db
from main import app


@pytest_asyncio.fixture
async def api(session_factory, league, monkeypatch):
    monkeypatch.setattr(settings, "settlement_api_key", "")

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def as_user(user_id) -> dict:
    return {"X-User-Id": str(user_id)}


async def offer(api, league_id, user=ALICE, **overrides) -> dict:
    body = {
        "week": WEEK,
        "season": SEASON,
        "matchup_index": 0,
        "side": "B",
        "token_amount": 10,
        "spread": 3.5,
    }
    body.update(overrides)
    response = await api.post(f"/leagues/{league_id}/wagers", json=body, headers=as_user(user))
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Health and auth
# ============================================================================

async def test_root(api) -> None:
    response = await api.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


async def test_missing_user_header(api, league) -> None:
    response = await api.get("/leagues")
    assert response.status_code == 401


async def test_invalid_user_header(api, league) -> None:
    response = await api.get("/leagues", headers={"X-User-Id": "not-a-uuid"})
    assert response.status_code == 401


# ============================================================================
# Leagues
# ============================================================================

async def test_create_and_list_leagues(api) -> None:
    response = await api.post(
        "/leagues",
        json={"name": "Work League", "external_id": "1180"},
        headers=as_user(OUTSIDER),
    )
    assert response.status_code == 201
    created = response.json()
    assert created["created_by"] == str(OUTSIDER)

    response = await api.get("/leagues", headers=as_user(OUTSIDER))
    assert [lg["id"] for lg in response.json()] == [created["id"]]


async def test_join_returns_profile(api, league) -> None:
    response = await api.post(
        f"/leagues/{league.id}/join",
        params={"display_name": "Outsider"},
        headers=as_user(OUTSIDER),
    )
    assert response.status_code == 200
    assert response.json() == {
        "id": str(OUTSIDER),
        "display_name": "Outsider",
        "token_balance": 1000,
    }


async def test_matchup_spreads(api, league) -> None:
    response = await api.get(
        f"/leagues/{league.id}/matchups/{WEEK}/spreads",
        params={"season": SEASON},
        headers=as_user(BOB),
    )
    assert response.status_code == 200
    spreads = response.json()
    assert spreads[0]["spread"] == 3.5
    assert spreads[0]["favored"] == "A"
    assert spreads[1]["roster_b"] is None


async def test_spreads_require_season(api, league) -> None:
    response = await api.get(
        f"/leagues/{league.id}/matchups/{WEEK}/spreads", headers=as_user(BOB)
    )
    assert response.status_code == 422


async def test_spreads_for_non_member(api, league) -> None:
    response = await api.get(
        f"/leagues/{league.id}/matchups/{WEEK}/spreads",
        params={"season": SEASON},
        headers=as_user(OUTSIDER),
    )
    assert response.status_code == 403
    assert response.json() == {"error": "You are not a member of this league"}


# ============================================================================
# Wagers
# ============================================================================

async def test_offer_accept_and_opposite(api, league) -> None:
    wager = await offer(api, league.id)
    assert wager["type"] == "12 +3.5 vs 7"
    assert wager["status"] == "offered"

    response = await api.get(f"/wagers/{wager['id']}/opposite", headers=as_user(BOB))
    assert response.status_code == 200
    assert response.json()["position"] == "7 -3.5 vs 12"
    assert response.json()["payout"]["total_pot"] == 30

    response = await api.post(f"/wagers/{wager['id']}/accept", headers=as_user(BOB))
    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert response.json()["accepted_by"] == str(BOB)

    response = await api.post(f"/wagers/{wager['id']}/accept", headers=as_user(CAROL))
    assert response.status_code == 409
    assert "error" in response.json()

    response = await api.get(
        f"/leagues/{league.id}/wagers",
        params={"status": "active"},
        headers=as_user(CAROL),
    )
    assert [w["id"] for w in response.json()] == [wager["id"]]


async def test_accept_own_wager_is_forbidden(api, league) -> None:
    wager = await offer(api, league.id)
    response = await api.post(f"/wagers/{wager['id']}/accept", headers=as_user(ALICE))
    assert response.status_code == 403


async def test_offer_validation(api, league) -> None:
    response = await api.post(
        f"/leagues/{league.id}/wagers",
        json={"week": WEEK, "season": SEASON, "matchup_index": 0, "side": "C",
              "token_amount": 0},
        headers=as_user(ALICE),
    )
    assert response.status_code == 422


async def test_offer_over_balance(api, league) -> None:
    response = await api.post(
        f"/leagues/{league.id}/wagers",
        json={"week": WEEK, "season": SEASON, "matchup_index": 0, "side": "A",
              "token_amount": 5000},
        headers=as_user(ALICE),
    )
    assert response.status_code == 409
    assert response.json()["error"].startswith("Insufficient balance")


async def test_counter_offer(api, league) -> None:
    wager = await offer(api, league.id)
    response = await api.post(
        f"/wagers/{wager['id']}/counter",
        json={"token_amount": 20, "payout_ratio": 1.5},
        headers=as_user(BOB),
    )
    assert response.status_code == 201
    counter = response.json()
    assert counter["type"] == "7 -3.5 vs 12"
    assert counter["terms"]["originalBetId"] == wager["id"]


async def test_unknown_wager(api, league) -> None:
    response = await api.get(f"/wagers/{OUTSIDER}", headers=as_user(ALICE))
    assert response.status_code == 404


# ============================================================================
# Settlement and admin
# ============================================================================

async def test_settle_bets_and_history(api, league) -> None:
    wager = await offer(api, league.id)
    await api.post(f"/wagers/{wager['id']}/accept", headers=as_user(BOB))

    response = await api.post(
        "/settlement/settle-bets",
        json={
            "league_id": str(league.id),
            "week": WEEK,
            "season": SEASON,
            "game_results": [
                {"home_roster_id": 12, "away_roster_id": 7,
                 "home_roster_points": 20, "away_roster_points": 21},
            ],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["settled_count"] == 1
    assert body["results"][0]["outcome"] == "won"
    assert body["results"][0]["payout_amount"] == 30

    response = await api.get(
        f"/settlement/leagues/{league.id}/results/{WEEK}", params={"season": SEASON}
    )
    assert response.json()[0]["status"] == "final"

    response = await api.get(f"/leagues/{league.id}/analytics", headers=as_user(ALICE))
    assert response.json()["wins"] == 1

    response = await api.get(f"/leagues/{league.id}/transactions", headers=as_user(ALICE))
    assert [t["type"] for t in response.json()] == ["payout_won", "bet_placed"]


async def test_settle_bets_requires_game_results(api, league) -> None:
    response = await api.post(
        "/settlement/settle-bets",
        json={"league_id": str(league.id), "week": WEEK, "season": SEASON},
    )
    assert response.status_code == 422


async def test_service_key_is_enforced(api, league, monkeypatch) -> None:
    monkeypatch.setattr(settings, "settlement_api_key", "s3cret")

    response = await api.get("/admin/wagers/review")
    assert response.status_code == 401

    response = await api.get("/admin/wagers/review", headers={"X-Service-Key": "s3cret"})
    assert response.status_code == 200
    assert response.json() == []


async def test_admin_resolve(api, league) -> None:
    response = await api.post(
        f"/leagues/{league.id}/wagers/custom",
        json={"description": "Longest TD", "token_amount": 10, "week": WEEK,
              "season": SEASON},
        headers=as_user(ALICE),
    )
    wager_id = response.json()["id"]

    response = await api.post(
        f"/admin/wagers/{wager_id}/resolve", json={"outcome": "push"}
    )
    assert response.status_code == 409

    await api.post(f"/wagers/{wager_id}/accept", headers=as_user(CAROL))
    response = await api.post(
        f"/admin/wagers/{wager_id}/resolve", json={"outcome": "push"}
    )
    assert response.status_code == 200
    assert response.json()["outcome"] == "push"

    response = await api.post(
        f"/admin/wagers/{wager_id}/resolve", json={"outcome": "unresolvable"}
    )
    assert response.status_code == 422

