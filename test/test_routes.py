"""
API tests through FastAPI's TestClient.

Services are swapped for instances backed by the in-memory repositories via
app.dependency_overrides, so no MongoDB or OpenAI access happens.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import inspect

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from main import app
from talentmatch.config import settings
from talentmatch.services.match_analysis_service import MatchAnalysisService
from talentmatch.services.matching_service import MatchingService, get_matching_service
from talentmatch.services.placement_service import PlacementService, get_placement_service
from talentmatch.services.profiler_service import ProfilerService, get_profiler_service
from talentmatch.services.ticket_service import TicketService, get_ticket_service

from conftest import SAMPLE_TICKET, STRONG_PROFILER, WEAK_PROFILER

ADMIN_KEY = "test-admin-key"
MEMBER_KEY = "test-member-key"
HEADERS = {"X-API-Key": ADMIN_KEY}


@pytest.fixture
def client(monkeypatch, ticket_repo, profiler_repo, placement_repo, history_repo, matcher):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "API_KEYS", [MEMBER_KEY])

    app.dependency_overrides[get_ticket_service] = lambda: TicketService(ticket_repo)
    app.dependency_overrides[get_profiler_service] = lambda: ProfilerService(profiler_repo, placement_repo)
    app.dependency_overrides[get_placement_service] = lambda: PlacementService(
        placement_repo, history_repo, ticket_repo, profiler_repo, matcher
    )
    app.dependency_overrides[get_matching_service] = lambda: MatchingService(
        ticket_repo, profiler_repo, placement_repo, matcher, MatchAnalysisService(openai_service=None)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_ticket(client, **overrides):
    response = client.post("/api/tickets", json=dict(SAMPLE_TICKET, **overrides), headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()["ticket"]


def create_profiler(client, data):
    response = client.post("/api/profilers", json=data, headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()["profiler"]


# ===================== AUTH / SERVICE INFO =====================

def test_root_is_public(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == settings.APP_NAME


def test_api_key_required(client):
    assert client.get("/api/tickets").status_code == 401
    assert client.get("/api/tickets", headers={"X-API-Key": "wrong"}).status_code == 403
    assert client.get("/api/tickets", headers={"X-API-Key": MEMBER_KEY}).status_code == 200

    ticket = create_ticket(client)
    member = {"X-API-Key": MEMBER_KEY}
    assert client.delete(f"/api/tickets/{ticket['id']}", headers=member).status_code == 403
    assert client.delete(f"/api/tickets/{ticket['id']}", headers=HEADERS).status_code == 200


def test_dev_admin_key_only_in_debug(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", "")
    dev = {"X-API-Key": "dev-key"}

    monkeypatch.setattr(settings, "DEBUG", False)
    assert client.get("/api/tickets", headers=dev).status_code == 403
    assert client.delete("/api/tickets/tkt_missing", headers=dev).status_code == 403

    monkeypatch.setattr(settings, "DEBUG", True)
    assert client.get("/api/tickets", headers=dev).status_code == 200
    assert client.delete("/api/tickets/tkt_missing", headers=dev).status_code == 404


def test_api_handlers_run_in_threadpool():
    """Handlers call blocking pymongo code, so they must be plain functions."""
    api_routes = [r for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/api")]
    assert api_routes
    assert [r.path for r in api_routes if inspect.iscoroutinefunction(r.endpoint)] == []


# ===================== TICKETS =====================

def test_ticket_crud(client):
    ticket = create_ticket(client)
    assert ticket["status"] == "new"
    assert ticket["ticket_number"]

    by_number = client.get(f"/api/tickets/{ticket['ticket_number']}", headers=HEADERS)
    assert by_number.json()["ticket"]["id"] == ticket["id"]

    updated = client.put(f"/api/tickets/{ticket['id']}", json={"priority": "high"}, headers=HEADERS)
    assert updated.status_code == 200
    assert updated.json()["ticket"]["priority"] == "high"

    listing = client.get("/api/tickets", params={"priority": "high"}, headers=HEADERS).json()
    assert listing["pagination"]["total"] == 1

    assert client.delete(f"/api/tickets/{ticket['id']}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/tickets/{ticket['id']}", headers=HEADERS).status_code == 404


def test_ticket_validation(client):
    bad_range = dict(SAMPLE_TICKET, budget_min=100, budget_max=50)
    assert client.post("/api/tickets", json=bad_range, headers=HEADERS).status_code == 422

    missing_title = {k: v for k, v in SAMPLE_TICKET.items() if k != "position_title"}
    assert client.post("/api/tickets", json=missing_title, headers=HEADERS).status_code == 422

    ticket = create_ticket(client)
    inverted = client.put(f"/api/tickets/{ticket['id']}", json={"budget_max": 10}, headers=HEADERS)
    assert inverted.status_code == 400


# ===================== PROFILERS =====================

def test_profiler_crud_and_duplicate_email(client):
    profiler = create_profiler(client, STRONG_PROFILER)
    assert profiler["id"].startswith("prf_")
    assert profiler["notice_period_days"] == 0

    duplicate = client.post("/api/profilers", json=dict(STRONG_PROFILER, email="ANA@example.com"), headers=HEADERS)
    assert duplicate.status_code == 409

    bad_email = client.post("/api/profilers", json=dict(WEAK_PROFILER, email="not-an-email"), headers=HEADERS)
    assert bad_email.status_code == 400

    detail = client.get(f"/api/profilers/{profiler['id']}", headers=HEADERS).json()["profiler"]
    assert detail["placements"] == []

    updated = client.put(f"/api/profilers/{profiler['id']}", json={"availability_status": "busy"}, headers=HEADERS)
    assert updated.json()["profiler"]["availability_status"] == "busy"

    assert client.delete(f"/api/profilers/{profiler['id']}", headers=HEADERS).status_code == 200
    assert client.delete(f"/api/profilers/{profiler['id']}", headers=HEADERS).status_code == 404


# ===================== MATCHING =====================

def test_match_endpoint(client):
    ticket = create_ticket(client)
    strong = create_profiler(client, STRONG_PROFILER)
    create_profiler(client, WEAK_PROFILER)

    response = client.get(f"/api/profilers/match/{ticket['id']}", headers=HEADERS)
    assert response.status_code == 200
    body = response.json()

    # weak candidate falls below the default minimum score
    assert [p["id"] for p in body["matched_profilers"]] == [strong["id"]]
    assert body["total_matches"] == 1
    assert body["filters_applied"] == {
        "min_match_score": settings.MATCH_DEFAULT_MIN_SCORE,
        "availability_only": False,
        "limit": settings.MATCH_DEFAULT_LIMIT,
    }


def test_match_endpoint_filters(client):
    ticket = create_ticket(client)
    create_profiler(client, STRONG_PROFILER)
    create_profiler(client, WEAK_PROFILER)

    everyone = client.get(
        f"/api/profilers/match/{ticket['id']}", params={"min_match_score": 0}, headers=HEADERS
    ).json()
    assert everyone["total_matches"] == 2

    limited = client.get(
        f"/api/profilers/match/{ticket['id']}", params={"min_match_score": 0, "limit": 1}, headers=HEADERS
    ).json()
    assert len(limited["matched_profilers"]) == 1
    assert limited["total_matches"] == 2

    available = client.get(
        f"/api/profilers/match/{ticket['id']}",
        params={"min_match_score": 0, "availability_only": "true"},
        headers=HEADERS,
    ).json()
    assert all(p["availability_status"] == "available" for p in available["matched_profilers"])


def test_match_endpoint_errors(client):
    assert client.get("/api/profilers/match/tkt_missing", headers=HEADERS).status_code == 404

    ticket = create_ticket(client)
    bad = client.get(f"/api/profilers/match/{ticket['id']}", params={"min_match_score": 3}, headers=HEADERS)
    assert bad.status_code == 400


def test_match_with_analysis_fallback(client):
    ticket = create_ticket(client)
    create_profiler(client, STRONG_PROFILER)

    body = client.get(
        f"/api/profilers/match/{ticket['id']}", params={"include_analysis": "true"}, headers=HEADERS
    ).json()
    assert body["matched_profilers"][0]["ai_analysis"]["source"] == "fallback"


# ===================== PLACEMENTS =====================

def test_placement_lifecycle(client):
    ticket = create_ticket(client)
    profiler = create_profiler(client, STRONG_PROFILER)
    payload = {"ticket_id": ticket["id"], "profiler_id": profiler["id"], "assigned_by": "dm@example.com"}

    created = client.post("/api/placements", json=payload, headers=HEADERS)
    assert created.status_code == 201
    placement = created.json()["placement"]

    assert client.post("/api/placements", json=payload, headers=HEADERS).status_code == 409

    match = client.get(f"/api/profilers/match/{ticket['id']}", headers=HEADERS).json()
    assert match["matched_profilers"][0]["existing_placement"]["id"] == placement["id"]

    moved = client.put(
        f"/api/placements/{placement['id']}",
        json={"status": "interviewing", "status_change_reason": "Client shortlisted"},
        headers=HEADERS,
    )
    assert moved.json()["placement"]["status"] == "interviewing"

    withdrawn = client.post(f"/api/placements/{placement['id']}/withdraw", json={"reason": "Client paused"}, headers=HEADERS)
    assert withdrawn.json()["placement"]["active"] is False

    assert client.post("/api/placements", json=payload, headers=HEADERS).status_code == 201

    detail = client.get(f"/api/placements/{placement['id']}", headers=HEADERS).json()["placement"]
    assert [h["status_changed_to"] for h in detail["history"]] == ["proposed", "interviewing", "withdrawn"]

    listing = client.get("/api/placements", params={"ticket_id": ticket["id"]}, headers=HEADERS).json()
    assert listing["pagination"]["total"] == 2

    assert client.delete(f"/api/placements/{placement['id']}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/placements/{placement['id']}", headers=HEADERS).status_code == 404


def test_placement_with_unknown_references(client):
    ticket = create_ticket(client)
    response = client.post(
        "/api/placements", json={"ticket_id": ticket["id"], "profiler_id": "prf_missing"}, headers=HEADERS
    )
    assert response.status_code == 400

    bad_status = client.post(
        "/api/placements", json={"ticket_id": ticket["id"], "profiler_id": "prf_x", "status": "nope"}, headers=HEADERS
    )
    assert bad_status.status_code == 422
