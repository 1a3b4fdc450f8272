"""
Tests for placement registration and its one-active-placement-per-pair rule
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from talentmatch.domain.errors import NotFoundError, PlacementConflictError, ValidationFailedError
from talentmatch.services.placement_service import PlacementService


@pytest.fixture
def service(placement_repo, history_repo, ticket_repo, profiler_repo, matcher):
    return PlacementService(
        placement_repo=placement_repo,
        history_repo=history_repo,
        ticket_repo=ticket_repo,
        profiler_repo=profiler_repo,
        matcher=matcher,
    )


def test_create_defaults(service, ticket, strong_profiler, history_repo):
    placement = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})

    assert placement["id"].startswith("plc_")
    assert placement["status"] == "proposed"
    assert placement["active"] is True
    # computed by the Matcher when not supplied
    assert 0.0 < placement["match_score"] <= 1.0

    history = history_repo.list_for(placement["id"])
    assert [h["status_changed_to"] for h in history] == ["proposed"]


def test_create_by_ticket_number_keeps_explicit_score(service, ticket, strong_profiler):
    placement = service.create({
        "ticket_id": ticket["ticket_number"],
        "profiler_id": strong_profiler["id"],
        "match_score": 0.42,
    })
    assert placement["ticket_id"] == ticket["id"]
    assert placement["match_score"] == 0.42


def test_second_active_placement_conflicts(service, ticket, strong_profiler):
    data = {"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]}
    service.create(data)

    with pytest.raises(PlacementConflictError):
        service.create(data)


def test_withdrawn_placement_frees_the_pair(service, ticket, strong_profiler, placement_repo):
    data = {"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]}
    first = service.create(data)

    withdrawn = service.withdraw(first["id"], changed_by="dm@example.com", reason="Client paused")
    assert withdrawn["status"] == "withdrawn"
    assert withdrawn["active"] is False

    second = service.create(data)
    assert second["id"] != first["id"]
    assert placement_repo.find_active(ticket["id"], strong_profiler["id"])["id"] == second["id"]


def test_reactivating_while_another_is_active_conflicts(service, ticket, strong_profiler):
    data = {"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]}
    first = service.create(data)
    service.update(first["id"], {"status": "cancelled"})
    service.create(data)

    with pytest.raises(PlacementConflictError):
        service.update(first["id"], {"status": "interviewing"})


def test_index_race_maps_to_conflict(service, ticket, strong_profiler, placement_repo):
    """Another writer inserted between the check and the insert"""
    data = {"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]}
    service.create(data)
    placement_repo.find_active = lambda ticket_id, profiler_id: None

    with pytest.raises(PlacementConflictError):
        service.create(data)


def test_unknown_ticket_or_profiler(service, ticket, strong_profiler):
    with pytest.raises(ValidationFailedError):
        service.create({"ticket_id": "tkt_missing", "profiler_id": strong_profiler["id"]})
    with pytest.raises(ValidationFailedError):
        service.create({"ticket_id": ticket["id"], "profiler_id": "prf_missing"})
    with pytest.raises(ValidationFailedError):
        service.create({"ticket_id": ticket["id"]})


def test_cannot_create_inactive(service, ticket, strong_profiler):
    with pytest.raises(ValidationFailedError):
        service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"], "status": "withdrawn"})


def test_status_changes_append_history(service, ticket, strong_profiler, history_repo):
    placement = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})

    service.update(placement["id"], {"status": "interviewing", "status_change_reason": "Shortlisted"})
    service.update(placement["id"], {"notes": "Call went well"})
    service.update(placement["id"], {"status": "accepted"})

    history = history_repo.list_for(placement["id"])
    assert [h["status_changed_to"] for h in history] == ["proposed", "interviewing", "accepted"]
    assert history[1]["reason"] == "Shortlisted"


def test_invalid_status_and_empty_update(service, ticket, strong_profiler):
    placement = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})

    with pytest.raises(ValidationFailedError):
        service.update(placement["id"], {"status": "hired-ish"})
    with pytest.raises(ValidationFailedError):
        service.update(placement["id"], {"notes": None})
    with pytest.raises(NotFoundError):
        service.update("plc_missing", {"status": "accepted"})


def test_get_includes_summaries_and_history(service, ticket, strong_profiler):
    placement = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})

    detail = service.get(placement["id"])
    assert detail["ticket"]["position_title"] == "Senior Backend Engineer"
    assert detail["profiler"]["email"] == "ana@example.com"
    assert len(detail["history"]) == 1


def test_list_and_delete(service, ticket, strong_profiler, weak_profiler, history_repo):
    a = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})
    service.create({"ticket_id": ticket["id"], "profiler_id": weak_profiler["id"]})

    page = service.list(ticket_id=ticket["id"], limit=1)
    assert page["pagination"] == {"total": 2, "limit": 1, "offset": 0, "has_more": True}
    assert page["placements"][0]["profiler"]["id"] in (strong_profiler["id"], weak_profiler["id"])

    service.delete(a["id"])
    assert history_repo.list_for(a["id"]) == []
    with pytest.raises(NotFoundError):
        service.get(a["id"])


def test_default_matcher_uses_configured_weights(
    monkeypatch, placement_repo, history_repo, ticket_repo, profiler_repo, ticket, strong_profiler
):
    from talentmatch.config import settings
    from talentmatch.utils.match_scorer import Matcher, ScoringWeights
    from talentmatch.utils.profile_normalizer import CandidateProfile, Ticket

    monkeypatch.setattr(settings, "MATCH_WEIGHT_SKILLS", 1.0)
    monkeypatch.setattr(settings, "MATCH_WEIGHT_EXPERIENCE", 0.0)
    monkeypatch.setattr(settings, "MATCH_WEIGHT_LOCATION", 0.0)
    monkeypatch.setattr(settings, "MATCH_WEIGHT_AVAILABILITY", 0.0)
    monkeypatch.setattr(settings, "MATCH_WEIGHT_BUDGET", 0.0)

    # no matcher passed: the service builds one from settings
    service = PlacementService(placement_repo, history_repo, ticket_repo, profiler_repo)
    placement = service.create({"ticket_id": ticket["id"], "profiler_id": strong_profiler["id"]})

    skills_only = Matcher(ScoringWeights(skills=1, experience=0, location=0, availability=0, budget=0))
    expected = skills_only.score(Ticket.from_record(ticket), CandidateProfile.from_record(strong_profiler))
    assert placement["match_score"] == expected.match_score
    assert placement["match_score"] == expected.match_details.skills_match
