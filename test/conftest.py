"""
Shared fixtures: in-memory repositories standing in for MongoDB.

Each fake exposes the same methods the services call on the real
repositories, and the placement fake enforces the partial unique index on
(ticket_id, profiler_id, active=True) by raising DuplicateKeyError.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import copy
import itertools
from datetime import datetime

import pytest
from pymongo.errors import DuplicateKeyError

from talentmatch.infra.mongodb.base_repository import new_id
from talentmatch.utils.match_scorer import Matcher


class InMemoryRepository:
    id_prefix = "doc"

    def __init__(self):
        self.docs = {}
        self._seq = itertools.count()

    def _store(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("id", new_id(self.id_prefix))
        doc["created_at"] = datetime.utcnow()
        doc["updated_at"] = doc["created_at"]
        doc["_seq"] = next(self._seq)
        self.docs[doc["id"]] = doc
        return self._out(doc)

    @staticmethod
    def _out(doc):
        if doc is None:
            return None
        out = copy.deepcopy(doc)
        out.pop("_seq", None)
        return out

    def _page(self, docs, offset, limit):
        docs = sorted(docs, key=lambda d: d["_seq"], reverse=True)
        return [self._out(d) for d in docs[offset:offset + limit]], len(docs)

    def get(self, doc_id):
        return self._out(self.docs.get(doc_id))

    def update(self, doc_id, updates):
        doc = self.docs.get(doc_id)
        if doc is None:
            return None
        doc.update({k: v for k, v in updates.items() if k not in ("id", "_id", "created_at")})
        doc["updated_at"] = datetime.utcnow()
        return self._out(doc)

    def delete(self, doc_id):
        return self.docs.pop(doc_id, None) is not None


class FakeTicketRepo(InMemoryRepository):
    id_prefix = "tkt"

    def create(self, data):
        doc = dict(data)
        doc["ticket_number"] = doc.get("ticket_number") or f"TKT-{len(self.docs) + 1:04d}"
        doc.setdefault("status", "new")
        return self._store(doc)

    def get(self, ticket_ref):
        if ticket_ref in self.docs:
            return self._out(self.docs[ticket_ref])
        for doc in self.docs.values():
            if doc.get("ticket_number") == ticket_ref:
                return self._out(doc)
        return None

    def list(self, status=None, priority=None, created_by=None, search=None, offset=0, limit=50):
        docs = [
            d for d in self.docs.values()
            if (not status or d.get("status") == status)
            and (not priority or d.get("priority") == priority)
            and (not created_by or d.get("created_by") == created_by)
            and (not search or search.lower() in (d.get("position_title") or "").lower())
        ]
        return self._page(docs, offset, limit)


class FakeProfilerRepo(InMemoryRepository):
    id_prefix = "prf"

    def create(self, data):
        doc = dict(data)
        doc["email"] = doc["email"].strip().lower()
        if self.get_by_email(doc["email"]):
            raise DuplicateKeyError("E11000 duplicate key error: email")
        return self._store(doc)

    def add_raw(self, doc):
        """Insert a record as-is, bypassing validation (for malformed data)."""
        self.docs[doc.get("id") or new_id(self.id_prefix)] = dict(doc, _seq=next(self._seq))

    def get_many(self, profiler_ids):
        return [self._out(self.docs[i]) for i in profiler_ids if i in self.docs]

    def get_by_email(self, email):
        email = email.strip().lower()
        for doc in self.docs.values():
            if doc.get("email") == email:
                return self._out(doc)
        return None

    def list(self, search=None, availability=None, location=None, skills=None, offset=0, limit=50):
        docs = [
            d for d in self.docs.values()
            if (not availability or d.get("availability_status") == availability)
            and (not location or location.lower() in (d.get("location") or "").lower())
        ]
        return self._page(docs, offset, limit)

    def list_all(self):
        return [self._out(d) for d in sorted(self.docs.values(), key=lambda d: d["_seq"])]


class FakePlacementRepo(InMemoryRepository):
    id_prefix = "plc"

    def _active_clash(self, ticket_id, profiler_id, exclude_id=None):
        return any(
            d["ticket_id"] == ticket_id and d["profiler_id"] == profiler_id
            and d.get("active") and d["id"] != exclude_id
            for d in self.docs.values()
        )

    def create(self, data):
        if data.get("active") and self._active_clash(data["ticket_id"], data["profiler_id"]):
            raise DuplicateKeyError("E11000 duplicate key error: uniq_active_ticket_profiler")
        return self._store(data)

    def find_active(self, ticket_id, profiler_id):
        for doc in self.docs.values():
            if doc["ticket_id"] == ticket_id and doc["profiler_id"] == profiler_id and doc.get("active"):
                return self._out(doc)
        return None

    def active_index_for_ticket(self, ticket_id):
        return {
            (ticket_id, d["profiler_id"]): {"id": d["id"], "status": d["status"]}
            for d in self.docs.values()
            if d["ticket_id"] == ticket_id and d.get("active")
        }

    def list(self, ticket_id=None, profiler_id=None, status=None, offset=0, limit=50):
        docs = [
            d for d in self.docs.values()
            if (not ticket_id or d["ticket_id"] == ticket_id)
            and (not profiler_id or d["profiler_id"] == profiler_id)
            and (not status or d["status"] == status)
        ]
        return self._page(docs, offset, limit)

    def list_by_profiler(self, profiler_id):
        return self.list(profiler_id=profiler_id, limit=1000)[0]

    def update(self, placement_id, updates):
        doc = self.docs.get(placement_id)
        if doc is not None and updates.get("active") and not doc.get("active"):
            if self._active_clash(doc["ticket_id"], doc["profiler_id"], exclude_id=placement_id):
                raise DuplicateKeyError("E11000 duplicate key error: uniq_active_ticket_profiler")
        return super().update(placement_id, updates)


class FakeHistoryRepo:
    def __init__(self):
        self.entries = []

    def add(self, placement_id, status_changed_to, changed_by=None, reason=None, notes=None):
        entry = {
            "id": new_id("plh"),
            "placement_id": placement_id,
            "status_changed_to": status_changed_to,
            "changed_by": changed_by,
            "reason": reason,
            "notes": notes,
            "created_at": datetime.utcnow(),
        }
        self.entries.append(entry)
        return dict(entry)

    def list_for(self, placement_id):
        return [dict(e) for e in self.entries if e["placement_id"] == placement_id]

    def delete_for(self, placement_id):
        before = len(self.entries)
        self.entries = [e for e in self.entries if e["placement_id"] != placement_id]
        return before - len(self.entries)


# ===================== SAMPLE DATA =====================

SAMPLE_TICKET = {
    "client_company": "Acme Bank",
    "position_title": "Senior Backend Engineer",
    "seniority": "senior",
    "required_skills": ["Python", "FastAPI"],
    "preferred_skills": ["Kubernetes"],
    "work_location": "Amsterdam, Netherlands",
    "work_arrangement": "hybrid",
    "budget_min": 60,
    "budget_max": 90,
    "currency": "USD",
    "rate_type": "hourly",
}

STRONG_PROFILER = {
    "email": "ana@example.com",
    "first_name": "Ana",
    "last_name": "Silva",
    "location": "Amsterdam, Netherlands",
    "availability_status": "available",
    "skills": ["Python", {"name": "FastAPI", "level": "expert"}, "Kubernetes"],
    "years_of_experience": 7,
    "hourly_rate": 80,
    "currency": "USD",
}

WEAK_PROFILER = {
    "email": "bo@example.com",
    "first_name": "Bo",
    "last_name": "Jensen",
    "location": "Lima, Peru",
    "availability_status": "unavailable",
    "skills": ["COBOL"],
    "years_of_experience": 1,
    "hourly_rate": 200,
    "currency": "USD",
}


@pytest.fixture
def ticket_repo():
    return FakeTicketRepo()


@pytest.fixture
def profiler_repo():
    return FakeProfilerRepo()


@pytest.fixture
def placement_repo():
    return FakePlacementRepo()


@pytest.fixture
def history_repo():
    return FakeHistoryRepo()


@pytest.fixture
def matcher():
    return Matcher()


@pytest.fixture
def ticket(ticket_repo):
    return ticket_repo.create(SAMPLE_TICKET)


@pytest.fixture
def strong_profiler(profiler_repo):
    return profiler_repo.create(STRONG_PROFILER)


@pytest.fixture
def weak_profiler(profiler_repo):
    return profiler_repo.create(WEAK_PROFILER)
