"""
Placement Repository

Handles placements (a profiler proposed for a ticket) and their status history.

Uniqueness: at most one active placement per (ticket_id, profiler_id).
A partial unique index over documents with active=true backs the
service-level check, so concurrent inserts for the same pair fail with
DuplicateKeyError instead of both succeeding.
"""
import logging
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from pymongo import ASCENDING, DESCENDING

from talentmatch.infra.mongodb.base_repository import BaseRepository, clean, new_id

logger = logging.getLogger(__name__)


class PlacementRepository(BaseRepository):
    """Placements of profilers on tickets."""

    collection_name = "placements"
    id_prefix = "plc"

    def ensure_indexes(self):
        self.collection.create_index(
            [("ticket_id", ASCENDING), ("profiler_id", ASCENDING)],
            unique=True,
            partialFilterExpression={"active": True},
            name="uniq_active_ticket_profiler",
        )
        self.collection.create_index([("profiler_id", ASCENDING)])
        self.collection.create_index([("created_at", DESCENDING)])

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a placement.

        Raises:
            pymongo.errors.DuplicateKeyError: an active placement already exists for the pair
        """
        placement = self.insert_one(dict(data))
        logger.info(
            f"Created placement {placement['id']}: profiler {placement['profiler_id']} "
            f"-> ticket {placement['ticket_id']} ({placement['status']})"
        )
        return placement

    def get(self, placement_id: str) -> Optional[Dict[str, Any]]:
        return self.find_by_id(placement_id)

    def find_active(self, ticket_id: str, profiler_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"ticket_id": ticket_id, "profiler_id": profiler_id, "active": True})

    def active_index_for_ticket(self, ticket_id: str) -> Dict[Tuple[str, str], Dict[str, Any]]:
        """{(ticket_id, profiler_id): {"id", "status"}} for every active placement on a ticket."""
        cursor = self.collection.find(
            {"ticket_id": ticket_id, "active": True},
            {"_id": 0, "id": 1, "profiler_id": 1, "status": 1},
        )
        return {
            (ticket_id, doc["profiler_id"]): {"id": doc["id"], "status": doc["status"]}
            for doc in cursor
        }

    @staticmethod
    def build_query(
        ticket_id: str = None,
        profiler_id: str = None,
        status: str = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if ticket_id:
            query["ticket_id"] = ticket_id
        if profiler_id:
            query["profiler_id"] = profiler_id
        if status:
            query["status"] = status
        return query

    def list(
        self,
        ticket_id: str = None,
        profiler_id: str = None,
        status: str = None,
        offset: int = 0,
        limit: int = 50
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self.build_query(ticket_id, profiler_id, status)
        return self.find_page(query, offset=offset, limit=limit)

    def list_by_profiler(self, profiler_id: str) -> List[Dict[str, Any]]:
        return self.find_many({"profiler_id": profiler_id}, sort=[("created_at", DESCENDING)])

    def update(self, placement_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update_by_id(placement_id, updates)

    def delete(self, placement_id: str) -> bool:
        return self.delete_by_id(placement_id)


class PlacementHistoryRepository(BaseRepository):
    """Append-only status log per placement."""

    collection_name = "placement_history"
    id_prefix = "plh"

    def ensure_indexes(self):
        self.collection.create_index([("placement_id", ASCENDING), ("created_at", ASCENDING)])

    def add(
        self,
        placement_id: str,
        status_changed_to: str,
        changed_by: str = None,
        reason: str = None,
        notes: str = None
    ) -> Dict[str, Any]:
        entry = {
            "id": new_id(self.id_prefix),
            "placement_id": placement_id,
            "status_changed_to": status_changed_to,
            "changed_by": changed_by,
            "reason": reason,
            "notes": notes,
            "created_at": datetime.utcnow(),
        }
        self.collection.insert_one(entry)
        return clean(entry)

    def list_for(self, placement_id: str) -> List[Dict[str, Any]]:
        return self.find_many({"placement_id": placement_id}, sort=[("created_at", ASCENDING)])

    def delete_for(self, placement_id: str) -> int:
        result = self.collection.delete_many({"placement_id": placement_id})
        return result.deleted_count


# Singletons
_placement_repo: Optional[PlacementRepository] = None
_placement_history_repo: Optional[PlacementHistoryRepository] = None

def get_placement_repo() -> PlacementRepository:
    global _placement_repo
    if _placement_repo is None:
        _placement_repo = PlacementRepository()
    return _placement_repo

def get_placement_history_repo() -> PlacementHistoryRepository:
    global _placement_history_repo
    if _placement_history_repo is None:
        _placement_history_repo = PlacementHistoryRepository()
    return _placement_history_repo
