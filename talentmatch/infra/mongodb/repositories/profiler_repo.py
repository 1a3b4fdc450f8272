"""
Profiler Repository - candidate profiles available for matching.

Skills are stored as submitted: bare strings or {"name", "level"} objects.
Skill filters therefore match either shape.
"""
import logging
import re
from typing import Optional, List, Dict, Any, Tuple
from pymongo import ASCENDING

from talentmatch.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfilerRepository(BaseRepository):
    """Candidate profiles, unique by e-mail."""

    collection_name = "profilers"
    id_prefix = "prf"

    def ensure_indexes(self):
        self.collection.create_index([("email", ASCENDING)], unique=True)
        self.collection.create_index([("availability_status", ASCENDING)])

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(data)
        doc["email"] = doc["email"].strip().lower()
        profiler = self.insert_one(doc)
        logger.info(f"Created profiler: {profiler['id']} ({profiler['email']})")
        return profiler

    def get(self, profiler_id: str) -> Optional[Dict[str, Any]]:
        return self.find_by_id(profiler_id)

    def get_many(self, profiler_ids: List[str]) -> List[Dict[str, Any]]:
        return self.find_many({"id": {"$in": list(profiler_ids)}})

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"email": email.strip().lower()})

    @staticmethod
    def build_query(
        search: str = None,
        availability: str = None,
        location: str = None,
        skills: List[str] = None
    ) -> Dict[str, Any]:
        clauses: List[Dict[str, Any]] = []

        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            clauses.append({"$or": [
                {"first_name": pattern},
                {"last_name": pattern},
                {"email": pattern},
            ]})

        if availability:
            clauses.append({"availability_status": availability})

        if location:
            clauses.append({"location": {"$regex": re.escape(location.strip()), "$options": "i"}})

        if skills:
            names = [re.compile(f"^{re.escape(s.strip())}$", re.IGNORECASE) for s in skills if s.strip()]
            if names:
                clauses.append({"$or": [
                    {"skills": {"$in": names}},
                    {"skills.name": {"$in": names}},
                ]})

        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def list(
        self,
        search: str = None,
        availability: str = None,
        location: str = None,
        skills: List[str] = None,
        offset: int = 0,
        limit: int = 50
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self.build_query(search, availability, location, skills)
        return self.find_page(query, offset=offset, limit=limit)

    def list_all(self) -> List[Dict[str, Any]]:
        """Full candidate pool for matching."""
        return self.find_many({})

    def update(self, profiler_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if updates.get("email"):
            updates["email"] = updates["email"].strip().lower()
        return self.update_by_id(profiler_id, updates)

    def delete(self, profiler_id: str) -> bool:
        deleted = self.delete_by_id(profiler_id)
        if deleted:
            logger.info(f"Deleted profiler: {profiler_id}")
        return deleted


# Singleton
_profiler_repo: Optional[ProfilerRepository] = None

def get_profiler_repo() -> ProfilerRepository:
    global _profiler_repo
    if _profiler_repo is None:
        _profiler_repo = ProfilerRepository()
    return _profiler_repo
