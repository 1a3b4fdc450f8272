"""
Profiler Service - candidate profile management.

Handles:
- Profile creation with e-mail validation and uniqueness
- Filtered, paginated listing
- Profile detail with placement history
"""
import logging
import re
from typing import Any, Dict, List, Optional
from pymongo.errors import DuplicateKeyError

from talentmatch.domain.errors import DuplicateProfilerError, NotFoundError, ValidationFailedError
from talentmatch.infra.mongodb.repositories.placement_repo import PlacementRepository, get_placement_repo
from talentmatch.infra.mongodb.repositories.profiler_repo import ProfilerRepository, get_profiler_repo
from talentmatch.services.ticket_service import pagination

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailedError("Invalid email format")
    return email


class ProfilerService:
    def __init__(
        self,
        profiler_repo: ProfilerRepository = None,
        placement_repo: PlacementRepository = None
    ):
        self.profiler_repo = profiler_repo or get_profiler_repo()
        self.placement_repo = placement_repo or get_placement_repo()

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a profiler.

        Raises:
            ValidationFailedError: bad e-mail
            DuplicateProfilerError: e-mail already registered
        """
        email = validate_email(data.get("email"))
        if self.profiler_repo.get_by_email(email):
            raise DuplicateProfilerError(email)

        doc = dict(data)
        doc["email"] = email
        try:
            return self.profiler_repo.create(doc)
        except DuplicateKeyError:
            # Lost a race with a concurrent insert of the same e-mail
            raise DuplicateProfilerError(email)

    def get(self, profiler_id: str, include_placements: bool = True) -> Dict[str, Any]:
        profiler = self.profiler_repo.get(profiler_id)
        if not profiler:
            raise NotFoundError("Profiler", profiler_id)
        if include_placements:
            profiler["placements"] = self.placement_repo.list_by_profiler(profiler_id)
        return profiler

    def list(
        self,
        search: str = None,
        availability: str = None,
        location: str = None,
        skills: List[str] = None,
        offset: int = 0,
        limit: int = 50
    ) -> Dict[str, Any]:
        profilers, total = self.profiler_repo.list(
            search=search,
            availability=availability,
            location=location,
            skills=skills,
            offset=offset,
            limit=limit,
        )
        return {"profilers": profilers, "pagination": pagination(total, limit, offset)}

    def update(self, profiler_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        if not updates:
            raise ValidationFailedError("No fields to update")

        if "email" in updates:
            updates["email"] = validate_email(updates["email"])
            owner = self.profiler_repo.get_by_email(updates["email"])
            if owner and owner["id"] != profiler_id:
                raise DuplicateProfilerError(updates["email"])

        try:
            updated = self.profiler_repo.update(profiler_id, updates)
        except DuplicateKeyError:
            raise DuplicateProfilerError(updates.get("email", ""))
        if updated is None:
            raise NotFoundError("Profiler", profiler_id)
        return updated

    def delete(self, profiler_id: str) -> None:
        if not self.profiler_repo.delete(profiler_id):
            raise NotFoundError("Profiler", profiler_id)


_profiler_service: Optional[ProfilerService] = None

def get_profiler_service() -> ProfilerService:
    global _profiler_service
    if _profiler_service is None:
        _profiler_service = ProfilerService()
    return _profiler_service
