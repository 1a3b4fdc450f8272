"""
Ticket Repository - staffing requests raised by Account Managers.
"""
import logging
import random
import re
import string
import time
from typing import Optional, List, Dict, Any, Tuple

from talentmatch.domain.constants import DEFAULT_CURRENCY, TicketStatus
from talentmatch.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


def generate_ticket_number() -> str:
    """TKT-<epoch ms>-<4 uppercase alphanumerics>."""
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"TKT-{int(time.time() * 1000)}-{suffix}"


class TicketRepository(BaseRepository):
    """Hiring tickets. Looked up by id or by human-readable ticket_number."""

    collection_name = "tickets"
    id_prefix = "tkt"

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(data)
        doc["ticket_number"] = doc.get("ticket_number") or generate_ticket_number()
        doc.setdefault("status", TicketStatus.NEW.value)
        doc["currency"] = doc.get("currency") or DEFAULT_CURRENCY
        doc["required_skills"] = [s.strip() for s in doc.get("required_skills") or [] if s and s.strip()]
        doc["preferred_skills"] = [s.strip() for s in doc.get("preferred_skills") or [] if s and s.strip()]

        ticket = self.insert_one(doc)
        logger.info(f"Created ticket: {ticket['ticket_number']} ({ticket.get('position_title')})")
        return ticket

    def get(self, ticket_ref: str) -> Optional[Dict[str, Any]]:
        """Find by id, falling back to ticket_number."""
        return self.find_by_id(ticket_ref) or self.find_one({"ticket_number": ticket_ref})

    @staticmethod
    def build_query(
        status: str = None,
        priority: str = None,
        created_by: str = None,
        search: str = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if status and status != "all":
            query["status"] = status
        if priority and priority != "all":
            query["priority"] = priority
        if created_by:
            query["created_by"] = created_by
        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [
                {"position_title": pattern},
                {"client_company": pattern},
                {"ticket_number": pattern},
            ]
        return query

    def list(
        self,
        status: str = None,
        priority: str = None,
        created_by: str = None,
        search: str = None,
        offset: int = 0,
        limit: int = 50
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self.build_query(status, priority, created_by, search)
        return self.find_page(query, offset=offset, limit=limit)

    def update(self, ticket_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update_by_id(ticket_id, updates)

    def delete(self, ticket_id: str) -> bool:
        deleted = self.delete_by_id(ticket_id)
        if deleted:
            logger.info(f"Deleted ticket: {ticket_id}")
        return deleted


# Singleton
_ticket_repo: Optional[TicketRepository] = None

def get_ticket_repo() -> TicketRepository:
    global _ticket_repo
    if _ticket_repo is None:
        _ticket_repo = TicketRepository()
    return _ticket_repo
