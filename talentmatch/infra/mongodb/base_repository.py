"""
Base Repository Pattern

Base class for all MongoDB repositories.
Documents are addressed by a string "id" field owned by the application;
Mongo's internal _id never leaves the repository layer.
"""
import logging
import uuid
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from pymongo import DESCENDING
from pymongo.collection import Collection

from talentmatch.infra.mongodb.connection import get_collection

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Short prefixed identifier, e.g. prf_3f9a0c12ab45."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def clean(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop Mongo's _id from a document."""
    if document is None:
        return None
    document.pop("_id", None)
    return document


class BaseRepository:
    """
    Base repository with common CRUD operations.

    Subclasses should set collection_name and id_prefix class attributes.
    """

    collection_name: str = None  # Override in subclass
    id_prefix: str = "doc"

    def __init__(self):
        if not self.collection_name:
            raise ValueError(f"collection_name must be set in {self.__class__.__name__}")

    @property
    def collection(self) -> Collection:
        """Get the MongoDB collection."""
        return get_collection(self.collection_name)

    def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a single document, assigning id and timestamps.

        Args:
            document: Document to insert

        Returns:
            The stored document (without _id)
        """
        now = datetime.utcnow()
        document.setdefault("id", new_id(self.id_prefix))
        document["created_at"] = now
        document["updated_at"] = now
        self.collection.insert_one(document)
        return clean(document)

    def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Find document by application id.

        Args:
            doc_id: Document ID string

        Returns:
            Document or None
        """
        return self.find_one({"id": doc_id})

    def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Find a single document matching query.

        Args:
            query: MongoDB query dict

        Returns:
            Document or None
        """
        return clean(self.collection.find_one(query))

    def find_many(
        self,
        query: Dict[str, Any] = None,
        skip: int = 0,
        limit: int = 0,
        sort: List[tuple] = None
    ) -> List[Dict[str, Any]]:
        """
        Find multiple documents.

        Args:
            query: MongoDB query dict
            skip: Number of documents to skip
            limit: Maximum documents to return (0 = no limit)
            sort: List of (field, direction) tuples

        Returns:
            List of documents
        """
        cursor = self.collection.find(query or {})

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)
        return [clean(doc) for doc in cursor]

    def find_page(
        self,
        query: Dict[str, Any] = None,
        offset: int = 0,
        limit: int = 50
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Newest-first page of documents plus the total matching count."""
        items = self.find_many(query, skip=offset, limit=limit, sort=[("created_at", DESCENDING)])
        return items, self.count(query)

    def update_by_id(self, doc_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply $set updates to a document.

        Returns:
            Updated document, or None when no document has that id
        """
        updates = {k: v for k, v in updates.items() if k not in ("id", "_id", "created_at")}
        updates["updated_at"] = datetime.utcnow()
        result = self.collection.update_one({"id": doc_id}, {"$set": updates})
        if result.matched_count == 0:
            return None
        return self.find_by_id(doc_id)

    def delete_by_id(self, doc_id: str) -> bool:
        """
        Delete a single document.

        Returns:
            True if document was deleted
        """
        result = self.collection.delete_one({"id": doc_id})
        return result.deleted_count > 0

    def count(self, query: Dict[str, Any] = None) -> int:
        """
        Count documents matching query.

        Args:
            query: MongoDB query dict

        Returns:
            Document count
        """
        return self.collection.count_documents(query or {})
