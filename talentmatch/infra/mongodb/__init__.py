"""MongoDB infrastructure layer - connection management and repositories."""

from talentmatch.infra.mongodb.connection import get_database, close_database
from talentmatch.infra.mongodb.base_repository import BaseRepository

__all__ = [
    "get_database",
    "close_database",
    "BaseRepository",
]
