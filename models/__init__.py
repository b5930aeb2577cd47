"""
Matchday Database Models

SQLAlchemy ORM models for the three stored collections and pydantic
schemas for validating input.
"""

from models.base import Base, make_engine, make_session_factory, get_session, init_db
from models.competition import CompetitionRecord
from models.participant import ParticipantRecord
from models.match import MatchRecord
from models.storage_meta import StorageMeta

__all__ = [
    "Base",
    "make_engine",
    "make_session_factory",
    "get_session",
    "init_db",
    "CompetitionRecord",
    "ParticipantRecord",
    "MatchRecord",
    "StorageMeta",
]
