"""
Matchday Services

Storage, event handling and the competition use-case layer.
"""

from services.event_bus import EventBus
from services.storage import MatchdayStore, MemoryBackend, SqlBackend, StorageBackend
from services.competition_manager import CompetitionManager, CompetitionProgress

__all__ = [
    "EventBus",
    "MatchdayStore",
    "MemoryBackend",
    "SqlBackend",
    "StorageBackend",
    "CompetitionManager",
    "CompetitionProgress",
]
