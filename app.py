"""
Matchday Application Controller

Top-level controller that wires together storage, the event bus and the
competition manager.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject

from services.competition_manager import CompetitionManager
from services.event_bus import EventBus
from services.storage import MatchdayStore, SqlBackend


logger = logging.getLogger(__name__)


class MatchdayApp(QObject):
    """
    Top-level application controller.
    Wires together all application components.
    """

    def __init__(self, database_url: Optional[str] = None):
        super().__init__()

        # Core services
        self.event_bus = EventBus()
        self.store = MatchdayStore(SqlBackend(database_url))
        self.store.initialize()
        self.manager = CompetitionManager(self.store, event_bus=self.event_bus)

        self.event_bus.competition_completed.connect(self._on_competition_completed)

    def _on_competition_completed(self, data: dict) -> None:
        """Handle competition completion event."""
        logger.info("Competition %s won by %s", data["competition_id"], data["winner_id"])

    def summary(self) -> list[str]:
        """One line per stored competition: name, type, status and progress."""
        lines = []
        for competition in self.store.get_competitions():
            progress = self.manager.get_progress(competition.id)
            lines.append(
                f"{competition.name} [{competition.type.value}] {competition.status.value} "
                f"{progress.completed}/{progress.total} ({progress.percentage:.0f}%)"
            )
        return lines
