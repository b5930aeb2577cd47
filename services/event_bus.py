"""
Event Bus - Central signal hub for competition events.

Views and other listeners connect to this single object rather than to
the competition manager directly. Signals are emitted only after the
corresponding write has succeeded.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for Matchday.

    Usage:
        bus = EventBus()
        bus.result_recorded.connect(self._on_result_recorded)
        manager = CompetitionManager(store, event_bus=bus)
    """

    # ============ Competition Lifecycle ============
    competition_created = Signal(dict)      # Competition dict
    participant_added = Signal(dict)        # Participant dict
    fixtures_generated = Signal(str, int)   # competition_id, match count
    competition_completed = Signal(dict)    # {competition_id, winner_id}
    competition_reset = Signal(str)         # competition_id
    competition_deleted = Signal(str)       # competition_id

    # ============ Result Events ============
    result_recorded = Signal(dict)          # {match_id, home_score, away_score, was_edit}
    participant_advanced = Signal(dict)     # {participant_id, from_match_id, to_match_id, became_bye}

    # ============ System Events ============
    storage_error = Signal(str)             # Error message

    def __init__(self):
        super().__init__()

    def emit_result(self, match_id: str, home_score: int, away_score: int, was_edit: bool) -> None:
        """Convenience method to emit a recorded result."""
        self.result_recorded.emit({
            "match_id": match_id,
            "home_score": home_score,
            "away_score": away_score,
            "was_edit": was_edit,
        })

    def emit_advancement(self, advancement) -> None:
        """Convenience method to emit a cup advancement."""
        self.participant_advanced.emit({
            "participant_id": advancement.participant_id,
            "from_match_id": advancement.from_match_id,
            "to_match_id": advancement.to_match_id,
            "became_bye": advancement.became_bye,
        })
