"""
Collection Storage

The competition core persists three flat collections (competitions,
participants, matches) through a deliberately small contract: load a
whole collection, or replace one or more whole collections in a single
write. A version marker records whether the collections have been
initialized.

Two backends implement the contract:
- MemoryBackend: JSON-shaped dicts held in memory (tests, embedding)
- SqlBackend: SQLAlchemy over SQLite, one transaction per write
"""

import copy
import logging
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import STORAGE_SETTINGS
from engine.entities import Competition, Match, Participant
from engine.exceptions import NotFound, StorageError
from models.base import get_session, init_db, make_engine, make_session_factory
from models.competition import CompetitionRecord
from models.match import MatchRecord
from models.participant import ParticipantRecord
from models.storage_meta import StorageMeta


logger = logging.getLogger(__name__)

COMPETITIONS = "competitions"
PARTICIPANTS = "participants"
MATCHES = "matches"


class StorageBackend:
    """Load-all / replace-all access to named collections."""

    def load(self, collection: str) -> list[dict]:
        raise NotImplementedError

    def replace(self, collections: dict[str, list[dict]]) -> None:
        """Replace every named collection, all or nothing."""
        raise NotImplementedError

    def get_version(self) -> Optional[str]:
        raise NotImplementedError

    def set_version(self, version: str) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    """Collections held as lists of dicts; callers only ever see copies."""

    def __init__(self):
        self._collections: dict[str, list[dict]] = {}
        self._version: Optional[str] = None

    def load(self, collection: str) -> list[dict]:
        return copy.deepcopy(self._collections.get(collection, []))

    def replace(self, collections: dict[str, list[dict]]) -> None:
        staged = {name: copy.deepcopy(records) for name, records in collections.items()}
        self._collections.update(staged)

    def get_version(self) -> Optional[str]:
        return self._version

    def set_version(self, version: str) -> None:
        self._version = version


class SqlBackend(StorageBackend):
    """
    Collections stored as SQLAlchemy rows.

    ``replace`` deletes and re-inserts each named table inside one session,
    so a failure rolls the whole write back.
    """

    MODELS = {
        COMPETITIONS: CompetitionRecord,
        PARTICIPANTS: ParticipantRecord,
        MATCHES: MatchRecord,
    }

    VERSION_KEY = f"{STORAGE_SETTINGS.key_prefix}:version"

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine or make_engine(database_url)
        self.session_factory = make_session_factory(self.engine)
        init_db(self.engine)

    def _model(self, collection: str):
        try:
            return self.MODELS[collection]
        except KeyError:
            raise StorageError(f"Unknown collection: {collection}") from None

    def load(self, collection: str) -> list[dict]:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                rows = session.scalars(select(model).order_by(model.seq)).all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load {collection}: {exc}") from exc

    def replace(self, collections: dict[str, list[dict]]) -> None:
        try:
            with get_session(self.session_factory) as session:
                for name, records in collections.items():
                    model = self._model(name)
                    session.execute(delete(model))
                    session.add_all(
                        model.from_record(record, seq=index)
                        for index, record in enumerate(records)
                    )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write {', '.join(collections)}: {exc}") from exc

    def get_version(self) -> Optional[str]:
        try:
            with get_session(self.session_factory) as session:
                meta = session.get(StorageMeta, self.VERSION_KEY)
                return meta.value if meta else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read storage version: {exc}") from exc

    def set_version(self, version: str) -> None:
        try:
            with get_session(self.session_factory) as session:
                session.merge(StorageMeta(key=self.VERSION_KEY, value=version))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write storage version: {exc}") from exc


class MatchdayStore:
    """
    Typed access to the three collections on top of a backend.

    Reads return fresh entity objects; ``save`` writes whole collections.
    """

    def __init__(self, backend: Optional[StorageBackend] = None):
        self.backend = backend or MemoryBackend()

    def initialize(self) -> None:
        """Empty-initialize the collections unless a version marker exists."""
        if self.backend.get_version() is not None:
            return
        self.backend.replace({name: [] for name in STORAGE_SETTINGS.collections})
        self.backend.set_version(STORAGE_SETTINGS.version)
        logger.info("Initialized empty storage (version %s)", STORAGE_SETTINGS.version)

    def clear(self) -> None:
        """Drop every stored record and re-initialize."""
        self.backend.replace({name: [] for name in STORAGE_SETTINGS.collections})
        self.backend.set_version(STORAGE_SETTINGS.version)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_competitions(self) -> list[Competition]:
        return [Competition.from_dict(r) for r in self.backend.load(COMPETITIONS)]

    def get_competition(self, competition_id: str) -> Competition:
        for competition in self.get_competitions():
            if competition.id == competition_id:
                return competition
        raise NotFound("Competition", competition_id)

    def get_participants(self, competition_id: Optional[str] = None) -> list[Participant]:
        participants = [Participant.from_dict(r) for r in self.backend.load(PARTICIPANTS)]
        if competition_id is None:
            return participants
        return [p for p in participants if p.competition_id == competition_id]

    def get_participant(self, participant_id: str) -> Participant:
        for participant in self.get_participants():
            if participant.id == participant_id:
                return participant
        raise NotFound("Participant", participant_id)

    def get_matches(self, competition_id: Optional[str] = None) -> list[Match]:
        matches = [Match.from_dict(r) for r in self.backend.load(MATCHES)]
        if competition_id is None:
            return matches
        return [m for m in matches if m.competition_id == competition_id]

    def get_match(self, match_id: str) -> Match:
        for match in self.get_matches():
            if match.id == match_id:
                return match
        raise NotFound("Match", match_id)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def save(
        self,
        competitions: Optional[Iterable[Competition]] = None,
        participants: Optional[Iterable[Participant]] = None,
        matches: Optional[Iterable[Match]] = None,
    ) -> None:
        """Replace each collection that is given, in one backend write."""
        collections: dict[str, list[dict]] = {}
        if competitions is not None:
            collections[COMPETITIONS] = [c.to_dict() for c in competitions]
        if participants is not None:
            collections[PARTICIPANTS] = [p.to_dict() for p in participants]
        if matches is not None:
            collections[MATCHES] = [m.to_dict() for m in matches]
        if collections:
            self.backend.replace(collections)

    def delete_competition(self, competition_id: str) -> None:
        """Remove a competition together with its participants and matches."""
        competitions = self.get_competitions()
        if not any(c.id == competition_id for c in competitions):
            raise NotFound("Competition", competition_id)

        self.save(
            competitions=[c for c in competitions if c.id != competition_id],
            participants=[p for p in self.get_participants() if p.competition_id != competition_id],
            matches=[m for m in self.get_matches() if m.competition_id != competition_id],
        )
