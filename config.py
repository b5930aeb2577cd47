"""
Matchday Configuration

Centralized settings, paths, and constants for the competition core.
"""

import logging
from pathlib import Path
from dataclasses import dataclass
import appdirs


# Application info
APP_NAME = "Matchday"
APP_AUTHOR = "Matchday"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores database)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory (stores user preferences)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "matchday.db"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "matchday.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class CompetitionDefaults:
    """Defaults applied to newly created competitions."""
    points_for_win: int = 3
    points_for_draw: int = 1
    points_for_loss: int = 0

    # Both fixture generators refuse anything smaller
    min_participants: int = 2


@dataclass(frozen=True)
class StorageSettings:
    """Persistence settings."""
    # Prefix used for collection keys
    key_prefix: str = "matchday"

    # Written once when collections are empty-initialized
    version: str = APP_VERSION

    collections: tuple[str, ...] = ("competitions", "participants", "matches")


# Singleton instances
PATHS = Paths()
COMPETITION_DEFAULTS = CompetitionDefaults()
STORAGE_SETTINGS = StorageSettings()

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()


def setup_logging(level: int = logging.INFO, log_to_file: bool = True) -> None:
    """
    Configure root logging for the application.

    Engine and service modules only create named loggers; handlers are
    attached here so embedding applications keep control of output.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        PATHS.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
