"""
Matchday - League and Cup Competition Manager

Entry point for the application.
"""

import logging
import sys

from PySide6.QtCore import QCoreApplication

from config import init_config, setup_logging, APP_NAME, APP_VERSION


def main() -> int:
    """Main entry point for Matchday."""
    # Initialize configuration and directories
    init_config()
    setup_logging(logging.INFO)

    # Create application
    app = QCoreApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    # Open the default database and report what it holds
    from app import MatchdayApp
    matchday = MatchdayApp()
    lines = matchday.summary()
    if not lines:
        print("No competitions stored")
    for line in lines:
        print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
