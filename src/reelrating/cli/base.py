"""Base class for CLI commands."""

import logging

from reelrating.database import SessionLocal
from reelrating.settings import settings


class CliCommand:
    """Shared session handling for CLI commands."""

    def __init__(self):
        self.db = None

    def setup_db(self):
        """Open a database session."""
        self.db = SessionLocal()

    def cleanup_db(self):
        """Close the database session."""
        if self.db is not None:
            self.db.close()
            self.db = None

    def run(self):
        raise NotImplementedError


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
