"""Create the Reveal tables directly from the ORM metadata."""

import logging

from reveal_api.core.logging import configure_logging
from reveal_api.core.settings import settings
from reveal_api.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Database initialized at %s", settings.effective_database_url.split("@")[-1])


if __name__ == "__main__":
    configure_logging()
    init_db()
