"""
Schema bootstrap for URL shortener.

Creates the urls table with its short_code and created_at indexes. Safe to
run repeatedly; existing tables are left alone.

Usage:
    python -m src.scripts.init_db
"""

import sys

from sqlalchemy.exc import SQLAlchemyError

from src.app.core.config import settings, logger
from src.app.db.session import init_db, check_db_connection


def run_init() -> int:
    """Create the schema and verify the connection, returning an exit code."""
    try:
        init_db()
        check_db_connection()
    except SQLAlchemyError as e:
        logger.error(f"Schema initialisation failed: {e}")
        return 1

    logger.info(f"Schema initialised on {settings.DATABASE_URL.split('@')[-1]}")
    return 0


if __name__ == "__main__":
    sys.exit(run_init())
