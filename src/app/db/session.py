from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Generator
from src.app.core.config import settings, logger
from src.app.db.base import Base


def _engine_options(database_url: str) -> dict:
    # In-memory SQLite must share one connection or every session sees an empty database
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the urls table and its indexes if they do not exist yet."""
    import src.app.models.url  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def check_db_connection() -> None:
    """
    Run a trivial query against the database.

    Raises:
        SQLAlchemyError: If the database is unreachable
    """
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
