from app.core.config import get_settings
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401  (registers every table on SQLModel.metadata)

_database_url = get_settings().DATABASE_URL

engine = create_engine(
    _database_url,
    pool_pre_ping=True,
    connect_args=(
        {"check_same_thread": False} if _database_url.startswith("sqlite") else {}
    ),
)


def create_db_and_tables():
    """
    Create database tables defined in SQLModel metadata.

    Creates all tables in the configured database according to `SQLModel.metadata` using the module-level engine.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    Provide a context-managed SQLModel session, one per request.

    Yields:
        session (Session): A SQLModel Session bound to the module-level engine, closed when the generator exits.
    """
    with Session(engine) as session:
        yield session
