"""Prepare the database before the API starts.

Run as ``python -m app.initial_data`` from the container entrypoint, after
``alembic upgrade head`` or instead of it for local SQLite databases.
"""

import argparse

from loguru import logger
from sqlmodel import Session

from app.database.database import engine, create_db_and_tables
from app.database.init_db import init_db
from app.models.analytics import OverviewStats
from app.services.analytics import get_overview_statistics
from app.utils.logger import setup_logging


def init(create_tables: bool = True) -> OverviewStats:
    """
    Optionally create missing tables, then seed the first super administrator.

    Returns:
        OverviewStats: Counters of the database once it is ready.
    """
    if create_tables:
        create_db_and_tables()
    with Session(engine) as session:
        init_db(session)
        return get_overview_statistics(session)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Prepare the TaiwanStay database")
    parser.add_argument(
        "--skip-create-tables",
        action="store_true",
        help="Leave the schema to Alembic and only seed data",
    )
    args = parser.parse_args(argv)

    setup_logging()
    stats = init(create_tables=not args.skip_create_tables)
    logger.info(
        f"Database ready: {stats.total_users} users, {stats.total_hosts} hosts, "
        f"{stats.pending_opportunities} opportunities awaiting review"
    )


if __name__ == "__main__":
    main()
