"""
Database initialization and migration utilities.
"""
import logging
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from handshake.db.models import Base
from handshake.db.database import init_engine
from handshake.config import get_db_components

logger = logging.getLogger(__name__)


def create_database_if_not_exists():
    """Create the PostgreSQL database if it doesn't exist."""
    db_components = get_db_components()
    if db_components["backend"] != "postgresql":
        return

    db_name = db_components["db_name"]
    engine = create_engine(db_components["db_url_without_name"], isolation_level="AUTOCOMMIT")

    with engine.connect() as conn:
        result = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
            {"db_name": db_name}
        )

        if not result.fetchone():
            logger.info(f"Creating database: {db_name}")
            # Database names cannot be parameterized in PostgreSQL
            conn.execute(text(f'CREATE DATABASE "{db_name}"'))
            logger.info(f"Database {db_name} created successfully")
        else:
            logger.info(f"Database {db_name} already exists")

    engine.dispose()


def create_tables(engine: Engine):
    """Create all tables defined in models."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created successfully")


def drop_all_tables(engine: Engine):
    """Drop all tables (useful for testing)."""
    logger.info("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine)
    logger.info("All tables dropped successfully")


def reset_database(engine: Engine):
    """Drop and recreate all tables."""
    logger.info("Resetting database...")
    drop_all_tables(engine)
    create_tables(engine)
    logger.info("Database reset complete")


def init_database(database_url: str | None = None) -> Engine:
    """Complete database initialization."""
    logger.info("Initializing database...")
    if database_url is None:
        create_database_if_not_exists()
    engine = init_engine(database_url)
    create_tables(engine)
    logger.info("Database initialization complete")
    return engine


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)
    if "--reset" in sys.argv:
        create_database_if_not_exists()
        reset_database(init_engine())
    else:
        init_database()
