from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
import logging

from handshake.config import settings

logger = logging.getLogger(__name__)

# Engine and session factory are created by init_engine() on startup
_engine: Engine | None = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def init_engine(database_url: str | None = None, **engine_kwargs) -> Engine:
    """Create the SQLAlchemy engine and bind the session factory to it."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = create_engine(database_url or str(settings.DATABASE_URL), pool_pre_ping=True, **engine_kwargs)
    SessionLocal.configure(bind=_engine)
    logger.info(f"Database engine ready ({_engine.url.get_backend_name()})")
    return _engine


def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None


# Create a database session dependency
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
