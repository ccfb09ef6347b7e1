from handshake.db.models import Base
from handshake.db.database import SessionLocal, get_db, init_engine, dispose_engine

# Import the comprehensive initialization function
from handshake.db.init_db import init_database

__all__ = ['Base', 'SessionLocal', 'get_db', 'init_engine', 'dispose_engine', 'init_database']
