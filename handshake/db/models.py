"""
Database Models using SQLAlchemy.

These define the durable record of searches: every search attempt, the users that
took part in one, and how often each user was searched for.
They are NOT related to:
- API schemas (see handshake.schemas.api_schemas)
- The cached search results, profiles and friend lists (see handshake.services.cache)
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base
import datetime
import uuid

Base = declarative_base()

def generate_uuid():
    return str(uuid.uuid4())

def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)

class Search(Base):
    __tablename__ = "searches"

    id = Column(String, primary_key=True, default=generate_uuid)
    requester_id = Column(String(17), nullable=False, index=True)
    target_id = Column(String(17), nullable=False, index=True)
    degree = Column(Integer, nullable=True)
    success = Column(Boolean, nullable=False, default=False)
    path = Column(JSON, default=list)  # Ordered SteamID64s, source to target
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

class User(Base):
    __tablename__ = "users"

    id64 = Column(String(17), primary_key=True)
    name = Column(String, nullable=False, default="")
    avatar = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow)
    last_seen_at = Column(DateTime, default=utcnow)

class Counter(Base):
    __tablename__ = "counters"

    entity_id64 = Column(String(17), primary_key=True)
    search_count = Column(Integer, nullable=False, default=0)
