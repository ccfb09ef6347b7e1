"""
Test configuration and fixtures for steam-handshake tests.
"""
from typing import Dict, Iterable, List, Optional, Set

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from handshake.main import app
from handshake.domain.entities import NeighborSet, Profile
from handshake.domain.events import event_publisher
from handshake.services.cache import CacheManager, InMemoryCacheStore
from handshake.services.directory import DirectoryStats
from handshake.application.path_engine import PathEngine
from handshake.application.search_history import SearchHistoryRecorder
from handshake.application.maintenance_service import MaintenanceService
from handshake.db.models import Base
from handshake.dependencies import get_history_db


def steam_id(n: int) -> str:
    """A valid SteamID64 for test user ``n``."""
    return str(76561198000000000 + n)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDirectory:
    """In-memory friend graph standing in for the Steam directory client.

    ``graph`` maps a user to its friends; every user in it has a profile unless listed
    in ``missing``. ``failing`` makes every lookup behave like an exhausted retry and
    ``failing_ids`` does the same for the friend lists of the listed users.
    """

    def __init__(self, graph: Dict[str, List[str]], private: Iterable[str] = (),
                 missing: Iterable[str] = (), handles: Optional[Dict[str, str]] = None,
                 failing_ids: Iterable[str] = ()):
        self.graph = graph
        self.private: Set[str] = set(private)
        self.missing: Set[str] = set(missing)
        self.handles = handles or {}
        self.failing_ids: Set[str] = set(failing_ids)
        self.failing = False
        self.failures = 0
        self.neighbor_calls: List[str] = []
        self.profile_calls = 0
        self.stats = DirectoryStats()

    def upstream_failure_count(self) -> int:
        return self.failures

    def _profile(self, steamid: str) -> Optional[Profile]:
        if steamid in self.missing:
            return None
        known = steamid in self.graph or any(steamid in friends for friends in self.graph.values())
        if not known:
            return None
        return Profile(steamid=steamid, personaname=f"user-{steamid[-4:]}", avatar=f"https://avatars/{steamid}.jpg")

    async def resolve_handle(self, handle: str) -> Optional[str]:
        if self.failing:
            self.failures += 1
            return None
        return self.handles.get(handle)

    async def get_profile(self, steamid: str) -> Optional[Profile]:
        self.profile_calls += 1
        if self.failing:
            self.failures += 1
            return None
        return self._profile(steamid)

    async def get_profiles(self, steamids: Iterable[str]) -> List[Profile]:
        self.profile_calls += 1
        if self.failing:
            self.failures += 1
            return []
        return [p for p in (self._profile(s) for s in dict.fromkeys(steamids)) if p is not None]

    async def get_neighbors(self, steamid: str) -> NeighborSet:
        self.neighbor_calls.append(steamid)
        if self.failing or steamid in self.failing_ids:
            self.failures += 1
            return NeighborSet(steamid=steamid)
        if steamid in self.private:
            return NeighborSet.private(steamid, 0.0)
        return NeighborSet(steamid=steamid, friends=tuple(self.graph.get(steamid, [])))


def undirected(*edges):
    """Build a friend graph from (a, b) pairs."""
    graph: Dict[str, List[str]] = {}
    for a, b in edges:
        graph.setdefault(a, []).append(b)
        graph.setdefault(b, []).append(a)
    return graph


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_store(clock):
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def cache_manager(cache_store):
    return CacheManager(cache_store)


@pytest.fixture
def chain_directory():
    """A - B - C - D, plus E who is friends with A only."""
    a, b, c, d, e = (steam_id(n) for n in range(1, 6))
    return FakeDirectory(undirected((a, b), (b, c), (c, d), (a, e)))


@pytest.fixture
def engine_factory(cache_manager):
    def make(directory, max_depth: int = 4, max_neighbors: int = 300) -> PathEngine:
        return PathEngine(directory=directory, cache=cache_manager, max_depth=max_depth, max_neighbors=max_neighbors)
    return make


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_event_publisher():
    """Handlers subscribed in one test must not leak into the next."""
    event_publisher.clear_subscribers()
    yield
    event_publisher.clear_subscribers()


@pytest.fixture
def client(chain_directory, cache_manager, session_factory):
    """Test client wired to the fake directory, in-memory cache and SQLite history.

    Startup hooks are not run; the services they would create are put on app.state.
    """
    app.state.cache_manager = cache_manager
    app.state.directory = chain_directory
    app.state.history = SearchHistoryRecorder(session_factory)
    app.state.maintenance = MaintenanceService(session_factory)

    def override_history_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_history_db] = override_history_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    for name in ("cache_manager", "directory", "history", "maintenance"):
        setattr(app.state, name, None)
