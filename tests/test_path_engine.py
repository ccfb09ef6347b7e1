"""Tests for the bidirectional path engine."""
import pytest

from handshake.application.path_engine import PathEngine
from handshake.domain.entities import FrontierNode
from handshake.domain.errors import ErrorKind

from conftest import FakeDirectory, steam_id, undirected

A, B, C, D, E = (steam_id(n) for n in range(1, 6))


def assert_valid_chain(result, graph):
    """Every consecutive pair of a found path must be friends."""
    ids = result.path_ids
    assert result.degree == len(ids) - 1
    assert len(set(ids)) == len(ids)
    for left, right in zip(ids, ids[1:]):
        assert right in graph[left]


class TestShortestPath:
    """Test successful searches."""

    @pytest.mark.asyncio
    async def test_chain_of_three_hops(self, chain_directory, engine_factory):
        engine = engine_factory(chain_directory)

        result = await engine.find_shortest_path(A, D)

        assert result.success
        assert result.degree == 3
        assert result.path_ids == [A, B, C, D]
        assert result.stats.cache_hits == 0
        assert result.stats.nodes_explored == 3
        assert_valid_chain(result, chain_directory.graph)

    @pytest.mark.asyncio
    async def test_direct_friends_skip_the_bfs(self, chain_directory, engine_factory):
        engine = engine_factory(chain_directory)

        result = await engine.find_shortest_path(A, B)

        assert result.degree == 1
        assert result.path_ids == [A, B]
        assert result.stats.nodes_explored == 0

    @pytest.mark.asyncio
    async def test_same_user(self, chain_directory, engine_factory):
        engine = engine_factory(chain_directory)

        result = await engine.find_shortest_path(A, A)

        assert result.success
        assert result.degree == 0
        assert result.path_ids == [A]
        assert chain_directory.neighbor_calls == []

    @pytest.mark.asyncio
    async def test_four_hops_is_the_limit(self, engine_factory):
        ids = [steam_id(n) for n in range(10, 15)]
        graph = undirected(*zip(ids, ids[1:]))
        engine = engine_factory(FakeDirectory(graph))

        result = await engine.find_shortest_path(ids[0], ids[-1])

        assert result.success
        assert result.degree == 4
        assert result.path_ids == ids
        assert_valid_chain(result, graph)

    @pytest.mark.asyncio
    async def test_shortest_of_several_routes(self, engine_factory):
        s, x, y, z, t = (steam_id(n) for n in range(20, 25))
        graph = undirected((s, x), (x, y), (y, t), (s, z), (z, t))
        engine = engine_factory(FakeDirectory(graph))

        result = await engine.find_shortest_path(s, t)

        assert result.degree == 2
        assert result.path_ids == [s, z, t]


class TestFailures:
    """Test every failure classification."""

    @pytest.mark.asyncio
    async def test_beyond_max_depth(self, engine_factory):
        ids = [steam_id(n) for n in range(10, 16)]
        directory = FakeDirectory(undirected(*zip(ids, ids[1:])))
        engine = engine_factory(directory)

        result = await engine.find_shortest_path(ids[0], ids[-1])

        assert not result.success
        assert result.error_message is ErrorKind.NO_PATH
        assert result.error_detail == "No connection found within 4 degrees"
        assert result.path == ()

    @pytest.mark.asyncio
    async def test_disconnected_users(self, engine_factory):
        directory = FakeDirectory(undirected((A, B), (C, D)))
        result = await engine_factory(directory).find_shortest_path(A, D)
        assert result.error_message is ErrorKind.NO_PATH

    @pytest.mark.asyncio
    async def test_private_source(self, engine_factory):
        directory = FakeDirectory(undirected((A, B), (B, C)), private=[A])

        result = await engine_factory(directory).find_shortest_path(A, C)

        assert result.error_message is ErrorKind.PRIVATE_SOURCE
        assert result.error_detail == "Source profile is private"
        assert result.stats.nodes_explored == 0

    @pytest.mark.asyncio
    async def test_private_target(self, engine_factory):
        directory = FakeDirectory(undirected((A, B), (B, C)), private=[C])
        result = await engine_factory(directory).find_shortest_path(A, C)
        assert result.error_message is ErrorKind.PRIVATE_TARGET

    @pytest.mark.asyncio
    async def test_private_intermediate_is_skipped(self, engine_factory):
        graph = undirected((A, B), (B, C), (C, D), (A, E), (E, D))
        directory = FakeDirectory(graph, private=[B])

        result = await engine_factory(directory).find_shortest_path(A, D)

        assert result.success
        assert result.path_ids == [A, E, D]

    @pytest.mark.asyncio
    async def test_unknown_user(self, chain_directory, engine_factory):
        result = await engine_factory(chain_directory).find_shortest_path(A, steam_id(99))

        assert result.error_message is ErrorKind.NOT_FOUND
        assert result.error_detail == "Target user not found"

    @pytest.mark.asyncio
    async def test_upstream_unavailable(self, chain_directory, engine_factory):
        chain_directory.failing = True

        result = await engine_factory(chain_directory).find_shortest_path(A, D)

        assert result.error_message is ErrorKind.UPSTREAM_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_failed_intermediate_lists_are_not_reported_as_no_path(self, engine_factory):
        directory = FakeDirectory(undirected((A, B), (B, C), (C, D)), failing_ids=[B, C])

        result = await engine_factory(directory).find_shortest_path(A, D)

        assert not result.success
        assert result.error_message is ErrorKind.UPSTREAM_UNAVAILABLE
        assert result.error_detail == "Some friend lists were unavailable during the search"

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_internal_error(self, chain_directory, engine_factory):
        async def broken(steamid):
            raise RuntimeError("boom")

        chain_directory.get_neighbors = broken

        result = await engine_factory(chain_directory).find_shortest_path(A, D)

        assert not result.success
        assert result.error_message is ErrorKind.INTERNAL_ERROR
        assert result.error_detail == "An error occurred during the search"


class TestDegradedPath:
    """Path members whose profile cannot be fetched are dropped and counted."""

    @pytest.mark.asyncio
    async def test_missing_intermediate_profile(self, engine_factory):
        graph = undirected((A, B), (B, C), (C, D))
        directory = FakeDirectory(graph, missing=[B])

        result = await engine_factory(directory).find_shortest_path(A, D)

        assert result.success
        assert result.path_ids == [A, C, D]
        assert result.degree == 2
        assert result.stats.dropped_ids == 1


class TestResultCache:
    """Test caching of results and reuse across directions."""

    @pytest.mark.asyncio
    async def test_repeat_search_is_served_from_cache(self, chain_directory, engine_factory):
        engine = engine_factory(chain_directory)

        first = await engine.find_shortest_path(A, D)
        calls = len(chain_directory.neighbor_calls)
        second = await engine.find_shortest_path(A, D)

        assert second == first
        assert second.stats.cache_hits == 1
        assert second.stats.nodes_explored == 0
        assert len(chain_directory.neighbor_calls) == calls

    @pytest.mark.asyncio
    async def test_reverse_search_reuses_result(self, chain_directory, engine_factory):
        engine = engine_factory(chain_directory)

        forward = await engine.find_shortest_path(A, D)
        calls = len(chain_directory.neighbor_calls)
        backward = await engine.find_shortest_path(D, A)

        assert backward.path_ids == list(reversed(forward.path_ids))
        assert backward.degree == forward.degree
        assert backward.stats.cache_hits == 1
        assert len(chain_directory.neighbor_calls) == calls

    @pytest.mark.asyncio
    async def test_reversed_failure_swaps_sides(self, engine_factory):
        directory = FakeDirectory(undirected((A, B), (B, C)), private=[A])
        engine = engine_factory(directory)

        await engine.find_shortest_path(A, C)
        reverse = await engine.find_shortest_path(C, A)

        assert reverse.error_message is ErrorKind.PRIVATE_TARGET
        assert reverse.error_detail == "Target profile is private"

    @pytest.mark.asyncio
    async def test_failures_are_cached(self, engine_factory, cache_manager):
        directory = FakeDirectory(undirected((A, B), (C, D)))
        await engine_factory(directory).find_shortest_path(A, D)

        assert await cache_manager.get_json(cache_manager.policy.result_key(A, D)) is not None

    @pytest.mark.asyncio
    async def test_independent_runs_agree(self, chain_directory, cache_manager):
        """Two engines over the same cache but separate BFS state give the same answer."""
        first = await PathEngine(chain_directory, cache_manager).find_shortest_path(A, D)
        await cache_manager.delete(cache_manager.policy.result_key(A, D))
        second = await PathEngine(chain_directory, cache_manager).find_shortest_path(A, D)

        assert first == second


class TestReconstructPath:
    """Test path reconstruction from both parent maps."""

    def test_meeting_point_appears_once(self):
        forward = {
            A: FrontierNode(A, 0, "forward"),
            B: FrontierNode(B, 1, "forward", parent=A),
            C: FrontierNode(C, 2, "forward", parent=B),
        }
        backward = {
            E: FrontierNode(E, 0, "backward"),
            D: FrontierNode(D, 1, "backward", parent=E),
            C: FrontierNode(C, 2, "backward", parent=D),
        }

        assert PathEngine.reconstruct_path_ids(C, forward, backward) == [A, B, C, D, E]

    def test_meeting_at_backward_root(self):
        forward = {A: FrontierNode(A, 0, "forward"), B: FrontierNode(B, 1, "forward", parent=A)}
        backward = {B: FrontierNode(B, 0, "backward")}

        assert PathEngine.reconstruct_path_ids(B, forward, backward) == [A, B]
