"""Tests for concept network traversal (both strategies)."""

from __future__ import annotations

import asyncio

import pytest

from logseq_mcp.core.exceptions import InvalidInputError, LogseqRemoteError, PageNotFoundError
from logseq_mcp.graph.network import DatalogTraversal, SequentialTraversal, create_traversal
from logseq_mcp.graph.types import ConceptNetwork, EdgeType

from tests.conftest import build_rich_graph, build_scenario_graph, make_client

STRATEGIES = [DatalogTraversal, SequentialTraversal]

# (graph builder, root page) pairs used for the property tests
GRAPH_CASES = [
    (build_scenario_graph, "Root Page"),
    (build_scenario_graph, "Connected B"),
    (build_scenario_graph, "Isolated Page"),
    (build_rich_graph, "Python"),
    (build_rich_graph, "memory safety"),
    (build_rich_graph, "Jan 1st, 2025"),
    (build_rich_graph, "Lonely"),
]


async def _traverse(builder, strategy, concept: str, max_hops: int) -> ConceptNetwork:
    async with make_client(builder()) as client:
        return await strategy(client).traverse(concept, max_hops)


def _assert_well_formed(network: ConceptNetwork) -> None:
    ids = [n.id for n in network.nodes]
    assert len(ids) == len(set(ids)), "duplicate node ids"

    roots = [n for n in network.nodes if n.depth == 0]
    assert len(roots) == 1
    assert roots[0].name.lower() == network.concept.lower()

    known = set(ids)
    for edge in network.edges:
        assert edge.source in known
        assert edge.target in known
        assert network.depth_of(edge.target) <= network.depth_of(edge.source) + 1

    pairs = [(e.source, e.target) for e in network.edges]
    assert len(pairs) == len(set(pairs)), "duplicate edges"
    assert all(e.source != e.target for e in network.edges)


# ============================================================================
# Concrete scenarios
# ============================================================================


class TestScenarios:
    """Fixed scenarios checked on each strategy."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_root_page_one_hop(self, strategy):
        network = await _traverse(build_scenario_graph, strategy, "Root Page", 1)

        names = {n.name: n.depth for n in network.nodes}
        assert names == {"Root Page": 0, "Connected A": 1, "Connected B": 1}
        assert len(network.edges) == 2

        ids = {n.name: n.id for n in network.nodes}
        edges = {(e.source, e.target): e.type for e in network.edges}
        assert edges[(ids["Root Page"], ids["Connected A"])] is EdgeType.REFERENCE
        assert edges[(ids["Connected B"], ids["Root Page"])] is EdgeType.BACKLINK

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_isolated_page(self, strategy):
        network = await _traverse(build_scenario_graph, strategy, "Isolated Page", 2)

        assert len(network.nodes) == 1
        assert network.edges == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_nonexistent_page(self, strategy):
        with pytest.raises(PageNotFoundError) as exc_info:
            await _traverse(build_scenario_graph, strategy, "NonExistent", 2)

        assert "NonExistent" in str(exc_info.value)
        assert str(exc_info.value) == "Page not found: NonExistent"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_depth_zero_is_root_only(self, strategy):
        network = await _traverse(build_rich_graph, strategy, "PYTHON", 0)

        assert len(network.nodes) == 1
        assert network.nodes[0].name == "Python"
        assert network.nodes[0].depth == 0
        assert network.edges == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_negative_hops_rejected(self, strategy):
        with pytest.raises(InvalidInputError):
            await _traverse(build_scenario_graph, strategy, "Root Page", -1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_rich_graph_levels(self, strategy):
        network = await _traverse(build_rich_graph, strategy, "Python", 3)

        depths = {n.name: n.depth for n in network.nodes}
        assert depths["Python"] == 0
        assert depths["Rust"] == 1
        assert depths["Programming"] == 1
        assert depths["Data Science"] == 1
        assert depths["Notes"] == 1
        assert depths["Memory Safety"] == 2
        assert depths["Jan 2nd, 2025"] == 3
        assert "Lonely" not in depths
        assert len(network.edges) == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_self_reference_is_not_an_edge(self, strategy):
        network = await _traverse(build_rich_graph, strategy, "Python", 1)

        root = network.root
        assert all(not (e.source == root.id and e.target == root.id) for e in network.edges)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_dangling_reference_is_skipped(self, strategy):
        network = await _traverse(build_rich_graph, strategy, "Notes", 1)

        assert {n.name for n in network.nodes} == {"Notes", "Python"}


# ============================================================================
# Properties over every fixture graph
# ============================================================================


class TestTraversalProperties:
    """Invariants that hold for any root and depth."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("builder,concept", GRAPH_CASES)
    @pytest.mark.parametrize("max_hops", [0, 1, 2, 3])
    async def test_well_formed(self, strategy, builder, concept, max_hops):
        network = await _traverse(builder, strategy, concept, max_hops)
        _assert_well_formed(network)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("builder,concept", GRAPH_CASES)
    async def test_monotonic_frontier(self, strategy, builder, concept):
        previous: set[int] = set()
        for k in range(4):
            network = await _traverse(builder, strategy, concept, k)
            assert previous <= network.node_ids
            previous = network.node_ids

    @pytest.mark.asyncio
    @pytest.mark.parametrize("builder,concept", GRAPH_CASES)
    @pytest.mark.parametrize("max_hops", [0, 1, 2, 3])
    async def test_strategy_equivalence(self, builder, concept, max_hops):
        datalog = await _traverse(builder, DatalogTraversal, concept, max_hops)
        sequential = await _traverse(builder, SequentialTraversal, concept, max_hops)

        assert datalog.node_ids == sequential.node_ids
        assert len(datalog.edges) == len(sequential.edges)
        assert {(e.source, e.target) for e in datalog.edges} == {
            (e.source, e.target) for e in sequential.edges
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy", STRATEGIES)
    async def test_deterministic(self, strategy):
        fake = build_rich_graph()
        async with make_client(fake) as client:
            traversal = strategy(client)
            first = await traversal.traverse("Python", 2)
            second = await traversal.traverse("Python", 2)

        assert first.node_ids == second.node_ids
        assert len(first.edges) == len(second.edges)


# ============================================================================
# Strategy specifics
# ============================================================================


class TestDatalogTraversal:
    """One Datalog query per BFS level."""

    @pytest.mark.asyncio
    async def test_query_count_is_per_level(self):
        fake = build_rich_graph()
        async with make_client(fake) as client:
            await DatalogTraversal(client).traverse("Python", 3)

        # root lookup plus one query per level
        assert fake.calls["logseq.DB.datascriptQuery"] == 4
        assert fake.calls["logseq.Editor.getPage"] == 0

    @pytest.mark.asyncio
    async def test_stops_when_level_is_empty(self):
        fake = build_scenario_graph()
        async with make_client(fake) as client:
            await DatalogTraversal(client).traverse("Isolated Page", 3)

        assert fake.calls["logseq.DB.datascriptQuery"] == 2

    @pytest.mark.asyncio
    async def test_remote_error_aborts(self):
        fake = build_scenario_graph()
        fake.errors["logseq.DB.datascriptQuery"] = "Query parse failed"
        async with make_client(fake) as client:
            with pytest.raises(LogseqRemoteError, match="Query parse failed"):
                await DatalogTraversal(client).traverse("Root Page", 1)


class TestSequentialTraversal:
    """Per-page fetches."""

    @pytest.mark.asyncio
    async def test_backlink_sources_resolved_by_id(self):
        fake = build_scenario_graph()
        fake.null_backlink_sources = True
        async with make_client(fake) as client:
            network = await SequentialTraversal(client).traverse("Root Page", 1)

        assert {n.name for n in network.nodes} == {"Root Page", "Connected A", "Connected B"}

    @pytest.mark.asyncio
    async def test_backlink_error_aborts(self):
        fake = build_scenario_graph()
        fake.errors["logseq.Editor.getPageLinkedReferences"] = "boom"
        async with make_client(fake) as client:
            with pytest.raises(LogseqRemoteError):
                await SequentialTraversal(client).traverse("Root Page", 1)

    @pytest.mark.asyncio
    async def test_shared_instance_runs_concurrently(self):
        async with make_client(build_rich_graph()) as client:
            traversal = SequentialTraversal(client)
            python, safety = await asyncio.gather(
                traversal.traverse("Python", 2),
                traversal.traverse("memory safety", 2),
            )

        expected_python = await _traverse(build_rich_graph, SequentialTraversal, "Python", 2)
        expected_safety = await _traverse(build_rich_graph, SequentialTraversal, "memory safety", 2)
        assert python.node_ids == expected_python.node_ids
        assert safety.node_ids == expected_safety.node_ids
        assert len(python.edges) == len(expected_python.edges)
        assert len(safety.edges) == len(expected_safety.edges)

    @pytest.mark.asyncio
    async def test_page_lookups_not_reused_across_traversals(self):
        fake = build_rich_graph()
        async with make_client(fake) as client:
            traversal = SequentialTraversal(client)
            await traversal.traverse("Python", 2)
            first_run = fake.calls["logseq.Editor.getPage"]
            await traversal.traverse("Python", 2)

        assert first_run > 0
        assert fake.calls["logseq.Editor.getPage"] == 2 * first_run


class TestCreateTraversal:
    @pytest.mark.asyncio
    async def test_flag_selects_strategy(self, scenario_client):
        assert isinstance(create_traversal(scenario_client, True), DatalogTraversal)
        assert isinstance(create_traversal(scenario_client, False), SequentialTraversal)
