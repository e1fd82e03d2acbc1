"""Pytest fixtures for logseq-graph-mcp tests.

Provides fixtures for:
- In-memory Logseq graphs (scenario, rich and journal graphs)
- LogseqClient / LogseqGraph wired to the fake through httpx.MockTransport
"""

from __future__ import annotations

from typing import AsyncIterator

import pytest

from logseq_mcp.clients.config import FeatureFlags, LogseqConfig
from logseq_mcp.clients.logseq import LogseqClient
from logseq_mcp.service import LogseqGraph

from tests.fake_logseq import API_URL, TOKEN, FakeLogseq


# ============================================================================
# Graph fixtures
# ============================================================================


def build_scenario_graph() -> FakeLogseq:
    """Root Page -> Connected A, Connected B -> Root Page, plus an isolated page."""
    fake = FakeLogseq()
    fake.add_page("Root Page")
    fake.add_page("Connected A")
    fake.add_page("Connected B")
    fake.add_page("Isolated Page")

    fake.add_block("Root Page", "This links to [[Connected A]]")
    fake.add_block("Connected A", "Nothing to see here")
    fake.add_block("Connected B", "Back to [[Root Page]]")
    fake.add_block("Isolated Page", "No links at all")
    return fake


def build_rich_graph() -> FakeLogseq:
    """Multi-level graph with tags, nesting, cycles, self references and journals."""
    fake = FakeLogseq()
    fake.add_page("Python", properties={"type": "language"})
    fake.add_page("Rust", properties={"type": "language"})
    fake.add_page("Memory Safety")
    fake.add_page("Data Science")
    fake.add_page("Programming")
    fake.add_page("Notes")
    fake.add_page("Jan 1st, 2025", journal_day=20250101)
    fake.add_page("Dec 31st, 2024", journal_day=20241231)
    fake.add_page("Jan 2nd, 2025", journal_day=20250102)
    fake.add_page("Lonely")

    fake.add_block("Python", "[[Python]] is a language")
    top = fake.add_block("Python", "Often compared with [[Rust]] #programming")
    fake.add_block("Python", "Used heavily in [[Data Science]]", parent=top)
    fake.add_block("Python", "status:: done", properties={"status": "done"})

    fake.add_block("Rust", "Focus on [[Memory Safety]]")
    fake.add_block("Rust", "Interop with [[Python]] via PyO3")

    fake.add_block("Memory Safety", "Ownership and borrowing")
    fake.add_block("Data Science", "Pandas and notebooks")
    fake.add_block("Programming", "General notes")

    fake.add_block("Notes", "[[Python]] vs [[Go]]")

    fake.add_block("Jan 1st, 2025", "Learned about [[Python]] and [[Rust]]")
    fake.add_block("Jan 1st, 2025", "Went for a walk")
    fake.add_block("Dec 31st, 2024", "Reviewing #python goals")
    fake.add_block("Jan 2nd, 2025", "Read a book on [[Memory Safety]]")

    fake.add_block("Lonely", "Just me")
    return fake


@pytest.fixture
def scenario_fake() -> FakeLogseq:
    return build_scenario_graph()


@pytest.fixture
def rich_fake() -> FakeLogseq:
    return build_rich_graph()


# ============================================================================
# Client fixtures
# ============================================================================


def make_config(use_datalog: bool | dict[str, bool] = False) -> LogseqConfig:
    return LogseqConfig(
        auth_token=TOKEN,
        api_url=API_URL,
        features=FeatureFlags(use_datalog=use_datalog),
    )


def make_client(fake: FakeLogseq, use_datalog: bool | dict[str, bool] = False) -> LogseqClient:
    return LogseqClient(make_config(use_datalog), transport=fake.transport())


@pytest.fixture
async def scenario_client(scenario_fake: FakeLogseq) -> AsyncIterator[LogseqClient]:
    async with make_client(scenario_fake) as client:
        yield client


@pytest.fixture
async def rich_client(rich_fake: FakeLogseq) -> AsyncIterator[LogseqClient]:
    async with make_client(rich_fake) as client:
        yield client


@pytest.fixture
async def rich_graph(rich_fake: FakeLogseq) -> AsyncIterator[LogseqGraph]:
    config = make_config()
    async with LogseqGraph(config, LogseqClient(config, transport=rich_fake.transport())) as graph:
        yield graph
