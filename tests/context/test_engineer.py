"""Tests for Context Engineer module."""

import logging
from datetime import datetime

import pytest
from unittest.mock import AsyncMock
from tenacity import wait_none

from browsing_context.config import ContextTreeConfig, reset_config
from browsing_context.context.engineer import (
    ContextEngineer,
    ContextEntry,
    ContextUsage,
    FAILED_CONTENT,
    MODEL_TOKEN_LIMITS
)
from browsing_context.tree.node import ContextNode

VISITED = datetime(2024, 5, 1, 12, 0, 0)


def make_node(url, title):
    return ContextNode(url=url, title=title, visited_at=VISITED)


class TestAddContextNodes:
    """Tests for attaching nodes to the chat."""

    @pytest.mark.asyncio
    async def test_entries_and_mentions(self):
        """Test each node becomes an entry and an @mention."""
        loader = AsyncMock(side_effect=lambda url: f"content of {url}")
        engineer = ContextEngineer(content_loader=loader)
        nodes = [
            make_node("https://a.com", "Alpha Home Page"),
            make_node("https://b.com", "Beta"),
        ]

        result = await engineer.add_context_nodes(nodes)

        assert result.text == "@Alpha @Beta"
        assert result.mentions == ["@Alpha", "@Beta"]
        entry = result.entries[0]
        assert entry.id == "https://a.com"
        assert entry.content == "content of https://a.com"
        assert entry.short_name == "Alpha"
        assert entry.timestamp == "2024-05-01T12:00:00"
        assert entry.is_context_node is True
        assert set(engineer.contexts) == {"Alpha Home Page", "Beta"}

    @pytest.mark.asyncio
    async def test_appends_to_existing_text(self):
        """Test mentions are appended after existing input."""
        engineer = ContextEngineer()
        result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")], "Compare")
        assert result.text == "Compare @Alpha"

    @pytest.mark.asyncio
    async def test_no_nodes_keeps_text(self):
        """Test empty selection leaves input unchanged."""
        engineer = ContextEngineer()
        result = await engineer.add_context_nodes([], "hello")
        assert result.text == "hello"
        assert result.entries == []

    @pytest.mark.asyncio
    async def test_untitled_node_uses_default_name(self):
        """Test nodes without a title get a generic name."""
        engineer = ContextEngineer()
        result = await engineer.add_context_nodes([make_node("https://a.com", "")])

        assert "Context Node" in engineer.contexts
        assert result.mentions == ["@Context"]
        assert result.entries[0].content == ""

    @pytest.mark.asyncio
    async def test_loader_failure_uses_placeholder(self):
        """Test a failing loader is retried then degrades to placeholder text."""
        loader = AsyncMock(side_effect=ConnectionError("offline"))
        engineer = ContextEngineer(content_loader=loader, retry_wait=wait_none())

        result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")])

        assert result.entries[0].content == FAILED_CONTENT
        assert result.mentions == ["@Alpha"]
        assert loader.await_count == 3

    @pytest.mark.asyncio
    async def test_loader_retry_recovers(self):
        """Test a transient loader failure is retried."""
        loader = AsyncMock(side_effect=[TimeoutError("slow"), "page text"])
        engineer = ContextEngineer(content_loader=loader, retry_wait=wait_none())

        result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")])

        assert result.entries[0].content == "page text"
        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_content_truncated_to_config(self):
        """Test loaded content respects the configured size."""
        reset_config(ContextTreeConfig(debug_invariants=True, content_max_chars=10))
        engineer = ContextEngineer(content_loader=AsyncMock(return_value="x" * 50))

        result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")])

        assert result.entries[0].content == "x" * 10

    @pytest.mark.asyncio
    async def test_handoff_reports_usage(self):
        """Test the handoff carries usage for the built context."""
        engineer = ContextEngineer(content_loader=AsyncMock(return_value="x" * 400))

        result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")])

        assert isinstance(result.usage, ContextUsage)
        assert result.usage.tokens > 100
        assert result.usage.max_tokens == 128000

    @pytest.mark.asyncio
    async def test_handoff_warns_over_threshold(self, caplog):
        """Test usage above the threshold is logged."""
        engineer = ContextEngineer(threshold=0.0, default_model="gpt-4")

        with caplog.at_level(logging.WARNING, logger="browsing_context.context.engineer"):
            result = await engineer.add_context_nodes([make_node("https://a.com", "Alpha")])

        assert result.usage.max_tokens == 8192
        assert "close to the model limit" in caplog.text

    @pytest.mark.asyncio
    async def test_remove_and_clear_contexts(self):
        """Test attached entries can be removed."""
        engineer = ContextEngineer()
        await engineer.add_context_nodes([make_node("https://a.com", "Alpha"), make_node("https://b.com", "Beta")])

        assert engineer.remove_context("Alpha") is True
        assert engineer.remove_context("Alpha") is False
        assert [s["short_name"] for s in engineer.get_context_summary()] == ["Beta"]

        engineer.clear_contexts()
        assert engineer.contexts == {}


class TestContextUsage:
    """Tests for token usage estimation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engineer = ContextEngineer(threshold=0.80, default_model="gpt-4o-mini")

    def test_default_model_from_config(self):
        """Test the default model comes from configuration."""
        assert ContextEngineer().default_model == "gpt-4o-mini"

    def test_calculate_usage_basic(self):
        """Test basic token usage calculation."""
        usage = self.engineer.calculate_usage("a" * 400)

        assert isinstance(usage, ContextUsage)
        assert usage.tokens == 100
        assert usage.max_tokens == 128000
        assert usage.remaining == 127900

    def test_should_compress(self):
        """Test compression threshold."""
        assert not self.engineer.should_compress("x" * 1000)
        assert self.engineer.should_compress("x" * 500000)

    def test_explicit_zero_threshold(self):
        """Test a threshold of 0.0 is honoured instead of the default."""
        assert not self.engineer.should_compress("x" * 1000)
        assert self.engineer.should_compress("x" * 1000, threshold=0.0)

    def test_unknown_model_fallback(self):
        """Test fallback for unknown models."""
        assert self.engineer.calculate_usage("test", "unknown-model-xyz").max_tokens == 128000

    def test_partial_model_match(self):
        """Test versioned model names match their family."""
        assert self.engineer.calculate_usage("test", "claude-3-opus-20240229").max_tokens == 200000

    def test_format_usage_string(self):
        """Test usage string formatting."""
        usage = ContextUsage(tokens=50000, max_tokens=128000, percent=39.1, remaining=78000)
        assert self.engineer.format_usage_string(usage) == "39.1% (50,000/128,000 tokens)"

    def test_all_limits_positive(self):
        """Test all token limits are positive integers."""
        for limit in MODEL_TOKEN_LIMITS.values():
            assert isinstance(limit, int)
            assert limit > 0


class TestBuildContextWithReferences:
    """Tests for building model context."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engineer = ContextEngineer()

    def test_includes_pages(self):
        """Test each entry gets a section."""
        entries = [
            ContextEntry(id="https://a.com", url="https://a.com", title="Alpha", content="Alpha text",
                         short_name="Alpha", timestamp="2024-05-01T12:00:00"),
            ContextEntry(id="https://b.com", url="https://b.com", title="Beta",
                         short_name="Beta", timestamp="2024-05-01T12:00:00"),
        ]

        result = self.engineer.build_context_with_references(entries, "Question")

        assert result.startswith("## Browsing Context\n")
        assert "### @Alpha: Alpha (https://a.com)\nAlpha text\n" in result
        assert "### @Beta: Beta (https://b.com)\n" in result
        assert result.endswith("\nQuestion")

    def test_no_entries(self):
        """Test context is unchanged without entries."""
        assert self.engineer.build_context_with_references([], "Question") == "Question"

    def test_content_shares_budget(self):
        """Test page content is capped by the model window and threshold."""
        engineer = ContextEngineer(threshold=0.5, default_model="gpt-4")
        entries = [
            ContextEntry(id=f"https://{c}.com", url=f"https://{c}.com", title=c, content=c * 10000,
                         short_name=c, timestamp="2024-05-01T12:00:00")
            for c in "abc"
        ]

        # 8192 tokens * 0.5 * 4 chars, less the current context
        result = engineer.build_context_with_references(entries, "q" * 384)

        assert result.count("a") >= 10000
        assert "b" * 6000 + "\n" in result
        assert "b" * 6001 not in result
        assert "### @c: c (https://c.com)\n\n" in result
        assert "cc" not in result
