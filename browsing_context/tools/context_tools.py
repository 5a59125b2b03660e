"""
Context Tree Tools for Agent
LangChain tools that let the chat model inspect the browsing context tree.
"""

import logging
from langchain_core.tools import tool

from ..context.session import ContextTracker
from ..context.view import format_time_ago

logger = logging.getLogger(__name__)


def render_outline(tracker: ContextTracker) -> str:
    """Indented outline of the whole forest, one page per line."""
    lines = []
    stack = [(root, 0) for root in reversed(tracker.roots)]

    while stack:
        node, depth = stack.pop()
        lines.append(f"{'  ' * depth}- {node.title} ({node.url}) [{format_time_ago(node.visited_at)}]")
        stack.extend((child, depth + 1) for child in reversed(node.children))

    return "\n".join(lines)


def create_list_context_tool(tracker: ContextTracker):
    """
    Create list_browsing_context tool bound to a tracker.

    Args:
        tracker: ContextTracker for the current session

    Returns:
        LangChain tool function
    """

    @tool
    def list_browsing_context() -> str:
        """
        List the pages the user visited while context tracking was on.

        Pages are shown as an outline: indented pages were reached from
        the page above them on the same site.

        Returns:
            Outline of visited pages, or a status message
        """
        if not tracker.enabled:
            return "Context tracking is turned off."

        outline = render_outline(tracker)
        if not outline:
            return "No pages have been tracked yet."
        return outline

    return list_browsing_context


def create_get_node_tool(tracker: ContextTracker):
    """
    Create get_context_node tool bound to a tracker.

    Args:
        tracker: ContextTracker for the current session

    Returns:
        LangChain tool function
    """

    @tool
    def get_context_node(url: str) -> str:
        """
        Get details about one page in the browsing context tree.

        Args:
            url: The page URL as shown by list_browsing_context

        Returns:
            Title, visit time and sub-pages of the page, or an error message
        """
        node = tracker.builder.get_node(url) if tracker.enabled else None
        if node is None:
            logger.debug(f"Context node lookup missed: {url}")
            return f"Page {url} is not in the browsing context."

        data = node.to_context_dict()
        details = [
            f"Title: {data['title']}",
            f"URL: {data['url']}",
            f"Visited: {data['visited_at']}",
        ]
        if data["favicon_url"]:
            details.append(f"Favicon: {data['favicon_url']}")
        if data["child_count"]:
            details.append(f"Sub-pages ({data['child_count']}):")
            details.extend(f"  - {child.title} ({child.url})" for child in node.children)
        return "\n".join(details)

    return get_context_node


def create_context_tree_tools(tracker: ContextTracker) -> list:
    """
    Create all context tree tools.

    Args:
        tracker: ContextTracker for the current session

    Returns:
        List of LangChain tools
    """
    return [
        create_list_context_tool(tracker),
        create_get_node_tool(tracker)
    ]
