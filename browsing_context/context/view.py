"""
Context Tree View State
Disclosure state and display helpers for rendering the forest.
"""

from typing import Iterable, List, Optional, Set
from dataclasses import dataclass
from datetime import datetime

from ..tree.node import ContextNode
from ..tree.urls import normalize_url


@dataclass
class TreeRow:
    """One rendered line of the context tree."""
    node: ContextNode
    depth: int
    expanded: bool
    has_children: bool


class ExpansionState:
    """
    Which nodes the picker shows expanded, keyed by normalized URL.
    Owned by the picker; the tree itself never reads it.
    """

    def __init__(self):
        self._expanded: Set[str] = set()

    def is_expanded(self, url: str) -> bool:
        return normalize_url(url) in self._expanded

    def set_expanded(self, url: str, expanded: bool):
        url = normalize_url(url)
        if expanded:
            self._expanded.add(url)
        else:
            self._expanded.discard(url)

    def toggle(self, url: str) -> bool:
        """Flip a node's state and return the new value."""
        expanded = not self.is_expanded(url)
        self.set_expanded(url, expanded)
        return expanded

    def forget(self, urls: Iterable[str]):
        """Drop state for deleted nodes."""
        for url in urls:
            self._expanded.discard(normalize_url(url))

    def clear(self):
        self._expanded.clear()


def visible_rows(roots: List[ContextNode], expansion: ExpansionState) -> List[TreeRow]:
    """
    Rows to draw for a hierarchical view.
    Children are listed only under expanded nodes.
    """
    rows: List[TreeRow] = []
    stack = [(root, 0) for root in reversed(roots)]

    while stack:
        node, depth = stack.pop()
        expanded = expansion.is_expanded(node.url)
        rows.append(TreeRow(node=node, depth=depth, expanded=expanded, has_children=bool(node.children)))
        if expanded:
            stack.extend((child, depth + 1) for child in reversed(node.children))

    return rows


def format_time_ago(visited_at: datetime, now: Optional[datetime] = None) -> str:
    """Compact relative age: 'now', '5m', '3h', '2d'."""
    now = now or datetime.now()
    seconds = (now - visited_at).total_seconds()
    minutes = int(seconds // 60)

    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"
