"""
Context Node Store
Identity map and forest roots for one tracking session.
"""

import logging
from typing import Dict, Iterator, List, Optional

from .node import ContextNode

logger = logging.getLogger(__name__)


class ForestInvariantError(RuntimeError):
    """Raised when the identity map and the forest shape disagree."""


class ContextNodeStore:
    """
    Holds every known node once, keyed by normalized URL, plus the
    ordered list of roots.

    The URL map is the authority for existence; roots/children are a
    second index over the same node objects. Parent URLs are tracked in
    a separate non-owning index so nodes keep children-only links.
    """

    def __init__(self):
        self._nodes: Dict[str, ContextNode] = {}
        self._roots: List[ContextNode] = []
        self._parents: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, url: str) -> bool:
        return url in self._nodes

    @property
    def roots(self) -> List[ContextNode]:
        """Forest roots in insertion order."""
        return list(self._roots)

    def contains(self, url: str) -> bool:
        return url in self._nodes

    def get(self, url: str) -> Optional[ContextNode]:
        return self._nodes.get(url)

    def parent_of(self, url: str) -> Optional[ContextNode]:
        """Get the parent node, or None for roots and unknown URLs."""
        parent_url = self._parents.get(url)
        return self._nodes.get(parent_url) if parent_url else None

    def add_root(self, node: ContextNode) -> ContextNode:
        """Insert a brand-new node as the last root."""
        self._ensure_new(node)
        self._nodes[node.url] = node
        self._roots.append(node)
        return node

    def add_child(self, parent_url: str, node: ContextNode) -> ContextNode:
        """Insert a brand-new node as the last child of a known parent."""
        self._ensure_new(node)
        parent = self._nodes.get(parent_url)
        if parent is None:
            raise ForestInvariantError(f"Cannot attach {node.url}: parent {parent_url} is not tracked")

        self._nodes[node.url] = node
        self._parents[node.url] = parent_url
        parent.children.append(node)
        return node

    def remove(self, url: str) -> List[str]:
        """
        Remove a node together with its subtree.

        Args:
            url: Normalized URL of the node

        Returns:
            URLs that were removed, the node first; empty if unknown
        """
        node = self._nodes.get(url)
        if node is None:
            return []

        self._roots = [root for root in self._roots if root.url != url]

        parent = self.parent_of(url)
        if parent is not None:
            parent.children[:] = [child for child in parent.children if child.url != url]
        else:
            # Index miss; search every tree
            for root in self._roots:
                self._remove_from_tree(root, url)

        removed = [n.url for n in node.iter_subtree()]
        for removed_url in removed:
            self._nodes.pop(removed_url, None)
            self._parents.pop(removed_url, None)

        return removed

    def clear(self):
        """Drop all nodes and roots."""
        self._nodes.clear()
        self._roots.clear()
        self._parents.clear()

    def iter_nodes(self) -> Iterator[ContextNode]:
        """Yield every node reachable from the roots, in pre-order."""
        for root in list(self._roots):
            yield from root.iter_subtree()

    def check_invariants(self):
        """
        Verify the forest is consistent with the identity map.

        Raises:
            ForestInvariantError: on a duplicate URL, a node with two
                parents, a node missing from the map, or a mapped node
                unreachable from the roots
        """
        seen: Dict[str, ContextNode] = {}
        for node in self.iter_nodes():
            if node.url in seen:
                raise ForestInvariantError(f"Node {node.url} is reachable more than once")
            if self._nodes.get(node.url) is not node:
                raise ForestInvariantError(f"Node {node.url} is in the forest but not in the URL map")
            seen[node.url] = node

        missing = set(self._nodes) - set(seen)
        if missing:
            raise ForestInvariantError(f"Unreachable nodes in URL map: {sorted(missing)}")

        for child_url, parent_url in self._parents.items():
            parent = self._nodes.get(parent_url)
            if parent is None or not parent.has_child(child_url):
                raise ForestInvariantError(f"Stale parent index entry {child_url} -> {parent_url}")

    def _ensure_new(self, node: ContextNode):
        if node.url in self._nodes:
            raise ForestInvariantError(f"Node {node.url} is already tracked")

    def _remove_from_tree(self, root: ContextNode, url: str):
        # Children are filtered before the walk descends into them
        for node in root.iter_subtree():
            node.children[:] = [child for child in node.children if child.url != url]
