"""
Context Tree Builder
Turns navigation events into a forest of browsing context trees.
"""

import logging
from typing import List, Optional

from .node import ContextNode
from .store import ContextNodeStore
from .urls import normalize_url, same_domain
from ..config import get_config

logger = logging.getLogger(__name__)


class ContextTreeBuilder:
    """
    Ingestion and query API over a ContextNodeStore.

    A navigation becomes a child of its origin when both pages share a
    domain and the origin is tracked; otherwise it starts a new root.
    Once placed, a node never moves.
    """

    def __init__(
        self,
        store: Optional[ContextNodeStore] = None,
        debug_invariants: Optional[bool] = None
    ):
        """
        Initialize the builder.

        Args:
            store: Node store to populate (a fresh one by default)
            debug_invariants: Check forest invariants after each mutation;
                defaults to the configured value
        """
        self.store = store if store is not None else ContextNodeStore()
        if debug_invariants is None:
            debug_invariants = get_config().debug_invariants
        self.debug_invariants = debug_invariants

    @property
    def roots(self) -> List[ContextNode]:
        """Forest roots in the order they were created."""
        return self.store.roots

    def add_navigation(
        self,
        from_url: str,
        to_url: str,
        to_title: str,
        favicon_url: Optional[str] = None
    ) -> Optional[ContextNode]:
        """
        Record a page transition.

        Args:
            from_url: Originating page, or "" when the tab opened directly
            to_url: Destination page
            to_title: Destination title (may be a placeholder)
            favicon_url: Optional destination favicon

        Returns:
            The newly created node, or None when the destination was
            already tracked
        """
        normalized_to = normalize_url(to_url)
        normalized_from = normalize_url(from_url) if from_url else ""

        if self.store.contains(normalized_to):
            logger.debug(f"Ignoring navigation to tracked node {normalized_to}")
            return None

        node = ContextNode(url=normalized_to, title=to_title, favicon_url=favicon_url)

        if (
            normalized_from
            and self.store.contains(normalized_from)
            and same_domain(normalized_from, normalized_to)
        ):
            self.store.add_child(normalized_from, node)
            logger.debug(f"Attached {normalized_to} under {normalized_from}")
        else:
            self.store.add_root(node)
            logger.debug(f"Created root {normalized_to} (from: {normalized_from or 'none'})")

        self._verify()
        return node

    def update_node_title(self, url: str, new_title: str) -> bool:
        """
        Correct a node's title once the real page title is known.

        Returns:
            True if a tracked node was updated
        """
        node = self.store.get(normalize_url(url))
        if node is None:
            return False

        node.title = new_title
        return True

    def delete_node(self, url: str) -> List[str]:
        """
        Delete a node and its whole subtree.

        Returns:
            Removed URLs (empty when the URL was not tracked)
        """
        removed = self.store.remove(normalize_url(url))
        if removed:
            logger.debug(f"Deleted {removed[0]} with {len(removed) - 1} descendants")
            self._verify()
        return removed

    def get_node(self, url: str) -> Optional[ContextNode]:
        """Look up a tracked node by (unnormalized) URL."""
        return self.store.get(normalize_url(url))

    def get_all_nodes(self) -> List[ContextNode]:
        """Flatten the forest in pre-order: each root, then its children in order."""
        return list(self.store.iter_nodes())

    def clear(self):
        """Discard every node and start an empty forest."""
        self.store.clear()

    def _verify(self):
        if self.debug_invariants:
            self.store.check_invariants()
