"""
Context Tracking Session
Gates tree updates behind the "context mode" toggle.
"""

import logging
from typing import Callable, List, Optional

from ..tree.builder import ContextTreeBuilder
from ..tree.node import ContextNode
from .view import ExpansionState

logger = logging.getLogger(__name__)


class ContextTracker:
    """
    One browsing context tracking session.

    Events are ignored while tracking is off, and switching it off
    discards the accumulated forest.
    """

    def __init__(
        self,
        builder: Optional[ContextTreeBuilder] = None,
        enabled: bool = False,
        on_change: Optional[Callable[[], None]] = None,
        on_mode_changed: Optional[Callable[[bool], None]] = None
    ):
        """
        Initialize the tracker.

        Args:
            builder: Tree builder to feed (a fresh one by default)
            enabled: Start with tracking on
            on_change: Called after every change to the tree
            on_mode_changed: Called with the new state after a toggle
        """
        self.builder = builder if builder is not None else ContextTreeBuilder()
        self.expansion = ExpansionState()
        self.on_change = on_change
        self.on_mode_changed = on_mode_changed
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool):
        """Turn tracking on or off; turning it off clears the tree."""
        if enabled == self._enabled:
            return

        self._enabled = enabled
        if not enabled:
            node_count = len(self.builder.store)
            self.builder.clear()
            self.expansion.clear()
            logger.info(f"Context tracking disabled, discarded {node_count} nodes")
            self._notify_change()
        else:
            logger.info("Context tracking enabled")

        if self.on_mode_changed:
            self.on_mode_changed(enabled)

    def toggle(self) -> bool:
        self.set_enabled(not self._enabled)
        return self._enabled

    def track_navigation(
        self,
        from_url: str,
        to_url: str,
        to_title: str,
        favicon_url: Optional[str] = None
    ) -> Optional[ContextNode]:
        if not self._enabled:
            return None

        node = self.builder.add_navigation(from_url, to_url, to_title, favicon_url=favicon_url)
        if node is not None:
            self._notify_change()
        return node

    def update_node_title(self, url: str, new_title: str) -> bool:
        if not self._enabled:
            return False

        updated = self.builder.update_node_title(url, new_title)
        if updated:
            self._notify_change()
        return updated

    def delete_node(self, url: str) -> List[str]:
        if not self._enabled:
            return []

        removed = self.builder.delete_node(url)
        if removed:
            self.expansion.forget(removed)
            self._notify_change()
        return removed

    def toggle_expansion(self, url: str) -> bool:
        return self.expansion.toggle(url)

    def get_all_nodes(self) -> List[ContextNode]:
        """Flattened forest, or nothing while tracking is off."""
        if not self._enabled:
            return []
        return self.builder.get_all_nodes()

    @property
    def roots(self) -> List[ContextNode]:
        return self.builder.roots if self._enabled else []

    def _notify_change(self):
        if self.on_change:
            self.on_change()
