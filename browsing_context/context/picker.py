"""
Context Picker Selection
Multi-select over tracked nodes before they are handed to the chat.
"""

from typing import List, Set

from ..tree.node import ContextNode


def create_short_name(full_name: str, max_length: int = 15) -> str:
    """
    Short @mention name for a page title.

    Uses the first word when the title has several words and the first
    one fits, otherwise the first max_length characters.
    """
    words = full_name.split(" ")
    if len(words) > 1 and len(words[0]) <= max_length:
        return words[0]
    return full_name[:max_length]


class ContextSelection:
    """Selected node URLs for one picker dialog."""

    def __init__(self, nodes: List[ContextNode]):
        """
        Initialize over the nodes shown in the dialog.

        Args:
            nodes: Display list, usually ContextTreeBuilder.get_all_nodes()
        """
        self.nodes = list(nodes)
        self._selected: Set[str] = set()

    def toggle(self, url: str) -> bool:
        """Select or deselect a node; returns True if now selected."""
        if url in self._selected:
            self._selected.discard(url)
            return False
        self._selected.add(url)
        return True

    def is_selected(self, url: str) -> bool:
        return url in self._selected

    @property
    def count(self) -> int:
        return len(self._selected)

    def confirm_label(self) -> str:
        """Text for the confirm button."""
        return f"Add {self.count} Node{'s' if self.count != 1 else ''}"

    def selected_nodes(self) -> List[ContextNode]:
        """Selected nodes in display order."""
        return [node for node in self.nodes if node.url in self._selected]

    def clear(self):
        self._selected.clear()
