"""
Browsing Context Tree
Tracks how a browsing session branches across pages and hands picked pages to an AI chat.
"""

__version__ = "0.1.0"

from .tree import ContextNode, ContextTreeBuilder, ContextNodeStore, ForestInvariantError
from .context import ContextTracker, ContextEngineer, ContextSelection, ExpansionState

__all__ = [
    "ContextNode",
    "ContextTreeBuilder",
    "ContextNodeStore",
    "ForestInvariantError",
    "ContextTracker",
    "ContextEngineer",
    "ContextSelection",
    "ExpansionState",
]
