"""
Context Tree Module
Forest of visited pages built from navigation events.
"""

from .node import ContextNode
from .store import ContextNodeStore, ForestInvariantError
from .builder import ContextTreeBuilder
from .urls import normalize_url, extract_domain

__all__ = [
    "ContextNode",
    "ContextNodeStore",
    "ForestInvariantError",
    "ContextTreeBuilder",
    "normalize_url",
    "extract_domain",
]
