"""
Context Handoff Module
Tracking sessions, the node picker, and chat context building.
"""

from .engineer import ContextEngineer, ContextEntry
from .picker import ContextSelection
from .session import ContextTracker
from .view import ExpansionState

__all__ = ["ContextEngineer", "ContextEntry", "ContextSelection", "ContextTracker", "ExpansionState"]
