"""Agent tools over the browsing context tree."""

from .context_tools import create_context_tree_tools

__all__ = ["create_context_tree_tools"]
