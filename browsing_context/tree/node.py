"""
Context Node Model
One tracked page within an active tracking session.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field


class ContextNode(BaseModel):
    """A visited page and the pages reached from it on the same domain."""
    url: str = Field(..., description="Normalized URL, unique across the forest")
    title: str = Field(..., description="Display label, corrected when the real title loads")
    favicon_url: Optional[str] = Field(default=None, description="Favicon captured at creation")
    visited_at: datetime = Field(default_factory=datetime.now, description="Creation time")
    children: List["ContextNode"] = Field(default_factory=list, description="Children in navigation order")

    def has_child(self, url: str) -> bool:
        """Check whether a direct child with this URL exists."""
        return any(child.url == url for child in self.children)

    def iter_subtree(self):
        """Yield this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_context_dict(self) -> Dict[str, Any]:
        """Flat representation for the chat context handoff (no children)."""
        data = self.model_dump(exclude={"children"})
        data["visited_at"] = self.visited_at.isoformat()
        data["child_count"] = len(self.children)
        return data


ContextNode.model_rebuild()
