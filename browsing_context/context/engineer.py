"""
Context Engineer
Turns selected context tree nodes into chat context entries and @mentions.
Tracks how much of the model's context window the result would use.
"""

import logging
from typing import Awaitable, Callable, Dict, Any, Optional, List
from dataclasses import dataclass, field

from pydantic import BaseModel, Field
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ..config import get_config
from ..tree.node import ContextNode
from .picker import create_short_name

logger = logging.getLogger(__name__)


# Model token limits
MODEL_TOKEN_LIMITS = {
    # OpenAI Models
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "gpt-4-turbo": 128000,
    "gpt-4": 8192,
    "gpt-3.5-turbo": 16385,
    # Anthropic Models
    "claude-3-5-sonnet": 200000,
    "claude-3-opus": 200000,
    "claude-3-haiku": 200000,
    # Google Models
    "gemini-pro": 32000,
    "gemini-1.5-pro": 1000000,
}

DEFAULT_NODE_NAME = "Context Node"
FAILED_CONTENT = "Failed to extract content from this context node."

ContentLoader = Callable[[str], Awaitable[str]]


class ContextEntry(BaseModel):
    """A page attached to the chat as context."""
    id: str = Field(..., description="Node URL, used as the entry ID")
    url: str
    title: str
    content: str = Field(default="", description="Page text handed to the model")
    short_name: str = Field(..., description="Name used in the @mention")
    timestamp: str = Field(..., description="ISO time the page was visited")
    is_context_node: bool = Field(default=True)


@dataclass
class ContextUsage:
    """Context window usage statistics."""
    tokens: int
    max_tokens: int
    percent: float
    remaining: int


@dataclass
class ContextHandoff:
    """Result of attaching nodes to the chat input."""
    text: str
    entries: List[ContextEntry] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    usage: Optional[ContextUsage] = None


class ContextEngineer:
    """
    Builds chat context from context tree selections.
    Loads page content, names entries, and measures context usage.
    """

    # Estimation parameters
    CHARS_PER_TOKEN = 4
    DEFAULT_THRESHOLD = 0.80

    def __init__(
        self,
        content_loader: Optional[ContentLoader] = None,
        threshold: float = DEFAULT_THRESHOLD,
        default_model: Optional[str] = None,
        retry_wait=None
    ):
        """
        Initialize Context Engineer.

        Args:
            content_loader: Async callable returning page text for a URL;
                entries get empty content when omitted
            threshold: Percentage threshold for should_compress (0.0-1.0)
            default_model: Model for token limit lookup (config default)
            retry_wait: tenacity wait strategy between loader attempts
        """
        config = get_config()
        self.content_loader = content_loader
        self.threshold = threshold
        self.default_model = default_model or config.default_model
        self.short_name_length = config.short_name_length
        self.content_max_chars = config.content_max_chars
        self.loader_retries = config.loader_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self.contexts: Dict[str, ContextEntry] = {}

    async def add_context_nodes(
        self,
        nodes: List[ContextNode],
        current_text: str = ""
    ) -> ContextHandoff:
        """
        Attach selected nodes to the chat input.

        Args:
            nodes: Nodes chosen in the context picker
            current_text: Text already in the chat input

        Returns:
            ContextHandoff with the new input text and the stored entries
        """
        entries = []
        mentions = []

        for node in nodes:
            full_name = node.title if node.title else DEFAULT_NODE_NAME
            short_name = create_short_name(full_name, self.short_name_length)

            try:
                content = await self._load_content(node.url)
            except Exception as e:
                logger.warning(f"Error extracting content from context node {node.title}: {e}")
                content = FAILED_CONTENT

            entry = ContextEntry(
                id=node.url,
                url=node.url,
                title=node.title,
                content=content,
                short_name=short_name,
                timestamp=node.visited_at.isoformat()
            )
            self.contexts[full_name] = entry
            entries.append(entry)
            mentions.append(f"@{short_name}")

        mention_text = " ".join(mentions)
        if not mention_text:
            text = current_text
        elif current_text:
            text = f"{current_text} {mention_text}"
        else:
            text = mention_text

        usage = self.calculate_usage(self.build_context_with_references(entries, text))
        if usage.percent > self.threshold * 100:
            logger.warning(f"Browsing context is close to the model limit: {self.format_usage_string(usage)}")

        logger.info(f"Added {len(entries)} context nodes to chat")
        return ContextHandoff(text=text, entries=entries, mentions=mentions, usage=usage)

    async def _load_content(self, url: str) -> str:
        if self.content_loader is None:
            return ""

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.loader_retries),
            wait=self.retry_wait,
            reraise=True
        ):
            with attempt:
                content = await self.content_loader(url)

        if self.content_max_chars and len(content) > self.content_max_chars:
            content = content[:self.content_max_chars]
        return content

    def remove_context(self, full_name: str) -> bool:
        """Detach a previously added entry."""
        return self.contexts.pop(full_name, None) is not None

    def clear_contexts(self):
        """Clear all attached context entries."""
        self.contexts.clear()

    def calculate_usage(
        self,
        context: str,
        model: Optional[str] = None
    ) -> ContextUsage:
        """
        Calculate context window usage.

        Args:
            context: Current context string
            model: Model name for token limit

        Returns:
            ContextUsage with tokens, max, percent, remaining
        """
        model = model or self.default_model
        estimated_tokens = len(context) // self.CHARS_PER_TOKEN
        max_tokens = self._get_max_tokens(model)
        percentage = (estimated_tokens / max_tokens) * 100
        remaining = max_tokens - estimated_tokens

        return ContextUsage(
            tokens=estimated_tokens,
            max_tokens=max_tokens,
            percent=round(percentage, 1),
            remaining=remaining
        )

    def should_compress(
        self,
        context: str,
        model: Optional[str] = None,
        threshold: Optional[float] = None
    ) -> bool:
        """Check if the context would exceed the usage threshold."""
        usage = self.calculate_usage(context, model)
        threshold_pct = (threshold if threshold is not None else self.threshold) * 100
        return usage.percent > threshold_pct

    def build_context_with_references(
        self,
        entries: List[ContextEntry],
        current_context: str,
        model: Optional[str] = None
    ) -> str:
        """
        Build model context including attached pages.

        Page content shares a budget of threshold * the model's window,
        less the current context. Entries past the budget keep their
        heading but lose (or get truncated) content.

        Args:
            entries: Context entries to include
            current_context: Current chat context
            model: Model name for token limit

        Returns:
            Combined context with one section per page
        """
        if not entries:
            return current_context

        max_tokens = self._get_max_tokens(model or self.default_model)
        budget = int(max_tokens * self.threshold * self.CHARS_PER_TOKEN) - len(current_context)

        section = "## Browsing Context\n"
        for entry in entries:
            section += f"### @{entry.short_name}: {entry.title} ({entry.url})\n"
            content = entry.content[:max(budget, 0)]
            if len(content) < len(entry.content):
                logger.debug(f"Trimmed context for {entry.url} to {len(content)} chars")
            if content:
                section += f"{content}\n"
                budget -= len(content)

        return f"{section}\n{current_context}"

    def get_context_summary(self) -> List[Dict[str, Any]]:
        """List attached entries without their content."""
        return [entry.model_dump(exclude={"content"}) for entry in self.contexts.values()]

    def _get_max_tokens(self, model: str) -> int:
        """Get max tokens for a model."""
        # Try exact match
        if model in MODEL_TOKEN_LIMITS:
            return MODEL_TOKEN_LIMITS[model]

        # Try partial match
        for key, value in MODEL_TOKEN_LIMITS.items():
            if key in model.lower():
                return value

        # Default fallback
        logger.warning(f"Unknown model '{model}', using default 128000 tokens")
        return 128000

    def format_usage_string(self, usage: ContextUsage) -> str:
        """Format usage for display."""
        return f"{usage.percent}% ({usage.tokens:,}/{usage.max_tokens:,} tokens)"
