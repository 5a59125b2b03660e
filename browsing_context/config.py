"""
Context Tree Configuration
Environment-driven settings for the browsing context engine.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ContextTreeConfig(BaseModel):
    """Configuration for context tree tracking and the AI handoff."""
    debug_invariants: bool = Field(default=False, description="Check forest invariants after every mutation")
    short_name_length: int = Field(default=15, ge=1, description="Max length of @mention names")
    default_model: str = Field(default="gpt-4o-mini", description="Model used for token limit lookup")
    content_max_chars: int = Field(default=8000, ge=0, description="Truncate loaded page content to this size")
    loader_retries: int = Field(default=3, ge=1, description="Attempts for the page content loader")

    @classmethod
    def from_env(cls) -> "ContextTreeConfig":
        """
        Build configuration from CONTEXT_TREE_* environment variables.
        Raw strings are coerced by the model, so bad values raise ValidationError.
        """
        return cls(
            debug_invariants=os.getenv("CONTEXT_TREE_DEBUG_INVARIANTS", "false").strip().lower(),
            short_name_length=os.getenv("CONTEXT_TREE_SHORT_NAME_LENGTH", "15"),
            default_model=os.getenv("CONTEXT_TREE_DEFAULT_MODEL", "gpt-4o-mini"),
            content_max_chars=os.getenv("CONTEXT_TREE_CONTENT_MAX_CHARS", "8000"),
            loader_retries=os.getenv("CONTEXT_TREE_LOADER_RETRIES", "3")
        )


# Singleton instance
_config: Optional[ContextTreeConfig] = None


def get_config() -> ContextTreeConfig:
    """Get the global context tree configuration."""
    global _config

    if _config is None:
        load_dotenv()
        _config = ContextTreeConfig.from_env()
        logger.debug(f"Loaded context tree config: {_config.model_dump()}")

    return _config


def reset_config(config: Optional[ContextTreeConfig] = None):
    """Replace (or drop) the global configuration. Used by tests."""
    global _config
    _config = config
