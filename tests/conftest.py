"""
Shared fixtures for unit tests.
Every test runs with forest invariant checking switched on.
"""

import pytest

from browsing_context.config import ContextTreeConfig, reset_config


@pytest.fixture(autouse=True)
def strict_config():
    """Install a config with invariant checks and no env overrides."""
    config = ContextTreeConfig(debug_invariants=True)
    reset_config(config)
    yield config
    reset_config()
