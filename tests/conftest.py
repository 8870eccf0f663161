"""Pytest configuration and shared fixtures for the markturn test suite."""

import os

import pytest

from markturn import HTMLToMarkdown
from markturn.plugins import plugin_registry, register_builtin_plugins

# Configure Hypothesis for property-based testing
try:
    from hypothesis import Phase, Verbosity, settings

    settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
    settings.register_profile("dev", max_examples=20)
    settings.register_profile(
        "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
    )

    settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))
except ImportError:
    # Hypothesis not installed, skip configuration
    pass


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "property: Property-based tests driven by Hypothesis")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture
def converter() -> HTMLToMarkdown:
    """Provide a converter with default options and the CommonMark rules."""
    return HTMLToMarkdown()


@pytest.fixture
def clean_plugin_registry():
    """Give a test an empty plugin registry and restore the built-ins afterwards."""
    plugin_registry.clear()
    # Prevent auto-initialization from running entry-point discovery
    plugin_registry._initialized = True
    yield plugin_registry
    plugin_registry.clear()
    register_builtin_plugins()
