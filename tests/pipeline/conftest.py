"""
Shared fixtures for the pipeline tests.
"""

import pytest

from grammarcheck.config import ServiceConfig
from grammarcheck.rules.checker import BasicGrammarAdapter, PatternRuleAdapter
from grammarcheck.service import GrammarCheckingService


@pytest.fixture
def config() -> ServiceConfig:
    """Default configuration with a short debounce."""
    config = ServiceConfig()
    config.scheduler.debounce_ms = 20
    return config


@pytest.fixture
def rule_adapters():
    """The offline regex engines."""
    return [PatternRuleAdapter(), BasicGrammarAdapter()]


@pytest.fixture
def make_service(config):
    """Factory for services that are disposed after the test."""
    services = []

    def _make(adapters=None, **kwargs):
        if adapters is None:
            adapters = [PatternRuleAdapter(), BasicGrammarAdapter()]
        service = GrammarCheckingService.create(config=config, adapters=adapters, **kwargs)
        services.append(service)
        return service

    yield _make

    for service in services:
        service.dispose()
