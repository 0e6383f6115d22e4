"""
Tests for Structured Logging and Errors
=======================================
"""

import asyncio
import json
import logging

from config_logging import (
    AdapterTimeoutError,
    ConfigurationError,
    JsonFormatter,
    LogConfig,
    StructuredLogger,
    get_config,
    reset_config,
)


class TestLogConfig:
    """Tests for LogConfig."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('GCS_LOG_LEVEL', 'DEBUG')
        monkeypatch.setenv('GCS_LOG_FORMAT', 'text')
        config = LogConfig.from_env()
        assert config.log_level == 'DEBUG'
        assert config.log_format == 'text'

    def test_invalid_values_fall_back(self):
        config = LogConfig(log_level='LOUD', log_format='xml')
        assert config.log_level == 'WARNING'
        assert config.log_format == 'json'

    def test_global_config_reset(self, monkeypatch):
        monkeypatch.setenv('GCS_LOG_LEVEL', 'ERROR')
        reset_config()
        try:
            assert get_config().log_level == 'ERROR'
        finally:
            reset_config()


class TestCorrelationIds:
    """Correlation IDs are scoped to the current task."""

    def test_new_id_is_current(self):
        request_id = StructuredLogger.new_correlation_id()
        assert StructuredLogger.get_correlation_id() == request_id

    def test_tasks_do_not_share_ids(self):
        async def worker():
            request_id = StructuredLogger.new_correlation_id()
            await asyncio.sleep(0.01)
            return request_id == StructuredLogger.get_correlation_id()

        async def scenario():
            return await asyncio.gather(worker(), worker(), worker())

        assert all(asyncio.run(scenario()))


class TestJsonFormatter:
    """Tests for the JSON formatter."""

    def test_extra_fields(self):
        record = logging.LogRecord('grammarcheck.test', logging.INFO, __file__, 1,
                                   'Check completed', None, None)
        record.engine = 'rules'
        data = json.loads(JsonFormatter().format(record))
        assert data['message'] == 'Check completed'
        assert data['level'] == 'INFO'
        assert data['engine'] == 'rules'

    def test_reserved_keys_renamed(self):
        logger = StructuredLogger('grammarcheck.test', LogConfig())
        extra = logger._extra({'name': 'rules', 'engine': 'rules'})
        assert extra['ctx_name'] == 'rules'
        assert extra['engine'] == 'rules'
        assert 'correlation_id' in extra


class TestErrors:
    """Tests for the error taxonomy."""

    def test_timeout_error(self):
        error = AdapterTimeoutError('languagetool', 10000)
        assert error.message == 'languagetool timed out after 10000ms'
        assert error.code == 'ADAPTER_TIMEOUT'
        assert error.details['engine'] == 'languagetool'

    def test_to_dict(self):
        data = ConfigurationError('Unknown key', key='cache.nope').to_dict()
        assert data['success'] is False
        assert data['error']['code'] == 'CONFIG_ERROR'
        assert data['error']['details'] == {'key': 'cache.nope'}
