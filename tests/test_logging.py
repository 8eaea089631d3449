import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from rediskit.core.config import settings
from rediskit.core.logging import get_logger, log_cache_operation, setup_logging
from rediskit.infrastructure.cache import RedisClient

pytestmark = pytest.mark.anyio


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_setup_logging_renders_json(monkeypatch, caplog, reset_structlog):
    monkeypatch.setattr(settings, "LOG_FORMAT", "json")
    caplog.set_level(logging.INFO)

    setup_logging()
    get_logger("rediskit.test").info("Cache operation", key="idx:orders")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "Cache operation"
    assert payload["key"] == "idx:orders"
    assert payload["level"] == "info"
    assert payload["logger"] == "rediskit.test"
    assert "timestamp" in payload


def test_log_cache_operation_fields():
    with capture_logs() as logs:
        log_cache_operation("expand", key="idx:orders", status="failed", members=3)

    assert logs == [
        {
            "event": "Cache operation",
            "log_level": "info",
            "operation": "expand",
            "key": "idx:orders",
            "status": "failed",
            "members": 3,
        }
    ]


async def test_connect_logs_with_trace_name(fake_redis, connect_config):
    with capture_logs() as logs:
        client = RedisClient(connect_config, "orders", client=fake_redis)
        await client.connect()

    connected = [entry for entry in logs if entry["event"] == "Successfully connected to redis"]
    assert connected[0]["trace"] == "[orders_RedisService]"
    assert any(entry.get("operation") == "connect" for entry in logs)
