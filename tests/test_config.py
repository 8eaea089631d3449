import time

import pytest
from pydantic import ValidationError

from rediskit.core.config import ConnectConfig, Settings
from rediskit.core.context import RequestContext
from rediskit.core.exceptions import (
    CacheCancelledError,
    CacheConnectionError,
    CacheTimeoutError,
    ConfigurationError,
)


def test_connect_config_defaults():
    config = ConnectConfig()

    assert config.ping_timeout == 30.0
    assert config.db == 0
    assert config.host_port() == ("localhost", 6379)


@pytest.mark.parametrize(
    "addr, expected",
    [
        ("cache.internal:6380", ("cache.internal", 6380)),
        ("cache.internal", ("cache.internal", 6379)),
    ],
)
def test_connect_config_host_port(addr, expected):
    assert ConnectConfig(addr=addr).host_port() == expected


@pytest.mark.parametrize("addr", [":6379", "cache:port"])
def test_connect_config_rejects_bad_address(addr):
    with pytest.raises(ConfigurationError):
        ConnectConfig(addr=addr).host_port()


def test_connect_config_rejects_negative_db():
    with pytest.raises(ValidationError):
        ConnectConfig(db=-1)


def test_connect_config_from_settings():
    settings = Settings(
        REDIS_ADDR="cache:6380",
        REDIS_USER="svc",
        REDIS_PASSWORD="secret",
        REDIS_DB=3,
        REDIS_PING_TIMEOUT=5,
    )

    config = ConnectConfig.from_settings(settings)

    assert config.addr == "cache:6380"
    assert config.user == "svc"
    assert config.password == "secret"
    assert config.db == 3
    assert config.ping_timeout == 5.0


def test_settings_validate_environment():
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT="qa")
    with pytest.raises(ValidationError):
        Settings(LOG_FORMAT="xml")


def test_background_context_never_expires():
    ctx = RequestContext.background()

    assert ctx.deadline is None
    assert ctx.remaining() is None
    assert ctx.expired is False
    ctx.check()


def test_timeout_context_expires():
    ctx = RequestContext.with_timeout(10)
    assert 0 < ctx.remaining() <= 10
    ctx.check()

    expired = RequestContext(deadline=time.monotonic() - 1)
    assert expired.expired is True
    assert expired.remaining() == 0.0
    with pytest.raises(CacheTimeoutError) as exc_info:
        expired.check({"key": "k"})
    assert isinstance(exc_info.value, CacheConnectionError)
    assert exc_info.value.details == {"key": "k"}


def test_cancelled_context():
    ctx = RequestContext.with_timeout(10)
    ctx.cancel()

    assert ctx.cancelled is True
    with pytest.raises(CacheCancelledError):
        ctx.check()
