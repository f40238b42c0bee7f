"""Tests for the Redis cache manager."""

from unittest.mock import MagicMock

import redis

from app.core.redis_client import CacheManager


def test_cache_manager_get():
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    # Test cache miss
    mock_redis.get.return_value = None
    assert cache_manager.get("view_key") is None

    # Test cache hit
    mock_redis.reset_mock()
    mock_redis.get.return_value = "/doctor/appointments"
    assert cache_manager.get("view_key") == "/doctor/appointments"
    mock_redis.get.assert_called_once_with("view_key")


def test_cache_manager_set():
    """Values with a TTL go through SETEX."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    # Test with TTL
    assert cache_manager.set("key", "value", ttl=60) is True
    mock_redis.setex.assert_called_once_with("key", 60, "value")
    mock_redis.set.assert_not_called()

    # Test without TTL
    mock_redis.reset_mock()
    assert cache_manager.set("key", "value") is True
    mock_redis.set.assert_called_once_with("key", "value")


def test_cache_manager_degrades_on_redis_errors():
    """A Redis outage reads as a miss and a failed write."""
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("down")
    mock_redis.setex.side_effect = redis.ConnectionError("down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.get("key") is None
    assert cache_manager.set("key", "value", ttl=5) is False
