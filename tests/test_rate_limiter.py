"""
Rate limiter tests against a mocked Redis client.
"""
import pytest
from unittest.mock import MagicMock, patch
from fastapi import status
from redis.exceptions import ConnectionError as RedisConnectionError
from app.utils import rate_limiter


@pytest.fixture
def redis_pipeline():
    """Patch the Redis client so pipeline().execute() is controllable."""
    pipeline = MagicMock()
    client = MagicMock()
    client.pipeline.return_value.__enter__.return_value = pipeline
    with patch.object(rate_limiter, "get_client", return_value=client):
        yield pipeline


class TestAllow:

    def test_allows_within_limit(self, redis_pipeline):
        redis_pipeline.execute.return_value = [None, 10]

        assert rate_limiter.allow("key", limit=10, window_seconds=900) is True
        redis_pipeline.incr.assert_called_once_with("key", 1)

    def test_first_hit_opens_window_with_ttl(self, redis_pipeline):
        redis_pipeline.execute.return_value = [True, 1]

        assert rate_limiter.allow("key", limit=10, window_seconds=900) is True
        redis_pipeline.set.assert_called_once_with("key", 0, ex=900, nx=True)
        redis_pipeline.expire.assert_not_called()

    def test_blocks_over_limit(self, redis_pipeline):
        redis_pipeline.execute.return_value = [None, 11]

        assert rate_limiter.allow("key", limit=10, window_seconds=900) is False

    def test_key_is_scoped_by_action_and_address(self, redis_pipeline):
        redis_pipeline.execute.return_value = [True, 1]

        rate_limiter.allow_for_address("waitlist-join", "203.0.113.9", limit=10, window_seconds=60)

        redis_pipeline.incr.assert_called_once_with("ratelimit:waitlist-join:203.0.113.9", 1)


class TestEndpointRateLimits:

    def test_redis_outage_lets_signup_through(self, client, mock_rate_limiter):
        mock_rate_limiter.side_effect = RedisConnectionError("connection refused")

        response = client.post(
            "/api/waitlist/join",
            json={"name": "Grace Hopper", "email": "grace@mail.com"}
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_disabled_rate_limit_skips_redis(self, client, mock_rate_limiter, monkeypatch):
        from app.core.config import settings
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)

        response = client.post(
            "/api/waitlist/join",
            json={"name": "Grace Hopper", "email": "grace@mail.com"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        mock_rate_limiter.assert_not_called()

    def test_stats_are_rate_limited_with_read_budget(self, client, mock_rate_limiter):
        mock_rate_limiter.return_value = False

        response = client.get(
            "/api/waitlist/stats",
            headers={"X-Forwarded-For": "198.51.100.7"}
        )

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        args, kwargs = mock_rate_limiter.call_args
        assert args == ("waitlist-read", "198.51.100.7")
        assert kwargs == {"limit": 300, "window_seconds": 900}

    def test_referral_lookup_is_rate_limited(self, client, mock_rate_limiter):
        mock_rate_limiter.return_value = False

        response = client.get("/api/waitlist/referral/ONEADA001")

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    def test_user_listing_is_rate_limited(self, client, admin_headers, mock_rate_limiter):
        mock_rate_limiter.return_value = False

        response = client.get("/api/waitlist/users", headers=admin_headers)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    def test_health_is_not_rate_limited(self, client, mock_rate_limiter):
        mock_rate_limiter.return_value = False

        response = client.get("/api/waitlist/health")

        assert response.status_code == status.HTTP_200_OK
        mock_rate_limiter.assert_not_called()
