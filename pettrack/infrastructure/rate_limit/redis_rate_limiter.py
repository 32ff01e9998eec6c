import redis

from ...application.ports.rate_limiter import RateLimiter


class RedisRateLimiter(RateLimiter):
    """Fixed window counter shared by every worker pointed at the same Redis."""

    def __init__(self, url: str, prefix: str = "pettrack:rl:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}:{window_seconds}"
        pipe = self.client.pipeline()
        # SET NX EX opens the window with its TTL only once
        pipe.set(rk, 0, ex=window_seconds, nx=True)
        pipe.incr(rk, 1)
        _, count = pipe.execute()
        return int(count) <= int(max_requests)
