import time
from collections import defaultdict, deque
from typing import Dict
from fastapi import Request
from mindwave.utils.errors import RateLimited
import logging

logger = logging.getLogger(__name__)

class RateLimiter:
    """Sliding-window request limiter keyed by client IP"""

    def __init__(self, max_requests: int = 20, window: int = 60):
        self.max_requests = max_requests
        self.window = window
        self.attempts: Dict[str, deque] = defaultdict(deque)  # IP -> timestamps
        self._last_sweep = time.time()

    def check(self, client_ip: str) -> bool:
        """Check if client IP is within rate limits"""
        current_time = time.time()
        cutoff_time = current_time - self.window

        # At most one full sweep per window
        if current_time - self._last_sweep >= self.window:
            self._sweep(cutoff_time)
            self._last_sweep = current_time

        # Clean old entries for this IP
        timestamps = self.attempts[client_ip]
        while timestamps and timestamps[0] < cutoff_time:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            return False

        timestamps.append(current_time)
        return True

    def _sweep(self, cutoff_time: float):
        """Forget clients with no request inside the window"""
        stale = [ip for ip, timestamps in self.attempts.items() if not timestamps or timestamps[-1] < cutoff_time]
        for ip in stale:
            del self.attempts[ip]
        if stale:
            logger.debug(f"Rate limiter dropped {len(stale)} idle clients")

    def reset(self):
        self.attempts.clear()

    async def __call__(self, request: Request):
        client_ip = request.client.host if request.client else "unknown"
        if not self.check(client_ip):
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            raise RateLimited()

# 20 requests per minute on the account endpoints
auth_limiter = RateLimiter(max_requests=20, window=60)
