# testgen/auth.py
"""
API key auth, owner resolution and pluggable rate-limiter.

Env vars:
- MOCK_AUTH (default: true): bypass auth in dev; owner comes from x-owner-id
- API_KEYS: comma-separated entries, each "key" or "key:owner_id"
- API_KEYS_FILE: optional path to file with one entry per line
- RATE_LIMIT_PER_MINUTE (default: 60)
- REDIS_URL: optional, enables Redis-based distributed limiter

A bare key (no ":owner_id") gets a stable owner id derived from its SHA-256,
so raw keys never end up in the database.
"""

import hashlib
import os
import time
import threading
from typing import Optional, Tuple, Dict

import redis

# Configuration
MOCK_AUTH = os.getenv("MOCK_AUTH", "true").lower() in ("1", "true", "yes")
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
API_KEYS_ENV = os.getenv("API_KEYS", "")
API_KEYS_FILE = os.getenv("API_KEYS_FILE", "")
REDIS_URL = os.getenv("REDIS_URL", "")

DEFAULT_MOCK_OWNER = "anonymous"


def owner_for_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:16]


def _parse_key_entry(entry: str) -> Optional[Tuple[str, str]]:
    entry = entry.strip()
    if not entry:
        return None
    key, sep, owner = entry.partition(":")
    key, owner = key.strip(), owner.strip()
    if not key:
        return None
    return key, (owner if sep and owner else owner_for_key(key))


def _load_api_keys() -> Dict[str, str]:
    """Return {api_key: owner_id}."""
    keys: Dict[str, str] = {}
    if API_KEYS_ENV:
        for entry in API_KEYS_ENV.split(","):
            parsed = _parse_key_entry(entry)
            if parsed:
                keys[parsed[0]] = parsed[1]
    if API_KEYS_FILE and os.path.exists(API_KEYS_FILE):
        with open(API_KEYS_FILE, "r", encoding="utf-8") as f:
            for line in f:
                parsed = _parse_key_entry(line)
                if parsed:
                    keys[parsed[0]] = parsed[1]
    return keys


API_KEYS = _load_api_keys()


class InMemoryFixedWindowLimiter:
    """Thread-safe in-memory fixed-window rate limiter (per-process)."""

    def __init__(self, limit_per_minute: int = 60):
        self.limit = limit_per_minute
        self._store: Dict[str, Tuple[int, int]] = {}  # key -> (window_minute, count)
        self._lock = threading.Lock()
        self._swept_window: Optional[int] = None

    def _prune(self, window: int) -> None:
        # once per window, drop principals whose counters are from an earlier minute
        if self._swept_window == window:
            return
        self._store = {k: v for k, v in self._store.items() if v[0] == window}
        self._swept_window = window

    def allow_request(self, principal: str) -> Tuple[bool, Optional[int]]:
        window = int(time.time()) // 60
        with self._lock:
            self._prune(window)
            wstart, count = self._store.get(principal, (window, 0))
            if wstart != window:
                wstart, count = window, 0
            if count >= self.limit:
                return False, 0
            self._store[principal] = (wstart, count + 1)
            return True, self.limit - (count + 1)


class RedisFixedWindowLimiter:
    """Redis fixed-window counter using INCR + EXPIRE."""

    def __init__(self, redis_url: str, limit_per_minute: int = 60):
        self.limit = limit_per_minute
        self._client = redis.from_url(redis_url, decode_responses=True)

    def allow_request(self, principal: str) -> Tuple[bool, Optional[int]]:
        window = int(time.time()) // 60
        key = f"rate:{principal}:{window}"
        try:
            count = int(self._client.incr(key))
            if count == 1:
                self._client.expire(key, 120)
        except redis.RedisError:
            # Fail open on Redis errors
            return True, None
        if count > self.limit:
            return False, 0
        return True, self.limit - count


def _make_limiter():
    if REDIS_URL:
        return RedisFixedWindowLimiter(REDIS_URL, RATE_LIMIT_PER_MINUTE)
    return InMemoryFixedWindowLimiter(RATE_LIMIT_PER_MINUTE)


_rate_limiter = _make_limiter()


def resolve_owner(api_key: Optional[str], owner_header: Optional[str] = None) -> Optional[str]:
    """
    Map a request's credentials to the owner id used for record scoping.
    Returns None when the request is not authenticated.
    """
    if MOCK_AUTH:
        return (owner_header or "").strip() or DEFAULT_MOCK_OWNER
    if not api_key:
        return None
    return API_KEYS.get(api_key)


def check_rate_limit(principal: str) -> Tuple[bool, Optional[int]]:
    """Check and consume quota. Returns (allowed, remaining)."""
    if MOCK_AUTH:
        return True, None
    if not principal:
        return False, 0
    return _rate_limiter.allow_request(principal)
