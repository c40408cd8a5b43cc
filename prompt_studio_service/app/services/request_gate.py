# prompt_studio_service/app/services/request_gate.py
"""
Fixed-window rate limiting and a short-lived response cache for the
template-only network entry point.

State lives in a GateStore handed to the gate at construction time. The
in-memory store holds one counter per caller and one entry per distinct
normalized request; expired entries are dropped only when looked up again,
so the cache grows with the number of distinct requests seen.
"""
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from ..config import settings
from ..models import GeneratedPrompt, PromptRequest
from .fragment_resolver import resolve_fragments
from .templates import render_prompt

logger = logging.getLogger(__name__)

# Callers without a known network identity all share this bucket.
UNKNOWN_CALLER = "unknown"


class RateLimitExceeded(Exception):
    def __init__(self, caller: str, retry_after: float):
        super().__init__(f"Rate limit exceeded for caller '{caller}'.")
        self.caller = caller
        self.retry_after = retry_after


@dataclass
class RateLimitCounter:
    count: int
    window_start: float


@dataclass
class CacheEntry:
    key: str
    value: GeneratedPrompt
    created_at: float


class GateStore(Protocol):
    def hit_counter(self, caller: str, now: float, window: float) -> RateLimitCounter:
        """Resets or increments the caller's counter and returns the updated state."""
        ...

    def get_entry(self, key: str) -> Optional[CacheEntry]: ...

    def put_entry(self, entry: CacheEntry) -> None: ...

    def drop_entry(self, key: str) -> None: ...


class InMemoryGateStore:
    """Process-local store. The lock keeps counter updates atomic under threaded servers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, RateLimitCounter] = {}
        self._entries: Dict[str, CacheEntry] = {}

    def hit_counter(self, caller: str, now: float, window: float) -> RateLimitCounter:
        with self._lock:
            counter = self._counters.get(caller)
            if counter is None or now > counter.window_start + window:
                counter = RateLimitCounter(count=1, window_start=now)
                self._counters[caller] = counter
            else:
                counter.count += 1
            return RateLimitCounter(count=counter.count, window_start=counter.window_start)

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put_entry(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def drop_entry(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


def build_cache_key(request: PromptRequest) -> str:
    """Deterministic serialization of the normalized request (defaults resolved)."""
    payload = resolve_fragments(request.fragment_overrides()).model_dump()
    payload["idea"] = request.idea
    payload["model"] = request.model.value
    return json.dumps(payload, sort_keys=True, ensure_ascii=False)


class RequestGate:
    def __init__(
        self,
        store: GateStore,
        render: Callable[..., GeneratedPrompt] = render_prompt,
        window_seconds: float = settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests: int = settings.RATE_LIMIT_MAX_REQUESTS,
        ttl_seconds: float = settings.CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.render = render
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def check_rate_limit(self, caller: Optional[str]) -> None:
        caller_key = caller or UNKNOWN_CALLER
        now = self.clock()
        counter = self.store.hit_counter(caller_key, now, self.window_seconds)
        if counter.count > self.max_requests:
            retry_after = max(0.0, counter.window_start + self.window_seconds - now)
            logger.warning(
                f"Rate limit exceeded for caller '{caller_key}' ({counter.count} requests in window)."
            )
            raise RateLimitExceeded(caller_key, retry_after)

    def cached_render(self, request: PromptRequest) -> GeneratedPrompt:
        key = build_cache_key(request)
        now = self.clock()
        entry = self.store.get_entry(key)
        if entry is not None:
            if now - entry.created_at < self.ttl_seconds:
                logger.debug(f"Prompt cache hit for model '{request.model.value}'.")
                return entry.value
            self.store.drop_entry(key)

        generated = self.render(
            request.idea, request.model, request.fragment_overrides()
        )
        self.store.put_entry(CacheEntry(key=key, value=generated, created_at=now))
        return generated

    def handle(self, caller: Optional[str], request: PromptRequest) -> GeneratedPrompt:
        """Rate limit first, then serve from cache or render."""
        self.check_rate_limit(caller)
        return self.cached_render(request)
