"""Fixed-window request counters persisted in one JSON file.

Each key maps to ``{"count": int, "reset": unix_ts}``. A key's window
restarts (count back to 1) the first time it is checked after
``reset``; otherwise the count only grows. Entries are never dropped
implicitly; call ``prune()`` to remove expired ones.

Within one process a lock serializes the read-modify-write cycle and
the file is replaced atomically. Separate processes sharing the file
are not coordinated: concurrent checks for the same key can lose
increments.

Usage::

    limiter = RateLimiter("storage/rate_limits.json")
    if not await limiter.check_async(f"{request.client_ip}:login"):
        errors.append("Too many login attempts. Please try again later.")
"""

import json
import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Any

from anyio import to_thread

_log = logging.getLogger("lighthouse.security")

type Entry = dict[str, int]


class RateLimiter:
    """Per-key fixed-window counter store.

    ``max_requests`` and ``window_seconds`` are defaults; ``check`` and
    ``remaining`` accept per-call overrides.
    """

    __slots__ = ("_clock", "_lock", "_path", "max_requests", "window_seconds")

    def __init__(
        self,
        path: str | Path,
        *,
        max_requests: int = 5,
        window_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._clock = clock
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @property
    def path(self) -> Path:
        return self._path

    def _now(self) -> int:
        return int(self._clock())

    def _load(self) -> dict[str, Entry]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            _log.warning("Rate limit file %s unreadable, starting empty", self._path)
            return {}
        try:
            data: Any = json.loads(raw) if raw.strip() else {}
        except ValueError:
            _log.warning("Rate limit file %s is not valid JSON, starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        entries: dict[str, Entry] = {}
        for key, entry in data.items():
            if not isinstance(entry, dict):
                continue
            try:
                entries[str(key)] = {"count": int(entry["count"]), "reset": int(entry["reset"])}
            except (KeyError, TypeError, ValueError):
                _log.warning("Rate limit entry %r in %s is malformed, skipping", key, self._path)
        return entries

    def _save(self, entries: dict[str, Entry]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".ratelimit-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entries, fh)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def check(
        self,
        key: str,
        max_requests: int | None = None,
        window_seconds: int | None = None,
    ) -> bool:
        """Count one request for *key*; True while within the ceiling.

        The count is stored even when the request is refused.
        """
        ceiling = self.max_requests if max_requests is None else max_requests
        window = self.window_seconds if window_seconds is None else window_seconds
        with self._lock:
            entries = self._load()
            now = self._now()
            entry = entries.get(key)
            if entry is None or now > entry["reset"]:
                entry = {"count": 1, "reset": now + window}
            else:
                entry = {"count": entry["count"] + 1, "reset": entry["reset"]}
            entries[key] = entry
            self._save(entries)
        allowed = entry["count"] <= ceiling
        if not allowed:
            _log.info("rate limit exceeded for %s (%d/%d)", key, entry["count"], ceiling)
        return allowed

    async def check_async(
        self,
        key: str,
        max_requests: int | None = None,
        window_seconds: int | None = None,
    ) -> bool:
        """``check`` from async code; the file I/O runs in a worker thread."""
        return await to_thread.run_sync(partial(self.check, key, max_requests, window_seconds))

    def remaining(self, key: str, max_requests: int | None = None) -> int:
        """Requests left in *key*'s window. Does not count as a request."""
        ceiling = self.max_requests if max_requests is None else max_requests
        with self._lock:
            entry = self._load().get(key)
        if entry is None or self._now() > entry["reset"]:
            return ceiling
        return max(0, ceiling - entry["count"])

    def reset(self, key: str) -> None:
        """Forget *key* entirely."""
        with self._lock:
            entries = self._load()
            if entries.pop(key, None) is not None:
                self._save(entries)

    def prune(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            entries = self._load()
            now = self._now()
            live = {k: v for k, v in entries.items() if now <= v["reset"]}
            removed = len(entries) - len(live)
            if removed:
                self._save(live)
        return removed
