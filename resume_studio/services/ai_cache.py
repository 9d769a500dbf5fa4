"""
AI Response Cache

Completions are cached by SHA-256 of (system prompt + prompt).

Backends:
- MongoDB collection with a TTL index (MONGODB_URI set and reachable)
- In-process dict guarded by a lock (otherwise)

Both keep at most `max_entries` items, evicting the oldest first.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger
from pymongo.errors import PyMongoError

from resume_studio.core.config import get_settings
from resume_studio.db.mongodb import get_collection, mongo_enabled, test_mongo_connection


def make_cache_key(prompt: str, system_prompt: Optional[str] = None) -> str:
    return hashlib.sha256(f"{system_prompt or ''}\n{prompt}".encode("utf-8")).hexdigest()


class MemoryCacheBackend:
    def __init__(self, ttl_seconds: int, max_entries: int):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries = OrderedDict()  # key -> (expires_at, value)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at < time.monotonic():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (time.monotonic() + self.ttl_seconds, value)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)


class MongoCacheBackend:
    def __init__(self, ttl_seconds: int, max_entries: int):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.collection = get_collection("ai_cache")

    def get(self, key: str) -> Optional[str]:
        doc = self.collection.find_one({"key": key})
        if not doc:
            return None
        # TTL monitor runs once a minute; check expiry ourselves as well
        expires_at = doc["expires_at"]
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            return None
        return doc["value"]

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        self.collection.update_one(
            {"key": key},
            {"$set": {
                "value": value,
                "created_at": now,
                "expires_at": now + timedelta(seconds=self.ttl_seconds),
            }},
            upsert=True,
        )
        overflow = self.collection.estimated_document_count() - self.max_entries
        if overflow > 0:
            oldest = self.collection.find({}, {"_id": 1}).sort("created_at", 1).limit(overflow)
            self.collection.delete_many({"_id": {"$in": [d["_id"] for d in oldest]}})

    def size(self) -> int:
        return self.collection.estimated_document_count()


class AICache:
    """Facade over the configured backend. Store errors never break an AI call."""

    def __init__(self, backend=None):
        settings = get_settings()
        self.enabled = settings.ai_cache_enabled
        if backend is not None:
            self.backend = backend
        elif mongo_enabled() and test_mongo_connection():
            self.backend = MongoCacheBackend(settings.ai_cache_ttl_seconds, settings.ai_cache_max_entries)
        else:
            if mongo_enabled():
                logger.warning("MongoDB unreachable, AI cache kept in memory")
            self.backend = MemoryCacheBackend(settings.ai_cache_ttl_seconds, settings.ai_cache_max_entries)

    def get(self, key: str) -> Optional[str]:
        if not self.enabled:
            return None
        try:
            return self.backend.get(key)
        except PyMongoError as e:
            logger.warning(f"AI cache read failed: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        if not self.enabled:
            return
        try:
            self.backend.set(key, value)
        except PyMongoError as e:
            logger.warning(f"AI cache write failed: {e}")

    def size(self) -> int:
        try:
            return self.backend.size()
        except PyMongoError as e:
            logger.warning(f"AI cache size unavailable: {e}")
            return 0
