import logging
import threading
import time

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis
from rq import Queue

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)

# Initialized lazily in create_app
redis_client: _redis.Redis = None  # type: ignore
task_queue: Queue = None  # type: ignore


class DummyQueue:
    """No-op queue for development without Redis."""

    def enqueue(self, *args, **kwargs):
        logger.warning("Redis not available, skipping job enqueue: %s", args[:1])
        return None


class RedisExpiringStore:
    """Expiring key-value store backed by Redis SETEX."""

    def __init__(self, client, prefix="catalog:"):
        self.client = client
        self.prefix = prefix

    def set(self, key, value, ttl):
        self.client.setex(self.prefix + key, int(ttl), value)

    def get(self, key):
        raw = self.client.get(self.prefix + key)
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else raw

    def delete(self, key):
        self.client.delete(self.prefix + key)


class MemoryExpiringStore:
    """Single-process expiring store for development and tests.

    Expired entries are dropped on read and swept on every write. Not
    shared between workers, so production deployments must configure
    REDIS_URL.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._data = {}
        self._lock = threading.Lock()

    def set(self, key, value, ttl):
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, expires_at) in self._data.items() if now >= expires_at]
            for k in expired:
                del self._data[k]
            self._data[key] = (str(value), now + ttl)

    def get(self, key):
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)


def init_redis(app):
    global redis_client, task_queue
    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, queue and OTP store are in-process (dev mode)")
        task_queue = DummyQueue()
        app.extensions["otp_store"] = MemoryExpiringStore()
        return

    try:
        redis_client = _redis.from_url(redis_url, decode_responses=False)
        redis_client.ping()
        task_queue = Queue("mail", connection=redis_client)
        app.extensions["otp_store"] = RedisExpiringStore(redis_client)
    except Exception as e:
        logger.warning("Redis connection failed (%s), queue disabled", e)
        task_queue = DummyQueue()
        app.extensions["otp_store"] = MemoryExpiringStore()
