
# storehub/infrastructure/locks/store_lock.py
from __future__ import annotations
import logging, threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

import redis

from storehub.core.config import Settings
from storehub.core.errors import ConflictError


logger = logging.getLogger(__name__)


"""
按店铺串行化导入：同一个 store 同时只允许一个 import 在跑。
    - LocalStoreLock：进程内 threading.Lock（单进程 uvicorn / 测试）
    - RedisStoreLock：redis-py 的 Lock（SET NX PX + token 校验释放），多进程/多机共享
      key: {prefix}:{store_id}
    等锁超过 timeout 抛 ConflictError（HTTP 409）
"""
class LocalStoreLock:

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._guard = threading.Lock()
        # 只保留正在持有或等待的店铺；最后一个使用者离开时删除
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    def _checkout(self, store_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(store_id)
            if lock is None:
                lock = self._locks[store_id] = threading.Lock()
            self._users[store_id] = self._users.get(store_id, 0) + 1
            return lock

    def _checkin(self, store_id: str) -> None:
        with self._guard:
            self._users[store_id] -= 1
            if self._users[store_id] == 0:
                del self._users[store_id]
                del self._locks[store_id]

    @contextmanager
    def hold(self, store_id: str) -> Iterator[None]:
        key = str(store_id)
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self.timeout):
                logger.info("store_lock.busy store_id=%s backend=local", store_id)
                raise ConflictError("An import is already running for this store")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)


class RedisStoreLock:

    def __init__(self, client: "redis.Redis", *, timeout: float = 30.0, ttl_sec: int = 900,
                 key_prefix: str = "storehub:import") -> None:
        self.r = client
        self.timeout = timeout
        self.ttl_sec = ttl_sec          # 进程崩溃时锁自动过期
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisStoreLock":
        return cls(redis.Redis.from_url(url), **kwargs)

    @contextmanager
    def hold(self, store_id: str) -> Iterator[None]:
        key = f"{self.key_prefix}:{store_id}"
        lock = self.r.lock(key, timeout=self.ttl_sec, blocking_timeout=self.timeout)
        if not lock.acquire():
            logger.info("store_lock.busy store_id=%s backend=redis", store_id)
            raise ConflictError("An import is already running for this store")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                # TTL 已过期被别人拿走，记录即可
                logger.warning("store_lock.expired_before_release key=%s", key)


def build_store_lock(cfg: Settings, client: Optional["redis.Redis"] = None):
    """配置了 REDIS_URL 用 Redis 锁，否则进程内锁"""
    if client is not None:
        return RedisStoreLock(client, timeout=cfg.IMPORT_LOCK_TIMEOUT_SEC, ttl_sec=cfg.IMPORT_LOCK_TTL_SEC)
    if cfg.REDIS_URL:
        logger.info("store_lock.backend=redis")
        return RedisStoreLock.from_url(
            cfg.REDIS_URL, timeout=cfg.IMPORT_LOCK_TIMEOUT_SEC, ttl_sec=cfg.IMPORT_LOCK_TTL_SEC,
        )
    logger.info("store_lock.backend=local")
    return LocalStoreLock(timeout=cfg.IMPORT_LOCK_TIMEOUT_SEC)
