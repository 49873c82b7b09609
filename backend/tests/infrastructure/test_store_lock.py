from __future__ import annotations

import threading

import pytest
import redis

from storehub.core.config import Settings
from storehub.core.errors import ConflictError
from storehub.infrastructure.locks import LocalStoreLock, RedisStoreLock, build_store_lock


def test_local_lock_rejects_second_holder():
    lock = LocalStoreLock(timeout=0.05)

    with lock.hold("store-1"):
        with pytest.raises(ConflictError):
            with lock.hold("store-1"):
                pass


def test_local_lock_is_per_store_and_released_on_exit():
    lock = LocalStoreLock(timeout=0.05)

    with lock.hold("store-1"):
        with lock.hold("store-2"):
            pass

    # 已释放，可再次获取
    with lock.hold("store-1"):
        pass


# 另一个线程持锁期间，本线程等锁超时 → 409
def test_local_lock_conflicts_across_threads():
    lock = LocalStoreLock(timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def worker():
        with lock.hold("store-1"):
            held.set()
            release.wait(2)

    t = threading.Thread(target=worker)
    t.start()
    try:
        assert held.wait(2)
        with pytest.raises(ConflictError):
            with lock.hold("store-1"):
                pass
    finally:
        release.set()
        t.join()


# 用完即删：进程内锁表只保留正在持有/等待的店铺
def test_local_lock_forgets_released_stores():
    lock = LocalStoreLock(timeout=0.05)

    for store_id in ("store-1", "store-2", "store-3"):
        with lock.hold(store_id):
            assert store_id in lock._locks

    assert lock._locks == {}
    assert lock._users == {}


def test_local_lock_entry_kept_while_contended():
    lock = LocalStoreLock(timeout=0.05)

    with lock.hold("store-1"):
        with pytest.raises(ConflictError):
            with lock.hold("store-1"):
                pass
        assert lock._users == {"store-1": 1}

    assert lock._locks == {}


class FakeRedisLock:

    def __init__(self, acquired: bool, release_error: bool = False) -> None:
        self.acquired = acquired
        self.release_error = release_error
        self.released = False

    def acquire(self):
        return self.acquired

    def release(self):
        if self.release_error:
            raise redis.exceptions.LockError("Cannot release an unlocked lock")
        self.released = True


class FakeRedis:

    def __init__(self, lock: FakeRedisLock) -> None:
        self._lock = lock
        self.requested = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.requested.append((name, timeout, blocking_timeout))
        return self._lock


def test_redis_lock_uses_store_key_and_releases():
    fake_lock = FakeRedisLock(acquired=True)
    client = FakeRedis(fake_lock)
    lock = RedisStoreLock(client, timeout=3, ttl_sec=60)

    with lock.hold("abc"):
        pass

    assert client.requested == [("storehub:import:abc", 60, 3)]
    assert fake_lock.released is True


def test_redis_lock_busy_raises_conflict():
    lock = RedisStoreLock(FakeRedis(FakeRedisLock(acquired=False)), timeout=0)

    with pytest.raises(ConflictError):
        with lock.hold("abc"):
            pass


# TTL 过期后锁被别人拿走：release 失败只记日志，不影响本次导入结果
def test_redis_lock_expired_release_is_tolerated():
    lock = RedisStoreLock(FakeRedis(FakeRedisLock(acquired=True, release_error=True)))

    with lock.hold("abc"):
        pass


def test_build_store_lock_picks_backend():
    cfg = Settings(REDIS_URL=None, IMPORT_LOCK_TIMEOUT_SEC=1.5)

    local = build_store_lock(cfg)
    assert isinstance(local, LocalStoreLock)
    assert local.timeout == 1.5

    shared = build_store_lock(cfg, client=FakeRedis(FakeRedisLock(acquired=True)))
    assert isinstance(shared, RedisStoreLock)
    assert shared.ttl_sec == cfg.IMPORT_LOCK_TTL_SEC
