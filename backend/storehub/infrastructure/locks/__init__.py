"""
  Import lock utilities.
     from storehub.infrastructure.locks import build_store_lock
"""
from .store_lock import LocalStoreLock, RedisStoreLock, build_store_lock

__all__ = ["LocalStoreLock", "RedisStoreLock", "build_store_lock"]
