"""
会话缓存适配器（adapters.session）：按会话隔离的内存缓存
- SessionCache：单个会话的 namespace/key 二级缓存（has/get/set）
- SessionCacheRegistry：按会话 ID 分配缓存，会话结束时整体丢弃

注意：
- 不同会话之间不共享任何可变状态
- set 写入的是副本，调用方后续修改原对象不影响缓存
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict

from minimee.utils.logging_ext import EventLogger

logger = logging.getLogger(__name__)


class SessionCache:
    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        self.cache: Dict[str, Dict[str, Any]] = {}

    def has(self, namespace: str, key: str) -> bool:
        return key in self.cache.get(namespace, {})

    def get(self, namespace: str, key: str) -> Any:
        return copy.deepcopy(self.cache.get(namespace, {}).get(key))

    def set(self, namespace: str, key: str, value: Any) -> None:
        self.cache.setdefault(namespace, {})[key] = copy.deepcopy(value)

    def clear(self) -> None:
        self.cache = {}


class SessionCacheRegistry:
    def __init__(self) -> None:
        self._sessions: Dict[str, SessionCache] = {}
        self.events = EventLogger(logger)

    def cache_for(self, session_id: str) -> SessionCache:
        cache = self._sessions.get(session_id)
        if cache is None:
            cache = SessionCache(session_id)
            self._sessions[session_id] = cache
            self.events.info("session.cache.create", session_id=session_id)
        return cache

    def end_session(self, session_id: str) -> bool:
        cache = self._sessions.pop(session_id, None)
        if cache is None:
            return False
        cache.clear()
        self.events.info("session.cache.drop", session_id=session_id)
        return True

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
