# -*- coding: utf-8 -*-
"""
AI 分析结果缓存

线程安全的内存 TTL 缓存，避免同一只股票在有效期内重复调用 AI 服务
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from core.domain.analysis import AdvisoryResult

logger = logging.getLogger(__name__)


class AdvisoryResultCache:
    """
    AI 分析结果缓存

    - 过期条目在读取时删除
    - 不缓存 None
    """

    def __init__(self, ttl: timedelta = timedelta(hours=6), clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            ttl: 缓存有效期（默认 6 小时）
            clock: 时钟函数（测试时可注入）
        """
        self._cache: Dict[str, Tuple[AdvisoryResult, datetime]] = {}
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[AdvisoryResult]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            value, cached_at = entry
            if self._clock() - cached_at >= self._ttl:
                del self._cache[key]
                return None
            return value

    def set(self, key: str, value: Optional[AdvisoryResult]) -> None:
        if value is None:
            return
        with self._lock:
            self._cache[key] = (value, self._clock())

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
