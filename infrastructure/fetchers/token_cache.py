# -*- coding: utf-8 -*-
"""
访问令牌缓存

KIS 访问令牌签发接口有频率限制（同一 appkey 每分钟仅能签发一次），
因此进程内所有线程共享同一个令牌：

- 令牌有效时直接返回（无锁快速路径）
- 令牌缺失或过期时，持锁后再次检查；第一个线程负责签发，
  其余线程等待同一轮签发的结果（成功得到同一令牌，失败得到同一个 AuthError）
- 签发失败不在内部重试；这一轮结束后的下一次调用会重新尝试签发
"""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

from common.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessToken:
    """访问令牌"""

    value: str
    expires_at: float  # 过期时间点（clock() 的时间基准）

    def is_valid(self, now: float) -> bool:
        return bool(self.value) and now < self.expires_at


class TokenCache:
    """
    线程安全的单飞令牌缓存

    使用示例：
        cache = TokenCache(issuer=client.issue_token, lease_seconds=86400)
        token = cache.get_token()
    """

    def __init__(
        self,
        issuer: Callable[[], str],
        lease_seconds: float = 86400,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            issuer: 令牌签发函数，返回令牌字符串
            lease_seconds: 令牌租期（秒），从签发完成时刻起算
            clock: 时钟函数（测试时可注入假时钟）
        """
        self._issuer = issuer
        self._lease_seconds = lease_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[AccessToken] = None
        self._inflight: Optional[Future] = None  # 当前这一轮签发
        self._issue_count = 0

    def get_token(self) -> str:
        """
        获取有效令牌

        Returns:
            令牌字符串

        Raises:
            AuthError: 签发失败（同一轮签发的所有等待者收到同一个异常）
        """
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token.value

        with self._lock:
            # 等锁期间其他线程可能已经完成签发
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token.value

            inflight = self._inflight
            leader = inflight is None
            if leader:
                inflight = self._inflight = Future()

        if not leader:
            return inflight.result()

        try:
            token = self._issue()
        except BaseException as e:
            with self._lock:
                self._inflight = None
            inflight.set_exception(e)
            raise

        with self._lock:
            self._token = token
            self._inflight = None
        inflight.set_result(token.value)
        return token.value

    def _issue(self) -> AccessToken:
        logger.info("[Token] 访问令牌缺失或已过期，开始签发新令牌")
        try:
            value = self._issuer()
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"访问令牌签发失败: {e}") from e

        if not value:
            raise AuthError("访问令牌签发失败: 返回的令牌为空")

        self._issue_count += 1
        expires_at = self._clock() + self._lease_seconds
        logger.info(f"[Token] 新令牌签发成功，有效期 {self._lease_seconds} 秒")
        return AccessToken(value=value, expires_at=expires_at)

    def invalidate(self) -> None:
        """丢弃当前令牌，下次调用时重新签发"""
        with self._lock:
            self._token = None

    @property
    def issue_count(self) -> int:
        """累计签发次数"""
        return self._issue_count
