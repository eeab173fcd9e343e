# -*- coding: utf-8 -*-
"""
AI接口基类

所有 AI 服务商都通过 HTTP POST 提交一条用户消息并返回文本，
子类只需给出接口地址、请求头和响应文本的提取方式
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from common.exceptions import AuthError, ParseError, RequestError, TransportError

logger = logging.getLogger(__name__)


class BaseAdvisoryProvider(ABC):
    """
    AI 服务商基类

    错误分类：
    - 超时、连接失败、429、5xx 等 → TransportError（可重试）
    - 401/403 → AuthError
    - 其他 4xx → RequestError（不重试）
    - 响应结构异常或文本为空 → ParseError
    """

    name = "base"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 2000,
        timeout: float = 45.0,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._session = session or requests.Session()

    def is_available(self) -> bool:
        """检查 API Key 是否已配置（排除 your_xxx 形式的占位值）"""
        key = self._api_key or ""
        return bool(key) and not key.startswith("your_") and len(key) > 10

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """接口地址"""
        pass

    def build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def build_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    @abstractmethod
    def extract_text(self, payload: Dict[str, Any]) -> str:
        """从响应 JSON 中提取文本"""
        pass

    def complete(self, prompt: str) -> str:
        """
        调用 AI 服务

        Args:
            prompt: 提示词

        Returns:
            模型返回的文本
        """
        try:
            response = self._session.post(
                self.endpoint, json=self.build_body(prompt), headers=self.build_headers(), timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransportError(f"[{self.name}] 请求超时: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"[{self.name}] 请求失败: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(f"[{self.name}] 认证失败 HTTP {response.status_code}: {response.text[:200]}")
        if 400 <= response.status_code < 500 and response.status_code != 429:
            raise RequestError(
                f"[{self.name}] 请求被拒绝 HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        if not response.ok:
            raise TransportError(
                f"[{self.name}] HTTP {response.status_code}: {response.text[:200]}", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"[{self.name}] 响应不是合法 JSON: {e}") from e

        try:
            text = self.extract_text(payload)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ParseError(f"[{self.name}] 响应结构异常: {e}") from e

        if not text or not text.strip():
            raise ParseError(f"[{self.name}] 返回空响应")

        logger.debug(f"[{self.name}] 响应长度 {len(text)} 字符")
        return text

    def close(self) -> None:
        self._session.close()
