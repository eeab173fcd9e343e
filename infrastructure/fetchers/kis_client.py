# -*- coding: utf-8 -*-
"""
KIS Open API 客户端

负责两件事：
1. 签发访问令牌（POST /oauth2/tokenP）
2. 带令牌的行情查询请求（GET，按 tr_id 区分接口）

错误统一映射为项目异常：网络/超时/状态码失败 → TransportError，
响应不是 JSON → ParseError，令牌签发失败 → AuthError
"""

import logging
from typing import Any, Dict, Optional

import requests

from common.config import Config
from common.exceptions import AuthError, ParseError, TransportError

from .token_cache import TokenCache

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth2/tokenP"


class KisApiClient:
    """
    KIS Open API 客户端

    同一实例可被多个线程共享：令牌由 TokenCache 保证单飞签发，
    requests.Session 的连接池在多线程下只读使用
    """

    def __init__(
        self,
        base_url: str,
        app_key: str,
        app_secret: str,
        token_lease_seconds: float = 86400,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        token_cache: Optional[TokenCache] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._app_key = app_key
        self._app_secret = app_secret
        self._timeout = timeout
        self._session = session or requests.Session()
        self._token_cache = token_cache or TokenCache(issuer=self.issue_token, lease_seconds=token_lease_seconds)

    @classmethod
    def from_config(cls, config: Config) -> "KisApiClient":
        return cls(
            base_url=config.kis_base_url,
            app_key=config.kis_app_key,
            app_secret=config.kis_app_secret,
            token_lease_seconds=config.token_lease_seconds,
            timeout=config.kis_timeout,
        )

    @property
    def token_cache(self) -> TokenCache:
        return self._token_cache

    def issue_token(self) -> str:
        """
        签发访问令牌

        Returns:
            access_token 字符串

        Raises:
            AuthError: 请求失败或响应中没有令牌
        """
        body = {
            "grant_type": "client_credentials",
            "appkey": self._app_key,
            "appsecret": self._app_secret,
        }
        try:
            response = self._session.post(f"{self.base_url}{TOKEN_PATH}", json=body, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise AuthError(f"令牌签发请求失败: {e}") from e
        except ValueError as e:
            raise AuthError(f"令牌签发响应不是合法 JSON: {e}") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthError(f"令牌签发响应缺少 access_token: {str(payload)[:200]}")
        return token

    def get(self, path: str, params: Dict[str, Any], tr_id: str) -> Dict[str, Any]:
        """
        发送带令牌的 GET 请求

        Args:
            path: 接口路径
            params: 查询参数
            tr_id: KIS 交易 ID

        Returns:
            响应 JSON（dict）

        Raises:
            AuthError: 令牌签发失败
            TransportError: 网络异常、超时或非 2xx 状态码
            ParseError: 响应不是 JSON 对象
        """
        token = self._token_cache.get_token()
        headers = {
            "content-type": "application/json; charset=utf-8",
            "authorization": f"Bearer {token}",
            "appkey": self._app_key,
            "appsecret": self._app_secret,
            "tr_id": tr_id,
            "custtype": "P",
        }

        try:
            response = self._session.get(
                f"{self.base_url}{path}", params=params, headers=headers, timeout=self._timeout
            )
        except requests.Timeout as e:
            raise TransportError(f"[{tr_id}] 请求超时: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"[{tr_id}] 请求失败: {e}") from e

        if not response.ok:
            raise TransportError(
                f"[{tr_id}] HTTP {response.status_code}: {response.text[:200]}", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"[{tr_id}] 响应不是合法 JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(f"[{tr_id}] 响应结构异常: {type(payload).__name__}")

        logger.debug(f"[KIS] {tr_id} 响应 rt_cd={payload.get('rt_cd')} msg={payload.get('msg1', '')}")
        return payload

    def close(self) -> None:
        self._session.close()
