# -*- coding: utf-8 -*-
"""
AI 服务商实现

- ClaudeProvider: Anthropic Messages API，文本位于 content[].text
- OpenAIProvider: Chat Completions API（兼容 OpenAI 格式的第三方服务），
  文本位于 choices[0].message.content
"""

import logging
from typing import Any, Dict, Optional

import requests

from common.config import Config
from common.exceptions import ConfigError

from .base import BaseAdvisoryProvider

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(BaseAdvisoryProvider):
    """Claude"""

    name = "Claude"

    def __init__(self, api_key: str, model: str, base_url: str = "https://api.anthropic.com", **kwargs):
        super().__init__(api_key, model, **kwargs)
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1/messages"

    def build_headers(self) -> Dict[str, str]:
        headers = super().build_headers()
        headers["x-api-key"] = self._api_key
        headers["anthropic-version"] = ANTHROPIC_VERSION
        return headers

    def extract_text(self, payload: Dict[str, Any]) -> str:
        blocks = payload["content"]
        return "".join(block.get("text", "") for block in blocks if block.get("type", "text") == "text")


class OpenAIProvider(BaseAdvisoryProvider):
    """GPT（OpenAI 兼容接口）"""

    name = "GPT"

    def __init__(self, api_key: str, model: str, base_url: str = "https://api.openai.com/v1", **kwargs):
        super().__init__(api_key, model, **kwargs)
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def extract_text(self, payload: Dict[str, Any]) -> str:
        return payload["choices"][0]["message"]["content"]


def create_provider(config: Config, session: Optional[requests.Session] = None) -> BaseAdvisoryProvider:
    """
    根据配置创建 AI 服务商

    Args:
        config: 系统配置（LLM_PROVIDER 为 claude 或 gpt）
        session: 可选的 requests.Session

    Returns:
        AI 服务商实例
    """
    common = {
        "max_tokens": config.llm_max_tokens,
        "timeout": config.llm_timeout,
        "session": session,
    }

    provider_name = (config.llm_provider or "").lower()
    if provider_name == "claude":
        provider = ClaudeProvider(config.claude_api_key, config.claude_model, base_url=config.claude_base_url, **common)
    elif provider_name == "gpt":
        provider = OpenAIProvider(config.openai_api_key, config.openai_model, base_url=config.openai_base_url, **common)
    else:
        raise ConfigError(f"不支持的 AI 服务商: {config.llm_provider}（可选 claude / gpt）")

    if not provider.is_available():
        logger.warning(f"[{provider.name}] API Key 未配置，AI 分析调用将失败")
    else:
        logger.info(f"[{provider.name}] AI 服务商初始化成功 (model: {provider.model})")
    return provider
