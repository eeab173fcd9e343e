# -*- coding: utf-8 -*-
"""
AI分析模块

AI 服务商、提示词、响应解析、结果缓存与投资建议客户端
"""

from .advisory import AdvisoryClient
from .base import BaseAdvisoryProvider
from .parsers import RecommendationParser
from .providers import ClaudeProvider, OpenAIProvider, create_provider
from .result_cache import AdvisoryResultCache

__all__ = [
    "AdvisoryClient",
    "AdvisoryResultCache",
    "BaseAdvisoryProvider",
    "ClaudeProvider",
    "OpenAIProvider",
    "RecommendationParser",
    "create_provider",
]
