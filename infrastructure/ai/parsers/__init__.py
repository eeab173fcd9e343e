# -*- coding: utf-8 -*-
"""
AI 响应解析器
"""

from .recommendation_parser import RecommendationParser

__all__ = [
    "RecommendationParser",
]
