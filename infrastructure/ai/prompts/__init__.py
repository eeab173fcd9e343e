# -*- coding: utf-8 -*-
"""
提示词模块
"""

from .stock_analysis import build_analysis_prompt, percent_above_low

__all__ = [
    "build_analysis_prompt",
    "percent_above_low",
]
