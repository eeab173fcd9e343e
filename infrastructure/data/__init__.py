# -*- coding: utf-8 -*-
"""
数据存储模块
"""

# 导出模型和数据库管理器
from .models import Base, DailyPrice, LlmAnalysisResult, StockSnapshot
from .storage import DatabaseManager

__all__ = [
    "Base",
    "DailyPrice",
    "StockSnapshot",
    "LlmAnalysisResult",
    "DatabaseManager",
]
