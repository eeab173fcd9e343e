# -*- coding: utf-8 -*-
"""
领域模型

定义业务领域的核心实体和值对象
"""

from .analysis import PARSE_FAILURE_SUMMARY, AdvisoryResult, AnalysisRecord, RecommendationStatus
from .job import AnalysisJob, AnalysisStatus
from .market import CollectedDataset, RankEntry, SeriesPoint, compute_window_range

__all__ = [
    # 市场数据
    "RankEntry",
    "SeriesPoint",
    "CollectedDataset",
    "compute_window_range",
    # 分析结果
    "RecommendationStatus",
    "AdvisoryResult",
    "AnalysisRecord",
    "PARSE_FAILURE_SUMMARY",
    # 作业
    "AnalysisJob",
    "AnalysisStatus",
]
