# -*- coding: utf-8 -*-
"""
分析服务模块

分析流程编排、作业存储与对外服务接口
"""

from .job_store import JobStore
from .pipeline import AnalysisOrchestrator
from .service import AnalysisService, create_analysis_service

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisService",
    "JobStore",
    "create_analysis_service",
]
