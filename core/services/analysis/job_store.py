# -*- coding: utf-8 -*-
"""
分析作业存储

进程内线程安全的作业表：save() 为按作业 ID 的覆盖写，
finalize() 只允许从 RUNNING 迁移到终态一次
"""

import logging
import threading
from typing import Dict, Optional

from core.domain.job import AnalysisJob

logger = logging.getLogger(__name__)


class JobStore:
    """分析作业存储"""

    def __init__(self):
        self._jobs: Dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def save(self, job: AnalysisJob) -> None:
        """保存作业（同 ID 覆盖）"""
        with self._lock:
            self._jobs[job.job_id] = job

    def get(self, job_id: str) -> Optional[AnalysisJob]:
        """查询作业，不存在时返回 None"""
        with self._lock:
            return self._jobs.get(job_id)

    def finalize(self, job: AnalysisJob) -> bool:
        """
        写入终态作业

        已处于终态的作业不会被再次覆盖

        Args:
            job: DONE 或 FAILED 状态的作业

        Returns:
            是否写入成功
        """
        if not job.is_terminal:
            raise ValueError(f"finalize 只接受终态作业: {job.job_id} {job.status.value}")

        with self._lock:
            current = self._jobs.get(job.job_id)
            if current is not None and current.is_terminal:
                logger.warning(
                    f"[Job] 作业 {job.job_id} 已处于终态 {current.status.value}，忽略 {job.status.value}"
                )
                return False
            self._jobs[job.job_id] = job
            return True

