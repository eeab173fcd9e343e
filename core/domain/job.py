# -*- coding: utf-8 -*-
"""
分析作业实体

作业状态只有一次迁移：RUNNING → DONE 或 RUNNING → FAILED
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .analysis import AnalysisRecord


class AnalysisStatus(Enum):
    """作业状态"""

    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AnalysisJob:
    """分析作业"""

    job_id: str
    status: AnalysisStatus
    results: Tuple[AnalysisRecord, ...] = ()  # 仅 DONE 时有值
    error_message: Optional[str] = None  # 仅 FAILED 时有值
    created_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @classmethod
    def running(cls, job_id: str) -> "AnalysisJob":
        return cls(job_id=job_id, status=AnalysisStatus.RUNNING)

    def done(self, results: List[AnalysisRecord]) -> "AnalysisJob":
        """生成 DONE 状态的新作业对象"""
        return AnalysisJob(
            job_id=self.job_id,
            status=AnalysisStatus.DONE,
            results=tuple(results),
            created_at=self.created_at,
            finished_at=datetime.now(),
        )

    def failed(self, error_message: str) -> "AnalysisJob":
        """生成 FAILED 状态的新作业对象"""
        return AnalysisJob(
            job_id=self.job_id,
            status=AnalysisStatus.FAILED,
            error_message=error_message,
            created_at=self.created_at,
            finished_at=datetime.now(),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status is not AnalysisStatus.RUNNING
