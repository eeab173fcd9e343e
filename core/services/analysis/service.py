# -*- coding: utf-8 -*-
"""
分析服务

对外提供触发 / 查询接口：
- submit(): 创建 RUNNING 作业并在后台执行，立即返回作业 ID
- poll(): 查询作业状态
- fetch(): 作业完成后获取分析结果
- latest(): 查询当天最近保存的分析结果
"""

import logging
import uuid
from concurrent.futures import Future
from datetime import date
from typing import Dict, List, Optional

from common.config import Config, get_config
from common.exceptions import JobNotFoundError
from core.domain.analysis import AnalysisRecord
from core.domain.job import AnalysisJob, AnalysisStatus
from core.services.collection import CollectionOrchestrator
from core.services.executor import BoundedExecutor
from infrastructure.ai import AdvisoryClient, create_provider
from infrastructure.data import DatabaseManager
from infrastructure.fetchers import KisApiClient, RankingFetcher, SeriesFetcher, parse_close_time

from .job_store import JobStore
from .pipeline import AnalysisOrchestrator

logger = logging.getLogger(__name__)

RUN_COMMAND = "run"


class AnalysisService:
    """分析服务"""

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        job_store: JobStore,
        executor: BoundedExecutor,
        repository=None,
        owned_executors: Optional[List[BoundedExecutor]] = None,
        resources: Optional[list] = None,
    ):
        """
        Args:
            orchestrator: 分析流程编排器
            job_store: 作业存储（需与 orchestrator 使用同一个）
            executor: 作业线程池
            repository: 结果查询组件（需提供 find_top_n_by_date_order_by_recency，可选）
            owned_executors: close() 时需要一并关闭的其他线程池
            resources: close() 时需要一并释放的其他资源（需提供 close()）
        """
        self._orchestrator = orchestrator
        self._job_store = job_store
        self._executor = executor
        self._repository = repository
        self._owned_executors = owned_executors or []
        self._resources = resources or []
        self._futures: Dict[str, Future] = {}

    def submit(self, command: str = RUN_COMMAND) -> str:
        """
        触发一次分析作业

        Args:
            command: 触发命令（目前只支持 "run"）

        Returns:
            作业 ID
        """
        if command != RUN_COMMAND:
            raise ValueError(f"不支持的命令: {command}")

        job_id = uuid.uuid4().hex
        self._job_store.save(AnalysisJob.running(job_id))
        logger.info(f"[Job] 作业已创建: {job_id}")

        future = self._executor.submit(self._orchestrator.run, job_id)
        self._futures[job_id] = future
        # 结束后的作业以 JobStore 为准
        future.add_done_callback(lambda _: self._futures.pop(job_id, None))
        return job_id

    def poll(self, job_id: str) -> Optional[AnalysisStatus]:
        """查询作业状态，不存在时返回 None"""
        job = self._job_store.get(job_id)
        return job.status if job else None

    def get_job(self, job_id: str) -> Optional[AnalysisJob]:
        return self._job_store.get(job_id)

    def fetch(self, job_id: str) -> Optional[List[AnalysisRecord]]:
        """
        获取作业结果

        Returns:
            作业为 DONE 时返回结果列表，否则返回 None

        Raises:
            JobNotFoundError: 作业不存在
        """
        job = self._job_store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if job.status is not AnalysisStatus.DONE:
            return None
        return list(job.results)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> AnalysisJob:
        """等待后台作业结束并返回终态作业"""
        future = self._futures.get(job_id)
        if future is not None:
            job = future.result(timeout=timeout)
            self._futures.pop(job_id, None)
            return job

        job = self._job_store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def run_now(self) -> AnalysisJob:
        """同步执行一次分析作业（用于命令行和定时任务）"""
        job_id = uuid.uuid4().hex
        self._job_store.save(AnalysisJob.running(job_id))
        return self._orchestrator.run(job_id)

    def latest(self, limit: int = 10) -> List[AnalysisRecord]:
        """当天最近保存的分析结果"""
        if self._repository is None:
            return []
        return self._repository.find_top_n_by_date_order_by_recency(date.today(), limit)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        for executor in self._owned_executors:
            executor.shutdown(wait=True)
        for resource in self._resources:
            resource.close()


def create_analysis_service(config: Optional[Config] = None, top_n: Optional[int] = None) -> AnalysisService:
    """
    根据配置组装分析服务

    Args:
        config: 系统配置（默认使用全局配置）
        top_n: 分析排行前 N 名（默认使用配置值）

    Returns:
        AnalysisService
    """
    config = config or get_config()
    db = DatabaseManager(config.get_db_url())

    kis_client = KisApiClient.from_config(config)
    collect_executor = BoundedExecutor("collect", config.collect_max_workers, config.collect_queue_capacity)
    analysis_executor = BoundedExecutor("analysis", config.analysis_max_workers, config.analysis_queue_capacity)
    job_executor = BoundedExecutor("job", config.job_max_workers, config.job_queue_capacity)

    collector = CollectionOrchestrator(
        series_fetcher=SeriesFetcher(
            kis_client,
            close_time=parse_close_time(config.market_close_time),
            market_timezone=config.market_timezone,
        ),
        executor=collect_executor,
        window_days=config.days_back,
        sink=db,
    )

    job_store = JobStore()
    orchestrator = AnalysisOrchestrator(
        ranking_fetcher=RankingFetcher(kis_client),
        collector=collector,
        advisory_client=AdvisoryClient.from_config(config, create_provider(config)),
        executor=analysis_executor,
        job_store=job_store,
        repository=db,
        top_n=top_n if top_n is not None else config.rank_top_n,
        strict_ranking=config.strict_ranking,
    )

    return AnalysisService(
        orchestrator=orchestrator,
        job_store=job_store,
        executor=job_executor,
        repository=db,
        owned_executors=[collect_executor, analysis_executor],
        resources=[kis_client],
    )
