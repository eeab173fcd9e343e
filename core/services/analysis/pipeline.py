# -*- coding: utf-8 -*-
"""
分析流程编排

一次完整的分析作业：
1. 获取成交量排行
2. 并发采集日线数据（第一阶段线程池）
3. 并发调用 AI 分析（第二阶段线程池）
4. 批量保存分析结果
5. 将作业标记为 DONE（或在异常时标记为 FAILED）
"""

import logging
import time
from datetime import date
from typing import List, Optional

from common.exceptions import PipelineError
from core.domain.analysis import AnalysisRecord
from core.domain.job import AnalysisJob
from core.domain.market import CollectedDataset
from core.services.collection import CollectionOrchestrator
from core.services.executor import BoundedExecutor, fan_out
from infrastructure.ai import AdvisoryClient
from infrastructure.fetchers import RankingFetcher

from .job_store import JobStore

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    分析流程编排器

    职责：
    1. 串联排行、采集、分析、持久化四个步骤
    2. 单只股票失败只影响该股票
    3. 流程级异常转换为 FAILED 作业
    """

    def __init__(
        self,
        ranking_fetcher: RankingFetcher,
        collector: CollectionOrchestrator,
        advisory_client: AdvisoryClient,
        executor: BoundedExecutor,
        job_store: JobStore,
        repository=None,
        top_n: int = 10,
        strict_ranking: bool = False,
    ):
        """
        Args:
            ranking_fetcher: 成交量排行获取器
            collector: 数据采集编排器
            advisory_client: AI 投资建议客户端
            executor: 分析阶段线程池
            job_store: 作业存储
            repository: 结果持久化组件（需提供 save_all(records)，可选）
            top_n: 分析排行前 N 名
            strict_ranking: 排行为空时是否视为失败
        """
        self._ranking_fetcher = ranking_fetcher
        self._collector = collector
        self._advisory_client = advisory_client
        self._executor = executor
        self._job_store = job_store
        self._repository = repository
        self._top_n = top_n
        self._strict_ranking = strict_ranking

    def run(self, job_id: str) -> AnalysisJob:
        """
        执行分析作业并写入终态

        Args:
            job_id: 作业 ID（应已以 RUNNING 状态保存）

        Returns:
            终态作业
        """
        job = self._job_store.get(job_id) or AnalysisJob.running(job_id)

        try:
            records = self.run_internal()
            final_job = job.done(records)
            logger.info(f"[Job] 作业 {job_id} 完成，共 {len(records)} 条分析结果")
        except Exception as e:
            logger.exception(f"[Job] 作业 {job_id} 失败: {e}")
            final_job = job.failed(str(e) or e.__class__.__name__)

        self._job_store.finalize(final_job)
        return self._job_store.get(job_id) or final_job

    def run_internal(self, analysis_date: Optional[date] = None) -> List[AnalysisRecord]:
        """
        执行完整分析流程（不处理作业状态）

        Returns:
            分析记录列表
        """
        analysis_date = analysis_date or date.today()
        start_time = time.time()

        entries = self._ranking_fetcher.fetch_top(self._top_n)
        if not entries:
            if self._strict_ranking:
                raise PipelineError("成交量排行为空")
            logger.warning("[Pipeline] 成交量排行为空，本次不进行分析")
            return []

        datasets = self._collector.collect(entries, analysis_date)
        if not datasets:
            logger.warning("[Pipeline] 没有可分析的股票数据")
            return []

        records = self._analyze_all(datasets)

        if records and self._repository is not None:
            self._repository.save_all(records)

        self._report(records, len(entries), time.time() - start_time)
        return records

    def _analyze_all(self, datasets: List[CollectedDataset]) -> List[AnalysisRecord]:
        logger.info(f"[Pipeline] 开始 AI 分析 {len(datasets)} 只股票")
        outcomes = fan_out(
            self._executor,
            datasets,
            self._advisory_client.analyze,
            describe=lambda ds: f"[{ds.code}] AI 分析",
        )

        records = []
        for outcome in outcomes:
            if not outcome.ok or outcome.value is None:
                continue
            dataset = outcome.item
            records.append(AnalysisRecord.from_result(dataset.code, dataset.name, dataset.analysis_date, outcome.value))
        return records

    def _report(self, records: List[AnalysisRecord], ranked: int, elapsed: float) -> None:
        logger.info("===== 分析结果摘要 =====")
        for r in records:
            logger.info(
                f"{r.recommendation.emoji} {r.stock_name}({r.stock_code}): {r.recommendation.value} | "
                f"置信度 {r.confidence:.2f} | {r.summary}"
            )
        logger.info(f"[Pipeline] 分析完成: 排行 {ranked} 只，产出 {len(records)} 条结果，耗时 {elapsed:.2f}s")
