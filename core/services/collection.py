# -*- coding: utf-8 -*-
"""
数据采集编排

第一阶段：对排行中的每只股票并发拉取日线数据，
全部完成后汇总为 CollectedDataset 列表
"""

import logging
import time
from datetime import date
from typing import List, Optional

from core.domain.market import CollectedDataset, RankEntry
from infrastructure.fetchers import SeriesFetcher

from .executor import BoundedExecutor, fan_out

logger = logging.getLogger(__name__)


class CollectionOrchestrator:
    """
    数据采集编排器

    - 单只股票拉取失败（异常）或返回空序列时，该股票被排除，不影响其他股票
    - 汇总结果可选地交给持久化组件保存（保存失败只记录日志）
    """

    def __init__(
        self,
        series_fetcher: SeriesFetcher,
        executor: BoundedExecutor,
        window_days: int = 60,
        sink=None,
    ):
        """
        Args:
            series_fetcher: 日线数据获取器
            executor: 采集线程池
            window_days: 日线窗口天数
            sink: 持久化组件（需提供 save_collected(datasets)，可选）
        """
        self._series_fetcher = series_fetcher
        self._executor = executor
        self._window_days = window_days
        self._sink = sink

    def collect(self, entries: List[RankEntry], analysis_date: Optional[date] = None) -> List[CollectedDataset]:
        """
        并发采集日线数据

        Args:
            entries: 成交量排行条目
            analysis_date: 分析日期（默认今天）

        Returns:
            日线序列非空的 CollectedDataset 列表（顺序与 entries 一致）
        """
        if not entries:
            return []

        analysis_date = analysis_date or date.today()
        start_time = time.time()
        logger.info(f"[Collect] 开始采集 {len(entries)} 只股票的日线数据（窗口 {self._window_days} 天）")

        outcomes = fan_out(
            self._executor,
            entries,
            lambda entry: self._series_fetcher.fetch_series(entry.code, self._window_days),
            describe=lambda entry: f"[{entry.code}] 日线采集",
        )

        datasets = []
        for outcome in outcomes:
            entry = outcome.item
            if not outcome.ok:
                continue
            if not outcome.value:
                logger.warning(f"[{entry.code}] {entry.name} 日线数据为空，跳过")
                continue
            datasets.append(CollectedDataset.from_series(entry, outcome.value, analysis_date))

        elapsed = time.time() - start_time
        logger.info(f"[Collect] 采集完成: 成功 {len(datasets)}/{len(entries)}，耗时 {elapsed:.2f}s")

        if self._sink is not None and datasets:
            try:
                self._sink.save_collected(datasets)
            except Exception as e:
                logger.error(f"[Collect] 保存采集数据失败: {e}")

        return datasets
