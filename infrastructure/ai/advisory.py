# -*- coding: utf-8 -*-
"""
AI 投资建议客户端

单只股票的分析流程：
1. 查询结果缓存（同一股票同一分析日在有效期内只调用一次）
2. 生成提示词
3. 调用 AI 服务商（仅对 TransportError 进行指数退避重试）
4. 解析响应；解析失败得到 ERROR 结果而不是异常
5. 缓存有效结果
"""

import logging
import time
from datetime import timedelta
from typing import Callable, Optional

from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from common.config import Config
from common.exceptions import TransportError
from core.domain.analysis import AdvisoryResult
from core.domain.market import CollectedDataset

from .base import BaseAdvisoryProvider
from .parsers import RecommendationParser
from .prompts import build_analysis_prompt
from .result_cache import AdvisoryResultCache

logger = logging.getLogger(__name__)


class AdvisoryClient:
    """
    AI 投资建议客户端

    使用方式：
        client = AdvisoryClient(provider)
        result = client.analyze(dataset)
    """

    def __init__(
        self,
        provider: BaseAdvisoryProvider,
        cache: Optional[AdvisoryResultCache] = None,
        parser: Optional[RecommendationParser] = None,
        max_retries: int = 2,
        initial_delay: float = 2.0,
        max_delay: float = 8.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            provider: AI 服务商
            cache: 结果缓存（默认 6 小时有效期）
            parser: 响应解析器
            max_retries: 首次调用失败后的最大重试次数
            initial_delay: 首次重试等待时间（秒），之后逐次翻倍
            max_delay: 单次等待上限（秒）
            sleep: 等待函数（测试时可注入）
        """
        self._provider = provider
        self._cache = cache if cache is not None else AdvisoryResultCache()
        self._parser = parser or RecommendationParser()
        self._max_retries = max_retries
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Config, provider: BaseAdvisoryProvider) -> "AdvisoryClient":
        return cls(
            provider=provider,
            cache=AdvisoryResultCache(ttl=timedelta(hours=config.llm_cache_ttl_hours)),
            max_retries=config.llm_max_retries,
            initial_delay=config.llm_retry_initial_delay,
            max_delay=config.llm_retry_max_delay,
        )

    @staticmethod
    def cache_key(dataset: CollectedDataset) -> str:
        return f"{dataset.code}:{dataset.analysis_date.isoformat()}"

    def analyze(self, dataset: CollectedDataset) -> AdvisoryResult:
        """
        分析单只股票

        Args:
            dataset: 采集数据集

        Returns:
            AdvisoryResult

        Raises:
            TransportError: 重试耗尽后仍然失败
            AuthError / RequestError / ParseError: 认证失败、请求被拒绝或响应结构异常（不重试）
        """
        code = dataset.code
        key = self.cache_key(dataset)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"[{code}] 命中分析缓存: {cached.recommendation.value}")
            return cached

        prompt = build_analysis_prompt(dataset)
        logger.debug(f"[{code}] 提示词长度 {len(prompt)} 字符")

        start_time = time.time()
        response_text = self._call_with_retry(prompt)
        logger.info(f"[{code}] {self._provider.name} 响应成功，耗时 {time.time() - start_time:.2f}s")

        result = self._parser.parse(response_text)
        if result.is_error:
            logger.warning(f"[{code}] {dataset.name} 分析结果解析失败，不写入缓存")
        else:
            self._cache.set(key, result)
            logger.info(f"[{code}] {dataset.name} 建议: {result.recommendation.value} (置信度 {result.confidence:.2f})")
        return result

    def _call_with_retry(self, prompt: str) -> str:
        retryer = Retrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._initial_delay, min=self._initial_delay, max=self._max_delay),
            retry=retry_if_exception_type(TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        return retryer(self._provider.complete, prompt)
