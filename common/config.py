# -*- coding: utf-8 -*-
"""
配置管理模块

从环境变量（以及项目根目录下的 .env 文件）加载全部运行配置：

- KIS Open API 凭证与行情参数
- 两级线程池的并发上限与队列容量
- AI 服务商、模型、重试与缓存参数
- 数据库、日志、定时任务
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

SUPPORTED_LLM_PROVIDERS = ("claude", "gpt")


def _get_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"环境变量 {name} 不是合法的整数: {value}")


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"环境变量 {name} 不是合法的数字: {value}")


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


@dataclass
class Config:
    """
    系统配置

    所有字段都有默认值，便于测试时直接构造；生产环境通过 Config.from_env() 读取。
    """

    # === KIS Open API ===
    kis_base_url: str = "https://openapi.koreainvestment.com:9443"
    kis_app_key: str = ""
    kis_app_secret: str = ""
    kis_timeout: float = 10.0  # 单次请求超时（秒）
    token_lease_seconds: int = 86400  # 访问令牌租期（秒）

    # === 行情参数 ===
    market_timezone: str = "Asia/Seoul"
    market_close_time: str = "15:30"  # 收盘时间，早于此时间取前一交易日
    days_back: int = 60  # 日线窗口天数
    rank_top_n: int = 10  # 成交量排行取前 N 名
    strict_ranking: bool = False  # 排行为空时是否视为失败

    # === 线程池 ===
    collect_max_workers: int = 10
    collect_queue_capacity: int = 100
    analysis_max_workers: int = 3
    analysis_queue_capacity: int = 50
    job_max_workers: int = 3
    job_queue_capacity: int = 50

    # === AI 服务 ===
    llm_provider: str = "claude"
    claude_api_key: str = ""
    claude_model: str = "claude-3-5-sonnet-20241022"
    claude_base_url: str = "https://api.anthropic.com"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    llm_max_tokens: int = 2000
    llm_timeout: float = 45.0
    llm_max_retries: int = 2  # 首次调用之外的额外重试次数
    llm_retry_initial_delay: float = 2.0
    llm_retry_max_delay: float = 8.0
    llm_cache_ttl_hours: float = 6.0

    # === 存储 / 日志 / 定时 ===
    database_path: str = "./data/stock_analysis.db"
    database_url: str = ""
    log_dir: str = "./logs"
    schedule_enabled: bool = False
    schedule_time: str = "16:00"

    # 启动时收集的配置告警
    warnings: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """
        从环境变量构造配置

        Args:
            env_file: .env 文件路径（可选，默认在当前目录查找）

        Returns:
            Config 对象
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        defaults = cls()
        return cls(
            kis_base_url=_get_str("KIS_BASE_URL", defaults.kis_base_url),
            kis_app_key=_get_str("KIS_APP_KEY"),
            kis_app_secret=_get_str("KIS_APP_SECRET"),
            kis_timeout=_get_float("KIS_TIMEOUT", defaults.kis_timeout),
            token_lease_seconds=_get_int("KIS_TOKEN_LEASE_SECONDS", defaults.token_lease_seconds),
            market_timezone=_get_str("MARKET_TIMEZONE", defaults.market_timezone),
            market_close_time=_get_str("MARKET_CLOSE_TIME", defaults.market_close_time),
            days_back=_get_int("DAYS_BACK", defaults.days_back),
            rank_top_n=_get_int("RANK_TOP_N", defaults.rank_top_n),
            strict_ranking=_get_bool("STRICT_RANKING", defaults.strict_ranking),
            collect_max_workers=_get_int("COLLECT_MAX_WORKERS", defaults.collect_max_workers),
            collect_queue_capacity=_get_int("COLLECT_QUEUE_CAPACITY", defaults.collect_queue_capacity),
            analysis_max_workers=_get_int("ANALYSIS_MAX_WORKERS", defaults.analysis_max_workers),
            analysis_queue_capacity=_get_int("ANALYSIS_QUEUE_CAPACITY", defaults.analysis_queue_capacity),
            job_max_workers=_get_int("JOB_MAX_WORKERS", defaults.job_max_workers),
            job_queue_capacity=_get_int("JOB_QUEUE_CAPACITY", defaults.job_queue_capacity),
            llm_provider=_get_str("LLM_PROVIDER", defaults.llm_provider).lower(),
            claude_api_key=_get_str("CLAUDE_API_KEY"),
            claude_model=_get_str("CLAUDE_MODEL", defaults.claude_model),
            claude_base_url=_get_str("CLAUDE_BASE_URL", defaults.claude_base_url),
            openai_api_key=_get_str("OPENAI_API_KEY"),
            openai_model=_get_str("OPENAI_MODEL", defaults.openai_model),
            openai_base_url=_get_str("OPENAI_BASE_URL", defaults.openai_base_url),
            llm_max_tokens=_get_int("LLM_MAX_TOKENS", defaults.llm_max_tokens),
            llm_timeout=_get_float("LLM_TIMEOUT", defaults.llm_timeout),
            llm_max_retries=_get_int("LLM_MAX_RETRIES", defaults.llm_max_retries),
            llm_retry_initial_delay=_get_float("LLM_RETRY_INITIAL_DELAY", defaults.llm_retry_initial_delay),
            llm_retry_max_delay=_get_float("LLM_RETRY_MAX_DELAY", defaults.llm_retry_max_delay),
            llm_cache_ttl_hours=_get_float("LLM_CACHE_TTL_HOURS", defaults.llm_cache_ttl_hours),
            database_path=_get_str("DATABASE_PATH", defaults.database_path),
            database_url=_get_str("DATABASE_URL"),
            log_dir=_get_str("LOG_DIR", defaults.log_dir),
            schedule_enabled=_get_bool("SCHEDULE_ENABLED", defaults.schedule_enabled),
            schedule_time=_get_str("SCHEDULE_TIME", defaults.schedule_time),
        )

    def validate(self) -> List[str]:
        """
        检查配置完整性

        Returns:
            告警信息列表（为空表示配置完整）
        """
        warnings = []

        if not self.kis_app_key or not self.kis_app_secret:
            warnings.append("未配置 KIS_APP_KEY / KIS_APP_SECRET，无法获取行情数据")

        if self.llm_provider not in SUPPORTED_LLM_PROVIDERS:
            warnings.append(f"LLM_PROVIDER={self.llm_provider} 不受支持，可选值: {', '.join(SUPPORTED_LLM_PROVIDERS)}")
        elif self.llm_provider == "claude" and not self.claude_api_key:
            warnings.append("LLM_PROVIDER=claude 但未配置 CLAUDE_API_KEY")
        elif self.llm_provider == "gpt" and not self.openai_api_key:
            warnings.append("LLM_PROVIDER=gpt 但未配置 OPENAI_API_KEY")

        if self.days_back < 1:
            warnings.append(f"DAYS_BACK={self.days_back} 无效，至少为 1")

        for name in ("collect_max_workers", "analysis_max_workers", "job_max_workers"):
            if getattr(self, name) < 1:
                warnings.append(f"{name.upper()} 必须大于 0")

        self.warnings = warnings
        return warnings

    def get_db_url(self) -> str:
        """
        获取数据库连接 URL

        优先使用 DATABASE_URL，否则基于 DATABASE_PATH 生成 SQLite URL（自动创建目录）
        """
        if self.database_url:
            return self.database_url

        db_path = Path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path.absolute()}"


_config: Optional[Config] = None


def get_config() -> Config:
    """获取全局配置（首次调用时从环境变量加载）"""
    global _config
    if _config is None:
        _config = Config.from_env()
        for warning in _config.validate():
            logger.warning(f"[Config] {warning}")
    return _config


def reset_config() -> None:
    """重置全局配置（用于测试）"""
    global _config
    _config = None
