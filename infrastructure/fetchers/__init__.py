# -*- coding: utf-8 -*-
"""
数据获取层

KIS Open API 客户端、访问令牌缓存、成交量排行与日线数据获取器
"""

from .kis_client import KisApiClient
from .ranking_fetcher import RankingFetcher
from .series_fetcher import SeriesFetcher, last_trading_date, parse_close_time
from .token_cache import AccessToken, TokenCache

__all__ = [
    "KisApiClient",
    "TokenCache",
    "AccessToken",
    "RankingFetcher",
    "SeriesFetcher",
    "last_trading_date",
    "parse_close_time",
]
