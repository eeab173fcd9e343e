# -*- coding: utf-8 -*-
"""
日线数据获取器

按 [结束日 - (窗口天数 - 1), 结束日] 查询单只股票的日线数据。
结束日为最近交易日：收盘前取前一天，周末回退到周五（不处理法定节假日）
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from common.exceptions import ParseError, TransportError
from core.domain.market import SeriesPoint
from shared.utils.validators import format_trade_date, parse_decimal, parse_integer, parse_trade_date

from .kis_client import KisApiClient

logger = logging.getLogger(__name__)

DAILY_CHART_PATH = "/uapi/domestic-stock/v1/quotations/inquire-daily-itemchartprice"
DAILY_CHART_TR_ID = "FHKST03010100"

DEFAULT_CLOSE_TIME = time(15, 30)


def parse_close_time(value: str) -> time:
    """解析 HH:MM 格式的收盘时间"""
    return datetime.strptime(value.strip(), "%H:%M").time()


def last_trading_date(now: datetime, close_time: time = DEFAULT_CLOSE_TIME) -> date:
    """
    计算最近交易日

    Args:
        now: 当前时间（市场所在时区）
        close_time: 收盘时间

    Returns:
        最近交易日
    """
    day = now.date()
    if now.time() < close_time:
        day -= timedelta(days=1)

    # 周六回退 1 天，周日回退 2 天
    if day.weekday() == 5:
        day -= timedelta(days=1)
    elif day.weekday() == 6:
        day -= timedelta(days=2)
    return day


def window_dates(end: date, window_days: int) -> Tuple[date, date]:
    """计算查询窗口 (开始日, 结束日)，包含两端"""
    return end - timedelta(days=max(window_days, 1) - 1), end


def parse_series_row(code: str, row: Dict[str, Any]) -> Optional[SeriesPoint]:
    """将日线接口的一行转换为 SeriesPoint；日期为空的占位行返回 None"""
    if not isinstance(row, dict):
        raise ParseError(f"[{code}] 日线数据行格式异常: {row!r}")

    if not str(row.get("stck_bsop_date") or "").strip():
        return None

    return SeriesPoint(
        code=code,
        trade_date=parse_trade_date(row.get("stck_bsop_date"), "stck_bsop_date"),
        open_price=parse_decimal(row.get("stck_oprc"), "stck_oprc"),
        close_price=parse_decimal(row.get("stck_clpr"), "stck_clpr"),
        high_price=parse_decimal(row.get("stck_hgpr"), "stck_hgpr"),
        low_price=parse_decimal(row.get("stck_lwpr"), "stck_lwpr"),
        volume=parse_integer(row.get("acml_vol"), "acml_vol"),
    )


class SeriesFetcher:
    """日线数据获取器"""

    def __init__(
        self,
        client: KisApiClient,
        close_time: time = DEFAULT_CLOSE_TIME,
        market_timezone: str = "Asia/Seoul",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            client: KIS 客户端
            close_time: 收盘时间
            market_timezone: 市场时区
            clock: 返回当前时间的函数（测试时可注入）
        """
        self._client = client
        self._close_time = close_time
        self._tz = ZoneInfo(market_timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

    def end_date(self) -> date:
        return last_trading_date(self._clock(), self._close_time)

    def fetch_series(self, code: str, window_days: int) -> List[SeriesPoint]:
        """
        获取日线序列

        传输失败或解析失败时返回空列表（该股票将被排除）；认证失败向上抛出。

        Args:
            code: 股票代码
            window_days: 窗口天数（自然日）

        Returns:
            按日期升序排列的 SeriesPoint 列表
        """
        start, end = window_dates(self.end_date(), window_days)
        params = {
            "FID_COND_MRKT_DIV_CODE": "J",
            "FID_INPUT_ISCD": code,
            "FID_INPUT_DATE_1": format_trade_date(start),
            "FID_INPUT_DATE_2": format_trade_date(end),
            "FID_PERIOD_DIV_CODE": "D",
            "FID_ORG_ADJ_PRC": "0",
        }

        try:
            payload = self._client.get(DAILY_CHART_PATH, params, DAILY_CHART_TR_ID)
            rows = payload.get("output2") or []
            if not isinstance(rows, list):
                raise ParseError(f"[{code}] 日线数据 output2 字段格式异常: {type(rows).__name__}")
            points = [p for p in (parse_series_row(code, row) for row in rows) if p is not None]
        except (TransportError, ParseError) as e:
            logger.warning(f"[{code}] 获取日线数据失败: {e}")
            return []

        points.sort(key=lambda p: p.trade_date)
        logger.debug(f"[{code}] 获取日线数据 {len(points)} 条 ({format_trade_date(start)} ~ {format_trade_date(end)})")
        return points
