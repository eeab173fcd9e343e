# -*- coding: utf-8 -*-
"""
市场数据实体

定义成交量排行、日线数据点以及采集阶段产出的数据集
"""

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class RankEntry:
    """成交量排行条目"""

    code: str  # 股票代码（6 位）
    name: str  # 股票名称
    current_price: float  # 当前价
    change_percent: float  # 涨跌幅(%)
    trading_volume: int  # 累计成交量
    trading_amount: int  # 累计成交额
    rank: int  # 排名（从 1 开始）


@dataclass(frozen=True)
class SeriesPoint:
    """日线数据点"""

    code: str
    trade_date: date
    open_price: float
    close_price: float
    high_price: float
    low_price: float
    volume: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "trade_date": self.trade_date.isoformat(),
            "open": self.open_price,
            "close": self.close_price,
            "high": self.high_price,
            "low": self.low_price,
            "volume": self.volume,
        }


def compute_window_range(points: Sequence[SeriesPoint]) -> Tuple[float, float]:
    """
    计算窗口内最高价和最低价

    Args:
        points: 日线数据点

    Returns:
        (最高价, 最低价)，序列为空时返回 (0.0, 0.0)
    """
    if not points:
        return 0.0, 0.0
    high = max(p.high_price for p in points)
    low = min(p.low_price for p in points)
    return high, low


@dataclass(frozen=True)
class CollectedDataset:
    """
    采集数据集

    一只股票的排行信息 + 按日期升序的日线序列 + 窗口统计。
    只有日线序列非空的股票才会进入分析阶段。
    """

    entry: RankEntry
    points: Tuple[SeriesPoint, ...]
    window_high: float = 0.0  # 窗口最高价（近似 52 周最高）
    window_low: float = 0.0  # 窗口最低价（近似 52 周最低）
    analysis_date: date = field(default_factory=date.today)

    @classmethod
    def from_series(
        cls, entry: RankEntry, points: Sequence[SeriesPoint], analysis_date: Optional[date] = None
    ) -> "CollectedDataset":
        """由排行条目和日线序列构造数据集（自动按日期排序并计算窗口统计）"""
        ordered = tuple(sorted(points, key=lambda p: p.trade_date))
        high, low = compute_window_range(ordered)
        return cls(
            entry=entry,
            points=ordered,
            window_high=high,
            window_low=low,
            analysis_date=analysis_date or date.today(),
        )

    @property
    def code(self) -> str:
        return self.entry.code

    @property
    def name(self) -> str:
        return self.entry.name

    def recent_points(self, limit: int = 10) -> List[SeriesPoint]:
        """最近 limit 个数据点（仍按日期升序）"""
        if limit <= 0:
            return []
        return list(self.points[-limit:])

    def series_json(self) -> str:
        """日线序列的 JSON 形式（用于快照持久化）"""
        return json.dumps([p.to_dict() for p in self.points], ensure_ascii=False)
