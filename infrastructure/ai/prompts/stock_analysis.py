# -*- coding: utf-8 -*-
"""
个股分析提示词

提示词由 CollectedDataset 确定性生成：相同输入得到完全相同的文本
"""

from typing import List

from core.domain.market import CollectedDataset, SeriesPoint
from shared.utils.formatters import format_amount, format_percentage, format_price, format_volume

RECENT_POINTS_LIMIT = 10

OUTPUT_RULES = """## 输出要求
1. 先给出分析正文：走势判断、量价关系、相对区间高低点的位置、主要风险。
2. 分析正文之后，最后一行必须是一个 JSON 对象，格式如下：
{"recommendation": "BUY", "confidence": 0.75, "summary": "一句话结论"}
3. recommendation 只能是 BUY 或 SELL；confidence 为 0.0 到 1.0 之间的小数；summary 为一句话摘要。
4. JSON 必须位于最后一行，不要使用 ``` 代码块包裹，JSON 之后不要再输出任何内容。"""


def percent_above_low(current_price: float, window_low: float) -> float:
    """当前价相对区间最低价的涨幅(%)，最低价为 0 时返回 0"""
    if not window_low:
        return 0.0
    return (current_price - window_low) / window_low * 100


def format_recent_points(points: List[SeriesPoint]) -> str:
    """将日线数据格式化为 Markdown 表格"""
    lines = [
        "| 日期 | 开盘 | 收盘 | 最高 | 最低 | 成交量 |",
        "|------|------|------|------|------|--------|",
    ]
    for p in points:
        lines.append(
            f"| {p.trade_date.isoformat()} | {format_price(p.open_price)} | {format_price(p.close_price)} "
            f"| {format_price(p.high_price)} | {format_price(p.low_price)} | {p.volume:,} |"
        )
    return "\n".join(lines)


def build_analysis_prompt(dataset: CollectedDataset, recent_limit: int = RECENT_POINTS_LIMIT) -> str:
    """
    生成个股分析提示词

    Args:
        dataset: 采集数据集
        recent_limit: 展示的最近交易日数量

    Returns:
        提示词文本
    """
    entry = dataset.entry
    recent = dataset.recent_points(recent_limit)
    above_low = percent_above_low(entry.current_price, dataset.window_low)

    return f"""你是一名专注于韩国股市（KOSPI/KOSDAQ）的证券分析师。请基于以下数据，对 {entry.name}({entry.code}) 给出交易建议。

## 基本信息
- 股票名称: {entry.name}
- 股票代码: {entry.code}
- 成交量排名: 第 {entry.rank} 名

## 当前行情
- 当前价: {format_price(entry.current_price)} 韩元
- 涨跌幅: {format_percentage(entry.change_percent, signed=True)}
- 成交量: {format_volume(entry.trading_volume)}
- 成交额: {format_amount(entry.trading_amount)}

## 区间统计（近 {len(dataset.points)} 个交易日）
- 52周最高价: {format_price(dataset.window_high)} 韩元
- 52周最低价: {format_price(dataset.window_low)} 韩元
- 较52周最低价涨幅: {format_percentage(above_low)}

## 最近 {len(recent)} 个交易日
{format_recent_points(recent)}

{OUTPUT_RULES}
"""
