# -*- coding: utf-8 -*-
"""
格式化工具

生成提示词和报告时使用的数值格式化函数（金额单位：韩元）
"""

from typing import Optional


def format_volume(volume: Optional[float]) -> str:
    """
    格式化成交量

    Args:
        volume: 成交量（股）

    Returns:
        str 格式化后的成交量字符串
    """
    if volume is None or volume == 0:
        return "0"

    if volume >= 1e8:
        return f"{volume / 1e8:.2f}亿股"
    elif volume >= 1e4:
        return f"{volume / 1e4:.2f}万股"
    else:
        return f"{volume:.0f}股"


def format_amount(amount: Optional[float]) -> str:
    """
    格式化成交额

    Args:
        amount: 成交额（韩元）

    Returns:
        str 格式化后的成交额字符串
    """
    if amount is None or amount == 0:
        return "0韩元"

    if amount >= 1e12:
        return f"{amount / 1e12:.2f}万亿韩元"
    elif amount >= 1e8:
        return f"{amount / 1e8:.2f}亿韩元"
    else:
        return f"{amount:,.0f}韩元"


def format_percentage(value: Optional[float], decimals: int = 2, signed: bool = False) -> str:
    """
    格式化百分比

    Args:
        value: 百分比值
        decimals: 小数位数
        signed: 是否总是带符号

    Returns:
        str 格式化后的百分比字符串
    """
    if value is None:
        return "N/A"

    if signed:
        return f"{value:+.{decimals}f}%"
    return f"{value:.{decimals}f}%"


def format_price(price: Optional[float]) -> str:
    """格式化价格（韩元无小数位，千分位分隔）"""
    if price is None:
        return "N/A"

    return f"{price:,.0f}"
