# -*- coding: utf-8 -*-
"""
校验与解析工具

KIS 接口的数值字段全部以字符串返回（如 "71,500"、"-1.25"），
在这里统一转换为 Python 类型，格式错误时抛出 ParseError
"""

import re
from datetime import date, datetime
from typing import Any

from common.exceptions import ParseError

DATE_FORMAT = "%Y%m%d"


def validate_stock_code(code: str) -> bool:
    """
    验证股票代码格式

    韩国市场股票代码为 6 位，通常为数字，部分 ETN/ETF 含大写字母

    Args:
        code: 股票代码

    Returns:
        bool 是否有效
    """
    if not code:
        return False
    return bool(re.match(r"^[0-9A-Z]{6}$", code))


def _clean(value: Any, field_name: str) -> str:
    if value is None:
        raise ParseError(f"字段 {field_name} 缺失")
    text = str(value).strip().replace(",", "")
    if not text:
        raise ParseError(f"字段 {field_name} 为空")
    return text


def parse_decimal(value: Any, field_name: str = "value") -> float:
    """
    解析字符串数值

    Args:
        value: 原始值（字符串或数字）
        field_name: 字段名（用于错误信息）

    Returns:
        float 数值
    """
    text = _clean(value, field_name)
    try:
        return float(text)
    except ValueError:
        raise ParseError(f"字段 {field_name} 不是合法数值: {value!r}")


def parse_integer(value: Any, field_name: str = "value") -> int:
    """解析字符串整数（兼容 "1234.0" 形式）"""
    text = _clean(value, field_name)
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            raise ParseError(f"字段 {field_name} 不是合法整数: {value!r}")


def parse_trade_date(value: Any, field_name: str = "date") -> date:
    """解析 8 位 YYYYMMDD 日期"""
    text = _clean(value, field_name)
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise ParseError(f"字段 {field_name} 不是合法日期: {value!r}")


def format_trade_date(value: date) -> str:
    """格式化为 8 位 YYYYMMDD"""
    return value.strftime(DATE_FORMAT)

