# -*- coding: utf-8 -*-
"""
工具函数
"""

from .formatters import format_amount, format_percentage, format_price, format_volume
from .validators import (
    format_trade_date,
    parse_decimal,
    parse_integer,
    parse_trade_date,
    validate_stock_code,
)

__all__ = [
    "format_amount",
    "format_percentage",
    "format_price",
    "format_volume",
    "format_trade_date",
    "parse_decimal",
    "parse_integer",
    "parse_trade_date",
    "validate_stock_code",
]
