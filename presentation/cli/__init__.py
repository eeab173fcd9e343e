# -*- coding: utf-8 -*-
"""
命令行接口模块

参数解析与日志初始化
"""

from .args import parse_arguments
from .logging_setup import LOG_FORMAT, setup_logging

__all__ = [
    "LOG_FORMAT",
    "parse_arguments",
    "setup_logging",
]
