# -*- coding: utf-8 -*-
"""
公共模块

配置与异常定义
"""

from .config import Config, get_config, reset_config
from .exceptions import (
    AnalysisError,
    AuthError,
    ConfigError,
    JobNotFoundError,
    ParseError,
    PipelineError,
    RequestError,
    TransportError,
)

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "AnalysisError",
    "AuthError",
    "ConfigError",
    "JobNotFoundError",
    "ParseError",
    "PipelineError",
    "RequestError",
    "TransportError",
]
