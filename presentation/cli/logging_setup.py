# -*- coding: utf-8 -*-
"""
日志配置模块

控制台 + 按日期分文件的轮转日志（常规日志 INFO，调试日志 DEBUG）
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# 配置日志格式
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)-18s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 需要降低日志级别的第三方库
NOISY_LOGGERS = ("urllib3", "sqlalchemy", "requests", "schedule")

_LOG_PREFIX = "volume_advisor"


def setup_logging(debug: bool = False, log_dir: str = "./logs") -> None:
    """
    配置日志系统（同时输出到控制台和文件）

    Args:
        debug: 是否启用调试模式
        log_dir: 日志文件目录
    """
    level = logging.DEBUG if debug else logging.INFO

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    today_str = datetime.now().strftime("%Y%m%d")
    log_file = log_path / f"{_LOG_PREFIX}_{today_str}.log"
    debug_log_file = log_path / f"{_LOG_PREFIX}_debug_{today_str}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # 由 handler 控制输出级别

    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # 常规日志文件（INFO 级别，10MB 轮转）
    file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 调试日志文件（DEBUG 级别，50MB 轮转）
    debug_handler = RotatingFileHandler(debug_log_file, maxBytes=50 * 1024 * 1024, backupCount=3, encoding="utf-8")
    debug_handler.setLevel(logging.DEBUG)
    debug_handler.setFormatter(formatter)
    root_logger.addHandler(debug_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"日志系统初始化完成，日志目录: {log_path.absolute()}")
    logging.debug(f"常规日志: {log_file}，调试日志: {debug_log_file}")
