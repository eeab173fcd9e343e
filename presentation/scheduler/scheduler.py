# -*- coding: utf-8 -*-
"""
定时任务调度器

每个交易日收盘后定时触发一次分析作业
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

import schedule

logger = logging.getLogger(__name__)


def register_daily_task(
    task: Callable, schedule_time: str = "16:00", scheduler: Optional[schedule.Scheduler] = None
) -> schedule.Job:
    """
    注册每日定时任务

    Args:
        task: 要执行的任务函数
        schedule_time: 每日执行时间（格式：HH:MM）
        scheduler: schedule.Scheduler（默认使用全局调度器）

    Returns:
        schedule.Job
    """
    scheduler = scheduler or schedule.default_scheduler
    return scheduler.every().day.at(schedule_time).do(_safe_execute_task, task)


def run_with_schedule(
    task: Callable,
    schedule_time: str = "16:00",
    run_immediately: bool = False,
    poll_seconds: float = 30,
) -> None:
    """
    运行定时任务

    Args:
        task: 要执行的任务函数
        schedule_time: 每日执行时间（格式：HH:MM，默认 16:00，即收盘后）
        run_immediately: 是否在启动时立即执行一次（默认False）
        poll_seconds: 调度循环检查间隔（秒）
    """
    logger.info(f"定时任务已启动，每日执行时间: {schedule_time}")

    if run_immediately:
        logger.info("立即执行一次任务...")
        _safe_execute_task(task)

    register_daily_task(task, schedule_time)

    logger.info("定时任务调度器运行中...")
    try:
        while True:
            schedule.run_pending()
            time.sleep(poll_seconds)
    except KeyboardInterrupt:
        logger.info("定时任务调度器已停止")


def _safe_execute_task(task: Callable) -> None:
    """
    安全执行任务（带异常处理）

    Args:
        task: 要执行的任务函数
    """
    try:
        logger.info(f"执行定时任务: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        task()
        logger.info("定时任务执行完成")
    except Exception as e:
        logger.error(f"定时任务执行失败: {e}", exc_info=True)
