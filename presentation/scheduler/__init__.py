# -*- coding: utf-8 -*-
"""
定时任务模块
"""

from .scheduler import register_daily_task, run_with_schedule

__all__ = [
    "register_daily_task",
    "run_with_schedule",
]
