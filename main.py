# -*- coding: utf-8 -*-
"""
===================================
韩股成交量排行 AI 分析系统 - 主程序
===================================

职责：
1. 获取 KIS 成交量排行前 N 名
2. 并发采集日线数据，再并发调用 AI 给出 BUY/SELL 建议
3. 单只股票失败不影响整体，作业结果写入数据库
4. 提供命令行入口（单次运行 / 后台作业 / 定时任务 / 查询结果）

使用方式：
    python main.py              # 立即执行一次
    python main.py --schedule   # 定时任务模式
    python main.py --latest     # 查看当天最近的分析结果
"""

import logging
import sys
import time
from datetime import datetime
from typing import List

from common.config import get_config
from core.domain.analysis import AnalysisRecord
from core.domain.job import AnalysisJob, AnalysisStatus
from core.services.analysis import AnalysisService, create_analysis_service
from presentation.cli import parse_arguments, setup_logging

logger = logging.getLogger(__name__)


def print_records(records: List[AnalysisRecord]) -> None:
    """输出分析结果摘要"""
    if not records:
        logger.info("没有分析结果")
        return

    logger.info(f"===== 分析结果（共 {len(records)} 条）=====")
    for r in records:
        logger.info(
            f"{r.recommendation.emoji} {r.stock_name}({r.stock_code}) {r.analysis_date}: "
            f"{r.recommendation.label} | 置信度 {r.confidence:.2f} | {r.summary}"
        )


def log_job(job: AnalysisJob) -> None:
    if job.status is AnalysisStatus.DONE:
        print_records(list(job.results))
    else:
        logger.error(f"作业 {job.job_id} 失败: {job.error_message}")


def run_async(service: AnalysisService, poll_interval: float) -> AnalysisJob:
    """后台提交作业并轮询状态"""
    job_id = service.submit()
    logger.info(f"作业已提交: {job_id}")

    while service.poll(job_id) is AnalysisStatus.RUNNING:
        time.sleep(poll_interval)

    job = service.get_job(job_id)
    logger.info(f"作业 {job_id} 结束，状态: {job.status.value}")
    return job


def main() -> int:
    """
    主入口函数

    Returns:
        退出码（0 表示成功）
    """
    args = parse_arguments()

    config = get_config()

    setup_logging(debug=args.debug, log_dir=config.log_dir)

    logger.info("=" * 60)
    logger.info("韩股成交量排行 AI 分析系统 启动")
    logger.info(f"运行时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 60)

    for warning in config.validate():
        logger.warning(warning)

    service = None
    try:
        service = create_analysis_service(config, top_n=args.top)

        # 模式1: 仅查询结果
        if args.latest:
            logger.info("模式: 查询当天分析结果")
            print_records(service.latest())
            return 0

        # 模式2: 定时任务模式
        if args.schedule or config.schedule_enabled:
            logger.info("模式: 定时任务")

            from presentation.scheduler import run_with_schedule

            def scheduled_task():
                log_job(service.run_now())

            run_with_schedule(task=scheduled_task, schedule_time=config.schedule_time, run_immediately=True)
            return 0

        # 模式3: 单次运行
        job = run_async(service, args.poll_interval) if args.run_async else service.run_now()
        log_job(job)

        logger.info("程序执行完成")
        return 0 if job.status is AnalysisStatus.DONE else 1

    except KeyboardInterrupt:
        logger.info("用户中断，程序退出")
        return 130

    except Exception as e:
        logger.exception(f"程序执行失败: {e}")
        return 1

    finally:
        if service is not None:
            service.close()


if __name__ == "__main__":
    sys.exit(main())
