# -*- coding: utf-8 -*-
"""
命令行参数解析模块
"""

import argparse
from typing import List, Optional


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="韩股成交量排行 AI 分析系统",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py                    # 立即执行一次分析
  python main.py --debug            # 调试模式
  python main.py --top 5            # 只分析成交量排行前 5 名
  python main.py --async            # 后台提交作业并轮询状态
  python main.py --schedule         # 启用定时任务模式
  python main.py --latest           # 查看当天最近的分析结果
        """,
    )

    parser.add_argument("--debug", action="store_true", help="启用调试模式，输出详细日志")

    parser.add_argument("--top", type=int, default=None, help="分析成交量排行前 N 名（最多 10，默认使用配置值）")

    parser.add_argument(
        "--async", dest="run_async", action="store_true", help="以后台作业方式提交，并轮询作业状态直到结束"
    )

    parser.add_argument("--poll-interval", type=float, default=2.0, help="后台作业轮询间隔（秒，默认 2）")

    parser.add_argument("--schedule", action="store_true", help="启用定时任务模式，每日定时执行")

    parser.add_argument("--latest", action="store_true", help="仅查询当天最近保存的分析结果")

    return parser.parse_args(argv)
