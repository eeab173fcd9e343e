# -*- coding: utf-8 -*-
"""
有界线程池

在 ThreadPoolExecutor 外包一层容量控制：
- 同时在途（运行中 + 排队中）的任务数不超过 max_workers + queue_capacity
- 超出容量时由提交线程同步执行该任务（调用方执行策略），
  从而对上游形成反压，而不是拒绝任务

fan_out() 在有界线程池上并发执行一批任务，并在全部完成后返回
每个条目的 ItemOutcome（结果或异常），单个条目失败不影响其他条目
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BoundedExecutor:
    """
    带调用方执行策略的有界线程池

    使用示例：
        with BoundedExecutor("collect", max_workers=10, queue_capacity=100) as executor:
            future = executor.submit(fetch, code)
    """

    def __init__(self, name: str, max_workers: int, queue_capacity: int):
        """
        Args:
            name: 线程池名称（用于线程名和日志）
            max_workers: 工作线程数
            queue_capacity: 排队容量
        """
        if max_workers < 1:
            raise ValueError(f"max_workers 必须大于 0: {max_workers}")
        if queue_capacity < 0:
            raise ValueError(f"queue_capacity 不能为负数: {queue_capacity}")

        self.name = name
        self.max_workers = max_workers
        self.queue_capacity = queue_capacity
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"{name}-worker")
        self._slots = threading.BoundedSemaphore(max_workers + queue_capacity)
        self._stats_lock = threading.Lock()
        self._submitted = 0
        self._caller_runs = 0

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> "Future[R]":
        """
        提交任务

        容量已满时在当前线程同步执行，返回已完成的 Future
        """
        with self._stats_lock:
            self._submitted += 1

        if not self._slots.acquire(blocking=False):
            with self._stats_lock:
                self._caller_runs += 1
            logger.warning(f"[{self.name}] 线程池已满，由提交线程同步执行任务")
            return self._run_in_caller(fn, *args, **kwargs)

        def run_and_release():
            try:
                return fn(*args, **kwargs)
            finally:
                self._slots.release()

        try:
            return self._executor.submit(run_and_release)
        except Exception:
            self._slots.release()
            raise

    @staticmethod
    def _run_in_caller(fn: Callable[..., R], *args: Any, **kwargs: Any) -> "Future[R]":
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future

    @property
    def submitted_count(self) -> int:
        return self._submitted

    @property
    def caller_runs_count(self) -> int:
        """由提交线程同步执行的任务数"""
        return self._caller_runs

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BoundedExecutor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)


@dataclass(frozen=True)
class ItemOutcome(Generic[T, R]):
    """单个条目的执行结果：value 与 error 二者其一有值"""

    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    executor: BoundedExecutor,
    items: Iterable[T],
    fn: Callable[[T], R],
    describe: Callable[[T], str] = str,
) -> List[ItemOutcome]:
    """
    并发执行并等待全部完成

    Args:
        executor: 有界线程池
        items: 待处理条目
        fn: 对单个条目执行的函数
        describe: 条目描述函数（用于日志）

    Returns:
        与 items 顺序一致的 ItemOutcome 列表
    """
    items = list(items)
    future_to_index = {executor.submit(fn, item): index for index, item in enumerate(items)}
    outcomes: List[Optional[ItemOutcome]] = [None] * len(items)

    for future in as_completed(future_to_index):
        index = future_to_index[future]
        item = items[index]
        try:
            outcomes[index] = ItemOutcome(item=item, value=future.result())
        except Exception as e:
            logger.warning(f"[{executor.name}] {describe(item)} 执行失败: {e}")
            outcomes[index] = ItemOutcome(item=item, error=e)

    return outcomes
