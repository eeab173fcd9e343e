# -*- coding: utf-8 -*-
"""
有界线程池测试
"""

import threading

import pytest

from core.services.executor import BoundedExecutor, ItemOutcome, fan_out


class TestBoundedExecutor:
    """BoundedExecutor 测试"""

    def test_runs_in_caller_when_saturated(self):
        """工作线程和队列都占满时，由提交线程同步执行"""
        release = threading.Event()
        executor = BoundedExecutor("test", max_workers=1, queue_capacity=1)
        try:
            blocked = [executor.submit(release.wait, 5) for _ in range(2)]

            caller_thread = []
            future = executor.submit(lambda: caller_thread.append(threading.current_thread()) or "inline")

            assert future.done()
            assert future.result() == "inline"
            assert caller_thread == [threading.current_thread()]
            assert executor.caller_runs_count == 1
        finally:
            release.set()
            for f in blocked:
                f.result(timeout=5)
            executor.shutdown()

    def test_inline_exception_is_captured_in_future(self):
        release = threading.Event()
        executor = BoundedExecutor("test", max_workers=1, queue_capacity=0)
        try:
            blocked = executor.submit(release.wait, 5)

            def boom():
                raise RuntimeError("inline failure")

            future = executor.submit(boom)

            with pytest.raises(RuntimeError):
                future.result()
        finally:
            release.set()
            blocked.result(timeout=5)
            executor.shutdown()

    def test_slots_are_released_after_completion(self):
        with BoundedExecutor("test", max_workers=2, queue_capacity=0) as executor:
            for _ in range(10):
                executor.submit(lambda: None).result(timeout=5)

            assert executor.caller_runs_count == 0
            assert executor.submitted_count == 10

    def test_invalid_sizes_rejected(self):
        with pytest.raises(ValueError):
            BoundedExecutor("test", max_workers=0, queue_capacity=1)
        with pytest.raises(ValueError):
            BoundedExecutor("test", max_workers=1, queue_capacity=-1)


class TestFanOut:
    """fan_out 测试"""

    def test_failures_are_isolated_per_item(self):
        def work(n):
            if n == 3:
                raise ValueError("bad item")
            return n * 10

        with BoundedExecutor("test", max_workers=4, queue_capacity=10) as executor:
            outcomes = fan_out(executor, [1, 2, 3, 4], work)

        assert [o.item for o in outcomes] == [1, 2, 3, 4]
        assert [o.value for o in outcomes if o.ok] == [10, 20, 40]
        failed = [o for o in outcomes if not o.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].error, ValueError)

    def test_empty_input(self):
        with BoundedExecutor("test", max_workers=1, queue_capacity=1) as executor:
            assert fan_out(executor, [], lambda x: x) == []

    def test_saturated_pool_still_completes_all(self):
        """容量不足时部分任务在调用方执行，结果仍然完整"""
        with BoundedExecutor("test", max_workers=1, queue_capacity=1) as executor:
            outcomes = fan_out(executor, range(20), lambda n: n + 1)

        assert [o.value for o in outcomes] == list(range(1, 21))

    def test_item_outcome_ok(self):
        assert ItemOutcome(item=1, value=2).ok
        assert not ItemOutcome(item=1, error=RuntimeError()).ok
