import threading
import time

import pytest

from readqc.distributed import multi


def _square(x):
    return x * x


def test_run_multicore_serial_keeps_order():
    assert multi.run_multicore(_square, [(1,), (2,), None, (3,)]) == [1, 4, 9]


def test_run_multicore_empty():
    assert multi.run_multicore(_square, []) == []


def test_run_multicore_threads_keep_order():
    def slow_first(x):
        time.sleep(0.2 if x == 0 else 0.01)
        return x, threading.current_thread().name

    out = multi.run_multicore(slow_first, [(i,) for i in range(4)], num_cores=4)
    assert [x for x, _ in out] == [0, 1, 2, 3]


@pytest.mark.parametrize('num_cores', [1, 3])
def test_run_multicore_waits_for_all(num_cores):
    finished = []

    def work(x):
        time.sleep(0.05)
        finished.append(x)
        return x

    multi.run_multicore(work, [(i,) for i in range(5)], num_cores=num_cores)
    assert sorted(finished) == [0, 1, 2, 3, 4]
