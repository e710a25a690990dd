"""Sequential and bounded-concurrency batch execution.

A batch is ``count`` iterations of ``prepare(i)`` followed by
``perform(*args)``. ``prepare`` always runs on the calling thread, in index
order. In concurrent mode ``perform`` runs on a thread pool and the number of
calls in flight is capped by an :class:`AdmissionGate`.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .models import OperationResult

MAX_IN_FLIGHT = 100

Prepare = Callable[[int], Sequence[Any]]
Perform = Callable[..., OperationResult]
OnResult = Callable[[OperationResult], None]


class AdmissionGate:
    """Counting semaphore that also tracks current and peak occupancy."""

    def __init__(self, capacity: int = MAX_IN_FLIGHT) -> None:
        if capacity <= 0:
            raise ValueError(f"gate capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._slots = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak(self) -> int:
        with self._lock:
            return self._peak

    def acquire(self) -> None:
        """Block until a slot is free."""
        self._slots.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._lock:
            self._in_flight -= 1
        self._slots.release()


@dataclass
class BatchReport:
    count: int
    elapsed: float
    latencies_ms: list[float] = field(default_factory=list)
    peak_in_flight: int = 0

    @property
    def rate(self) -> float:
        return self.count / self.elapsed if self.elapsed > 0 else 0.0

    def percentile(self, p: float) -> float:
        """Nearest-rank percentile of the recorded latencies, ``p`` in [0, 1]."""
        if not self.latencies_ms:
            return 0.0
        ordered = sorted(self.latencies_ms)
        return ordered[min(int(len(ordered) * p), len(ordered) - 1)]


def run_batch(
    count: int,
    prepare: Prepare,
    perform: Perform,
    *,
    concurrent: bool = False,
    gate: AdmissionGate | None = None,
    on_result: OnResult | None = None,
) -> BatchReport:
    """Run ``count`` operations and return timing for the whole batch.

    The first failing operation aborts the batch and its exception propagates;
    nothing is reported for the operations that did complete.
    """
    if count <= 0:
        return BatchReport(count=0, elapsed=0.0)
    if concurrent:
        return _run_concurrent(count, prepare, perform, gate or AdmissionGate(), on_result)
    return _run_sequential(count, prepare, perform, on_result)


def _timed(perform: Perform, args: Sequence[Any], on_result: OnResult | None) -> float:
    start = time.perf_counter()
    result = perform(*args)
    latency_ms = (time.perf_counter() - start) * 1000
    if on_result is not None:
        on_result(result)
    return latency_ms


def _run_sequential(
    count: int,
    prepare: Prepare,
    perform: Perform,
    on_result: OnResult | None,
) -> BatchReport:
    latencies: list[float] = []

    start = time.perf_counter()
    for i in range(count):
        latencies.append(_timed(perform, prepare(i), on_result))
    elapsed = time.perf_counter() - start

    return BatchReport(count=count, elapsed=elapsed, latencies_ms=latencies, peak_in_flight=1)


def _run_concurrent(
    count: int,
    prepare: Prepare,
    perform: Perform,
    gate: AdmissionGate,
    on_result: OnResult | None,
) -> BatchReport:
    latencies: list[float] = []
    failures: list[BaseException] = []
    lock = threading.Lock()
    failed = threading.Event()

    def task(args: Sequence[Any]) -> None:
        try:
            latency_ms = _timed(perform, args, on_result)
            with lock:
                latencies.append(latency_ms)
        except BaseException as exc:
            # Recorded before the slot is released so the submitter sees it.
            with lock:
                failures.append(exc)
            failed.set()
        finally:
            gate.release()

    futures: list[Future] = []
    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=gate.capacity, thread_name_prefix="etcdbench") as executor:
        for i in range(count):
            if failed.is_set():
                break
            args = prepare(i)
            gate.acquire()
            # A slot may have been freed by the task that just failed.
            if failed.is_set():
                gate.release()
                break
            futures.append(executor.submit(task, args))
        wait(futures)
    elapsed = time.perf_counter() - start

    if failures:
        raise failures[0]

    return BatchReport(
        count=count,
        elapsed=elapsed,
        latencies_ms=latencies,
        peak_in_flight=gate.peak,
    )
