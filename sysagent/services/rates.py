from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from .cache import MetricsCache, RateUpdate
from .sources import CpuSample, MetricSource, NetSample

logger = logging.getLogger(__name__)

_BYTES_PER_KB = 1024.0

T = TypeVar('T')


def cpu_usage_percent(prev: CpuSample, now: CpuSample) -> float:
    delta_total = now.total - prev.total
    if delta_total <= 0:
        return 0.0
    delta_idle = now.idle - prev.idle
    return (1.0 - delta_idle / delta_total) * 100.0


def throughput_kb(prev_bytes: int, now_bytes: int, seconds: float) -> float:
    # Counter wraps and resets come through as negative rates.
    if seconds <= 0:
        return 0.0
    return (now_bytes - prev_bytes) / seconds / _BYTES_PER_KB


class RateEngine:
    """Turns successive counter samples into rates.

    Holds the previous CPU and network samples. Only the sampling thread
    touches an engine, so it carries no lock.
    """

    def __init__(self, source: MetricSource, interval: float):
        self.source = source
        self.interval = interval
        self.prev_cpu: Optional[CpuSample] = None
        self.prev_net: Optional[NetSample] = None

    def prime(self) -> None:
        self.prev_cpu = _try_sample('cpu', self.source.cpu_sample)
        self.prev_net = _try_sample('net', self.source.net_sample)

    def tick(self) -> RateUpdate:
        cpu_usage = None
        cpu = _try_sample('cpu', self.source.cpu_sample)
        if cpu is not None:
            if self.prev_cpu is not None:
                cpu_usage = cpu_usage_percent(self.prev_cpu, cpu)
            self.prev_cpu = cpu

        net_rates = None
        net = _try_sample('net', self.source.net_sample)
        if net is not None:
            if self.prev_net is not None:
                net_rates = (
                    throughput_kb(self.prev_net.rx, net.rx, self.interval),
                    throughput_kb(self.prev_net.tx, net.tx, self.interval),
                )
            self.prev_net = net

        return RateUpdate(cpu_usage_percent=cpu_usage, net_rates_kb=net_rates)


def _try_sample(kind: str, sampler: Callable[[], T]) -> Optional[T]:
    try:
        return sampler()
    except Exception as exc:
        logger.debug('%s sample failed: %s', kind, exc)
        return None


class SamplingLoop:
    """Background thread that ticks a RateEngine into a MetricsCache."""

    def __init__(self, engine: RateEngine, cache: MetricsCache, clock: Callable[[], float] = time.monotonic):
        self._engine = engine
        self._cache = cache
        self._clock = clock
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name='sysagent-sampler', daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        interval = self._engine.interval
        deadline = self._clock() + interval
        while not self._stop.wait(max(0.0, deadline - self._clock())):
            update = self._engine.tick()
            if not update.empty:
                self._cache.write(update)
            deadline += interval
            now = self._clock()
            if deadline <= now:
                deadline = now + interval
        logger.debug('sampling loop exited')
