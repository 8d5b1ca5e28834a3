from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class RateValues:
    cpu_usage_percent: float = 0.0
    net_rx_kb: float = 0.0
    net_tx_kb: float = 0.0


@dataclass(frozen=True)
class RateUpdate:
    """Result of one sampling tick. ``None`` means the counter was not sampled."""

    cpu_usage_percent: Optional[float] = None
    net_rates_kb: Optional[tuple[float, float]] = None

    @property
    def empty(self) -> bool:
        return self.cpu_usage_percent is None and self.net_rates_kb is None


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve the sampling loop.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class MetricsCache:
    """Latest rate-derived values, written by the sampling loop only."""

    def __init__(self):
        self._lock = ReadWriteLock()
        self._values = RateValues()

    def read(self) -> RateValues:
        with self._lock.read_locked():
            return self._values

    def write(self, update: RateUpdate) -> RateValues:
        with self._lock.write_locked():
            current = self._values
            cpu = current.cpu_usage_percent
            rx, tx = current.net_rx_kb, current.net_tx_kb
            if update.cpu_usage_percent is not None:
                cpu = update.cpu_usage_percent
            if update.net_rates_kb is not None:
                rx, tx = update.net_rates_kb
            self._values = RateValues(cpu_usage_percent=cpu, net_rx_kb=rx, net_tx_kb=tx)
            return self._values
