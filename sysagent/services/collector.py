from __future__ import annotations

import logging
import sys
import threading
from enum import Enum
from typing import Callable, Optional, TypeVar

from ..config import Settings
from ..schemas import MetricSnapshot
from .cache import MetricsCache
from .portable import PortableSource
from .procfs import ProcfsSource
from .rates import RateEngine, SamplingLoop
from .sources import MetricSource

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0
_STOP_JOIN_PADDING_SEC = 5.0

T = TypeVar('T')


class CollectorState(str, Enum):
    UNSTARTED = 'unstarted'
    RUNNING = 'running'
    STOPPED = 'stopped'


class Collector:
    """Owns the sampling loop and assembles snapshots.

    ``get_metrics`` merges the cached rates with fresh point reads from the
    source. It never raises for a failed reader; the fields that reader
    feeds keep their zero values.
    """

    def __init__(self, source: MetricSource):
        self.source = source
        self.cache = MetricsCache()
        self._state = CollectorState.UNSTARTED
        self._loop: Optional[SamplingLoop] = None
        self._interval = 0.0
        self._lock = threading.Lock()

    @property
    def state(self) -> CollectorState:
        return self._state

    def start(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError('sampling interval must be positive')

        with self._lock:
            if self._state is not CollectorState.UNSTARTED:
                raise RuntimeError(f'collector cannot start from state {self._state.value}')

            engine = RateEngine(self.source, interval)
            engine.prime()
            self._loop = SamplingLoop(engine, self.cache)
            self._loop.start()
            self._interval = interval
            self._state = CollectorState.RUNNING
        logger.info('Collector started with %.3fs interval', interval)

    def stop(self) -> None:
        with self._lock:
            if self._state is CollectorState.STOPPED:
                return
            loop, self._loop = self._loop, None
            self._state = CollectorState.STOPPED

        if loop is not None:
            loop.stop(timeout=self._interval + _STOP_JOIN_PADDING_SEC)
            if loop.alive:
                logger.warning('Sampling thread did not exit within timeout')
        logger.info('Collector stopped')

    def get_metrics(self) -> MetricSnapshot:
        rates = self.cache.read()
        m = MetricSnapshot(
            cpu_usage_percent=rates.cpu_usage_percent,
            net_rx_kb=rates.net_rx_kb,
            net_tx_kb=rates.net_tx_kb,
        )

        memory = _read('memory', self.source.memory_usage)
        if memory is not None:
            m.mem_usage_percent = memory.mem_percent
            m.swap_usage_percent = memory.swap_percent

        disk_free = _read('disk', self.source.disk_free_gb)
        if disk_free is not None:
            m.disk_free_gb = disk_free

        load = _read('load', self.source.load_average)
        if load is not None:
            m.load_1, m.load_5, m.load_15 = load.load_1, load.load_5, load.load_15

        uptime = _read('uptime', self.source.uptime_seconds)
        if uptime is not None:
            m.uptime_hours = uptime / _SECONDS_PER_HOUR

        temp = _read('temperature', self.source.cpu_temp_c)
        if temp is not None:
            m.cpu_temp_c = temp

        fds = _read('file handles', self.source.fd_stats)
        if fds is not None:
            m.fd_open, m.fd_max = fds.open, fds.max

        battery = _read('battery', self.source.battery)
        if battery is not None:
            m.battery_percent = battery.percent
            m.battery_status = battery.status.value

        return m


def _read(name: str, reader: Callable[[], T]) -> Optional[T]:
    try:
        return reader()
    except Exception as exc:
        logger.debug('%s reader failed: %s', name, exc)
        return None


def build_source(settings: Settings, platform: Optional[str] = None) -> MetricSource:
    platform = platform or sys.platform
    if platform.startswith('linux'):
        return ProcfsSource(
            proc_root=settings.proc_root,
            sys_root=settings.sys_root,
            disk_path=settings.disk_path,
            thermal_zone=settings.thermal_zone,
            battery_name=settings.battery_name,
        )
    return PortableSource(disk_path=settings.disk_path)


def new_collector(settings: Settings, platform: Optional[str] = None) -> Collector:
    source = build_source(settings, platform)
    logger.debug('Using %s metric source', type(source).__name__)
    return Collector(source)
