from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..schemas import BatteryStatus


@dataclass(frozen=True)
class CpuSample:
    idle: int
    total: int


@dataclass(frozen=True)
class NetSample:
    rx: int
    tx: int


@dataclass(frozen=True)
class MemoryUsage:
    mem_percent: float
    swap_percent: float


@dataclass(frozen=True)
class LoadAverage:
    load_1: float
    load_5: float
    load_15: float


@dataclass(frozen=True)
class FdStats:
    open: int
    max: int


@dataclass(frozen=True)
class BatteryInfo:
    percent: int
    status: BatteryStatus


NO_BATTERY = BatteryInfo(percent=100, status=BatteryStatus.AC_POWER)


class MetricSource(Protocol):
    """Point reads of host metrics. Every call may raise; none keeps state."""

    def cpu_sample(self) -> CpuSample:
        ...

    def net_sample(self) -> NetSample:
        ...

    def memory_usage(self) -> MemoryUsage:
        ...

    def disk_free_gb(self) -> float:
        ...

    def load_average(self) -> LoadAverage:
        ...

    def uptime_seconds(self) -> float:
        ...

    def cpu_temp_c(self) -> float:
        ...

    def fd_stats(self) -> FdStats:
        ...

    def battery(self) -> BatteryInfo:
        ...


def percent_used(total: float, free: float) -> float:
    if total <= 0:
        return 0.0
    return (total - free) / total * 100.0
