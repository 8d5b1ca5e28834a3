from __future__ import annotations

import time

import psutil

from ..schemas import BatteryStatus
from .sources import (
    NO_BATTERY,
    BatteryInfo,
    CpuSample,
    FdStats,
    LoadAverage,
    MemoryUsage,
    NetSample,
    percent_used,
)

_GIB = 1024 ** 3
_LOOPBACK_NAMES = {'lo', 'lo0', 'Loopback Pseudo-Interface 1'}
# psutil reports cpu times in seconds; scale to integer ticks.
_TICKS_PER_SECOND = 100


class PortableSource:
    """psutil-backed readers for hosts without /proc."""

    def __init__(self, disk_path: str = '/'):
        self.disk_path = disk_path

    def cpu_sample(self) -> CpuSample:
        times = psutil.cpu_times()
        idle = times.idle + getattr(times, 'iowait', 0.0)
        total = sum(times)
        return CpuSample(idle=int(idle * _TICKS_PER_SECOND), total=int(total * _TICKS_PER_SECOND))

    def net_sample(self) -> NetSample:
        counters = psutil.net_io_counters(pernic=True)
        rx = tx = 0
        for name, nic in counters.items():
            if name in _LOOPBACK_NAMES:
                continue
            rx += nic.bytes_recv
            tx += nic.bytes_sent
        return NetSample(rx=rx, tx=tx)

    def memory_usage(self) -> MemoryUsage:
        vm = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return MemoryUsage(
            mem_percent=percent_used(vm.total, vm.available),
            swap_percent=percent_used(swap.total, swap.free),
        )

    def disk_free_gb(self) -> float:
        return psutil.disk_usage(self.disk_path).free / _GIB

    def load_average(self) -> LoadAverage:
        l1, l5, l15 = psutil.getloadavg()
        return LoadAverage(l1, l5, l15)

    def uptime_seconds(self) -> float:
        return max(time.time() - psutil.boot_time(), 0.0)

    def cpu_temp_c(self) -> float:
        sensors = getattr(psutil, 'sensors_temperatures', None)
        if sensors is None:
            raise NotImplementedError('temperature sensors unsupported on this platform')
        for _, values in sensors().items():
            if values:
                return values[0].current
        raise LookupError('no temperature sensor found')

    def fd_stats(self) -> FdStats:
        raise NotImplementedError('system-wide file handle counts unsupported on this platform')

    def battery(self) -> BatteryInfo:
        sensors = getattr(psutil, 'sensors_battery', None)
        battery = sensors() if sensors is not None else None
        if battery is None:
            return NO_BATTERY

        percent = min(max(int(round(battery.percent)), 0), 100)
        if battery.power_plugged is None:
            status = BatteryStatus.UNKNOWN
        elif not battery.power_plugged:
            status = BatteryStatus.DISCHARGING
        elif percent >= 100:
            status = BatteryStatus.FULL
        else:
            status = BatteryStatus.CHARGING
        return BatteryInfo(percent=percent, status=status)
