from __future__ import annotations

from pathlib import Path

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
_LOOPBACK = 'lo'


def _read_fields(path: Path, minimum: int) -> list[str]:
    fields = path.read_text(errors='ignore').split()
    if len(fields) < minimum:
        raise ValueError(f'unexpected format in {path}')
    return fields


class ProcfsSource:
    """Linux readers backed by /proc and /sys."""

    def __init__(
        self,
        proc_root: str = '/proc',
        sys_root: str = '/sys',
        disk_path: str = '/',
        thermal_zone: str = 'thermal_zone0',
        battery_name: str = 'BAT0',
    ):
        self.proc = Path(proc_root)
        self.sys = Path(sys_root)
        self.disk_path = disk_path
        self.thermal_zone = thermal_zone
        self.battery_name = battery_name

    def cpu_sample(self) -> CpuSample:
        with (self.proc / 'stat').open(errors='ignore') as handle:
            first = handle.readline()
        fields = first.split()
        if not fields or fields[0] != 'cpu':
            raise ValueError('missing aggregate cpu line in stat')
        ticks = [int(v) for v in fields[1:]]
        if len(ticks) < 4:
            raise ValueError('too few cpu columns in stat')
        # idle + iowait
        idle = ticks[3] + (ticks[4] if len(ticks) > 4 else 0)
        return CpuSample(idle=idle, total=sum(ticks))

    def net_sample(self) -> NetSample:
        rx_total = tx_total = 0
        for line in (self.proc / 'net' / 'dev').read_text(errors='ignore').splitlines():
            if '|' in line or ':' not in line:
                continue
            name, data = line.split(':', 1)
            if name.strip() == _LOOPBACK:
                continue
            columns = data.split()
            if len(columns) < 9:
                continue
            rx_total += int(columns[0])
            tx_total += int(columns[8])
        return NetSample(rx=rx_total, tx=tx_total)

    def memory_usage(self) -> MemoryUsage:
        wanted = {'MemTotal:', 'MemAvailable:', 'SwapTotal:', 'SwapFree:'}
        values: dict[str, float] = {}
        for line in (self.proc / 'meminfo').read_text(errors='ignore').splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[0] in wanted:
                values[parts[0]] = float(parts[1])
        return MemoryUsage(
            mem_percent=percent_used(values.get('MemTotal:', 0.0), values.get('MemAvailable:', 0.0)),
            swap_percent=percent_used(values.get('SwapTotal:', 0.0), values.get('SwapFree:', 0.0)),
        )

    def disk_free_gb(self) -> float:
        return psutil.disk_usage(self.disk_path).free / _GIB

    def load_average(self) -> LoadAverage:
        fields = _read_fields(self.proc / 'loadavg', 3)
        return LoadAverage(float(fields[0]), float(fields[1]), float(fields[2]))

    def uptime_seconds(self) -> float:
        return float(_read_fields(self.proc / 'uptime', 1)[0])

    def cpu_temp_c(self) -> float:
        raw = (self.sys / 'class' / 'thermal' / self.thermal_zone / 'temp').read_text().strip()
        return float(raw) / 1000.0

    def fd_stats(self) -> FdStats:
        # allocated, unused, max
        fields = _read_fields(self.proc / 'sys' / 'fs' / 'file-nr', 3)
        return FdStats(open=int(fields[0]), max=int(fields[2]))

    def battery(self) -> BatteryInfo:
        base = self.sys / 'class' / 'power_supply' / self.battery_name
        if not base.exists():
            return NO_BATTERY

        percent = int((base / 'capacity').read_text().strip())
        percent = min(max(percent, 0), 100)
        try:
            status = BatteryStatus.parse((base / 'status').read_text())
        except OSError:
            status = BatteryStatus.UNKNOWN
        return BatteryInfo(percent=percent, status=status)
