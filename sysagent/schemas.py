from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class BatteryStatus(str, Enum):
    CHARGING = 'Charging'
    DISCHARGING = 'Discharging'
    FULL = 'Full'
    AC_POWER = 'AC_Power'
    UNKNOWN = 'Unknown'

    @classmethod
    def parse(cls, raw: str) -> BatteryStatus:
        value = (raw or '').strip()
        for status in cls:
            if status.value.lower() == value.lower():
                return status
        return cls.UNKNOWN


class MetricSnapshot(BaseModel):
    """One assembled reading of every host metric.

    Field names are the JSON wire format. A field whose reader failed keeps
    its zero value.
    """

    cpu_usage_percent: float = 0.0
    mem_usage_percent: float = 0.0
    swap_usage_percent: float = 0.0
    disk_free_gb: float = 0.0

    load_1: float = 0.0
    load_5: float = 0.0
    load_15: float = 0.0
    uptime_hours: float = 0.0

    fd_open: int = Field(default=0, ge=0)
    fd_max: int = Field(default=0, ge=0)

    cpu_temp_c: float = 0.0
    battery_percent: int = Field(default=0, ge=0, le=100)
    battery_status: str = ''

    net_rx_kb: float = 0.0
    net_tx_kb: float = 0.0


class HealthResponse(BaseModel):
    ok: bool = True
    collector: str
