from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'SysAgent'
    app_host: str = '0.0.0.0'
    app_port: int = Field(default=8085, ge=1, le=65535)
    sample_interval_sec: float = Field(default=1.0, gt=0, le=3600)
    log_level: str = 'info'
    proc_root: str = '/proc'
    sys_root: str = '/sys'
    disk_path: str = '/'
    thermal_zone: str = 'thermal_zone0'
    battery_name: str = 'BAT0'
    dashboard_file: str = str(_PACKAGE_DIR / 'static' / 'dashboard.html')


settings = Settings()
