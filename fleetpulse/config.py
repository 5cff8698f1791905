from datetime import timedelta
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_TITLE: str = "fleetpulse"
    APP_VERSION: str = "0.3.0"

    # Retención del historial
    RETENTION_WINDOW_HOURS: float = 24
    SWEEP_PERIOD_SECONDS: float = 3600

    # HTTP
    HOST: str = "0.0.0.0"
    PORT: int = 23480
    MAX_BODY_BYTES: int = 1 << 20

    BASE_DIR: Path = Path(__file__).resolve().parent
    STATIC_DIR: Path = BASE_DIR / "static"

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = False

    @property
    def retention_window(self) -> timedelta:
        return timedelta(hours=self.RETENTION_WINDOW_HOURS)

    @property
    def sweep_period(self) -> timedelta:
        return timedelta(seconds=self.SWEEP_PERIOD_SECONDS)


class AgentSettings(BaseSettings):
    NODE_IP: str = ""
    SERVER_URL: str = ""
    PEERS: List[str] = [f"10.0.0.{i}" for i in range(1, 11)]

    REPORT_INTERVAL_SECONDS: float = 30
    PING_COUNT: int = 4
    PING_TIMEOUT_SECONDS: float = 10
    CONNECTED_THRESHOLD_MS: float = 1000
    HTTP_TIMEOUT_SECONDS: float = 10

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = False
