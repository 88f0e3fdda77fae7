import os
from dataclasses import dataclass, field
from typing import List


def _csv(value: str) -> List[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


@dataclass(frozen=True)
class Settings:
    APP_VERSION: str = field(default_factory=lambda: os.getenv("APP_VERSION", "0.1.0"))
    APP_ENV: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))

    CORS_MODE: str = field(default_factory=lambda: os.getenv("CORS_MODE", "open"))
    CORS_ALLOW_ORIGINS: List[str] = field(default_factory=lambda: _csv(os.getenv("CORS_ALLOW_ORIGINS", "")))

    CHAT_ENDPOINT_URL: str = field(default_factory=lambda: os.getenv("CHAT_ENDPOINT_URL", ""))
    CHAT_TIMEOUT_SECONDS: float = field(default_factory=lambda: float(os.getenv("CHAT_TIMEOUT_SECONDS", "30")))

    RECOMMENDATION_LIMIT: int = field(default_factory=lambda: int(os.getenv("RECOMMENDATION_LIMIT", "6")))
    REALTIME_REFRESH_DELAY_SECONDS: float = field(
        default_factory=lambda: float(os.getenv("REALTIME_REFRESH_DELAY_SECONDS", "1"))
    )


settings = Settings()
