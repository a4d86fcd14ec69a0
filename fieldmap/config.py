import os
from typing import List


def _split_origins(value: str) -> List[str]:
    if value.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings:
    PROJECT_NAME: str = "Field Map Service"
    PROJECT_VERSION: str = "1.0.0"

    # LOGGING
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    # CORS (the map editor runs in the browser / desktop shell)
    CORS_ORIGINS: List[str] = _split_origins(os.getenv("CORS_ORIGINS", "*"))


settings = Settings()
