from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "scavhunt-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Scavenger Hunt")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/scavhunt_dev")

    # Answer obscuring (cosmetic only, not access control)
    obscure_key: str = os.getenv("OBSCURE_KEY", "scav-obscure")

    # Access
    admin_api_key: str = os.getenv("ADMIN_API_KEY", "dev-admin-key")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    team_token_ttl_min: int = int(os.getenv("TEAM_TOKEN_TTL_MIN", "1440"))  # 1d

    # Gameplay
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))
    join_code_length: int = int(os.getenv("JOIN_CODE_LENGTH", "6"))

settings = Settings()
