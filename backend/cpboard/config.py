from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "cpboard-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "CP Leaderboard")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3002"))
    api_prefix: str = os.getenv("API_PREFIX", "/api/leaderboard")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/leaderboard")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    auto_create_tables: bool = os.getenv("AUTO_CREATE_TABLES", "0") == "1"

    # Admin identity (role claim, or this username)
    admin_role: str = os.getenv("ADMIN_ROLE", "admin")
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")

    # Dashboard -> API
    dashboard_api_url: str = os.getenv("DASHBOARD_API_URL", "http://localhost:3002/api/leaderboard")
    dashboard_token: str = os.getenv("DASHBOARD_TOKEN", "")
    dashboard_timeout_seconds: float = float(os.getenv("DASHBOARD_TIMEOUT_SECONDS", "10"))
    toast_ttl_seconds: float = float(os.getenv("TOAST_TTL_SECONDS", "5"))

settings = Settings()
