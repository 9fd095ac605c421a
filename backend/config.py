"""
Hi-Pot Test Log - System Configuration
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Serial entry cap and list size warning threshold
v1.0.1 (2026-10-05): Token lifetime fixed at 24h, bcrypt cost factor setting
v1.0.0 (2026-10-01): Initial configuration module
"""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path
import os


class Settings(BaseSettings):
    """System-wide configuration"""

    # Application
    APP_NAME: str = "Hi-Pot Test Log"
    APP_VERSION: str = "1.1.0"
    DEBUG: bool = False

    # API Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3002
    API_WORKERS: int = 1  # Single writer on the SQLite file
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # SQLite Configuration
    SQLITE_DB_PATH: str = str(Path(__file__).parent / "data" / "hipot_logs.db")

    # Authentication
    JWT_SECRET_KEY: str = "change-me-hipot-test-log-signing-key"  # Generate with: openssl rand -hex 32
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    BCRYPT_ROUNDS: int = 10
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin"

    # Ingestion
    MAX_SERIAL_ENTRIES: int = 10  # Entry form limit, also enforced on submit; raise to accept more

    # Query
    LOG_LIST_WARN_THRESHOLD: int = 5000  # Full-list reads above this get flagged

    # File Paths
    DATA_DIR: str = str(Path(__file__).parent / "data")
    LOGS_DIR: str = str(Path(__file__).parent / "logs")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Singleton instance
settings = Settings()


# Create required directories
def init_directories(cfg: Settings = None):
    """Create necessary directories if they don't exist"""
    cfg = cfg or settings
    db_dir = os.path.dirname(os.path.abspath(cfg.SQLITE_DB_PATH))
    for directory in [cfg.DATA_DIR, cfg.LOGS_DIR, db_dir]:
        os.makedirs(directory, exist_ok=True)


if __name__ == "__main__":
    print(f"{settings.APP_NAME} Configuration v{settings.APP_VERSION}")
    print(f"SQLite: {settings.SQLITE_DB_PATH}")
    print(f"Token lifetime: {settings.ACCESS_TOKEN_EXPIRE_MINUTES} min")
    print(f"Max serial entries per work order: {settings.MAX_SERIAL_ENTRIES}")
