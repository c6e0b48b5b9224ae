"""
Application settings
Loaded from the environment (.env supported) with an optional YAML file
pointed to by TINYLEARN_CONFIG.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from tinylearn.utils.config_loader import LayeredConfig

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DB_PATH = BASE_DIR / "tinylearn.db"


def _default_database_url() -> str:
    clean_path = str(DB_PATH).replace('\\', '/')
    return f"sqlite:///{clean_path}"


@dataclass
class Settings:
    database_url: str
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    environment: str = "development"
    db_pool_size: int = 10
    db_pool_timeout: int = 30
    redis_url: str = "redis://localhost:6379/0"
    notifications_enabled: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    auto_create_tables: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def load_settings(config_path: str = None) -> Settings:
    cfg = LayeredConfig.from_file(config_path or os.getenv("TINYLEARN_CONFIG"))

    return Settings(
        database_url=cfg.get("DATABASE_URL", "database.url", _default_database_url()),
        jwt_secret_key=cfg.get("JWT_SECRET_KEY", "auth.secret_key", "your-secret-key-change-this-in-production"),
        jwt_algorithm=cfg.get("JWT_ALGORITHM", "auth.algorithm", "HS256"),
        access_token_expire_minutes=cfg.get_int("ACCESS_TOKEN_EXPIRE_MINUTES", "auth.expire_minutes", 60 * 24),
        environment=cfg.get("ENVIRONMENT", "server.environment", "development"),
        db_pool_size=cfg.get_int("DB_POOL_SIZE", "database.pool_size", 10),
        db_pool_timeout=cfg.get_int("DB_POOL_TIMEOUT", "database.pool_timeout", 30),
        redis_url=cfg.get("REDIS_URL", "notifications.redis_url", "redis://localhost:6379/0"),
        notifications_enabled=cfg.get_bool("NOTIFICATIONS_ENABLED", "notifications.enabled", False),
        cors_origins=cfg.get_list("CORS_ORIGINS", "server.cors_origins", ["*"]),
        auto_create_tables=cfg.get_bool("AUTO_CREATE_TABLES", "database.auto_create_tables", True),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
