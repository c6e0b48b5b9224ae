"""
Database configuration and session management
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator
from loguru import logger

from tinylearn.config import Settings, get_settings
from tinylearn.models.database_models import Base


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine; server databases get a bounded pool
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
    )


settings = get_settings()
engine = build_engine(settings)
logger.debug(f"Using database URL: {engine.url.render_as_string(hide_password=True)}")

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind: Engine = None):
    """
    Create all database tables
    """
    Base.metadata.create_all(bind=bind or engine)

def drop_tables(bind: Engine = None):
    """
    Drop all database tables (for testing/reset)
    """
    Base.metadata.drop_all(bind=bind or engine)
