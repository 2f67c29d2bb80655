from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import get_settings


def build_engine(url: str) -> Engine:
    """按 URL 创建引擎。SQLite 需要允许跨线程使用连接，内存库只保留一个共享连接。"""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, future=True, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        future=True,
    )


settings = get_settings()

engine = build_engine(settings.database_uri)

Base = declarative_base()
