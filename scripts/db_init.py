#!/usr/bin/env python3
import sys
from pathlib import Path

# 确保可以导入 image_catalog.*
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pymysql
from sqlalchemy.engine import make_url

from image_catalog import models  # noqa: F401  注册 images 表
from image_catalog.config import get_settings
from image_catalog.database import Base, build_engine


def create_database_if_not_exists() -> bool:
    """仅 MySQL 需要预先建库，其他后端直接跳过。返回是否执行了建库。"""
    settings = get_settings()
    url = make_url(settings.database_uri)
    if not url.drivername.startswith("mysql"):
        return False
    conn = pymysql.connect(
        host=url.host or settings.MYSQL_HOST,
        port=url.port or settings.MYSQL_PORT,
        user=url.username or settings.MYSQL_USER,
        password=url.password or "",
        database="mysql",
        charset="utf8mb4",
        autocommit=True,
    )
    try:
        with conn.cursor() as cur:
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{url.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
            )
    finally:
        conn.close()
    return True


def create_tables() -> None:
    settings = get_settings()
    engine = build_engine(settings.database_uri)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()


def main() -> None:
    print("[db-init] Creating database if not exists...")
    if not create_database_if_not_exists():
        print("[db-init] Not a MySQL backend, skipped.")
    print("[db-init] Creating tables...")
    create_tables()
    print("[db-init] Done.")


if __name__ == "__main__":
    main()
