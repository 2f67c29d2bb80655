from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """项目配置，支持从环境变量与.env文件加载。"""

    # 完整的 SQLAlchemy URL，设置后优先于下面的 MySQL 配置
    DATABASE_URL: Optional[str] = None

    # MySQL
    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_DB: str = "image_catalog"
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = "password"

    LOG_LEVEL: str = "INFO"

    # 按 hash 查询时每批读取的行数
    CATALOG_FIND_BATCH_SIZE: int = 100
    CATALOG_MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def database_uri(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = quote_plus(self.MYSQL_PASSWORD)
        return (
            f"mysql+pymysql://{self.MYSQL_USER}:{password}@{self.MYSQL_HOST}:{self.MYSQL_PORT}/"
            f"{self.MYSQL_DB}?charset=utf8mb4"
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
