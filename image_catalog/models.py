from sqlalchemy import BigInteger, CheckConstraint, Column, Index, Integer, LargeBinary, String

from .database import Base


class Image(Base):
    __tablename__ = "images"

    # SQLite 只有 INTEGER PRIMARY KEY 才是 rowid 别名，AUTOINCREMENT 保证删除后 id 不被复用
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    author = Column(String(255), nullable=False)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    hash = Column(LargeBinary, nullable=False)
    path = Column(String(255), nullable=False)
    url = Column(String(512), nullable=False)
    mime_type = Column(String(255), nullable=False)

    __table_args__ = (
        CheckConstraint("width > 0", name="ck_images_width_positive"),
        CheckConstraint("height > 0", name="ck_images_height_positive"),
        # hash 不唯一，仅用于去重查询；MySQL 的 BLOB 索引需要前缀长度
        Index("ix_images_hash", "hash", mysql_length=32),
        {"sqlite_autoincrement": True},
    )
