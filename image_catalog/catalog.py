"""图片元数据目录。

每个操作都在独立的会话/事务中完成，返回与会话脱离的 ``ImageRecord`` 快照，
调用方不会读到写了一半的记录。id 由数据库自增分配，写操作在进程内串行化。

hash 不是唯一键：``find_by_hash`` 只提供去重查询，"先查再插"存在竞争，
需要严格去重的调用方自行处理。
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import asc, desc, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .database import engine as default_engine
from .exceptions import NotFoundError, StorageError, ValidationError
from .models import Image
from .schemas import ImageRecord

logger = logging.getLogger(__name__)

# 与 images 表的列长度一致
_TEXT_LIMITS = (("author", 255), ("path", 255), ("url", 512), ("mime_type", 255))
_MAX_DIMENSION = 2**31 - 1
# id 列为有符号 64 位整数
_MAX_ID = 2**63 - 1


def _coerce_hash(value) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise ValidationError("hash", "必须是字节串")


def _check_id(image_id) -> None:
    # 超出 id 列范围的值不可能存在，驱动绑定参数时还会直接溢出
    if isinstance(image_id, bool) or not isinstance(image_id, int) or not 1 <= image_id <= _MAX_ID:
        raise NotFoundError(image_id)


def validate_fields(*, author, width, height, hash, path, url, mime_type) -> dict:
    """校验整条记录，遇到第一个错误即抛出 ValidationError。返回可直接写库的字段字典。"""
    values = {"author": author, "path": path, "url": url, "mime_type": mime_type}
    for name, limit in _TEXT_LIMITS:
        value = values[name]
        if not isinstance(value, str):
            raise ValidationError(name, "必须是字符串")
        if not value.strip():
            raise ValidationError(name, "不能为空")
        if len(value) > limit:
            raise ValidationError(name, f"长度不能超过 {limit}")

    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(name, "必须是整数")
        if value <= 0:
            raise ValidationError(name, "必须大于 0")
        if value > _MAX_DIMENSION:
            raise ValidationError(name, "超出范围")

    digest = _coerce_hash(hash)
    if not digest:
        raise ValidationError("hash", "不能为空")

    values.update(width=width, height=height, hash=digest)
    return values


class CatalogStore:
    def __init__(
        self,
        bind: Engine,
        *,
        find_batch_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._sessions = sessionmaker(
            bind=bind,
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )
        self._write_lock = threading.RLock()
        # 内存 SQLite 只有一个共享连接，读也必须串行
        self._serialize_reads = isinstance(bind.pool, StaticPool)
        self.find_batch_size = find_batch_size or settings.CATALOG_FIND_BATCH_SIZE
        self.max_page_size = max_page_size or settings.CATALOG_MAX_PAGE_SIZE

    @contextmanager
    def _transaction(self, operation: str, *, write: bool) -> Iterator[Session]:
        lock = self._write_lock if write or self._serialize_reads else nullcontext()
        with lock, self._sessions() as session:
            try:
                with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error("图片目录操作失败 (%s): %s", operation, e)
                raise StorageError(f"存储操作失败 ({operation}): {e}", operation=operation) from e

    def insert(self, *, author, width, height, hash, path, url, mime_type) -> int:
        values = validate_fields(
            author=author, width=width, height=height, hash=hash, path=path, url=url, mime_type=mime_type
        )
        with self._transaction("insert", write=True) as session:
            image = Image(**values)
            session.add(image)
            session.flush()
            image_id = image.id
        logger.info("新增图片记录 id=%s hash=%s", image_id, values["hash"].hex())
        return image_id

    def get(self, image_id: int) -> ImageRecord:
        _check_id(image_id)
        with self._transaction("get", write=False) as session:
            image = session.get(Image, image_id)
            if image is None:
                raise NotFoundError(image_id)
            return ImageRecord.model_validate(image)

    def find_by_hash(self, hash) -> Iterator[ImageRecord]:
        """按内容 hash 精确匹配，按插入顺序惰性返回。参数类型错误会立即抛出。"""
        return self._iter_by_hash(_coerce_hash(hash))

    def _iter_by_hash(self, digest: bytes) -> Iterator[ImageRecord]:
        # 按 id 分批读取，批与批之间不持有会话和锁
        last_id = 0
        while True:
            with self._transaction("find_by_hash", write=False) as session:
                rows = session.scalars(
                    select(Image)
                    .where(Image.hash == digest, Image.id > last_id)
                    .order_by(Image.id)
                    .limit(self.find_batch_size)
                ).all()
                batch = [ImageRecord.model_validate(row) for row in rows]
            yield from batch
            if len(batch) < self.find_batch_size:
                return
            last_id = batch[-1].id

    def delete(self, image_id: int) -> None:
        _check_id(image_id)
        with self._transaction("delete", write=True) as session:
            image = session.get(Image, image_id, with_for_update=True)
            if image is None:
                raise NotFoundError(image_id)
            session.delete(image)
        logger.info("删除图片记录 id=%s", image_id)

    def replace(self, image_id: int, *, author, width, height, hash, path, url, mime_type) -> ImageRecord:
        """整条覆盖已有记录，不支持部分字段更新。"""
        _check_id(image_id)
        values = validate_fields(
            author=author, width=width, height=height, hash=hash, path=path, url=url, mime_type=mime_type
        )
        with self._transaction("replace", write=True) as session:
            image = session.get(Image, image_id, with_for_update=True)
            if image is None:
                raise NotFoundError(image_id)
            for name, value in values.items():
                setattr(image, name, value)
            session.flush()
            record = ImageRecord.model_validate(image)
        logger.info("覆盖图片记录 id=%s", image_id)
        return record

    def list_records(self, *, page: int = 1, size: int = 20, order: str = "asc") -> Tuple[int, List[ImageRecord]]:
        if page < 1:
            raise ValidationError("page", "必须大于 0")
        if size < 1:
            raise ValidationError("size", "必须大于 0")
        if order not in ("asc", "desc"):
            raise ValidationError("order", "只支持 asc 或 desc")
        size = min(size, self.max_page_size)
        ordering = desc(Image.id) if order == "desc" else asc(Image.id)

        with self._transaction("list", write=False) as session:
            total = session.scalar(select(func.count(Image.id))) or 0
            rows = session.scalars(
                select(Image).order_by(ordering).offset((page - 1) * size).limit(size)
            ).all()
            return int(total), [ImageRecord.model_validate(row) for row in rows]

    def count(self) -> int:
        with self._transaction("count", write=False) as session:
            return int(session.scalar(select(func.count(Image.id))) or 0)


_catalog: Optional[CatalogStore] = None
_catalog_lock = threading.Lock()


def get_catalog() -> CatalogStore:
    # 同步依赖在线程池中执行，首次创建必须加锁，保证全进程只有一把写锁
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = CatalogStore(default_engine)
    return _catalog
