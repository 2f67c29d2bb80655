"""图片目录的异常层级。

    CatalogError (基类)
    +-- ValidationError   字段缺失、超长或尺寸非正数，调用方需修正后再提交
    +-- NotFoundError     id 不存在（或已删除）
    +-- StorageError      底层存储失败，可重试
"""

from typing import Optional


class CatalogError(Exception):
    """目录操作的基类异常。"""

    retryable = False


class ValidationError(CatalogError):
    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class NotFoundError(CatalogError):
    def __init__(self, image_id: int) -> None:
        self.image_id = image_id
        super().__init__(f"未找到图片: {image_id}")


class StorageError(CatalogError):
    """底层存储失败。目录本身不重试，由调用方决定重试策略。"""

    retryable = True

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        self.operation = operation
        super().__init__(message)
