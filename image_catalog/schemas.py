from typing import List

from pydantic import BaseModel, Field, StrictInt, field_validator


class ImageRecord(BaseModel):
    """目录返回的记录快照，与数据库会话脱离且不可变。"""

    id: int
    author: str
    width: int
    height: int
    hash: bytes
    path: str
    url: str
    mime_type: str

    class Config:
        from_attributes = True
        frozen = True


class ImageIn(BaseModel):
    author: str
    width: StrictInt
    height: StrictInt
    hash: bytes = Field(..., description="内容指纹，十六进制字符串")
    path: str
    url: str
    mime_type: str

    @field_validator("hash", mode="before")
    @classmethod
    def _decode_hex(cls, value):
        if isinstance(value, str):
            try:
                return bytes.fromhex(value)
            except ValueError:
                raise ValueError("hash 必须是十六进制字符串")
        return value


class ImageOut(BaseModel):
    id: int
    author: str
    width: int
    height: int
    hash: str
    path: str
    url: str
    mime_type: str

    @classmethod
    def from_record(cls, record: ImageRecord) -> "ImageOut":
        return cls(**record.model_dump(exclude={"hash"}), hash=record.hash.hex())


class ImageListResponse(BaseModel):
    total: int
    page: int
    size: int
    items: List[ImageOut]
