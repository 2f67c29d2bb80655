from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..catalog import CatalogStore, get_catalog
from ..schemas import ImageIn, ImageListResponse, ImageOut


router = APIRouter()


@router.post("", response_model=ImageOut, status_code=status.HTTP_201_CREATED)
def create_image(payload: ImageIn, catalog: CatalogStore = Depends(get_catalog)) -> ImageOut:
    fields = payload.model_dump()
    image_id = catalog.insert(**fields)
    return ImageOut(id=image_id, **{**fields, "hash": payload.hash.hex()})


@router.get("", response_model=ImageListResponse)
def list_images(
    *,
    catalog: CatalogStore = Depends(get_catalog),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    total, records = catalog.list_records(page=page, size=size, order=order)
    return ImageListResponse(
        total=total,
        page=page,
        size=min(size, catalog.max_page_size),
        items=[ImageOut.from_record(r) for r in records],
    )


@router.get("/by-hash/{digest}", response_model=List[ImageOut])
def find_images_by_hash(digest: str, catalog: CatalogStore = Depends(get_catalog)) -> List[ImageOut]:
    try:
        raw = bytes.fromhex(digest)
    except ValueError:
        raise HTTPException(status_code=422, detail="hash 必须是十六进制字符串")
    return [ImageOut.from_record(r) for r in catalog.find_by_hash(raw)]


@router.get("/{image_id}", response_model=ImageOut)
def get_image_detail(image_id: int, catalog: CatalogStore = Depends(get_catalog)) -> ImageOut:
    return ImageOut.from_record(catalog.get(image_id))


@router.put("/{image_id}", response_model=ImageOut)
def replace_image(image_id: int, payload: ImageIn, catalog: CatalogStore = Depends(get_catalog)) -> ImageOut:
    return ImageOut.from_record(catalog.replace(image_id, **payload.model_dump()))


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(image_id: int, catalog: CatalogStore = Depends(get_catalog)) -> Response:
    catalog.delete(image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
