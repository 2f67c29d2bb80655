import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import Base, engine
from .exceptions import NotFoundError, StorageError, ValidationError


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="图片元数据目录 API", version="0.1.0")

    # 路由
    from .routers import images  # 延迟导入以避免循环

    app.include_router(images.router, prefix="/images", tags=["images"])

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": "未找到图片"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        # 可重试，提示客户端稍后再试
        logger.warning("存储失败 %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "存储暂不可用"}, headers={"Retry-After": "1"})

    @app.on_event("startup")
    def on_startup() -> None:
        # 初始化数据库表
        Base.metadata.create_all(bind=engine)

    return app


app = create_app()
