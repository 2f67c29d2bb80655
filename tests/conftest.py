import os
import sys

# 添加项目根目录到PYTHONPATH，并在导入 image_catalog 之前指向内存数据库
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from image_catalog.catalog import CatalogStore, get_catalog
from image_catalog.database import Base, build_engine
from image_catalog.main import app


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    # 小批量，方便覆盖 find_by_hash 的分批读取
    return CatalogStore(engine, find_batch_size=2, max_page_size=50)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_catalog] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def alice():
    return dict(
        author="alice",
        width=800,
        height=600,
        hash=bytes.fromhex("dead"),
        path="/img/1.png",
        url="https://cdn/1.png",
        mime_type="image/png",
    )
