"""
Test fixtures - in-memory SQLite database, fresh catalog/editor state and an
HTTP client bound to the FastAPI app
"""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from precast.database import Base, get_db
from precast.main import app
from precast.models.product import Product
from precast.services.catalog import CatalogCache, get_catalog
from precast.services.editor import AdminEditor, get_editor
from precast.services.storage import LocalObjectStorage
from precast.services.uploads import ImageUploader, get_uploader


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
def catalog():
    return CatalogCache()


@pytest.fixture()
def editor():
    return AdminEditor()


@pytest.fixture()
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path), "http://test", bucket="images")


@pytest.fixture()
def uploader(storage):
    return ImageUploader(storage, max_size=1024 * 1024)


@pytest_asyncio.fixture()
async def seed_products(db_session):
    """Three products with distinct creation times"""
    base = datetime(2025, 1, 1, 12, 0, 0)
    products = [
        Product(name="Culvert Pipe 600mm", base_price=4500, transport_cost=800,
                images=["http://test/uploads/images/products/culvert.jpg"], created_at=base),
        Product(name="Road Kerb", base_price=650, transport_cost=120, created_at=base + timedelta(days=1)),
        Product(name="Manhole Ring", description="1200mm ring", base_price=9800, transport_cost=1500,
                is_available=False, created_at=base + timedelta(days=2)),
    ]
    db_session.add_all(products)
    await db_session.commit()
    for p in products:
        await db_session.refresh(p)
    return products


@pytest_asyncio.fixture()
async def client(db_session, catalog, editor, uploader):
    """httpx AsyncClient bound to the FastAPI app with per-test state"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_editor] = lambda: editor
    app.dependency_overrides[get_uploader] = lambda: uploader

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
