"""Shared fixtures for Loja API tests.

Every test gets its own SQLite database file and image directory.
API tests talk to the app through ``TestClient`` with the session and
image ingestor dependencies overridden; seeding uses a synchronous
session on the same database file.
"""

import base64
from collections.abc import AsyncGenerator, Callable, Generator
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from loja.api.products import get_image_ingestor
from loja.catalog.images import ImageIngestor
from loja.catalog.models import Category, Product
from loja.infrastructure.config import settings
from loja.infrastructure.database import Base, get_session
from loja.infrastructure.security import create_access_token
from loja.main import app

TEST_BASE_URL = "https://cdn.loja.test"

# Image content is never inspected.
IMAGE_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-bytes\xff\xd9"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Create a fresh SQLite database file with the catalog schema."""
    path = tmp_path / "loja-test.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture
def sync_session(database_path: Path) -> Generator[Session, None, None]:
    """Synchronous session for seeding and inspecting the test database."""
    engine = create_engine(f"sqlite:///{database_path}")
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    with factory() as session:
        yield session
    engine.dispose()


@pytest.fixture
def session_factory(database_path: Path) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to the test database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{database_path}",
        poolclass=NullPool,
    )
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Async session for repository and service tests."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """Directory receiving stored images."""
    return tmp_path / "images"


@pytest.fixture
def ingestor(image_dir: Path) -> ImageIngestor:
    """Image ingestor writing to the temporary image directory."""
    return ImageIngestor(storage_dir=image_dir, base_url=TEST_BASE_URL)


@pytest.fixture
def image_bytes() -> bytes:
    """Raw image content."""
    return IMAGE_BYTES


@pytest.fixture
def image_base64() -> str:
    """Image content as plain base64."""
    return base64.b64encode(IMAGE_BYTES).decode()


@pytest.fixture
def image_data_uri(image_base64: str) -> str:
    """Image content as a data URI."""
    return f"data:image/png;base64,{image_base64}"


# ============================================================================
# Seeding Fixtures
# ============================================================================


@pytest.fixture
def make_category(sync_session: Session) -> Callable[..., Category]:
    """Factory inserting a category."""

    def _make(name: str = "Livros") -> Category:
        category = Category(name=name)
        sync_session.add(category)
        sync_session.commit()
        return category

    return _make


@pytest.fixture
def make_product(sync_session: Session) -> Callable[..., Product]:
    """Factory inserting a product into an existing category."""

    def _make(
        category: Category,
        name: str = "Dom Casmurro",
        description: str = "Romance de Machado de Assis",
        value: Decimal = Decimal("39.90"),
        image: str = f"{TEST_BASE_URL}/images/existing.jpg",
    ) -> Product:
        product = Product(
            name=name,
            description=description,
            value=value,
            image=image,
            category_id=category.id,
        )
        sync_session.add(product)
        sync_session.commit()
        return product

    return _make


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(
    session_factory: async_sessionmaker[AsyncSession],
    ingestor: ImageIngestor,
) -> Generator[TestClient, None, None]:
    """Create test client bound to the test database and image directory."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_image_ingestor] = lambda: ingestor

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Bearer headers for an administrator."""
    token = create_access_token("maria", ["admin"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers() -> dict[str, str]:
    """Bearer headers for a customer."""
    token = create_access_token("joao", ["customer"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reseller_headers() -> dict[str, str]:
    """API key headers for the reseller integration."""
    return {settings.api_key_header: settings.reseller_api_key}
