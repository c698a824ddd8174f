"""Tests for product API endpoints."""

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from loja.api.products import get_service
from loja.application.product_service import ProductService
from loja.catalog.images import ImageIngestor
from loja.catalog.models import Category, Product
from loja.catalog.repository import CatalogRepository
from loja.main import app


def _create_body(category_id: int, image: str, **overrides: Any) -> dict[str, Any]:
    body = {
        "categoryId": category_id,
        "name": "Dom Casmurro",
        "description": "Romance de Machado de Assis",
        "value": 39.9,
        "base64Image": image,
    }
    body.update(overrides)
    return body


def _update_body(category_id: int, **overrides: Any) -> dict[str, Any]:
    body = {
        "categoryId": category_id,
        "name": "Memórias Póstumas",
        "description": "Outro romance",
        "value": 45.0,
        "image": "https://example.com/bras-cubas.jpg",
    }
    body.update(overrides)
    return body


@pytest.fixture
def broken_store(ingestor: ImageIngestor) -> Any:
    """Route the product endpoints to a repository whose queries fail."""
    repository = AsyncMock(spec=CatalogRepository)
    error = SQLAlchemyError("db down")
    repository.get_category.side_effect = error
    repository.get_product.side_effect = error
    repository.list_products.side_effect = error
    repository.list_products_with_category.side_effect = error
    session = MagicMock(spec=AsyncSession)
    session.rollback = AsyncMock()

    app.dependency_overrides[get_service] = lambda: ProductService(
        session=session,
        image_ingestor=ingestor,
        repository=repository,
    )
    yield repository
    app.dependency_overrides.pop(get_service, None)


# ============================================================================
# Create Product
# ============================================================================


class TestCreateProduct:
    """Tests for POST /product."""

    def test_create_product(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        image_data_uri: str,
        image_dir: Path,
        image_bytes: bytes,
    ) -> None:
        """Test creating a product returns an empty 200 and stores the image."""
        category = make_category()

        response = client.post(
            "/product",
            json=_create_body(category.id, image_data_uri),
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content == b""
        stored = list(image_dir.iterdir())
        assert len(stored) == 1
        assert stored[0].suffix == ".jpg"
        assert stored[0].read_bytes() == image_bytes

    def test_create_then_list(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        image_base64: str,
    ) -> None:
        """Test a created product is listed with its category and image URL."""
        category = make_category("Livros")

        client.post(
            "/product",
            json=_create_body(category.id, image_base64),
            headers=admin_headers,
        )
        response = client.get("/product", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        product = data["products"][0]
        assert product["name"] == "Dom Casmurro"
        assert product["description"] == "Romance de Machado de Assis"
        assert product["value"] == 39.9
        assert product["image"].startswith("https://cdn.loja.test/images/")
        assert product["category"] == {"id": category.id, "name": "Livros"}

    def test_description_defaults_to_empty(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        image_base64: str,
    ) -> None:
        """Test omitting the description stores an empty one."""
        category = make_category()
        body = _create_body(category.id, image_base64)
        del body["description"]

        client.post("/product", json=body, headers=admin_headers)
        product = client.get("/product", headers=admin_headers).json()["products"][0]

        assert product["description"] == ""

    def test_unknown_category(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        image_base64: str,
        sync_session: Session,
    ) -> None:
        """Test creating in a missing category returns 404."""
        response = client.post(
            "/product",
            json=_create_body(999, image_base64),
            headers=admin_headers,
        )

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "CATEGORY_NOT_FOUND"
        assert data["message"] == "Category not found"
        assert sync_session.query(Product).count() == 0

    def test_malformed_image(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        sync_session: Session,
    ) -> None:
        """Test an undecodable image returns 500 and inserts nothing."""
        category = make_category()

        response = client.post(
            "/product",
            json=_create_body(category.id, "data:image/png;base64,@@@"),
            headers=admin_headers,
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Server error"
        assert sync_session.query(Product).count() == 0

    def test_missing_fields(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        """Test request validation rejects incomplete bodies."""
        response = client.post("/product", json={"name": "X"}, headers=admin_headers)
        assert response.status_code == 422

    def test_negative_value(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        image_base64: str,
    ) -> None:
        """Test negative prices are rejected."""
        category = make_category()

        response = client.post(
            "/product",
            json=_create_body(category.id, image_base64, value=-1),
            headers=admin_headers,
        )

        assert response.status_code == 422


# ============================================================================
# List Products
# ============================================================================


class TestListProducts:
    """Tests for GET /product."""

    def test_pagination(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test pages of ten over twenty-five products."""
        category = make_category()
        for i in range(25):
            make_product(category, name=f"Produto {i}")

        first = client.get("/product", headers=customer_headers).json()
        last = client.get(
            "/product",
            params={"page": 2, "pageSize": 10},
            headers=customer_headers,
        ).json()

        assert first["count"] == 25
        assert first["page"] == 0
        assert first["pageSize"] == 10
        assert len(first["products"]) == 10
        assert last["count"] == 25
        assert [p["name"] for p in last["products"]] == [
            f"Produto {i}" for i in range(20, 25)
        ]

    def test_custom_page_size(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test the pageSize query parameter."""
        category = make_category()
        for _ in range(7):
            make_product(category)

        data = client.get(
            "/product",
            params={"pageSize": 3},
            headers=customer_headers,
        ).json()

        assert data["count"] == 7
        assert data["pageSize"] == 3
        assert len(data["products"]) == 3

    def test_empty_catalog(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
    ) -> None:
        """Test listing an empty catalog."""
        response = client.get("/product", headers=customer_headers)

        assert response.status_code == 200
        assert response.json() == {
            "count": 0,
            "page": 0,
            "pageSize": 10,
            "products": [],
        }

    @pytest.mark.parametrize(
        "params",
        [{"page": -1}, {"pageSize": -5}, {"page": "first"}],
    )
    def test_invalid_paging(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
        params: dict[str, Any],
    ) -> None:
        """Test invalid paging parameters are rejected."""
        response = client.get("/product", params=params, headers=customer_headers)
        assert response.status_code == 422

    def test_zero_page_size(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test a zero page size returns an empty page with the total count."""
        category = make_category()
        make_product(category)

        response = client.get(
            "/product",
            params={"pageSize": 0},
            headers=customer_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["pageSize"] == 0
        assert data["products"] == []

    def test_admin_can_list(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        """Test administrators may list products too."""
        assert client.get("/product", headers=admin_headers).status_code == 200


# ============================================================================
# Update Product
# ============================================================================


class TestUpdateProduct:
    """Tests for PUT /product/{id}."""

    def test_update_product(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test a full replacement update."""
        books = make_category("Livros")
        classics = make_category("Clássicos")
        product = make_product(books)

        response = client.put(
            f"/product/{product.id}",
            json=_update_body(classics.id),
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content == b""
        listed = client.get("/product", headers=admin_headers).json()["products"][0]
        assert listed == {
            "id": product.id,
            "name": "Memórias Póstumas",
            "description": "Outro romance",
            "value": 45.0,
            "image": "https://example.com/bras-cubas.jpg",
            "category": {"id": classics.id, "name": "Clássicos"},
        }

    def test_unknown_product(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
    ) -> None:
        """Test updating a missing product returns 404."""
        category = make_category()

        response = client.put(
            "/product/999",
            json=_update_body(category.id),
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"

    def test_unknown_category(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test moving a product to a missing category returns 404."""
        category = make_category()
        product = make_product(category)

        response = client.put(
            f"/product/{product.id}",
            json=_update_body(999),
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"

    def test_non_integer_id(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        """Test path IDs must be integers."""
        response = client.put("/product/abc", json=_update_body(1), headers=admin_headers)
        assert response.status_code == 422


# ============================================================================
# Delete Product
# ============================================================================


class TestDeleteProduct:
    """Tests for DELETE /product/{id}."""

    def test_delete_product(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test deleting a product."""
        category = make_category()
        product = make_product(category)

        response = client.delete(f"/product/{product.id}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get("/product", headers=admin_headers).json()["count"] == 0

    def test_delete_twice(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test the second delete of the same product returns 404."""
        category = make_category()
        product = make_product(category)

        client.delete(f"/product/{product.id}", headers=admin_headers)
        response = client.delete(f"/product/{product.id}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"


# ============================================================================
# Reseller Feed
# ============================================================================


class TestResellerFeed:
    """Tests for GET /product/revendedor."""

    def test_feed_discounts_values(
        self,
        client: TestClient,
        reseller_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test the feed shows discounted values without product IDs."""
        category = make_category("Eletrônicos")
        make_product(
            category,
            name="Fone",
            description="Sem fio",
            value=Decimal("100.00"),
            image="https://example.com/fone.jpg",
        )

        response = client.get("/product/revendedor", headers=reseller_headers)

        assert response.status_code == 200
        assert response.json() == [
            {
                "name": "Fone",
                "description": "Sem fio",
                "value": 85.0,
                "image": "https://example.com/fone.jpg",
                "category": {"id": category.id, "name": "Eletrônicos"},
            }
        ]

    def test_feed_lists_everything(
        self,
        client: TestClient,
        reseller_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test the feed is not paginated."""
        category = make_category()
        for i in range(12):
            make_product(category, name=f"Produto {i}")

        data = client.get("/product/revendedor", headers=reseller_headers).json()

        assert len(data) == 12

    def test_catalog_value_unchanged(
        self,
        client: TestClient,
        reseller_headers: dict[str, str],
        customer_headers: dict[str, str],
        make_category: Callable[..., Category],
        make_product: Callable[..., Product],
    ) -> None:
        """Test the catalog listing still shows the full price."""
        category = make_category()
        make_product(category, value=Decimal("100.00"))

        client.get("/product/revendedor", headers=reseller_headers)
        listed = client.get("/product", headers=customer_headers).json()

        assert listed["products"][0]["value"] == 100.0


# ============================================================================
# Store Failures
# ============================================================================


class TestStoreFailures:
    """Tests for database failures surfacing as 500."""

    def test_list_fault(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
        broken_store: Any,
    ) -> None:
        """Test a failing listing returns 500."""
        response = client.get("/product", headers=customer_headers)

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INFRASTRUCTURE_FAULT"
        assert data["message"] == "Server error"

    def test_create_fault(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        image_base64: str,
        broken_store: Any,
    ) -> None:
        """Test a failing create returns 500."""
        response = client.post(
            "/product",
            json=_create_body(1, image_base64),
            headers=admin_headers,
        )
        assert response.status_code == 500

    def test_update_fault(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        broken_store: Any,
    ) -> None:
        """Test a failing update returns 500."""
        response = client.put("/product/1", json=_update_body(1), headers=admin_headers)
        assert response.status_code == 500

    def test_delete_fault(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        broken_store: Any,
    ) -> None:
        """Test a failing delete returns 500."""
        response = client.delete("/product/1", headers=admin_headers)
        assert response.status_code == 500

    def test_feed_fault(
        self,
        client: TestClient,
        reseller_headers: dict[str, str],
        broken_store: Any,
    ) -> None:
        """Test a failing feed returns 500."""
        response = client.get("/product/revendedor", headers=reseller_headers)
        assert response.status_code == 500

    def test_unexpected_error(
        self,
        client: TestClient,
        customer_headers: dict[str, str],
    ) -> None:
        """Test unexpected exceptions return the generic 500 envelope."""

        def explode() -> ProductService:
            raise RuntimeError("boom")

        app.dependency_overrides[get_service] = explode
        try:
            response = TestClient(app, raise_server_exceptions=False).get(
                "/product", headers=customer_headers
            )
        finally:
            app.dependency_overrides.pop(get_service, None)

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"
        assert response.json()["message"] == "Server error"
