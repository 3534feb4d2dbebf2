"""Tests for variation endpoints."""

from fastapi.testclient import TestClient

from variations.catalog import CatalogStore, create_simple_product, create_variable_product
from variations.domain import Product
from variations.main import app


def url(product: Product | int, variation_id: int | None = None) -> str:
    """Build a variations URL."""
    product_id = product if isinstance(product, int) else product.id
    base = f"/products/{product_id}/variations"
    return base if variation_id is None else f"{base}/{variation_id}"


class TestRoutes:
    """Tests for route registration."""

    def test_routes_registered(self) -> None:
        """Collection, batch and item routes exist."""
        assert app.url_path_for("list_variations", product_id=1) == "/products/1/variations"
        assert (
            app.url_path_for("batch_variations", product_id=1)
            == "/products/1/variations/batch"
        )
        assert (
            app.url_path_for("get_variation", product_id=1, variation_id=2)
            == "/products/1/variations/2"
        )


class TestListVariations:
    """Tests for GET /products/{product_id}/variations."""

    def test_list(self, auth_client: TestClient, variable_product: Product) -> None:
        """Lists both variations, newest first."""
        response = auth_client.get(url(variable_product))

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert data[0]["sku"] == "DUMMY SKU VARIABLE LARGE"
        assert data[0]["price"] == "12"
        assert data[0]["regular_price"] == "15"
        assert data[0]["sale_price"] == "12"
        assert data[0]["on_sale"] is True
        assert data[0]["attributes"] == [{"id": 1, "name": "size", "option": "large"}]
        assert data[1]["sku"] == "DUMMY SKU VARIABLE SMALL"
        assert data[1]["sale_price"] == ""
        assert response.headers["X-Total"] == "2"
        assert response.headers["X-Total-Pages"] == "1"

    def test_list_pagination(self, auth_client: TestClient, variable_product: Product) -> None:
        """per_page and page slice the list."""
        response = auth_client.get(url(variable_product), params={"per_page": 1, "page": 2})
        assert response.status_code == 200
        assert [v["sku"] for v in response.json()] == ["DUMMY SKU VARIABLE SMALL"]
        assert response.headers["X-Total-Pages"] == "2"

    def test_list_filter_by_sku(self, auth_client: TestClient, variable_product: Product) -> None:
        """Filters narrow the result."""
        response = auth_client.get(url(variable_product), params={"sku": "DUMMY SKU VARIABLE SMALL"})
        assert [v["id"] for v in response.json()] == [variable_product.children[0]]

    def test_list_without_permission(self, client: TestClient, variable_product: Product) -> None:
        """Anonymous callers are rejected."""
        response = client.get(url(variable_product))
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unauthorized_beats_not_found(self, client: TestClient) -> None:
        """An unknown parent still answers 401 to anonymous callers."""
        response = client.get(url(999))
        assert response.status_code == 401

    def test_customer_forbidden(self, customer_client: TestClient, variable_product: Product) -> None:
        """Authenticated callers without capabilities get 403."""
        response = customer_client.get(url(variable_product))
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_unknown_parent(self, auth_client: TestClient) -> None:
        """Unknown parents are 404."""
        response = auth_client.get(url(999))
        assert response.status_code == 404
        assert response.json()["error_code"] == "INVALID_PRODUCT_ID"

    def test_simple_parent(self, auth_client: TestClient, store: CatalogStore) -> None:
        """Simple products have no variations resource."""
        product = create_simple_product(store)
        response = auth_client.get(url(product))
        assert response.status_code == 404


class TestGetVariation:
    """Tests for GET /products/{product_id}/variations/{id}."""

    def test_get(self, auth_client: TestClient, variable_product: Product) -> None:
        """Returns the full representation."""
        small_id = variable_product.children[0]
        response = auth_client.get(url(variable_product, small_id))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == small_id
        assert data["sku"] == "DUMMY SKU VARIABLE SMALL"
        assert data["price"] == "10"
        assert data["regular_price"] == "10"
        assert data["purchasable"] is True
        assert data["manage_stock"] is False
        assert data["stock_status"] == "instock"
        assert data["image"] is None
        assert data["dimensions"] == {"length": "", "width": "", "height": ""}
        assert data["permalink"].endswith(f"?product={variable_product.id}&variation={small_id}")

    def test_get_without_permission(self, client: TestClient, variable_product: Product) -> None:
        """Anonymous callers are rejected."""
        response = client.get(url(variable_product, variable_product.children[0]))
        assert response.status_code == 401

    def test_get_invalid_id(self, auth_client: TestClient, variable_product: Product) -> None:
        """Id 0 is never a variation."""
        response = auth_client.get(url(variable_product, 0))
        assert response.status_code == 404
        assert response.json()["error_code"] == "INVALID_VARIATION_ID"

    def test_get_invalid_id_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers get 401 even for ids that do not exist."""
        response = client.get(url(variable_product, 0))
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_get_through_wrong_parent(
        self, auth_client: TestClient, store: CatalogStore, variable_product: Product
    ) -> None:
        """Variations are only reachable through their own parent."""
        other = create_variable_product(store, sku="OTHER")
        response = auth_client.get(url(variable_product, other.children[0]))
        assert response.status_code == 404


class TestUpdateVariation:
    """Tests for PUT /products/{product_id}/variations/{id}."""

    def test_update(self, auth_client: TestClient, variable_product: Product) -> None:
        """Writes submitted fields and keeps the rest."""
        small_id = variable_product.children[0]
        response = auth_client.put(
            url(variable_product, small_id),
            json={
                "sku": "FIXED-'SKU",
                "sale_price": "8",
                "description": "O_O",
                "image": {
                    "position": 0,
                    "src": "https://example.com/image.png",
                    "alt": "test upload",
                },
                "attributes": [{"name": "pa_size", "option": "medium"}],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "O_O"
        assert data["sku"] == "FIXED-'SKU"
        assert data["sale_price"] == "8"
        assert data["regular_price"] == "10"
        assert data["price"] == "8"
        assert data["on_sale"] is True
        assert data["image"]["src"] == "https://example.com/image.png"
        assert data["image"]["alt"] == "test upload"
        assert data["attributes"] == [{"id": 1, "name": "size", "option": "medium"}]

    def test_update_with_patch(self, auth_client: TestClient, variable_product: Product) -> None:
        """PATCH is an alias for PUT."""
        response = auth_client.patch(
            url(variable_product, variable_product.children[0]),
            json={"menu_order": 5},
        )
        assert response.status_code == 200
        assert response.json()["menu_order"] == 5

    def test_update_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers are rejected."""
        response = client.put(
            url(variable_product, variable_product.children[0]), json={"sku": "FIXED-SKU"}
        )
        assert response.status_code == 401

    def test_update_invalid_id(self, auth_client: TestClient, variable_product: Product) -> None:
        """Unknown ids are 404."""
        response = auth_client.put(url(variable_product, 0), json={"sku": "FIXED-SKU"})
        assert response.status_code == 404

    def test_update_invalid_id_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers get 401 even for ids that do not exist."""
        response = client.put(url(variable_product, 0), json={"sku": "FIXED-SKU"})
        assert response.status_code == 401

    def test_update_malformed_body_without_permission(self, client: TestClient) -> None:
        """Authorization is decided before the body is validated."""
        response = client.put(url(999, 0), json={"menu_order": "first"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_update_oversized_price(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """Prices with huge exponents are rejected instead of expanded."""
        response = auth_client.put(
            url(variable_product, variable_product.children[0]),
            json={"regular_price": "1e2000000"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PRICE"

    def test_update_invalid_price_is_atomic(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """Nothing is written when one field is rejected."""
        small_id = variable_product.children[0]
        response = auth_client.put(
            url(variable_product, small_id),
            json={"description": "changed", "regular_price": "abc"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PRICE"

        data = auth_client.get(url(variable_product, small_id)).json()
        assert data["description"] == ""
        assert data["regular_price"] == "10"

    def test_update_invalid_image(self, auth_client: TestClient, variable_product: Product) -> None:
        """Image sources must be fetchable URLs."""
        response = auth_client.put(
            url(variable_product, variable_product.children[0]),
            json={"image": {"src": "not-a-url"}},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_IMAGE"

    def test_update_invalid_attribute(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """Attributes must exist on the parent."""
        response = auth_client.put(
            url(variable_product, variable_product.children[0]),
            json={"attributes": [{"name": "color", "option": "red"}]},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ATTRIBUTE"

    def test_update_malformed_body(self, auth_client: TestClient, variable_product: Product) -> None:
        """Type errors in the body are 400 with field details."""
        response = auth_client.put(
            url(variable_product, variable_product.children[0]),
            json={"menu_order": "first"},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_PARAM"
        assert any("menu_order" in (d["field"] or "") for d in data["details"]["errors"])

    def test_duplicate_sku(self, auth_client: TestClient, variable_product: Product) -> None:
        """A SKU held by a sibling is rejected; the variation's own SKU is not."""
        small_id, large_id = variable_product.children

        response = auth_client.put(url(variable_product, small_id), json={"sku": "SKU-A"})
        assert response.status_code == 200
        response = auth_client.put(url(variable_product, large_id), json={"sku": "SKU-B"})
        assert response.status_code == 200

        response = auth_client.put(url(variable_product, large_id), json={"sku": "SKU-A"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_SKU"

        response = auth_client.put(url(variable_product, small_id), json={"sku": "SKU-A"})
        assert response.status_code == 200

    def test_update_manage_stock(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """manage_stock reports true, false, or 'parent' when the parent governs."""
        small_id = variable_product.children[0]

        response = auth_client.put(
            url(variable_product, small_id),
            json={"manage_stock": True, "stock_quantity": 0},
        )
        data = response.json()
        assert data["manage_stock"] is True
        assert data["stock_quantity"] == 0
        assert data["stock_status"] == "outofstock"
        assert data["purchasable"] is False

        response = auth_client.put(
            url(variable_product, small_id), json={"backorders": "notify"}
        )
        data = response.json()
        assert data["stock_status"] == "onbackorder"
        assert data["backorders_allowed"] is True
        assert data["backordered"] is True

        response = auth_client.put(url(variable_product, small_id), json={"manage_stock": False})
        data = response.json()
        assert data["manage_stock"] is False
        assert data["stock_quantity"] is None

        variable_product.set_manage_stock(True, 5)
        response = auth_client.put(url(variable_product, small_id), json={"manage_stock": False})
        data = response.json()
        assert data["manage_stock"] == "parent"
        assert data["stock_quantity"] == 5
        assert data["stock_status"] == "instock"


class TestCreateVariation:
    """Tests for POST /products/{product_id}/variations."""

    def test_create(self, auth_client: TestClient, variable_product: Product) -> None:
        """Creates a variation under the parent."""
        response = auth_client.post(
            url(variable_product),
            json={
                "sku": "DUMMY SKU VARIABLE MEDIUM",
                "regular_price": "12",
                "attributes": [{"name": "pa_size", "option": "medium"}],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["sku"] == "DUMMY SKU VARIABLE MEDIUM"
        assert data["price"] == "12"
        assert data["purchasable"] is True
        assert data["attributes"] == [{"id": 1, "name": "size", "option": "medium"}]

        listed = auth_client.get(url(variable_product)).json()
        assert len(listed) == 3
        assert data["id"] in variable_product.children

    def test_create_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers are rejected."""
        response = client.post(url(variable_product), json={"regular_price": "12"})
        assert response.status_code == 401

    def test_create_malformed_body_without_permission(self, client: TestClient) -> None:
        """Authorization is decided before the body is validated."""
        response = client.post(url(999), json={"regular_price": ["12"]})
        assert response.status_code == 401

    def test_create_non_object_body(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """Bodies must be JSON objects."""
        response = auth_client.post(url(variable_product), json=["12"])
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PARAM"

    def test_create_without_body(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """A missing body creates a variation with default fields."""
        response = auth_client.post(url(variable_product))
        assert response.status_code == 201
        data = response.json()
        assert data["sku"] == ""
        assert data["purchasable"] is False

    def test_create_unknown_parent(self, auth_client: TestClient) -> None:
        """Variations need a variable parent."""
        response = auth_client.post(url(999), json={"regular_price": "12"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "INVALID_PRODUCT_ID"


class TestDeleteVariation:
    """Tests for DELETE /products/{product_id}/variations/{id}."""

    def test_delete(self, auth_client: TestClient, variable_product: Product) -> None:
        """Forced delete returns the previous state."""
        small_id = variable_product.children[0]
        response = auth_client.delete(url(variable_product, small_id), params={"force": "true"})

        assert response.status_code == 200
        assert response.json()["previous"]["id"] == small_id
        assert len(auth_client.get(url(variable_product)).json()) == 1
        assert auth_client.get(url(variable_product, small_id)).status_code == 404

    def test_delete_without_force(
        self, auth_client: TestClient, variable_product: Product
    ) -> None:
        """Trashing is not supported."""
        response = auth_client.delete(url(variable_product, variable_product.children[0]))
        assert response.status_code == 501
        assert response.json()["error_code"] == "TRASH_NOT_SUPPORTED"

    def test_delete_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers are rejected."""
        response = client.delete(
            url(variable_product, variable_product.children[0]), params={"force": "true"}
        )
        assert response.status_code == 401

    def test_delete_invalid_id(self, auth_client: TestClient, variable_product: Product) -> None:
        """Unknown ids are 404."""
        response = auth_client.delete(url(variable_product, 0), params={"force": "true"})
        assert response.status_code == 404

    def test_delete_invalid_id_without_permission(
        self, client: TestClient, variable_product: Product
    ) -> None:
        """Anonymous callers get 401 even for ids that do not exist."""
        response = client.delete(url(variable_product, 0), params={"force": "true"})
        assert response.status_code == 401


class TestVariationLifecycle:
    """End-to-end scenario over one product."""

    def test_delete_then_create(self, auth_client: TestClient, variable_product: Product) -> None:
        """Deleting one of two variations and creating another leaves two."""
        first_id, second_id = variable_product.children
        auth_client.put(url(variable_product, first_id), json={"sku": "SKU-A"})
        auth_client.put(url(variable_product, second_id), json={"sku": "SKU-B"})

        response = auth_client.delete(url(variable_product, first_id), params={"force": "true"})
        assert response.status_code == 200

        listed = auth_client.get(url(variable_product)).json()
        assert [v["sku"] for v in listed] == ["SKU-B"]

        response = auth_client.post(
            url(variable_product),
            json={
                "sku": "SKU-C",
                "regular_price": "12",
                "attributes": [{"name": "size", "option": "medium"}],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["price"] == "12"
        assert data["purchasable"] is True

        assert len(auth_client.get(url(variable_product)).json()) == 2
