from fastapi import FastAPI
from fastapi.testclient import TestClient

from api_help.options import ApiHelpOptions, LoadingPolicy
from api_help.routes import help_router

import shop

ORDER_DETAIL_DATA = {
    "id": 0,
    "status": "open",
    "customer": {"name": "string", "email": "string"},
    "lines": [{"sku": "string", "quantity": 0}],
}

ORDER_DETAIL_SCHEMA = {
    "id": "int",
    "status": "OrderStatus",
    "customer": {"name": "string", "email": "string"},
    "lines": [{"sku": "string", "quantity": "int"}],
}


def _lazy_app() -> FastAPI:
    app = FastAPI()

    @app.get("/orders", tags=["Orders"])
    def list_orders() -> list[shop.Order]:
        return []

    @app.get("/orders/{id}", tags=["Orders"])
    def get_order(id: int) -> shop.Order:
        """Fetch one order."""
        raise NotImplementedError

    app.include_router(help_router(ApiHelpOptions(loading_policy=LoadingPolicy.LAZY)))
    return app


class TestHelpListing:
    def test_eager_listing(self):
        client = TestClient(shop.app)
        resp = client.get("/api/help")
        assert resp.status_code == 200

        orders = resp.json()["Orders"]
        assert orders["GET /orders"] == {
            "Summary": "List all orders.",
            "Request": {"limit": {"Source": "query", "Data": 0}},
            "Response": {
                "Data": [{"id": 0, "total": 0}],
                "Schema": [{"id": "int", "total": "decimal"}],
            },
        }

    def test_nested_response(self):
        orders = TestClient(shop.app).get("/api/help").json()["Orders"]
        detail = orders["GET /orders/{id}"]
        assert detail["Request"] == {
            "id": {"Source": "path", "Data": 0},
            "x-request-id": {"Source": "header", "Data": "string"},
        }
        assert detail["Response"] == {"Data": ORDER_DETAIL_DATA, "Schema": ORDER_DETAIL_SCHEMA}

    def test_no_data_responses(self):
        orders = TestClient(shop.app).get("/api/help").json()["Orders"]
        assert orders["POST /orders"]["Response"] == {"Data": None, "Schema": None}
        assert orders["DELETE /orders/{id}"]["Response"] == {"Data": None, "Schema": None}

    def test_injected_parameters_are_not_documented(self):
        orders = TestClient(shop.app).get("/api/help").json()["Orders"]
        assert "db" not in orders["GET /orders"]["Request"]
        assert "db" not in orders["POST /orders"]["Request"]
        assert "background_tasks" not in orders["DELETE /orders/{id}"]["Request"]

    def test_body_parameter_has_schema(self):
        orders = TestClient(shop.app).get("/api/help").json()["Orders"]
        order = orders["POST /orders"]["Request"]["order"]
        assert order["Source"] == "body"
        assert order["Schema"] == {
            "customer": {"name": "string", "email": "string"},
            "lines": [{"sku": "string", "quantity": "int"}],
        }

    def test_declared_response_model_is_used_for_response_objects(self):
        orders = TestClient(shop.app).get("/api/help").json()["Orders"]
        refund = orders["POST /orders/{id}/refund"]["Response"]
        assert refund == {"Data": {"order_id": 0, "amount": 0}, "Schema": {"order_id": "int", "amount": "decimal"}}

    def test_cyclic_model_is_truncated(self):
        catalog = TestClient(shop.app).get("/api/help").json()["Catalog"]
        response = catalog["GET /categories"]["Response"]
        assert response["Data"] == [{"name": "string", "parent": {}}]
        assert response["Schema"] == [{"name": "string", "parent": {}}]

    def test_undocumented_handler_uses_display_name(self):
        catalog = TestClient(shop.app).get("/api/help").json()["Catalog"]
        assert catalog["GET /categories"]["Summary"] == "shop.list_categories"

    def test_lazy_listing(self):
        resp = TestClient(_lazy_app()).get("/api/help")
        assert resp.status_code == 200
        assert resp.json()["Orders"] == ["GET /orders", "GET /orders/{id}"]


class TestHelpLookup:
    def test_single_endpoint(self):
        resp = TestClient(shop.app).get("/api/help/get", params={"relativePath": "/orders/{id}", "httpMethod": "GET"})
        assert resp.status_code == 200
        document = resp.json()
        assert list(document) == ["GET /orders/{id}"]
        assert document["GET /orders/{id}"]["Response"]["Data"] == ORDER_DETAIL_DATA

    def test_any_method(self):
        resp = TestClient(shop.app).get("/api/help/get", params={"relativePath": "/orders/{id}"})
        assert set(resp.json()) == {"GET /orders/{id}", "DELETE /orders/{id}"}

    def test_unmatched_path(self):
        resp = TestClient(shop.app).get("/api/help/get", params={"relativePath": "/nowhere"})
        assert resp.status_code == 200
        assert resp.json() == {}

    def test_missing_path(self):
        resp = TestClient(shop.app).get("/api/help/get")
        assert resp.status_code == 200
        assert resp.json() == {}

    def test_lookup_expands_under_lazy_policy(self):
        resp = TestClient(_lazy_app()).get("/api/help/get", params={"relativePath": "/orders/{id}"})
        assert resp.json()["GET /orders/{id}"]["Summary"] == "Fetch one order."

    def test_eager_listing_matches_lookup(self):
        client = TestClient(shop.app)
        listing = client.get("/api/help").json()["Orders"]
        for key, detail in listing.items():
            method, path = key.split(" ", 1)
            lookup = client.get("/api/help/get", params={"relativePath": path, "httpMethod": method}).json()
            assert lookup == {key: detail}
