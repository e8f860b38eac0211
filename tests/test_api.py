"""
API tests for the stock and transaction endpoints
"""

from decimal import Decimal


STOCK = "/api/v1/stock"
TRANSACTIONS = "/api/v1/transactions"


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"


class TestAuthentication:

    def test_missing_token(self, client, product):
        response = client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": 1})
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client, product):
        response = client.post(
            f"{STOCK}/increase",
            json={"product_id": product.id, "quantity": 1},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestStockEndpoints:

    def test_increase(self, client, auth_headers, product, staff_user):
        response = client.post(
            f"{STOCK}/increase",
            json={"product_id": product.id, "quantity": 5, "notes": "Delivery"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["stock"] == 15
        assert data["entry"]["transaction_type"] == "INCREASE"
        assert data["entry"]["stock_before"] == 10
        assert data["entry"]["created_by"] == staff_user.id

    def test_decrease_insufficient_stock(self, client, auth_headers, product, db_helper, database):
        response = client.post(
            f"{STOCK}/decrease",
            json={"product_id": product.id, "quantity": 20},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json() == {
            "error": "INSUFFICIENT_STOCK",
            "message": f"Insufficient stock for product {product.id}: available 10, requested 20",
            "retryable": False,
        }
        assert db_helper.stock_of(database, product.id) == 10

    def test_unknown_product(self, client, auth_headers):
        response = client.post(f"{STOCK}/increase", json={"product_id": 9999, "quantity": 1}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "PRODUCT_NOT_FOUND"

    def test_inactive_product(self, client, auth_headers, make_product):
        inactive = make_product(status="INACTIVE")
        response = client.post(
            f"{STOCK}/decrease", json={"product_id": inactive.id, "quantity": 1}, headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json()["error"] == "PRODUCT_INACTIVE"

    def test_non_positive_quantity_is_unprocessable(self, client, auth_headers, product):
        response = client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": 0}, headers=auth_headers)
        assert response.status_code == 422

    def test_persistence_failure_is_retryable(self, client, auth_headers, product, monkeypatch):
        from backoffice.core.exceptions import PersistenceFailure
        from backoffice.services.stock import StockAdjustmentService

        def unavailable(self, *args, **kwargs):
            raise PersistenceFailure("Timed out waiting for the product lock; the request can be retried")

        monkeypatch.setattr(StockAdjustmentService, "increase", unavailable)

        response = client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": 1}, headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["retryable"] is True
        assert response.headers["Retry-After"] == "1"

    def test_logs_newest_first(self, client, auth_headers, product):
        for quantity in (1, 2, 3):
            client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": quantity}, headers=auth_headers)

        response = client.get(f"{STOCK}/logs/{product.id}", params={"page_size": 2}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["page_size"] == 2
        assert [log["quantity"] for log in data["logs"]] == [3, 2]

    def test_logs_filter_by_kind(self, client, auth_headers, product):
        client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": 4}, headers=auth_headers)
        client.post(f"{STOCK}/decrease", json={"product_id": product.id, "quantity": 1}, headers=auth_headers)

        response = client.get(
            f"{STOCK}/logs/{product.id}", params={"transaction_type": "DECREASE"}, headers=auth_headers
        )

        assert [log["transaction_type"] for log in response.json()["logs"]] == ["DECREASE"]

    def test_recent_logs(self, client, auth_headers, product):
        client.post(f"{STOCK}/increase", json={"product_id": product.id, "quantity": 1}, headers=auth_headers)

        response = client.get(f"{STOCK}/logs/recent", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1


class TestTransactionEndpoints:

    def test_create_decrease_transaction(self, client, auth_headers, product, store):
        response = client.post(
            TRANSACTIONS,
            json={
                "transaction_type": "DECREASE",
                "product_id": product.id,
                "store_id": store.id,
                "quantity": 3,
                "unit_price": "2.50",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(str(data["total_amount"])) == Decimal("7.50")
        assert data["store_name"] == "Downtown Store"
        assert data["stock_log_id"] is not None

    def test_decrease_without_store(self, client, auth_headers, product):
        response = client.post(
            TRANSACTIONS,
            json={"transaction_type": "DECREASE", "product_id": product.id, "quantity": 1, "unit_price": "1.00"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_MOVEMENT_CONTEXT"

    def test_list_transactions(self, client, auth_headers, product, store):
        client.post(
            TRANSACTIONS,
            json={"transaction_type": "INCREASE", "product_id": product.id, "quantity": 2, "unit_price": "1.00"},
            headers=auth_headers,
        )

        response = client.get(TRANSACTIONS, params={"limit": 10}, headers=auth_headers)
        by_product = client.get(f"{TRANSACTIONS}/product/{product.id}", headers=auth_headers)
        by_store = client.get(f"{TRANSACTIONS}/store/{store.id}", headers=auth_headers)

        assert response.json()["total"] == 1
        assert response.json()["limit"] == 10
        assert len(by_product.json()) == 1
        assert by_store.json() == []


class TestConstraintFailures:

    def test_unknown_actor_is_rejected_without_retry(self, client, token_factory, product, staff_user):
        response = client.post(
            f"{STOCK}/increase",
            json={"product_id": product.id, "quantity": 1},
            headers={"Authorization": f"Bearer {token_factory(999)}"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "CONSTRAINT_VIOLATION"
        assert response.json()["retryable"] is False
        assert "Retry-After" not in response.headers
