"""
Tests for the valuation HTTP API.

Verifies:
- Health endpoints
- Collection valuation round trip through the request schema
- Bad input maps to 400, a missing rate table to 422
"""

from pathlib import Path
import sys

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from utils.config import Config
from web.app import create_app


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def client():
    config = Config(display_currency="SEK", region="europe", workers=1)
    return TestClient(create_app(config))


@pytest.fixture
def payload():
    return {
        "rates": {
            "base": "USD",
            "date": "2024-01-01",
            "rates": {"EUR": 0.92, "SEK": 10.5},
        },
        "items": [
            {
                "name": "Kind of Blue",
                "item_id": "1001",
                "condition_text": "New",
                "purchase_amount": 50,
                "purchase_currency": "USD",
                "observations": [
                    {"price": "$50.00", "condition": "New", "sale_date": "May 1, 2025"},
                    {"price": "$60.00", "condition": "New", "sale_date": "May 2, 2025"},
                    {"currency": "USD", "amount": 70, "condition": "New", "sale_date": "May 3, 2025"},
                    {"price": "about 25 bucks", "condition": "New", "sale_date": "May 3, 2025"},
                ],
            },
            {"name": "Private Pressing", "purchase_amount": 1000, "purchase_currency": "SEK"},
        ],
    }


# =============================================================================
# Test: Endpoints
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_api_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0"


class TestValuation:

    def test_values_collection(self, client, payload):
        response = client.post("/api/valuation", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["display_currency"] == "SEK"
        first, second = data["items"]
        assert first["estimated_value"] == 630
        assert first["valuation"]["classification"] == "exact"
        assert second["estimated_value"] == 599
        assert data["totals"]["purchase_price"] == 525 + 998
        assert data["diagnostics"]["unrecognized_formats"] == ["about 25 bucks"]

    def test_request_overrides_display_currency(self, client, payload):
        payload["display_currency"] = "USD"
        data = client.post("/api/valuation", json=payload).json()
        assert data["items"][0]["estimated_value"] == 60

    def test_invalid_region(self, client, payload):
        payload["region"] = "atlantis"
        response = client.post("/api/valuation", json=payload)
        assert response.status_code == 400
        assert "Valid options" in response.json()["detail"]

    def test_invalid_condition(self, client, payload):
        payload["condition"] = "mint"
        assert client.post("/api/valuation", json=payload).status_code == 400

    def test_missing_rates_rejected(self, client, payload):
        del payload["rates"]
        assert client.post("/api/valuation", json=payload).status_code == 422

    def test_unparseable_price_recorded_not_fatal(self, client, payload):
        payload["items"][0]["observations"].append(
            {"price": "EUR ,", "condition": "New", "sale_date": "May 3, 2025"}
        )
        response = client.post("/api/valuation", json=payload)
        assert response.status_code == 200
        assert "EUR ," in response.json()["diagnostics"]["unrecognized_formats"]


class TestConfiguredDefaults:
    """Configuration fills values the request leaves out."""

    def test_configured_base_currency_when_rates_omit_base(self):
        client = TestClient(create_app(Config(base_currency="EUR", display_currency="EUR")))
        payload = {
            "rates": {"date": "2024-01-01", "rates": {"USD": 1.25}},
            "items": [{"name": "Private Pressing", "purchase_amount": 100, "purchase_currency": "USD"}],
        }

        data = client.post("/api/valuation", json=payload).json()

        assert data["base_currency"] == "EUR"
        # 100 USD -> 80 EUR, 60% -> 48 EUR
        assert data["items"][0]["purchase_price"] == 80
        assert data["items"][0]["estimated_value"] == 48

    def test_configured_region_validated(self, payload):
        client = TestClient(create_app(Config(region="atlantis")))
        response = client.post("/api/valuation", json=payload)
        assert response.status_code == 400
