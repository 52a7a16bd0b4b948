"""Shared fixtures for the store-fn test-suite."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from store_fn.adapters import MockPolarAdapter  # noqa: E402
from store_fn.config import reset_config  # noqa: E402
from store_fn.models import Product  # noqa: E402
from store_fn.store import create_store  # noqa: E402

ORGANIZATION_ID = "org_test"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests start with a clean slate for Polar variables."""

    for key in (
        "POLAR_ACCESS_TOKEN",
        "POLAR_ORGANIZATION_ID",
        "POLAR_SERVER",
        "POLAR_TIMEOUT",
        "DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def mock_client() -> MockPolarAdapter:
    return MockPolarAdapter(ORGANIZATION_ID)


@pytest.fixture
def store(mock_client):
    return create_store(client=mock_client, organization_id=ORGANIZATION_ID)


def make_remote_product(key: str, *, product_id: str | None = None, **overrides: Any) -> Product:
    """Build a remote product record carrying ``key`` in its metadata."""

    data: dict[str, Any] = {
        "id": product_id or f"prod_{key}",
        "name": f"Remote {key}",
        "created_at": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        "organization_id": ORGANIZATION_ID,
        "metadata": {"key": key},
        "prices": [
            {
                "id": f"price_{key}",
                "amount_type": "fixed",
                "price_amount": 1000,
                "price_currency": "usd",
                "type": "one_time",
                "product_id": product_id or f"prod_{key}",
                "created_at": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
            }
        ],
    }
    data.update(overrides)
    return Product.model_validate(data)
