from __future__ import annotations

import json

import httpx
import pytest
from httpx import MockTransport, Request, Response

from store_fn.adapters import PolarAdapterError, PolarRESTAdapter
from store_fn.models import FixedPriceDefinition, ProductCreateDefinition
from store_fn.snapshot import fetch_all

PRODUCT_JSON = {
    "id": "prod_1",
    "name": "Pro",
    "created_at": "2024-05-01T12:30:00Z",
    "organization_id": "org_1",
    "metadata": {"key": "pro"},
    "prices": [],
}


def _page(items, max_page):
    return {"items": items, "pagination": {"total_count": len(items), "max_page": max_page}}


def _definition() -> ProductCreateDefinition:
    return ProductCreateDefinition(
        name="Pro",
        prices=[FixedPriceDefinition(price_amount=1999)],
        metadata={"key": "pro"},
    )


@pytest.mark.asyncio
async def test_products_list_follows_pagination() -> None:
    requests: list[Request] = []

    async def _handler(request: Request) -> Response:
        requests.append(request)
        page = int(request.url.params["page"])
        item = dict(PRODUCT_JSON, id=f"prod_{page}")
        return Response(200, json=_page([item], max_page=3))

    adapter = PolarRESTAdapter("token-123", page_size=1, transport=MockTransport(_handler))

    products = await fetch_all(adapter.products.list("org_1"))

    assert [product.id for product in products] == ["prod_1", "prod_2", "prod_3"]
    assert [request.url.params["page"] for request in requests] == ["1", "2", "3"]
    assert all(request.url.params["organization_id"] == "org_1" for request in requests)
    assert all(request.url.params["limit"] == "1" for request in requests)
    assert requests[0].url.host == "api.polar.sh"
    assert requests[0].url.path == "/v1/products/"
    assert requests[0].headers["Authorization"] == "Bearer token-123"


@pytest.mark.asyncio
async def test_listing_stops_on_empty_page() -> None:
    calls = 0

    async def _handler(request: Request) -> Response:
        nonlocal calls
        calls += 1
        return Response(200, json=_page([], max_page=10))

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    benefits = await fetch_all(adapter.benefits.list("org_1"))

    assert benefits == []
    assert calls == 1


@pytest.mark.asyncio
async def test_create_posts_definition_payload() -> None:
    captured: dict[str, str] = {}

    async def _handler(request: Request) -> Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = request.content.decode()
        return Response(201, json=PRODUCT_JSON)

    adapter = PolarRESTAdapter(
        "token-123", server="sandbox", transport=MockTransport(_handler)
    )

    product = await adapter.products.create(_definition())

    assert product.id == "prod_1"
    assert adapter.base_url == "https://sandbox-api.polar.sh"
    assert captured["method"] == "POST"
    assert captured["path"] == "/v1/products/"
    assert json.loads(captured["body"]) == {
        "name": "Pro",
        "prices": [{"amount_type": "fixed", "price_amount": 1999}],
        "metadata": {"key": "pro"},
        "medias": [],
    }


@pytest.mark.asyncio
async def test_update_patches_product_by_id() -> None:
    captured: dict[str, str] = {}

    async def _handler(request: Request) -> Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        return Response(200, json=PRODUCT_JSON)

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    await adapter.products.update("prod_1", _definition())

    assert captured == {"method": "PATCH", "path": "/v1/products/prod_1"}


@pytest.mark.asyncio
async def test_non_success_response_raises_with_payload() -> None:
    async def _handler(request: Request) -> Response:
        return Response(422, text="unprocessable")

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    with pytest.raises(PolarAdapterError) as excinfo:
        await adapter.products.create(_definition())

    payload = excinfo.value.payload
    assert payload["status"] == "failed"
    assert payload["operation"] == "products.create"
    assert payload["status_code"] == 422
    assert payload["body"] == "unprocessable"


@pytest.mark.asyncio
async def test_timeout_raises_adapter_error() -> None:
    async def _handler(request: Request) -> Response:
        raise httpx.ReadTimeout("slow", request=request)

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    with pytest.raises(PolarAdapterError) as excinfo:
        await adapter.products.update("prod_1", _definition())

    assert excinfo.value.payload["error"] == "timeout"


@pytest.mark.asyncio
async def test_invalid_json_raises_adapter_error() -> None:
    async def _handler(request: Request) -> Response:
        return Response(200, text="<html>not json</html>")

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    with pytest.raises(PolarAdapterError) as excinfo:
        await adapter.products.create(_definition())

    assert excinfo.value.payload["body"] == "<html>not json</html>"


@pytest.mark.asyncio
async def test_unexpected_shape_raises_adapter_error() -> None:
    async def _handler(request: Request) -> Response:
        return Response(200, json={"items": "nope"})

    adapter = PolarRESTAdapter("token-123", transport=MockTransport(_handler))

    with pytest.raises(PolarAdapterError):
        await fetch_all(adapter.products.list("org_1"))


def test_constructor_validates_arguments() -> None:
    with pytest.raises(ValueError):
        PolarRESTAdapter("")
    with pytest.raises(ValueError):
        PolarRESTAdapter("token-123", server="staging")
    adapter = PolarRESTAdapter("token-123", server="staging", base_url="http://localhost:8000/")
    assert adapter.base_url == "http://localhost:8000"
