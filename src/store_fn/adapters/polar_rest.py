from __future__ import annotations

import logging
from typing import Any, AsyncIterator, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from store_fn.adapters.errors import PolarAdapterError
from store_fn.models import Benefit, Page, Product, ProductCreateDefinition

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

POLAR_SERVERS = {
    "production": "https://api.polar.sh",
    "sandbox": "https://sandbox-api.polar.sh",
}


class PolarRESTAdapter:
    """Real adapter that lists, creates and updates catalog data via the Polar REST API."""

    def __init__(
        self,
        access_token: str,
        *,
        server: str = "production",
        base_url: str | None = None,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("Polar access token must be provided")
        if base_url is None:
            if server not in POLAR_SERVERS:
                raise ValueError(
                    f"Unknown Polar server '{server}'. Expected one of: "
                    f"{', '.join(sorted(POLAR_SERVERS))}"
                )
            base_url = POLAR_SERVERS[server]
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport
        self._headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        self.products = PolarProductsResource(self)
        self.benefits = PolarBenefitsResource(self)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug("Calling Polar %s %s operation=%s", method, path, operation)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as exc:
            logger.exception("Polar %s timed out", operation)
            raise PolarAdapterError(
                f"Polar {operation} timed out",
                payload=self._failure_payload(operation, error="timeout"),
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Polar %s failed due to HTTP error", operation)
            raise PolarAdapterError(
                f"Polar {operation} failed",
                payload=self._failure_payload(operation, error=str(exc)),
            ) from exc

        if not response.is_success:
            logger.error(
                "Polar %s failed with status=%s body=%s",
                operation,
                response.status_code,
                response.text,
            )
            raise PolarAdapterError(
                f"Polar {operation} failed with status {response.status_code}",
                payload=self._failure_payload(
                    operation,
                    status_code=response.status_code,
                    body=response.text,
                ),
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.exception("Polar returned invalid JSON for %s", operation)
            raise PolarAdapterError(
                "Invalid Polar response",
                payload=self._failure_payload(
                    operation,
                    status_code=response.status_code,
                    body=response.text,
                ),
            ) from exc

    async def paginate(
        self,
        path: str,
        model: type[ModelT],
        *,
        operation: str,
        params: dict[str, Any],
    ) -> AsyncIterator[Page[ModelT]]:
        """Yield every page of a listing endpoint, starting at page 1."""

        page_number = 1
        while True:
            data = await self.request(
                "GET",
                path,
                operation=operation,
                params={**params, "page": page_number, "limit": self._page_size},
            )
            page = self._parse(Page[model], data, operation)
            yield page
            if not page.items or page_number >= page.pagination.max_page:
                return
            page_number += 1

    @classmethod
    def _parse(cls, model: type[ModelT], data: Any, operation: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected Polar payload for %s: %s", operation, exc)
            raise PolarAdapterError(
                f"Unexpected Polar response for {operation}",
                payload=cls._failure_payload(operation, error=str(exc)),
            ) from exc

    @staticmethod
    def _failure_payload(
        operation: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        error: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": "failed", "operation": operation}
        if status_code is not None:
            payload["status_code"] = status_code
        if body is not None:
            payload["body"] = body
        if error is not None:
            payload["error"] = error
        return payload


class PolarProductsResource:
    def __init__(self, adapter: PolarRESTAdapter) -> None:
        self._adapter = adapter

    def list(self, organization_id: str) -> AsyncIterator[Page[Product]]:
        return self._adapter.paginate(
            "/v1/products/",
            Product,
            operation="products.list",
            params={"organization_id": organization_id},
        )

    async def create(self, definition: ProductCreateDefinition) -> Product:
        data = await self._adapter.request(
            "POST",
            "/v1/products/",
            operation="products.create",
            json=definition.to_payload(),
        )
        product = self._adapter._parse(Product, data, "products.create")
        logger.debug("Polar product created id=%s key=%s", product.id, product.key)
        return product

    async def update(self, id: str, payload: ProductCreateDefinition) -> Product:
        data = await self._adapter.request(
            "PATCH",
            f"/v1/products/{id}",
            operation="products.update",
            json=payload.to_payload(),
        )
        product = self._adapter._parse(Product, data, "products.update")
        logger.debug("Polar product updated id=%s key=%s", product.id, product.key)
        return product


class PolarBenefitsResource:
    def __init__(self, adapter: PolarRESTAdapter) -> None:
        self._adapter = adapter

    def list(self, organization_id: str) -> AsyncIterator[Page[Benefit]]:
        return self._adapter.paginate(
            "/v1/benefits/",
            Benefit,
            operation="benefits.list",
            params={"organization_id": organization_id},
        )


__all__ = ["POLAR_SERVERS", "PolarBenefitsResource", "PolarProductsResource", "PolarRESTAdapter"]
