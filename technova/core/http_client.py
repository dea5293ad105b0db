# technova/core/http_client.py
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from .cache import TTLCache
from .config import settings
from .errors import TransientIOError
from technova.models import Product

logger = logging.getLogger("technova.catalog")


class CatalogClient:
    """Read-only client for the external product catalog."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.catalog_base_url).rstrip("/")
        self._timeout = httpx.Timeout(
            connect=settings.http_connect_timeout,
            read=settings.http_read_timeout,
            write=settings.http_write_timeout,
            pool=settings.http_pool_timeout,
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=transport,
        )
        self._cache = TTLCache(ttl_seconds=settings.catalog_cache_ttl if cache_ttl is None else cache_ttl)

    async def aclose(self):
        await self._client.aclose()

    async def _get_json(self, path: str):
        try:
            resp = await self._client.get(path)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("catalog GET %s failed: %s", path, e)
            raise TransientIOError(f"catalog request {path} failed") from e

        # the catalog answers unknown ids with an empty 200
        if not resp.content.strip():
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransientIOError(f"catalog returned invalid JSON for {path}") from e

    @staticmethod
    def _parse_products(data) -> List[Product]:
        out: List[Product] = []
        for raw in data or []:
            try:
                out.append(Product.model_validate(raw))
            except SchemaError:
                logger.warning("skipping malformed catalog product: %r", raw)
        return out

    async def get_product(self, product_id: int) -> Optional[Product]:
        data = await self._get_json(f"/products/{product_id}")
        if not data:
            return None
        try:
            return Product.model_validate(data)
        except SchemaError as e:
            raise TransientIOError(f"catalog returned malformed product {product_id}") from e

    async def get_products(self, category: str | None = None) -> List[Product]:
        path = f"/products/category/{category}" if category else "/products"

        async def producer():
            return self._parse_products(await self._get_json(path))

        return await self._cache.get_or_set(path, producer)

    async def get_categories(self) -> List[str]:
        async def producer():
            data = await self._get_json("/products/categories")
            return [str(c) for c in data or []]

        return await self._cache.get_or_set("/products/categories", producer)


catalog_client = CatalogClient()
