from fastapi import APIRouter, Depends

from technova.core.http_client import CatalogClient
from technova.dependencies import get_catalog

router = APIRouter(prefix="/api/v1/health", tags=["health"])

@router.get("")
async def health(catalog: CatalogClient = Depends(get_catalog)):
    return {"status": "ok", "catalog": catalog.base_url}
