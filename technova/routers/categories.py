from typing import List

from fastapi import APIRouter, Depends

from technova.core.http_client import CatalogClient
from technova.dependencies import get_catalog

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])

@router.get("/", response_model=List[str])
async def list_categories(catalog: CatalogClient = Depends(get_catalog)):
    return await catalog.get_categories()
