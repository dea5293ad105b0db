import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel

from technova.core.errors import TransientIOError
from technova.core.http_client import CatalogClient
from technova.core.security import get_optional_user
from technova.dependencies import get_catalog, get_recorder, get_similarity_scorer
from technova.models import InteractionType, Product, UserInDB
from technova.services.recorder import InteractionRecorder
from technova.services.similarity import SimilarityScorer

logger = logging.getLogger("technova.products")

router = APIRouter(prefix="/api/v1/products", tags=["products"])


class ProductsResponse(BaseModel):
    count: int
    items: List[Product]


@router.get("", response_model=ProductsResponse)
async def list_products(
    category: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=200),
    catalog: CatalogClient = Depends(get_catalog),
):
    items = await catalog.get_products(category=category)
    if limit:
        items = items[:limit]
    return ProductsResponse(count=len(items), items=items)


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    background: BackgroundTasks,
    catalog: CatalogClient = Depends(get_catalog),
    recorder: InteractionRecorder = Depends(get_recorder),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    product = await catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if user:
        background.add_task(recorder.dispatch, user.id, product.id, InteractionType.VIEW, product.category)

    return product


@router.get("/{product_id}/similar", response_model=List[Product])
async def similar_products(
    product_id: int,
    category: Optional[str] = None,
    price: Optional[float] = Query(None, ge=0),
    limit: int = Query(4, ge=1, le=50),
    catalog: CatalogClient = Depends(get_catalog),
    scorer: SimilarityScorer = Depends(get_similarity_scorer),
):
    if category is None or price is None:
        try:
            seed = await catalog.get_product(product_id)
        except TransientIOError as e:
            logger.warning("seed product %s unavailable: %s", product_id, e)
            return []
        if not seed:
            raise HTTPException(status_code=404, detail="Product not found")
        category = seed.category if category is None else category
        price = seed.price if price is None else price

    return await scorer.similar(product_id, category, price, limit)
