from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from technova.core.security import get_optional_user
from technova.dependencies import get_recommender
from technova.models import Recommendation, RecommendedProduct, UserInDB
from technova.services.recommender import PersonalRecommender

router = APIRouter(prefix="/api/v1/recommendations", tags=["recommendations"])


@router.get("", response_model=List[Recommendation])
async def get_product_recommendations(
    limit: int = Query(8, ge=1, le=100),
    recommender: PersonalRecommender = Depends(get_recommender),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    if not user:
        return []
    return await recommender.recommend(user.id, limit)


@router.get("/products", response_model=List[RecommendedProduct])
async def get_recommended_products(
    limit: int = Query(8, ge=1, le=100),
    recommender: PersonalRecommender = Depends(get_recommender),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    if not user:
        return []
    return await recommender.recommend_products(user.id, limit)
