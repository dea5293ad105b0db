from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from technova.core.security import get_optional_user
from technova.dependencies import get_recorder
from technova.models import InteractionType, OrderItem, UserInDB
from technova.services.recorder import InteractionRecorder

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.post("/items")
async def add_to_cart(
    item: OrderItem,
    background: BackgroundTasks,
    recorder: InteractionRecorder = Depends(get_recorder),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    # the basket itself lives client-side; only the tracking happens here
    if user:
        background.add_task(
            recorder.dispatch, user.id, item.product_id, InteractionType.CART_ADD, item.category
        )
    return {"message": "added", "product_id": item.product_id}
