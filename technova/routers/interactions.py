from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from technova.core.security import get_optional_user
from technova.dependencies import get_recorder
from technova.models import InteractionIn, OrderIn, RecordResult, UserInDB
from technova.services.recorder import InteractionRecorder

router = APIRouter(prefix="/api/v1/interactions", tags=["interactions"])


@router.post("", response_model=RecordResult)
async def record_interaction(
    body: InteractionIn,
    recorder: InteractionRecorder = Depends(get_recorder),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    return await recorder.record(
        user.id if user else None,
        body.product_id,
        body.interaction_type,
        body.category,
    )


@router.post("/purchases", status_code=202)
async def record_order_purchases(
    body: OrderIn,
    background: BackgroundTasks,
    recorder: InteractionRecorder = Depends(get_recorder),
    user: Optional[UserInDB] = Depends(get_optional_user),
):
    if user and body.items:
        background.add_task(recorder.dispatch_many, user.id, body.items)
    return {"message": "accepted", "items": len(body.items)}
