from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from technova.core.db import users_coll
from technova.core.security import hash_password, get_current_user, is_admin
from technova.dependencies import get_event_store
from technova.models import InteractionEvent, InteractionType, UserInDB, UserPublic, UserRegister
from technova.services.store import EventStore

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/registration", response_model=UserPublic)
async def register_user(body: UserRegister):

    if body.password != body.passwordConfirmation:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    if len(body.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    if len(body.username.strip()) < 3:
        raise HTTPException(status_code=400, detail="Username must be at least 3 characters")

    existing = await users_coll.find_one({"username": body.username.strip()})
    if existing:
        raise HTTPException(status_code=400, detail="Username already exists")

    doc = {
        "username": body.username.strip(),
        "password": hash_password(body.password),
        "created_at": datetime.now(timezone.utc),
    }

    res = await users_coll.insert_one(doc)

    return UserPublic(id=str(res.inserted_id), username=body.username.strip())


@router.get("/me", response_model=UserPublic)
async def get_me(user: UserInDB = Depends(get_current_user)):
    return UserPublic(id=user.id, username=user.username, is_admin=is_admin(user))


@router.get("/me/history", response_model=List[InteractionEvent])
async def me_history(
        all: bool = Query(True),
        limit: Optional[int] = Query(None, ge=1, le=500),
        user: UserInDB = Depends(get_current_user),
        store: EventStore = Depends(get_event_store),
):
    events = await store.query(user_id=user.id, descending=True)
    if not all:
        events = [e for e in events if e.interaction_type != InteractionType.VIEW]
    return events[: limit or 500]
