import base64
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from passlib.context import CryptContext
from pymongo.errors import PyMongoError

from .config import settings
from .db import users_coll
from .errors import AuthorizationError
from technova.models import UserInDB

logger = logging.getLogger("technova.security")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def is_admin(user: UserInDB) -> bool:
    return user.username in settings.admin_usernames


def parse_basic_auth(header: str) -> tuple[str, str]:
    try:
        decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
        username, password = decoded.split(":", 1)
    except (IndexError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header"
        )
    return username, password


async def _find_user_by_username(username: str) -> Optional[UserInDB]:
    doc = await users_coll.find_one({"username": username})
    if not doc:
        return None
    return UserInDB(
        id=str(doc.get("_id")),
        username=doc["username"],
        password=doc["password"],
    )


async def get_current_user(request: Request) -> UserInDB:
    """
    Basic Auth against the users collection.
    No WWW-Authenticate header is sent, so browsers don't pop a login dialog.
    """
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Basic "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    username, password = parse_basic_auth(auth)
    user = await _find_user_by_username(username)
    if not user or not verify_password(password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    return user


async def get_optional_user(request: Request) -> Optional[UserInDB]:
    """Like get_current_user, but anonymous visitors get None instead of 401."""
    if not request.headers.get("Authorization"):
        return None
    try:
        return await get_current_user(request)
    except HTTPException:
        return None
    except PyMongoError as e:
        logger.warning("user lookup failed, serving request anonymously: %s", e)
        return None


async def require_admin(user: UserInDB = Depends(get_current_user)) -> UserInDB:
    if not is_admin(user):
        raise AuthorizationError("Admin only")
    return user
