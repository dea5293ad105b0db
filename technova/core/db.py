from motor.motor_asyncio import AsyncIOMotorClient
from .config import settings

client = AsyncIOMotorClient(
    settings.mongo_uri,
    tz_aware=True,
    serverSelectionTimeoutMS=settings.mongo_timeout_ms,
)
db = client[settings.mongo_db]

users_coll = db["users"]
interactions_coll = db["user_interactions"]
