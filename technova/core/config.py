from typing import List

from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    port: int = int(os.getenv("PORT", "9000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    mongo_uri: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db: str = os.getenv("MONGO_DB", "technova")
    mongo_timeout_ms: int = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    catalog_base_url: str = os.getenv("CATALOG_BASE_URL", "https://fakestoreapi.com")
    catalog_cache_ttl: int = int(os.getenv("CATALOG_CACHE_TTL", "60"))
    http_connect_timeout: float = float(os.getenv("HTTP_CONNECT_TIMEOUT", "5"))
    http_read_timeout: float = float(os.getenv("HTTP_READ_TIMEOUT", "10"))
    http_write_timeout: float = float(os.getenv("HTTP_WRITE_TIMEOUT", "10"))
    http_pool_timeout: float = float(os.getenv("HTTP_POOL_TIMEOUT", "5"))

    admin_usernames: List[str] = _csv(os.getenv("ADMIN_USERNAMES", "admin"))

    # similar products
    similarity_category_weight: float = float(os.getenv("SIMILARITY_CATEGORY_WEIGHT", "0.7"))
    similarity_price_weight: float = float(os.getenv("SIMILARITY_PRICE_WEIGHT", "0.3"))

    # personal recommendations
    reco_lookback_days: int = int(os.getenv("RECO_LOOKBACK_DAYS", "90"))
    reco_half_life_days: float = float(os.getenv("RECO_HALF_LIFE_DAYS", "14"))
    reco_top_categories: int = int(os.getenv("RECO_TOP_CATEGORIES", "3"))
    reco_affinity_weight: float = float(os.getenv("RECO_AFFINITY_WEIGHT", "0.6"))
    reco_popularity_weight: float = float(os.getenv("RECO_POPULARITY_WEIGHT", "0.3"))
    reco_interest_weight: float = float(os.getenv("RECO_INTEREST_WEIGHT", "0.1"))

    # admin analytics
    analytics_recent_limit: int = int(os.getenv("ANALYTICS_RECENT_LIMIT", "20"))
    analytics_daily_days: int = int(os.getenv("ANALYTICS_DAILY_DAYS", "30"))
    analytics_trend_days: int = int(os.getenv("ANALYTICS_TREND_DAYS", "7"))


settings = Settings()
