from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator


class InteractionType(str, Enum):
    VIEW = "view"
    CART_ADD = "cart_add"
    PURCHASE = "purchase"


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class InteractionEvent(BaseModel):
    model_config = {"frozen": True}

    user_id: str
    product_id: int
    interaction_type: InteractionType
    category: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class InteractionIn(BaseModel):
    product_id: int
    interaction_type: str
    category: Optional[str] = None


class OrderItem(BaseModel):
    product_id: int
    category: Optional[str] = None


class OrderIn(BaseModel):
    items: List[OrderItem]


class RecordResult(BaseModel):
    success: bool
    recorded: int = 0


class Rating(BaseModel):
    rate: float = 0.0
    count: int = 0


class Product(BaseModel):
    id: int
    title: str
    price: float
    category: str
    image: Optional[str] = None
    description: Optional[str] = None
    rating: Rating = Field(default_factory=Rating)


class Recommendation(BaseModel):
    product_id: int
    score: float = Field(..., ge=0)
    reason: str


class RecommendedProduct(BaseModel):
    product: Product
    score: float
    reason: str


class CategoryCount(BaseModel):
    category: str
    count: int


class DailyInteraction(BaseModel):
    date: date
    views: int = 0
    cart_adds: int = 0
    purchases: int = 0
    total: int = 0


class InteractionTypeTrend(BaseModel):
    date: date
    view: int = 0
    cart_add: int = 0
    purchase: int = 0


class AnalyticsSnapshot(BaseModel):
    total_users: int
    total_interactions: int
    total_views: int
    total_cart_adds: int
    total_purchases: int
    popular_categories: List[CategoryCount]
    recent_interactions: List[InteractionEvent]
    daily_interactions: List[DailyInteraction]
    interaction_types_trend: List[InteractionTypeTrend]


class UserRegister(BaseModel):
    username: str
    password: str
    passwordConfirmation: str


class UserInDB(BaseModel):
    id: str
    username: str
    password: str


class UserPublic(BaseModel):
    id: str
    username: str
    is_admin: bool = False
