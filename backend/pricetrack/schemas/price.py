"""Price history and price feed schemas"""
from datetime import date
from typing import List, Literal, Optional

from pydantic import Field

from pricetrack.schemas.common import CamelModel, Money


class PriceTrend(CamelModel):
    """Comparison of an observation against the next-older one"""
    label: Literal["no reference", "increased", "decreased", "unchanged"]
    direction: Literal["up", "down", "neutral"]
    delta: Optional[Money] = None
    delta_text: Optional[str] = None


class PriceHistoryEntry(CamelModel):
    observation_id: int
    product_id: int
    branch_id: int
    branch_name: str
    price: Money
    observed_on: date
    user_id: int
    user_name: str
    is_valid: bool = True
    trend: Optional[PriceTrend] = None


class SupermarketPrice(CamelModel):
    """Latest valid price of a product across a supermarket's branches"""
    observation_id: int
    product_id: int
    price: Money
    observed_on: date
    branch_id: int
    branch_name: Optional[str] = None
    barcode: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None


class FeedRecord(CamelModel):
    """Community price feed row"""
    observation_id: int
    product_id: int
    branch_id: int
    price: Money
    observed_on: date
    user_id: int
    is_valid: bool = True
    barcode: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    branch_name: Optional[str] = None
    supermarket_name: Optional[str] = None
    user_name: Optional[str] = None


class SupermarketGroup(CamelModel):
    supermarket_name: str
    count: int
    average_price: Optional[Money] = None


class FeedSummary(CamelModel):
    supermarkets: List[str] = Field(default_factory=list)
    total_records: int = 0
    distinct_users: int = 0
    distinct_products: int = 0
    average_price: Optional[Money] = None
    groups: List[SupermarketGroup] = Field(default_factory=list)
