"""Purchase request/response schemas"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from pricetrack.schemas.common import CamelModel, Money


class LineItemIn(CamelModel):
    """One cart entry as submitted by the client"""
    product_id: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class PurchaseCreate(CamelModel):
    """Record purchase request"""
    user_id: int = Field(..., gt=0)
    purchase_date: date
    branch_id: int = Field(..., gt=0)
    line_items: List[LineItemIn] = Field(..., min_length=1)
    total_override: Optional[Decimal] = Field(None, gt=0)

    @field_validator("total_override", mode="before")
    @classmethod
    def ignore_non_numeric_total(cls, value):
        # anything but a JSON number falls back to the computed total
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return None
        return value


class PurchaseCreated(CamelModel):
    purchase_id: int


class PurchaseSummary(CamelModel):
    """Row of a user's purchase history"""
    purchase_id: int
    user_id: int
    purchase_date: date
    total_amount: Money
    branch_id: int
    branch_name: Optional[str] = None
    supermarket_name: Optional[str] = None
    total_items: int = 0


class PurchaseLineItemDetail(CamelModel):
    """Line item enriched with product catalog data"""
    line_item_id: int
    purchase_id: int
    product_id: int
    unit_price: Money
    quantity: int
    subtotal: Money
    barcode: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
