"""Purchase endpoints - record a cart and browse past purchases"""
from typing import List

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.database import get_db
from pricetrack.core.config import settings
from pricetrack.core.rate_limit import limiter
from pricetrack.schemas.common import Envelope
from pricetrack.schemas.purchase import (
    PurchaseCreate,
    PurchaseCreated,
    PurchaseLineItemDetail,
    PurchaseSummary,
)
from pricetrack.services.price_history import PriceHistoryService
from pricetrack.services.purchase_recorder import PurchaseRecorder

router = APIRouter()


@router.post("", response_model=Envelope[PurchaseCreated], response_model_exclude_none=True)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def record_purchase(
    request: Request,
    data: PurchaseCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a purchase with its line items.

    Each line item also becomes a community price observation. Either the
    whole purchase is stored or nothing is.
    """
    purchase_id = await PurchaseRecorder(db).record_purchase(
        user_id=data.user_id,
        purchase_date=data.purchase_date,
        branch_id=data.branch_id,
        line_items=data.line_items,
        total_override=data.total_override,
    )
    return Envelope(data=PurchaseCreated(purchase_id=purchase_id))


@router.get(
    "/user/{user_id}",
    response_model=Envelope[List[PurchaseSummary]],
    response_model_exclude_none=True,
)
async def list_user_purchases(
    user_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Purchases of a user, newest first."""
    purchases = await PriceHistoryService(db).get_purchases_for_user(user_id)
    return Envelope(data=purchases)


@router.get(
    "/{purchase_id}/items",
    response_model=Envelope[List[PurchaseLineItemDetail]],
    response_model_exclude_none=True,
)
async def list_purchase_items(
    purchase_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Line items of a purchase in the order they were added."""
    items = await PriceHistoryService(db).get_history_for_purchase(purchase_id)
    return Envelope(data=items)
