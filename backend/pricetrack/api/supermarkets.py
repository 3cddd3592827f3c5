"""Supermarket endpoints"""
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.database import get_db
from pricetrack.schemas.common import Envelope
from pricetrack.schemas.price import SupermarketPrice
from pricetrack.services.price_history import PriceHistoryService

router = APIRouter()


@router.get(
    "/{supermarket_id}/prices",
    response_model=Envelope[List[SupermarketPrice]],
    response_model_exclude_none=True,
)
async def get_latest_prices(
    supermarket_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Latest reported price of each product at any branch of the supermarket."""
    prices = await PriceHistoryService(db).get_latest_prices_for_supermarket(supermarket_id)
    return Envelope(data=prices)
