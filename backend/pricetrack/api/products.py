"""Product endpoints"""
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.database import get_db
from pricetrack.schemas.common import Envelope
from pricetrack.schemas.price import PriceHistoryEntry
from pricetrack.services.price_history import PriceHistoryService

router = APIRouter()


@router.get(
    "/{product_id}/price-history",
    response_model=Envelope[List[PriceHistoryEntry]],
    response_model_exclude_none=True,
)
async def get_price_history(
    product_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Reported prices of a product, newest first, each with its trend."""
    history = await PriceHistoryService(db).get_history_for_product(product_id)
    return Envelope(data=history)
