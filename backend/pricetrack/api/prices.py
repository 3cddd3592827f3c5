"""Community price feed endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.database import get_db
from pricetrack.schemas.common import FeedEnvelope, FeedMeta
from pricetrack.schemas.price import FeedRecord, FeedSummary
from pricetrack.services.price_feed import PriceFeedAggregator, summarize_feed

router = APIRouter()


@router.get("", response_model=FeedEnvelope[List[FeedRecord]], response_model_exclude_none=True)
async def get_price_feed(
    # Kept as text so values like "NaN" fall back to the default window
    limit: Optional[str] = Query(None, description="Window size, clamped to [20, 300]"),
    q: Optional[str] = Query(None, description="Product, barcode, user or supermarket"),
    db: AsyncSession = Depends(get_db),
):
    """Most recent valid prices reported by the community."""
    page = await PriceFeedAggregator(db).get_feed(limit, q)
    return FeedEnvelope(
        data=page.records,
        meta=FeedMeta(limit=page.limit, count=page.count),
    )


@router.get("/summary", response_model=FeedEnvelope[FeedSummary], response_model_exclude_none=True)
async def get_price_feed_summary(
    limit: Optional[str] = Query(None, description="Window size, clamped to [20, 300]"),
    q: Optional[str] = Query(None),
    supermarket: Optional[str] = Query(None, description="Restrict figures to one supermarket"),
    db: AsyncSession = Depends(get_db),
):
    """Counts and average price over the same window the feed returns."""
    page = await PriceFeedAggregator(db).get_feed(limit, q)
    return FeedEnvelope(
        data=summarize_feed(page.records, supermarket),
        meta=FeedMeta(limit=page.limit, count=page.count),
    )
