"""Price Feed Aggregator - recent community prices and their summary"""
import math
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.config import settings
from pricetrack.models.observation import PriceObservation
from pricetrack.models.product import Brand, Category, Product
from pricetrack.models.supermarket import Branch, Supermarket
from pricetrack.models.user import User
from pricetrack.schemas.price import FeedRecord, FeedSummary, SupermarketGroup
from pricetrack.services.trend import to_money


@dataclass
class FeedPage:
    records: List[FeedRecord]
    limit: int
    count: int


def clamp_feed_limit(raw) -> int:
    """
    Window size for the feed.

    Missing, unparsable or non-finite input falls back to the default;
    anything else is truncated and clamped into [min, max].
    """
    if raw is None or isinstance(raw, bool):
        return settings.FEED_DEFAULT_LIMIT
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return settings.FEED_DEFAULT_LIMIT
    if not math.isfinite(value):
        return settings.FEED_DEFAULT_LIMIT
    return max(settings.FEED_MIN_LIMIT, min(settings.FEED_MAX_LIMIT, math.trunc(value)))


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _average(prices: Sequence[Decimal]) -> Optional[Decimal]:
    if not prices:
        return None
    return to_money(sum(prices, Decimal("0")) / len(prices))


def summarize_feed(records: Sequence[FeedRecord], supermarket: Optional[str] = None) -> FeedSummary:
    """
    Statistics over an already fetched feed window.

    `supermarkets` always lists every supermarket present in the window so a
    client can offer it as a filter; the remaining figures cover only the
    records of `supermarket` when one is given.
    """
    supermarkets = sorted({r.supermarket_name for r in records if r.supermarket_name})

    if supermarket:
        records = [r for r in records if r.supermarket_name == supermarket]

    groups = defaultdict(list)
    for record in records:
        groups[record.supermarket_name or ""].append(record.price)

    return FeedSummary(
        supermarkets=supermarkets,
        total_records=len(records),
        distinct_users=len({r.user_id for r in records}),
        distinct_products=len({r.product_id for r in records}),
        average_price=_average([r.price for r in records]),
        groups=[
            SupermarketGroup(supermarket_name=name, count=len(prices), average_price=_average(prices))
            for name, prices in sorted(groups.items())
        ],
    )


class PriceFeedAggregator:
    """Newest valid price observations across every user and supermarket."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_feed(self, limit: int, search_text: Optional[str] = None) -> FeedPage:
        limit = clamp_feed_limit(limit)
        search = (search_text or "").strip()

        query = (
            select(
                PriceObservation.id.label("observation_id"),
                PriceObservation.product_id,
                PriceObservation.branch_id,
                PriceObservation.price,
                PriceObservation.observed_on,
                PriceObservation.user_id,
                PriceObservation.is_valid,
                Product.barcode,
                Product.name.label("product_name"),
                Brand.name.label("brand"),
                Category.name.label("category"),
                Branch.name.label("branch_name"),
                Supermarket.name.label("supermarket_name"),
                User.name.label("user_name"),
            )
            .outerjoin(Product, Product.id == PriceObservation.product_id)
            .outerjoin(Brand, Brand.id == Product.brand_id)
            .outerjoin(Category, Category.id == Product.category_id)
            .outerjoin(Branch, Branch.id == PriceObservation.branch_id)
            .outerjoin(Supermarket, Supermarket.id == Branch.supermarket_id)
            .outerjoin(User, User.id == PriceObservation.user_id)
            .where(PriceObservation.is_valid.is_(True))
        )

        if search:
            pattern = f"%{_escape_like(search)}%"
            query = query.where(or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.barcode.ilike(pattern, escape="\\"),
                User.name.ilike(pattern, escape="\\"),
                Supermarket.name.ilike(pattern, escape="\\"),
            ))

        query = (
            query
            .order_by(PriceObservation.observed_on.desc(), PriceObservation.id.desc())
            .limit(limit)
        )

        result = await self.db.execute(query)
        records = [FeedRecord(**row._mapping) for row in result.all()]
        return FeedPage(records=records, limit=limit, count=len(records))
