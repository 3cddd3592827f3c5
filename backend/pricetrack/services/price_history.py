"""Price History Service - read paths over purchases and price observations"""
from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.errors import NotFoundError
from pricetrack.models.observation import PriceObservation
from pricetrack.models.product import Brand, Category, Product
from pricetrack.models.purchase import Purchase, PurchaseLineItem
from pricetrack.models.supermarket import Branch, Supermarket
from pricetrack.models.user import User
from pricetrack.schemas.price import PriceHistoryEntry, PriceTrend, SupermarketPrice
from pricetrack.schemas.purchase import PurchaseLineItemDetail, PurchaseSummary
from pricetrack.services.trend import annotate_trends


class PriceHistoryService:
    """
    Read-only queries behind the product, purchase and supermarket screens.

    Price observations and purchases come back newest first (date, then
    identifier, both descending). Line items of one purchase keep the order
    in which they were added.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_history_for_product(self, product_id: int) -> List[PriceHistoryEntry]:
        """Valid observations of a product with the trend against the next-older one."""
        await self._require(Product, product_id, "Product not found")

        result = await self.db.execute(
            select(
                PriceObservation,
                Branch.name.label("branch_name"),
                User.name.label("user_name"),
            )
            .outerjoin(Branch, Branch.id == PriceObservation.branch_id)
            .outerjoin(User, User.id == PriceObservation.user_id)
            .where(
                PriceObservation.product_id == product_id,
                PriceObservation.is_valid.is_(True),
            )
            .order_by(PriceObservation.observed_on.desc(), PriceObservation.id.desc())
        )
        rows = result.all()
        trends = annotate_trends([row.PriceObservation.price for row in rows])

        return [
            PriceHistoryEntry(
                observation_id=row.PriceObservation.id,
                product_id=row.PriceObservation.product_id,
                branch_id=row.PriceObservation.branch_id,
                branch_name=row.branch_name or str(row.PriceObservation.branch_id),
                price=row.PriceObservation.price,
                observed_on=row.PriceObservation.observed_on,
                user_id=row.PriceObservation.user_id,
                user_name=row.user_name or str(row.PriceObservation.user_id),
                is_valid=row.PriceObservation.is_valid,
                trend=PriceTrend.model_validate(trend),
            )
            for row, trend in zip(rows, trends)
        ]

    async def get_history_for_purchase(self, purchase_id: int) -> List[PurchaseLineItemDetail]:
        """Line items of a purchase, in insertion order."""
        await self._require(Purchase, purchase_id, "Purchase not found")

        result = await self.db.execute(
            select(
                PurchaseLineItem.id.label("line_item_id"),
                PurchaseLineItem.purchase_id,
                PurchaseLineItem.product_id,
                PurchaseLineItem.unit_price,
                PurchaseLineItem.quantity,
                PurchaseLineItem.subtotal,
                Product.barcode,
                Product.name.label("product_name"),
                Brand.name.label("brand"),
                Category.name.label("category"),
                Product.image_url,
            )
            .outerjoin(Product, Product.id == PurchaseLineItem.product_id)
            .outerjoin(Brand, Brand.id == Product.brand_id)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(PurchaseLineItem.purchase_id == purchase_id)
            .order_by(PurchaseLineItem.id.asc())
        )
        return [PurchaseLineItemDetail(**row._mapping) for row in result.all()]

    async def get_purchases_for_user(self, user_id: int) -> List[PurchaseSummary]:
        """A user's purchases with branch, supermarket and item count."""
        result = await self.db.execute(
            select(
                Purchase.id.label("purchase_id"),
                Purchase.user_id,
                Purchase.purchase_date,
                Purchase.total_amount,
                Purchase.branch_id,
                Branch.name.label("branch_name"),
                Supermarket.name.label("supermarket_name"),
                func.count(PurchaseLineItem.id).label("total_items"),
            )
            .outerjoin(Branch, Branch.id == Purchase.branch_id)
            .outerjoin(Supermarket, Supermarket.id == Branch.supermarket_id)
            .outerjoin(PurchaseLineItem, PurchaseLineItem.purchase_id == Purchase.id)
            .where(Purchase.user_id == user_id)
            .group_by(
                Purchase.id,
                Purchase.user_id,
                Purchase.purchase_date,
                Purchase.total_amount,
                Purchase.branch_id,
                Branch.name,
                Supermarket.name,
            )
            .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
        )
        return [PurchaseSummary(**row._mapping) for row in result.all()]

    async def get_latest_prices_for_supermarket(self, supermarket_id: int) -> List[SupermarketPrice]:
        """Most recent valid price of every product seen at any branch of a supermarket."""
        await self._require(Supermarket, supermarket_id, "Supermarket not found")

        ranked = (
            select(
                PriceObservation.id.label("observation_id"),
                PriceObservation.product_id,
                PriceObservation.price,
                PriceObservation.observed_on,
                PriceObservation.branch_id,
                Branch.name.label("branch_name"),
                func.row_number().over(
                    partition_by=PriceObservation.product_id,
                    order_by=(PriceObservation.observed_on.desc(), PriceObservation.id.desc()),
                ).label("row_rank"),
            )
            .join(Branch, Branch.id == PriceObservation.branch_id)
            .where(
                Branch.supermarket_id == supermarket_id,
                PriceObservation.is_valid.is_(True),
            )
            .subquery()
        )

        result = await self.db.execute(
            select(
                ranked.c.observation_id,
                ranked.c.product_id,
                ranked.c.price,
                ranked.c.observed_on,
                ranked.c.branch_id,
                ranked.c.branch_name,
                Product.barcode,
                Product.name.label("product_name"),
                Brand.name.label("brand"),
                Category.name.label("category"),
                Product.image_url,
            )
            .join(Product, Product.id == ranked.c.product_id)
            .outerjoin(Brand, Brand.id == Product.brand_id)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(ranked.c.row_rank == 1)
            .order_by(Product.name.asc(), ranked.c.product_id.asc())
        )
        return [SupermarketPrice(**row._mapping) for row in result.all()]

    async def _require(self, model, identifier: int, message: str):
        result = await self.db.execute(select(model.id).where(model.id == identifier))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(message)
