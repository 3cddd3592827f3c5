"""Purchase Recorder - atomic purchase registration"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pricetrack.core.database import unit_of_work
from pricetrack.core.errors import PersistenceError, ValidationError
from pricetrack.models.observation import PriceObservation
from pricetrack.models.purchase import Purchase, PurchaseLineItem
from pricetrack.schemas.purchase import LineItemIn
from pricetrack.services.trend import to_money

logger = logging.getLogger(__name__)


def _is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Number):
        return False
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return False
    return amount.is_finite() and amount > 0


def _is_numeric(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_positive_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def line_subtotal(quantity: int, unit_price) -> Decimal:
    """quantity x unit price, in cents"""
    return to_money(Decimal(quantity) * to_money(unit_price))


def purchase_total(line_items: Sequence[LineItemIn], total_override=None) -> Decimal:
    """Client-supplied total when it is a number, otherwise the sum of the line items."""
    if _is_numeric(total_override):
        return Decimal(str(total_override))
    return sum(
        (line_subtotal(item.quantity, item.unit_price) for item in line_items),
        Decimal("0.00"),
    )


class PurchaseRecorder:
    """
    Records purchases together with the price observations they imply.

    A purchase is written as one unit of work:
    - the header first, to obtain its identifier
    - then, per line item in input order, the line item and one valid
      price observation dated on the purchase date
    Any failure rolls back the header, every line item and every
    observation already written.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_purchase(
        self,
        user_id: int,
        purchase_date: date,
        branch_id: int,
        line_items: Sequence[LineItemIn],
        total_override: Optional[Decimal] = None,
    ) -> int:
        self._validate(user_id, purchase_date, branch_id, line_items, total_override)
        total = purchase_total(line_items, total_override)

        try:
            async with unit_of_work(self.db):
                purchase = Purchase(
                    user_id=user_id,
                    purchase_date=purchase_date,
                    total_amount=total,
                    branch_id=branch_id,
                )
                self.db.add(purchase)
                await self.db.flush()

                if purchase.id is None:
                    raise PersistenceError("Could not create the purchase")

                for item in line_items:
                    await self._add_line_item(purchase, item)
        except SQLAlchemyError as exc:
            logger.exception("Purchase for user %s rolled back", user_id)
            raise PersistenceError("Error recording purchase") from exc
        except PersistenceError:
            logger.error("Purchase for user %s rolled back: no identifier returned", user_id)
            raise

        logger.info(
            "Recorded purchase %s for user %s (%d items, total %s)",
            purchase.id, user_id, len(line_items), total,
        )
        return purchase.id

    async def _add_line_item(self, purchase: Purchase, item: LineItemIn):
        """Insert one line item and the price observation it produces."""
        self.db.add(PurchaseLineItem(
            purchase_id=purchase.id,
            product_id=item.product_id,
            unit_price=to_money(item.unit_price),
            quantity=item.quantity,
            subtotal=line_subtotal(item.quantity, item.unit_price),
        ))
        self.db.add(PriceObservation(
            product_id=item.product_id,
            branch_id=purchase.branch_id,
            price=to_money(item.unit_price),
            observed_on=purchase.purchase_date,
            user_id=purchase.user_id,
            is_valid=True,
        ))
        await self.db.flush()

    def _validate(
        self,
        user_id,
        purchase_date,
        branch_id,
        line_items,
        total_override,
    ):
        """Reject malformed input before anything touches the store."""
        if not _is_positive_id(user_id) or not _is_positive_id(branch_id):
            raise ValidationError("userId, purchaseDate, branchId and lineItems are required")
        if not isinstance(purchase_date, date):
            raise ValidationError("userId, purchaseDate, branchId and lineItems are required")
        if line_items is None:
            raise ValidationError("userId, purchaseDate, branchId and lineItems are required")
        if len(line_items) == 0:
            raise ValidationError("A purchase needs at least one product")

        for position, item in enumerate(line_items, start=1):
            if not _is_positive_id(getattr(item, "product_id", None)):
                raise ValidationError(f"Line item {position} has no valid product")
            if not _is_positive_id(getattr(item, "quantity", None)):
                raise ValidationError(f"Line item {position} needs a positive whole quantity")
            if not _is_positive_number(getattr(item, "unit_price", None)):
                raise ValidationError(f"Line item {position} needs a positive unit price")

        if _is_numeric(total_override) and not _is_positive_number(total_override):
            raise ValidationError("totalOverride must be a positive amount")
