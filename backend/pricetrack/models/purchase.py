"""Purchase header and line item models"""
from sqlalchemy import Column, Integer, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pricetrack.core.database import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    purchase_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(18, 2), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Line items belong exclusively to their purchase
    line_items = relationship(
        "PurchaseLineItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PurchaseLineItem.id",
        lazy="raise",
    )


class PurchaseLineItem(Base):
    __tablename__ = "purchase_line_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(
        Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    unit_price = Column(Numeric(18, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(18, 2), nullable=False)  # quantity * unit_price at creation

    purchase = relationship(Purchase, back_populates="line_items", lazy="raise")
