"""Price Observation model (immutable event log)"""
from sqlalchemy import Column, Integer, BigInteger, Numeric, Boolean, Date, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from pricetrack.core.database import Base


class PriceObservation(Base):
    __tablename__ = "price_observations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    price = Column(Numeric(18, 2), nullable=False)
    observed_on = Column(Date, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Only valid observations feed history, trends and the community feed
    is_valid = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_observation_product_observed", "product_id", "observed_on"),
    )
