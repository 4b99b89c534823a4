"""Stock movements recorded against a product."""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..db.session import Base

INBOUND = 1
OUTBOUND = 2


class Rental(Base):
    """One inbound (``transaction_type`` 1) or outbound (2) movement.

    ``id`` is the immutable identity of the row. ``(product_sn, start_date)`` is
    kept unique because older clients address rentals by that pair.
    """

    __tablename__ = "rentals"
    __table_args__ = (UniqueConstraint("product_sn", "start_date", name="uq_rentals_product_start"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_sn = Column(
        String(64),
        ForeignKey("products.product_sn", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date = Column(String(19), nullable=False)
    transaction_type = Column(Integer, nullable=False)
    end_date = Column(String(19), nullable=True)
    qty = Column(Float, nullable=False)
    description = Column(Text, nullable=False, default="")

    product = relationship("Product", back_populates="rentals")
