from __future__ import annotations

from sqlalchemy import Column, Float, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Product(Base):
    __tablename__ = "products"

    product_sn = Column(String(64), primary_key=True)
    # Stored as "YYYY-MM-DD HH:MM:SS" text, never as a native timestamp.
    purchase_date = Column(String(19), nullable=False)
    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    vendor = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")

    rentals = relationship(
        "Rental",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
