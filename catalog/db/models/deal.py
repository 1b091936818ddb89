# catalog/db/models/deal.py
from sqlalchemy import Column, String, Text, Float, Integer, Boolean, DateTime, Index, func
from catalog.db.base import Base


class Deal(Base):
    """
    Time-bounded promotion for a single product.

    product_id and variant_sku are a snapshot taken at generation time, not a
    foreign key: deleting or editing the product leaves its deals untouched.
    """

    __tablename__ = "deals"
    __table_args__ = (Index("deal_dates_idx", "start_date", "end_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, index=True)
    variant_sku = Column(String, nullable=False)
    department = Column(String, nullable=False, index=True)
    thumbnail = Column(String, default="")
    image = Column(String, default="")
    title = Column(String, nullable=False)
    description = Column(Text)
    short_description = Column(String)

    # Pricing information
    price = Column(Integer, nullable=False, comment="Discounted price")
    original_price = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    discount = Column(Integer, nullable=False, comment="Discount percentage")
    rating = Column(Float)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    last_updated = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<Deal(id={self.id}, product_id={self.product_id}, discount={self.discount}%)>"
