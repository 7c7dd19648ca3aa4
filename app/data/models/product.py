from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, Boolean, DateTime, Numeric

from app.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String(40), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, index=True)

    price = Column(Numeric(12, 2), nullable=False)
    #stock == 0 => is_available False (pilnuje tego serwis, nie baza)
    stock = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    popularity = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500), nullable=True)

    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
