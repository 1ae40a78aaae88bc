from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, Boolean, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from app.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    condition = Column(String(20), nullable=False, default="Good")
    price = Column(Numeric(10, 2), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    location = Column(String(255))

    is_available = Column(Boolean, nullable=False, default=True)
    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    seller = relationship("UserModel")
