"""
Product model - one row per catalog item shown on the site
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, Float, Boolean, DateTime, JSON
from precast.database import Base


def _new_product_id() -> str:
    return str(uuid.uuid4())


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_new_product_id)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    base_price = Column(Float, nullable=False, default=0)
    transport_cost = Column(Float, nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)  # public URLs, display order
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
