from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from signage_cms.db import Base


class Site(Base):
    __tablename__ = "site"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customer.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    site_code = Column(String(50), nullable=False)
    time_zone = Column(String(64), nullable=False, default="UTC")  # IANA name
    default_layout_id = Column(Integer, ForeignKey("layout.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
