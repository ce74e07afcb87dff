from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Text, CheckConstraint
from app.database.base import Base
from app.utils.dates import utc_now
import cuid


class CreditPackage(Base):
    __tablename__ = "credit_packages"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    credits = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    validity_days = Column(Integer, nullable=False, default=90)
    is_best_value = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint("credits > 0", name="credits_positive"),
        CheckConstraint("validity_days > 0", name="validity_positive"),
    )
