from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from app.database.base import Base
from app.utils.dates import utc_now
import cuid


class ServiceType(Base):
    """Kind of session offered (EMS group class, personal training, ...)."""

    __tablename__ = "service_types"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    credit_cost = Column(Integer, nullable=False, default=1)
    default_capacity = Column(Integer, nullable=False, default=1)
    is_private = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)
