from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, JSON, UniqueConstraint
from app.database.base import Base
from app.utils.dates import utc_now
import cuid


class SystemConfiguration(Base):
    """One immutable version of a configuration document (branding, content)."""

    __tablename__ = "system_configurations"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    key = Column(String(50), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    value = Column(JSON, nullable=False)
    preset_id = Column(String(50), nullable=True)
    updated_by = Column(String(25), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("key", "version", name="uq_system_configurations_key_version"),
    )
