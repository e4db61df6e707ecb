"""
Kitchen Flow — Station DB model
"""
from datetime import datetime
from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from kitchen_flow.db.database import Base


class StationRecord(Base):
    """
    version_id is the optimistic locking column: two assignments racing for
    the last slot cannot both commit.
    """
    __tablename__ = "stations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    station_type: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
