"""
Kitchen Flow — Order DB model

The aggregate (order + items) is stored as one JSON document; status and the
correlation ids are copied into columns so list queries can filter on them.
"""
from datetime import datetime
from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from kitchen_flow.db.database import Base


class OrderRecord(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    customer_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    assigned_station_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # optimistic lock
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
