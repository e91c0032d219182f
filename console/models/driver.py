"""Delivery driver ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from console.db.base import Base


class Driver(Base):
    """Dispatchable driver.

    ``busy``/``available`` follow the active delivery load; ``offline`` is an
    operator override kept in its own flag so the two never fight over one
    column.
    """

    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    manually_offline: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active_deliveries: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def effective_status(self) -> str:
        if self.manually_offline:
            return "offline"
        return "busy" if (self.active_deliveries or 0) > 0 else "available"
