"""ORM model for the per-user favorite property set.

The unique constraint on ``(user_id, property_id)`` is what makes favorite
inserts idempotent: repository code issues ``INSERT ... ON CONFLICT DO
NOTHING`` so replaying a sync batch never duplicates rows.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import Base, Property, utcnow


class UserFavorite(Base):
    __tablename__ = "user_favorites"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "property_id",
            name="uq_user_favorites_user_property",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        doc="Drives newest-first ordering of the favorites list.",
    )

    property: Mapped[Property] = relationship("Property", lazy="joined")
