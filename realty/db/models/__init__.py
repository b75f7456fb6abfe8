from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="client",
        doc="One of 'client', 'agent' or 'admin'.",
    )
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    agent: Mapped[Agent | None] = relationship("Agent", back_populates="user", uselist=False)


class UserSession(Base):
    """Durable session row; the key-value cache mirrors it for fast lookups."""

    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        doc="Sessions past this instant are rejected even if still cached.",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User")


class Agent(Base):
    __tablename__ = "agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, unique=True)
    license_number: Mapped[str] = mapped_column(String(64), nullable=False)
    initials: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    experience_years: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_listings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    homes_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    avg_days_on_market: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    client_satisfaction: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    profile_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    specialties: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    languages: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    certifications: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="agent", lazy="joined")
    properties: Mapped[list[Property]] = relationship("Property", back_populates="agent")


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_featured_created", "is_featured", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mls_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    agent_id: Mapped[int | None] = mapped_column(
        ForeignKey("agents.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(32), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(16), nullable=False)
    price: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
        doc="Listing price in cents.",
    )
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    square_feet: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lot_size: Mapped[str | None] = mapped_column(String(64), nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    property_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="for_sale", index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    days_on_market: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    neighborhood: Mapped[str | None] = mapped_column(String(128), nullable=True)
    school_district: Mapped[str | None] = mapped_column(String(128), nullable=True)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    main_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    agent: Mapped[Agent | None] = relationship("Agent", back_populates="properties", lazy="joined")
    images: Mapped[list[PropertyImage]] = relationship(
        "PropertyImage",
        back_populates="property",
        order_by="PropertyImage.display_order",
        cascade="all, delete-orphan",
    )


class PropertyImage(Base):
    __tablename__ = "property_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(512), nullable=False)
    alt_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    property: Mapped[Property] = relationship("Property", back_populates="images")


# Imported late so the sibling modules can reference Base and the core tables.
from .email import EmailNotification, UserEmailPreferences  # noqa: E402
from .engagement import PriceAlert, PropertyInquiry, SearchHistory  # noqa: E402
from .favorites import UserFavorite  # noqa: E402

__all__ = [
    "Agent",
    "Base",
    "EmailNotification",
    "PriceAlert",
    "Property",
    "PropertyImage",
    "PropertyInquiry",
    "SearchHistory",
    "User",
    "UserEmailPreferences",
    "UserFavorite",
    "UserSession",
    "utcnow",
]
