from __future__ import annotations

import datetime as dt

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(120))
    last_name: Mapped[str] = mapped_column(String(120))
    # Stored trimmed + lower-cased; the unique index is what guarantees one account per email.
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone_number: Mapped[str] = mapped_column(String(40))
    profile_pic_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    # Property ids only, never embedded documents.
    liked_properties: Mapped[list[int]] = mapped_column(JSON, default=list)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    features: Mapped[list[str]] = mapped_column(JSON, default=list)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list)
    liked: Mapped[bool | None] = mapped_column(Boolean, nullable=True, index=True)

    title: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    # Coordinates and numeric-looking fields are free text, as entered by the client.
    lat: Mapped[str | None] = mapped_column(String(40), nullable=True)
    lng: Mapped[str | None] = mapped_column(String(40), nullable=True)
    price: Mapped[str | None] = mapped_column(String(40), nullable=True)
    rating: Mapped[str | None] = mapped_column(String(40), nullable=True)
    bedrooms: Mapped[str | None] = mapped_column(String(40), nullable=True)
    bathrooms: Mapped[str | None] = mapped_column(String(40), nullable=True)
    area: Mapped[str | None] = mapped_column(String(80), nullable=True)
    type: Mapped[str | None] = mapped_column(String(80), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    views: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class ViewRecord(Base):
    """
    Last counted view per (user, property). Written only by the view policy.
    """

    __tablename__ = "view_records"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    last_viewed_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
