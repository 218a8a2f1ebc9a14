# bookmarket/models.py
"""SQLAlchemy ORM models for persisted entities.

Two tables: `users` and `listings`. Identifiers are opaque uuid4 hex strings.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, JSON, Index
from .db import Base

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

CONDITIONS = ("New", "Like New", "Good", "Fair", "Poor")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    name = Column(String(50), nullable=False)
    role = Column(String(16), nullable=False, default=ROLE_MEMBER)
    last_used_seller_profile = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class Listing(Base):
    __tablename__ = "listings"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    condition = Column(String(16), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=False)
    # ordered; index 0 is the main image
    images = Column(JSON, nullable=False)
    owner_id = Column(String(32), nullable=False)
    seller_name = Column(String(50), nullable=False)
    seller_profile = Column(Text, nullable=False)
    pending_review = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True))

Index("idx_listings_owner", Listing.owner_id)
Index("idx_listings_created_at", Listing.created_at)
