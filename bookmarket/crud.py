# bookmarket/crud.py
"""CRUD helpers for `User` and `Listing` rows.

Each write commits exactly one row change. Access rules live in
`services`; nothing here checks who the caller is.
"""
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .models import Listing, User, ROLE_ADMIN, utcnow


# ---- users ----

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create_user(db: Session, email: str, password_hash: str, name: str) -> User:
    obj = User(email=email, password_hash=password_hash, name=name)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def touch_login(db: Session, user: User) -> None:
    user.last_login_at = utcnow()
    db.commit()


def set_last_used_seller_profile(db: Session, user_id: str, profile: str) -> bool:
    obj = db.get(User, user_id)
    if not obj:
        return False
    obj.last_used_seller_profile = profile
    obj.updated_at = utcnow()
    db.commit()
    return True


def set_admin(db: Session, email: str) -> bool:
    obj = get_user_by_email(db, email)
    if not obj:
        return False
    obj.role = ROLE_ADMIN
    obj.updated_at = utcnow()
    db.commit()
    return True


# ---- listings ----

def create_listing(db: Session, data: Dict[str, Any]) -> Listing:
    obj = Listing(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_listing(db: Session, listing_id: str) -> Optional[Listing]:
    return db.get(Listing, listing_id)


def list_listings(db: Session, skip: int = 0, limit: int = 20,
                  include_pending: bool = False, owner_id: Optional[str] = None):
    """Newest first. Pending listings are included only for admins
    (`include_pending`) or when they belong to `owner_id`."""
    q = db.query(Listing)
    if not include_pending:
        conds = [Listing.pending_review.is_(False)]
        if owner_id:
            conds.append(Listing.owner_id == owner_id)
        q = q.filter(or_(*conds))
    q = q.order_by(Listing.created_at.desc(), Listing.id.desc())
    return q.offset(skip).limit(limit).all()


def list_owned_listings(db: Session, owner_id: str):
    return (
        db.query(Listing)
        .filter(Listing.owner_id == owner_id)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .all()
    )


def update_listing(db: Session, obj: Listing, updates: Dict[str, Any]) -> Listing:
    for k, v in updates.items():
        setattr(obj, k, v)
    obj.updated_at = utcnow()
    db.commit()
    db.refresh(obj)
    return obj


def approve_listing(db: Session, obj: Listing) -> Listing:
    obj.pending_review = False
    db.commit()
    db.refresh(obj)
    return obj


def delete_listing(db: Session, obj: Listing) -> None:
    db.delete(obj)
    db.commit()
