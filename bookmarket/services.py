# bookmarket/services.py
"""Business rules for accounts and listings.

Functions here take an open session and the caller identity (None for an
anonymous caller) and raise `bookmarket.exceptions` errors on refusal.
"""
import time
import uuid
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud
from .auth import hash_password, verify_password
from .exceptions import (
    AuthenticationError, AuthorizationError, InvalidReference, NotFound, ValidationError,
)
from .models import Listing, User
from .schemas import (
    ListingCreate, ListingUpdate, LoginRequest, RegisterRequest, SessionData, SessionOut,
)
from .utils import logger
from .visibility import decide

MAX_PAGE_SIZE = 50
INVALID_CREDENTIALS = "Invalid credentials"


def session_for(user: User) -> SessionData:
    return SessionData(user_id=user.id, email=user.email, name=user.name, admin=user.is_admin)


# ---- accounts ----

def register(db: Session, payload: RegisterRequest, bcrypt_rounds: int = 14) -> SessionData:
    if crud.get_user_by_email(db, payload.email):
        raise ValidationError("User already exists")
    try:
        user = crud.create_user(
            db,
            email=payload.email,
            password_hash=hash_password(payload.password, rounds=bcrypt_rounds),
            name=payload.name,
        )
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        db.rollback()
        raise ValidationError("User already exists")
    logger.info("Registered user %s", user.id)
    return session_for(user)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds=rounds)


def login(db: Session, payload: LoginRequest, failure_delay: float = 1.0,
          bcrypt_rounds: int = 14) -> SessionData:
    """Check credentials. Unknown email and wrong password fail identically,
    and both pay for one bcrypt check."""
    user = crud.get_user_by_email(db, payload.email)
    if user is None:
        verify_password(payload.password, _dummy_hash(bcrypt_rounds))
    if not user or not verify_password(payload.password, user.password_hash):
        time.sleep(failure_delay)
        logger.info("Failed login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS)
    crud.touch_login(db, user)
    logger.info("User %s logged in", user.id)
    return session_for(user)


def current_session(db: Session, caller: Optional[SessionData]) -> SessionOut:
    if caller is None:
        raise AuthenticationError("Not authenticated")
    user = crud.get_user(db, caller.user_id)
    if not user:
        raise NotFound("User not found")
    return SessionOut(
        user_id=caller.user_id,
        email=caller.email,
        name=caller.name,
        admin=user.is_admin,
        last_used_seller_profile=user.last_used_seller_profile or "",
    )


def update_seller_profile(db: Session, caller: SessionData, profile: str) -> None:
    if not crud.set_last_used_seller_profile(db, caller.user_id, profile):
        raise NotFound("User not found")


def _remember_seller_profile(db: Session, user_id: str, profile: str) -> None:
    """Best-effort secondary write; never undoes the listing write."""
    try:
        crud.set_last_used_seller_profile(db, user_id, profile)
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Could not update last used seller profile for user %s", user_id, exc_info=True)


# ---- listings ----

def parse_listing_id(listing_id: str) -> str:
    try:
        return uuid.UUID(hex=listing_id).hex
    except ValueError:
        raise InvalidReference()


def _require_caller(caller: Optional[SessionData]) -> SessionData:
    if caller is None:
        raise AuthenticationError()
    return caller


def _load(db: Session, listing_id: str) -> Listing:
    obj = crud.get_listing(db, parse_listing_id(listing_id))
    if not obj:
        raise NotFound("Book not found")
    return obj


def _load_owned(db: Session, caller: Optional[SessionData], listing_id: str) -> Listing:
    caller = _require_caller(caller)
    obj = _load(db, listing_id)
    if obj.owner_id != caller.user_id:
        raise AuthorizationError()
    return obj


def _column_values(fields: dict) -> dict:
    if "price" in fields:
        fields["price"] = Decimal(str(fields["price"])).quantize(Decimal("0.01"))
    return fields


def create_listing(db: Session, caller: Optional[SessionData], draft: ListingCreate) -> Listing:
    caller = _require_caller(caller)
    data = _column_values(draft.model_dump())
    data.update(
        owner_id=caller.user_id,
        seller_name=caller.name,
        pending_review=True,
    )
    obj = crud.create_listing(db, data)
    logger.info("User %s created listing %s (pending review)", caller.user_id, obj.id)
    _remember_seller_profile(db, caller.user_id, obj.seller_profile)
    return obj


def get_listing(db: Session, caller: Optional[SessionData], listing_id: str):
    """Return the listing and the visibility decision for this caller.

    A listing the caller may not see is reported as missing."""
    obj = _load(db, listing_id)
    decision = decide(caller, obj)
    if not decision.visible:
        raise NotFound("Book not found")
    return obj, decision


def list_listings(db: Session, caller: Optional[SessionData], page: int = 1, page_size: int = 20):
    page_size = min(page_size, MAX_PAGE_SIZE)
    skip = (page - 1) * page_size
    return crud.list_listings(
        db,
        skip=skip,
        limit=page_size,
        include_pending=bool(caller and caller.admin),
        owner_id=caller.user_id if caller else None,
    )


def my_listings(db: Session, caller: Optional[SessionData]):
    caller = _require_caller(caller)
    return crud.list_owned_listings(db, caller.user_id)


def update_listing(db: Session, caller: Optional[SessionData], listing_id: str, patch: ListingUpdate) -> Listing:
    obj = _load_owned(db, caller, listing_id)
    updates = _column_values(patch.model_dump(exclude_unset=True))
    obj = crud.update_listing(db, obj, updates)
    logger.info("User %s updated listing %s", caller.user_id, obj.id)
    if "seller_profile" in updates:
        _remember_seller_profile(db, caller.user_id, obj.seller_profile)
    return obj


def delete_listing(db: Session, caller: Optional[SessionData], listing_id: str) -> None:
    obj = _load_owned(db, caller, listing_id)
    crud.delete_listing(db, obj)
    logger.info("User %s deleted listing %s", caller.user_id, listing_id)


def approve_listing(db: Session, admin: SessionData, listing_id: str) -> Listing:
    """Clear the pending flag. Approving twice is not an error."""
    obj = _load(db, listing_id)
    if obj.pending_review:
        obj = crud.approve_listing(db, obj)
        logger.info("Admin %s approved listing %s", admin.user_id, obj.id)
    return obj


def deny_listing(db: Session, admin: SessionData, listing_id: str) -> None:
    """Denied listings are deleted; there is no rejected state."""
    obj = _load(db, listing_id)
    crud.delete_listing(db, obj)
    logger.info("Admin %s denied and removed listing %s", admin.user_id, listing_id)
