# bookmarket/api/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import services
from ..db import get_db
from ..schemas import ListingCreate, ListingUpdate, SessionData
from ..visibility import Decision, present, present_all
from .deps import get_session, require_admin

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/api/books")
def listings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    caller: Optional[SessionData] = Depends(get_session),
    db: Session = Depends(get_db),
):
    items = services.list_listings(db, caller, page=page, page_size=limit)
    return present_all(caller, items)


@router.post("/api/books", status_code=status.HTTP_201_CREATED)
def create_listing(
    payload: ListingCreate,
    caller: Optional[SessionData] = Depends(get_session),
    db: Session = Depends(get_db),
):
    obj = services.create_listing(db, caller, payload)
    return {
        "message": "Book submitted for verification. It will be available to other users once approved by an admin.",
        "id": obj.id,
    }


@router.get("/api/books/mine")
def my_listings(caller: Optional[SessionData] = Depends(get_session), db: Session = Depends(get_db)):
    return [present(obj, Decision(visible=True)) for obj in services.my_listings(db, caller)]


@router.get("/api/books/{listing_id}")
def get_listing(
    listing_id: str,
    caller: Optional[SessionData] = Depends(get_session),
    db: Session = Depends(get_db),
):
    obj, decision = services.get_listing(db, caller, listing_id)
    return present(obj, decision)


@router.put("/api/books/{listing_id}")
def update_listing(
    listing_id: str,
    payload: ListingUpdate,
    caller: Optional[SessionData] = Depends(get_session),
    db: Session = Depends(get_db),
):
    services.update_listing(db, caller, listing_id, payload)
    return {"message": "Book updated successfully"}


@router.delete("/api/books/{listing_id}")
def delete_listing(
    listing_id: str,
    caller: Optional[SessionData] = Depends(get_session),
    db: Session = Depends(get_db),
):
    services.delete_listing(db, caller, listing_id)
    return {"message": "Book deleted successfully"}


@router.post("/api/books/{listing_id}/verify")
def approve_listing(
    listing_id: str,
    admin: SessionData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    services.approve_listing(db, admin, listing_id)
    return {"message": "Book verified successfully"}


@router.post("/api/books/{listing_id}/deny")
def deny_listing(
    listing_id: str,
    admin: SessionData = Depends(require_admin),
    db: Session = Depends(get_db),
):
    services.deny_listing(db, admin, listing_id)
    return {"message": "Book denied and removed"}
