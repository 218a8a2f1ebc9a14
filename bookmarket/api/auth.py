# bookmarket/api/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import services
from ..auth import SessionManager
from ..db import get_db
from ..schemas import LoginRequest, ProfileUpdate, RegisterRequest, SessionData, SessionOut
from .deps import get_session, get_sessions, require_session

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_sessions),
):
    identity = services.register(db, payload, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)
    response = JSONResponse({"message": "User created successfully"}, status_code=status.HTTP_201_CREATED)
    sessions.attach(response, identity)
    return response


@router.post("/login")
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_sessions),
):
    settings = request.app.state.settings
    identity = services.login(
        db, payload,
        failure_delay=settings.login_failure_delay,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    response = JSONResponse({"message": "Login successful"})
    sessions.attach(response, identity)
    return response


@router.get("/me", response_model=SessionOut, response_model_by_alias=True)
def me(caller: Optional[SessionData] = Depends(get_session), db: Session = Depends(get_db)):
    return services.current_session(db, caller)


@router.post("/logout")
def logout(sessions: SessionManager = Depends(get_sessions)):
    response = JSONResponse({"message": "Logged out"})
    sessions.clear(response)
    return response


@router.post("/update-profile")
def update_profile(
    payload: ProfileUpdate,
    caller: SessionData = Depends(require_session),
    db: Session = Depends(get_db),
):
    services.update_seller_profile(db, caller, payload.last_used_seller_profile)
    return {"message": "Profile updated successfully"}
