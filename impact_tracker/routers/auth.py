"""Authentication routes: register, login, me, rubric preferences.

Uses SQLite when DATA_PROVIDER=sqlite; otherwise uses in-memory store.

PySecure-4-Minimal:
- Validate inputs via Pydantic models.
- Hash passwords; do not log secrets.
- Use Bearer token with JWT.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from impact_tracker.core.config import get_settings
from impact_tracker.db import sqlite as sqlite_db
from impact_tracker.models.auth import RubricPreferences, TokenResponse, UserCreate, UserLogin, UserPublic
from impact_tracker.security.jwt import create_access_token, decode_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# In-memory fallback stores (DATA_PROVIDER=memory)
_mem_users: Dict[str, Dict] = {}  # id -> record
_mem_users_by_email: Dict[str, str] = {}  # email -> id


# PUBLIC_INTERFACE
def reset_auth_state() -> None:
    """Reset in-memory auth state for tests or local dev.

    Note:
        - This only clears in-memory user stores when DATA_PROVIDER != "sqlite".
        - When using SQLite provider, users are persisted in the DB and are not cleared.
    """
    settings = get_settings()
    if settings.data_provider != "sqlite":
        _mem_users.clear()
        _mem_users_by_email.clear()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _get_user_by_email(email: str) -> Optional[Dict]:
    settings = get_settings()
    email_norm = _normalize_email(email)
    if settings.data_provider == "sqlite":
        with sqlite_db.get_conn() as conn:
            return sqlite_db.auth_get_user_by_email(conn, email_norm)
    uid = _mem_users_by_email.get(email_norm)
    return _mem_users.get(uid) if uid else None


def _get_user_by_id(user_id: str) -> Optional[Dict]:
    settings = get_settings()
    if settings.data_provider == "sqlite":
        with sqlite_db.get_conn() as conn:
            return sqlite_db.auth_get_user_by_id(conn, user_id)
    return _mem_users.get(user_id)


def _create_user(payload: UserCreate, pwd_hash: str) -> Dict:
    settings = get_settings()
    email_norm = _normalize_email(str(payload.email))
    record = {
        "id": str(uuid4()),
        "email": email_norm,
        "full_name": payload.full_name.strip() if isinstance(payload.full_name, str) else None,
        "password_hash": pwd_hash,
        "job_family": payload.job_family.value if payload.job_family else None,
        "level": payload.level.value if payload.level else None,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    if settings.data_provider == "sqlite":
        try:
            with sqlite_db.get_conn() as conn:
                sqlite_db.auth_insert_user(conn, record)
        except sqlite3.IntegrityError:
            # Unique constraint violation (email)
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    else:
        if email_norm in _mem_users_by_email:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        _mem_users[record["id"]] = record
        _mem_users_by_email[email_norm] = record["id"]
    logger.info("Registered user %s", record["id"])
    return record


def _user_public(rec: Dict) -> UserPublic:
    return UserPublic(
        id=rec["id"],
        email=rec["email"],
        full_name=rec.get("full_name"),
        job_family=rec.get("job_family"),
        level=rec.get("level"),
    )


def get_current_user(token: str = Depends(oauth2_scheme)) -> UserPublic:
    """Dependency to extract current user from JWT token."""
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")
    rec = _get_user_by_id(sub)
    if not rec:
        raise HTTPException(status_code=401, detail="User not found")
    return _user_public(rec)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create a new user account, optionally with a job family and level.",
)
def register(payload: UserCreate):
    """Register a new user with hashed password.

    Returns:
        201 with public user if created.
        409 if email already exists.
        400 if the password policy fails.
    """
    if _get_user_by_email(str(payload.email)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    try:
        pwd_hash = hash_password(payload.password)
    except ValueError as ve:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(ve))
    return _user_public(_create_user(payload, pwd_hash))


# PUBLIC_INTERFACE
@router.post("/login", response_model=TokenResponse, summary="Login", description="Authenticate and receive an access token.")
def login(payload: UserLogin):
    """Authenticate a user and return a JWT access token."""
    rec = _get_user_by_email(str(payload.email))
    if not rec or not verify_password(payload.password, rec["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(subject=rec["id"], claims={"email": rec["email"]})
    return TokenResponse(access_token=token)


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserPublic, summary="Current user", description="Return the current authenticated user.")
def me(current: UserPublic = Depends(get_current_user)):
    """Return current user data."""
    return current


# PUBLIC_INTERFACE
@router.put(
    "/me/preferences",
    response_model=UserPublic,
    summary="Set rubric selection",
    description="Store the job family and level used as defaults for rubric coverage.",
)
def update_preferences(payload: RubricPreferences, current: UserPublic = Depends(get_current_user)):
    """Replace the current user's job family and level selection."""
    job_family = payload.job_family.value if payload.job_family else None
    level = payload.level.value if payload.level else None
    settings = get_settings()
    if settings.data_provider == "sqlite":
        with sqlite_db.get_conn() as conn:
            sqlite_db.auth_update_preferences(conn, current.id, job_family, level)
    else:
        _mem_users[current.id].update(job_family=job_family, level=level)
    return current.model_copy(update={"job_family": job_family, "level": level})
