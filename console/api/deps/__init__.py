import os
import secrets

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from blogkit.db import SessionLocal


def get_db() -> Session:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def require_admin(
    authorization: str = Header(default=None, alias="Authorization"),
) -> str:
    expected = os.getenv("BLOG_ADMIN_TOKEN") or ""
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Deploy trigger disabled; set BLOG_ADMIN_TOKEN",
        )
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token"
        )
    token = authorization.split(" ", 1)[1].strip()
    if not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )
    return token
