"""
Simulated single-user admin login.

A fixed username/password pair from settings, checked per request over HTTP
Basic. There is no hashing and no session expiry: this is a demo gate for the
admin panel, not production authentication.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from wishlist.config import Settings, get_settings

security = HTTPBasic()


def check_credentials(settings: Settings, username: str, password: str) -> bool:
    user_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    return user_ok and password_ok


def require_admin(
    credentials: HTTPBasicCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    if not check_credentials(settings, credentials.username, credentials.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
