from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.security import decode_token
from models.profile import Profile


bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds is not None and creds.credentials:
        return creds.credentials
    cookie_token = request.cookies.get("access_token")
    return cookie_token or None


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    cached = getattr(request.state, "current_user", None)
    if isinstance(cached, Profile):
        return cached

    token = _extract_token(request, creds)
    if not token:
        raise HTTPException(status_code=401, detail="NOT_AUTHENTICATED")
    try:
        payload = decode_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    try:
        user_uuid = uuid.UUID(str(user_id))
    except Exception:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    # The role lives on the profile row; the token only proves identity.
    profile = db.get(Profile, user_uuid)
    if profile is None:
        raise HTTPException(status_code=403, detail="PROFILE_NOT_FOUND")

    request.state.current_user = profile
    return profile


def is_admin(profile: Profile) -> bool:
    return str(profile.role or "").lower() in settings.admin_role_set


def require_admin(
    current_user: Profile = Depends(get_current_user),
) -> Profile:
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="NOT_AUTHORIZED")
    return current_user
