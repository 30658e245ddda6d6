# minutes/api/v1/deps.py
from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException, Request, status

from minutes.core.security import decode_access_token
from minutes.models import Meeting, Project, Tag
from minutes.models.user import User

async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    The JWT is taken from the ``Authorization: Bearer`` header, falling back
    to the HttpOnly ``accessToken`` cookie set by /auth/login.

    Raises:
        HTTPException (401): AUTH_REQUIRED, AUTH_INVALID_TOKEN or AUTH_USER_NOT_FOUND
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    try:
        payload = decode_access_token(token)
        user_id = UUID(str(payload.get("sub")))
    except (jwt.PyJWTError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")

    user = await User.get_or_none(id=user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_USER_NOT_FOUND")
    return user

async def require_admin(current: User = Depends(get_current_user)) -> User:
    """Like get_current_user, but 403 (FORBIDDEN_ADMIN_ONLY) unless role == "admin"."""
    if getattr(current, "role", "user") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_ADMIN_ONLY")
    return current

# -------- ownership-scoped lookups --------
# Another user's id is indistinguishable from a missing one (404).

async def get_owned_meeting(meeting_id: UUID, user: User) -> Meeting:
    meeting = await Meeting.get_or_none(id=meeting_id, user_id=user.id)
    if not meeting:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meeting not found")
    return meeting

async def get_owned_project(project_id: UUID, user: User) -> Project:
    project = await Project.get_or_none(id=project_id, user_id=user.id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project

async def get_owned_tag(tag_id: UUID, user: User) -> Tag:
    tag = await Tag.get_or_none(id=tag_id, user_id=user.id)
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag
