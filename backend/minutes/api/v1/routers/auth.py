# minutes/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from minutes.api.v1.deps import get_current_user
from minutes.core import logging as log
from minutes.core.rate_limit import RateLimiter, enforce, get_client_ip, get_rate_limiter
from minutes.core.security import create_access_token, hash_password, verify_password
from minutes.models.user import User
from minutes.schemas.auth import LoginRequest, LoginResponse, RegisterIn, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register")
async def register(body: RegisterIn):
    """
    Register a new user account.

    Error codes (HTTP 400 / 409):
        - BAD_REQUEST: Missing username or password
        - USERNAME_EXISTS: Username already taken
        - EMAIL_EXISTS: Email already registered
    """
    username = body.username.strip()
    if not username or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail={"code": "BAD_REQUEST", "message": "username/password required"})
    if await User.get_or_none(username=username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                            detail={"code": "USERNAME_EXISTS", "message": "Username already exists"})
    if body.email and await User.get_or_none(email=body.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                            detail={"code": "EMAIL_EXISTS", "message": "Email already registered"})

    u = await User.create(
        username=username,
        email=(body.email or None),
        password_hash=hash_password(body.password),
        role="user",
    )
    return {"success": True, "data": UserOut.from_user(u).model_dump()}

@router.post("/login")
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Authenticate and issue an access token.

    Attempts are limited per client IP; a successful login clears the
    counter. The token is returned in the body and also set as the HttpOnly
    ``accessToken`` cookie.
    """
    ip = get_client_ip(request)
    await enforce(limiter, "login", ip, message="Too many login attempts.")

    user = await User.get_or_none(username=payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        log.auth_login(payload.username, False, ip)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Incorrect username or password"})

    await limiter.reset(f"login:{ip}")
    log.auth_login(user.username, True, ip)

    token = create_access_token(str(user.id), user.role)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    data = LoginResponse(user=UserOut.from_user(user), accessToken=token)
    return {"success": True, "data": data.model_dump()}

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": UserOut.from_user(user).model_dump()}

@router.post("/logout")
async def logout(response: Response):
    """
    Clear the access token cookie. The JWT itself stays valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True}
