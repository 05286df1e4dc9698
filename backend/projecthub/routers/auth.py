from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from projecthub import models
from projecthub.core.exceptions import Conflict, Unauthenticated
from projecthub.core.logging import get_logger
from projecthub.core.rate_limit import RATE_LIMITS, limiter
from projecthub.core.security import create_access_token, hash_password, verify_password
from projecthub.core.settings import settings
from projecthub.db import get_db
from projecthub.routers.deps import authenticated
from projecthub.schemas import (
    ApiResponse,
    LoginResponse,
    Token,
    UserCreate,
    UserLogin,
    UserRead,
    api_response,
)
from projecthub.services import identity
from projecthub.services.authorization import ACCESS_TOKEN_COOKIE, RequestContext

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _authenticate_credentials(
    db: Session, password: str, email: str | None = None, username: str | None = None
) -> models.User:
    user = identity.find_by_email_or_username(db, email=email, username=username)
    if user is None or not user.is_active or not verify_password(password, user.hashed_password):
        raise Unauthenticated("Incorrect email or password")
    return user


def _set_access_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )


@router.post("/register", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["auth_operations"])
def register_user(request: Request, payload: UserCreate, db: Session = Depends(get_db)):
    existing = identity.find_by_email_or_username(db, email=payload.email, username=payload.username)
    if existing:
        raise Conflict("User with the given email or username already exists")

    user = models.User(
        email=payload.email,
        username=payload.username,
        full_name=payload.full_name,
        hashed_password=hash_password(payload.password),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_registered", user_id=str(user.id))
    return api_response(201, UserRead.model_validate(user), "User registered successfully")


@router.post("/login", response_model=ApiResponse[LoginResponse])
@limiter.limit(RATE_LIMITS["auth_operations"])
def login_user(request: Request, payload: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = _authenticate_credentials(db, payload.password, email=payload.email, username=payload.username)
    access_token = create_access_token(data={"sub": str(user.id)})
    _set_access_cookie(response, access_token)
    logger.info("user_logged_in", user_id=str(user.id))
    data = LoginResponse(user=UserRead.model_validate(user), access_token=access_token)
    return api_response(200, data, "User logged in successfully")


@router.post("/token", response_model=Token)
@limiter.limit(RATE_LIMITS["auth_operations"])
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> Token:
    """OAuth2 password flow, used by the interactive API docs."""
    user = _authenticate_credentials(db, form_data.password, email=form_data.username, username=form_data.username)
    return Token(access_token=create_access_token(data={"sub": str(user.id)}))


@router.post("/logout", response_model=ApiResponse[None])
def logout_user(response: Response, ctx: RequestContext = Depends(authenticated)):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    logger.info("user_logged_out", user_id=ctx.principal_id)
    return api_response(200, None, "User logged out successfully")


@router.get("/me", response_model=ApiResponse[UserRead])
def read_users_me(ctx: RequestContext = Depends(authenticated)):
    return api_response(200, UserRead.model_validate(ctx.principal), "Current user fetched successfully")
