"""Authentication router.

API endpoints for user registration, login, and the current user.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.auth import CurrentUser
from glycotrack.core.security import create_access_token, hash_password, verify_password
from glycotrack.database import get_db
from glycotrack.logging_config import get_logger
from glycotrack.models.user import User
from glycotrack.schemas.auth import (
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)
from glycotrack.services.user_settings import default_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _issue_session(user: User, response: Response, message: str) -> AuthResponse:
    """Create a JWT, set it as the session cookie and build the response."""
    token = create_access_token(user_id=user.id, email=user.email)
    max_age = settings.session_expire_hours * 3600

    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=max_age,
        path="/",
    )

    return AuthResponse(
        message=message,
        user=UserResponse.model_validate(user),
        access_token=token,
        expires_in=max_age,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User registered successfully"},
        409: {"description": "Email already exists"},
    },
)
async def register_user(
    body: UserRegistrationRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Register a new user account with default settings.

    Password is hashed using bcrypt before storage.
    """
    email = body.email.lower()
    existing_user = await db.execute(select(User).where(User.email == email))
    if existing_user.scalar_one_or_none():
        logger.warning(
            "Registration attempt with existing email",
            email=email,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        name=body.name,
        email=email,
        hashed_password=hash_password(body.password),
        diabetes_type=body.diabetes_type,
        is_active=True,
    )

    try:
        db.add(user)
        await db.flush()
        db.add(default_settings(user.id))
        await db.commit()
        await db.refresh(user)
    except IntegrityError:
        await db.rollback()
        logger.warning(
            "Registration failed - integrity error",
            email=email,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    logger.info(
        "User registered successfully",
        user_id=str(user.id),
        email=user.email,
    )
    return _issue_session(user, response, "User created successfully")


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
    },
)
async def login(
    body: LoginRequest,
    response: Response,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Authenticate a user and create a session.

    Returns the JWT in the body and in an httpOnly cookie. Deleted
    accounts cannot log in.
    """
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        logger.warning(
            "Failed login attempt",
            email=body.email,
            client_ip=client_ip,
            reason="invalid_credentials",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        logger.warning(
            "Failed login attempt",
            email=body.email,
            client_ip=client_ip,
            reason="account_disabled",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    logger.info(
        "User logged in successfully",
        user_id=str(user.id),
        client_ip=client_ip,
    )
    return _issue_session(user, response, "Login successful")


@router.get("/me", response_model=UserResponse)
async def get_me(user: CurrentUser) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse.model_validate(user)
