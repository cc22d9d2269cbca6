from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, EmailStr, Field
import logging

from core import cache_keys as keys
from core.cache import CacheStore
from core.dependencies import (
    get_cache_store,
    get_identity_provider,
    get_invalidator,
    get_token_service,
    get_user_repository,
)
from core.errors import InvalidCredentialsError, UserNotFoundError
from core.invalidation import InvalidationCoordinator
from core.logging import LOGGER_NAME
from core.oauth import IdentityProvider
from core.security import get_password_hash, verify_password
from core.tokens import TokenService
from models.token import TokenPair
from models.user import User, UserPublic

router = APIRouter(prefix="/auth", tags=["Auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
logger = logging.getLogger(LOGGER_NAME)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class GoogleLoginRequest(BaseModel):
    code: str = Field(..., min_length=1)

class RefreshTokenRequest(BaseModel):
    refresh_token: str

class SessionResponse(TokenPair):
    user: UserPublic


async def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Resolves the bearer access token to a user id. The error code tells
    an expired token (try /auth/refresh) apart from an invalid one.
    """
    return tokens.verify_access_token(token)


async def _start_session(user: User, tokens: TokenService) -> SessionResponse:
    pair = await tokens.issue_token_pair(user.id)
    return SessionResponse(user=user.public(), **pair.model_dump())


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    users=Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    # The unique email index rejects duplicates, including concurrent ones
    user = await users.create(User(
        email=payload.email,
        name=payload.name.strip(),
        password_hash=get_password_hash(payload.password),
    ))
    logger.info("User registered", extra={"user_id": user.id})
    return await _start_session(user, tokens)


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    users=Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    user = await users.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise InvalidCredentialsError()
    logger.info("User logged in", extra={"user_id": user.id})
    return await _start_session(user, tokens)


@router.get("/google/url")
async def google_auth_url(provider: IdentityProvider = Depends(get_identity_provider)):
    return {"url": provider.authorization_url()}


@router.post("/google", response_model=SessionResponse)
async def google_login(
    payload: GoogleLoginRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    users=Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
    invalidator: InvalidationCoordinator = Depends(get_invalidator),
):
    """
    Signs in with a Google authorization code.
    - Known Google id: sign in.
    - Known email without Google id: link the Google id to that account.
    - Otherwise: create a password-less account.
    """
    identity = await provider.verify(payload.code)

    user = await users.get_by_google_id(identity.subject)
    if user is None:
        existing = await users.get_by_email(identity.email)
        if existing is not None:
            user = await users.link_google_id(existing.id, identity.subject)
            await invalidator.on_user_changed(existing.id)
        else:
            user = await users.create(User(
                email=identity.email,
                name=identity.name or identity.email.split("@")[0],
                google_id=identity.subject,
            ))
            logger.info("User registered via Google", extra={"user_id": user.id})
    if user is None:
        raise UserNotFoundError()

    return await _start_session(user, tokens)


@router.post("/refresh", response_model=TokenPair)
async def refresh(payload: RefreshTokenRequest, tokens: TokenService = Depends(get_token_service)):
    """
    Trades a refresh token for a new access token and a new refresh token.
    The presented refresh token stops working.
    """
    return await tokens.rotate(payload.refresh_token)


@router.post("/logout")
async def logout(payload: RefreshTokenRequest, tokens: TokenService = Depends(get_token_service)):
    # An unknown token still logs the caller out from their point of view
    revoked = await tokens.revoke(payload.refresh_token)
    return {"message": "Logged out successfully", "revoked": revoked}


@router.post("/logout-all")
async def logout_all(
    user_id: str = Depends(get_current_user_id),
    tokens: TokenService = Depends(get_token_service),
):
    revoked = await tokens.revoke_all(user_id)
    return {"message": "Logged out from all devices", "revoked": revoked}


@router.get("/me", response_model=UserPublic)
async def read_users_me(
    user_id: str = Depends(get_current_user_id),
    users=Depends(get_user_repository),
    cache: CacheStore = Depends(get_cache_store),
):
    key = keys.user_profile(user_id)
    cached = await cache.get(key)
    if cached is not None:
        return UserPublic(**cached)

    user = await users.get(user_id)
    if user is None:
        raise UserNotFoundError()
    profile = user.public()
    await cache.set(key, profile.model_dump(mode="json"), keys.TTL_USER_PROFILE)
    return profile
