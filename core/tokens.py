"""
Session credentials.

Access tokens are short-lived signed JWTs checked without any storage lookup.
Refresh tokens are opaque random strings persisted with an expiry; a user may
hold several at once (one per device). Lifecycle of a refresh token:

    issued -> active -> expired | revoked

Both end states are terminal: once a record is gone, the token never
verifies again.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from jose import ExpiredSignatureError, JWTError

from core.config import settings
from core.errors import InvalidTokenError, RefreshTokenError, TokenExpiredError
from core.logging import LOGGER_NAME
from core.security import ACCESS_TOKEN_TYPE, create_access_token, decode_access_token, generate_refresh_token
from core.time_utils import get_current_time, to_utc
from models.token import RefreshTokenRecord, RefreshVerification, TokenPair
from repositories.tokens import RefreshTokenRepository

logger = logging.getLogger(LOGGER_NAME)


class TokenService:
    def __init__(
        self,
        repository: RefreshTokenRepository,
        access_token_minutes: Optional[int] = None,
        refresh_token_days: Optional[int] = None,
        clock: Callable = get_current_time,
    ):
        self.repository = repository
        self.access_token_ttl = timedelta(minutes=access_token_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_token_ttl = timedelta(days=refresh_token_days or settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.clock = clock

    # Access tokens -----------------------------------------------------

    def issue_access_token(self, user_id: str) -> str:
        return create_access_token(subject=user_id, expires_delta=self.access_token_ttl)

    def verify_access_token(self, token: str) -> str:
        """
        Returns the user id carried by a valid access token.

        Raises:
            TokenExpiredError: signature is fine but the token is past expiry,
                the caller can try a refresh.
            InvalidTokenError: malformed or badly signed, re-authenticate.
        """
        try:
            payload = decode_access_token(token)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidTokenError()

        user_id = payload.get("sub")
        if not user_id or payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError()
        return user_id

    # Refresh tokens ----------------------------------------------------

    async def issue_refresh_token(self, user_id: str) -> str:
        record = RefreshTokenRecord(
            token=generate_refresh_token(),
            user_id=user_id,
            expires_at=self.clock() + self.refresh_token_ttl,
        )
        await self.repository.create(record)
        return record.token

    async def issue_token_pair(self, user_id: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id),
            refresh_token=await self.issue_refresh_token(user_id),
        )

    async def verify_refresh_token(self, token: str) -> RefreshVerification:
        record = await self.repository.get(token)
        if record is None:
            return RefreshVerification(valid=False, reason="not_found")

        if to_utc(record.expires_at) < to_utc(self.clock()):
            # Lazy cleanup, the periodic sweep catches the ones nobody presents
            await self.repository.delete(token)
            return RefreshVerification(valid=False, reason="expired")

        return RefreshVerification(valid=True, user_id=record.user_id)

    async def rotate(self, token: str) -> TokenPair:
        """
        Exchanges a refresh token for a fresh pair. The presented token is
        revoked, so each refresh token can be used once.
        """
        verification = await self.verify_refresh_token(token)
        if not verification.valid:
            raise RefreshTokenError(verification.reason)

        if not await self.repository.delete(token):
            # Lost a race with a concurrent rotation or logout of the same token
            raise RefreshTokenError("not_found")

        return await self.issue_token_pair(verification.user_id)

    async def revoke(self, token: str) -> bool:
        """False when no such token exists."""
        return await self.repository.delete(token)

    async def revoke_all(self, user_id: str) -> int:
        count = await self.repository.delete_for_user(user_id)
        logger.info("Revoked all refresh tokens", extra={"user_id": user_id, "count": count})
        return count

    async def sweep_expired(self) -> int:
        """Deletes every expired record. Errors are logged, the next run retries."""
        try:
            count = await self.repository.delete_expired(to_utc(self.clock()))
        except Exception as e:
            logger.error("Failed to clean up expired refresh tokens", extra={"error": str(e)})
            return 0
        if count > 0:
            logger.info("Cleaned up expired refresh tokens", extra={"count": count})
        return count
