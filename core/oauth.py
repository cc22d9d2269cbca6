"""Google sign-in. The rest of the app only sees a VerifiedIdentity."""

import logging
from typing import Protocol
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, EmailStr

from core.config import settings
from core.errors import AuthError
from core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class VerifiedIdentity(BaseModel):
    subject: str
    email: EmailStr
    name: str = ""


class IdentityRejectedError(AuthError):
    code = "identity_rejected"
    message = "Failed to get Google user info"


class IdentityProvider(Protocol):
    def authorization_url(self) -> str: ...

    async def verify(self, code: str) -> VerifiedIdentity: ...


class GoogleIdentityProvider:
    def __init__(self, client_id: str = settings.GOOGLE_CLIENT_ID, client_secret: str = settings.GOOGLE_CLIENT_SECRET,
                 redirect_uri: str = settings.GOOGLE_CALLBACK_URL, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def authorization_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "access_type": "offline",
            "scope": "openid email profile",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def verify(self, code: str) -> VerifiedIdentity:
        """Exchanges an authorization code for the user's verified email and Google id."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                token_resp = await client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                })
                token_resp.raise_for_status()
                access_token = token_resp.json()["access_token"]

                info_resp = await client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
                info_resp.raise_for_status()
                info = info_resp.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("Google OAuth error", extra={"error": str(e)})
            raise IdentityRejectedError()

        if not info.get("verified_email", False) or not info.get("id") or not info.get("email"):
            raise IdentityRejectedError("Google account email is not verified")

        return VerifiedIdentity(subject=info["id"], email=info["email"], name=info.get("name") or "")
