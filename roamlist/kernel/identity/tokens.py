"""
Identity token handling.

Credentials are bearer JWTs minted by the external identity provider. The
``sub`` claim is the stable external identity a principal is bound to.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError

from roamlist.config import get_settings
from roamlist.logging_config import get_logger

logger = get_logger(__name__)

TOKEN_TYPE = "identity"


class IdentityClaims(BaseModel):
    """Verified claims of an identity token."""

    sub: str  # External identity
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    exp: datetime
    iat: datetime
    jti: str


class IdentityTokenManager:
    """
    Verifies identity tokens, and mints them for development and tests.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
        issuer: Optional[str] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.expire_minutes = expire_minutes or settings.identity_token_expire_minutes
        self.issuer = issuer if issuer is not None else settings.identity_issuer

    def create_token(
        self,
        subject: str,
        email: str,
        name: Optional[str] = None,
        picture: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Mint a signed identity token for ``subject``."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "email": email,
            "exp": now + (expires_delta or timedelta(minutes=self.expire_minutes)),
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": TOKEN_TYPE,
        }
        if name:
            payload["name"] = name
        if picture:
            payload["picture"] = picture
        if self.issuer:
            payload["iss"] = self.issuer

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[IdentityClaims]:
        """
        Verify and decode an identity token.

        ``sub``, ``exp`` and ``iat`` must be present; a signed token that
        lacks them, or carries claims of the wrong type, is rejected like a
        forged one.

        Returns:
            The claims if signature, expiry, type and issuer check out,
            None otherwise
        """
        try:
            options = {
                "verify_iss": bool(self.issuer),
                "require_exp": True,
                "require_iat": True,
                "require_sub": True,
            }
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options=options,
            )
        except JWTError as exc:
            logger.info("Rejected identity token", extra={"reason": str(exc)})
            return None

        if payload.get("type") != TOKEN_TYPE or not payload.get("sub") or not payload.get("email"):
            return None

        try:
            return IdentityClaims(
                sub=payload["sub"],
                email=payload["email"],
                name=payload.get("name"),
                picture=payload.get("picture"),
                exp=payload["exp"],
                iat=payload["iat"],
                jti=payload.get("jti", ""),
            )
        except PydanticValidationError as exc:
            logger.info("Rejected identity token", extra={"reason": "malformed claims", "errors": exc.error_count()})
            return None


_token_manager: Optional[IdentityTokenManager] = None


def get_token_manager() -> IdentityTokenManager:
    """Get or create the default token manager."""
    global _token_manager
    if _token_manager is None:
        _token_manager = IdentityTokenManager()
    return _token_manager
