"""
AuthorizationGuard: credential -> principal resolution and ownership checks.

Principals are passed explicitly to every operation; nothing here keeps an
ambient "current user".
"""

import uuid
from typing import Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.config import get_settings
from roamlist.kernel.errors import AuthenticationRequired, AuthorizationDenied, NotFound
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.tokens import IdentityClaims, IdentityTokenManager, get_token_manager
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.user import User, UserRole
from roamlist.logging_config import get_logger, principal_id_var

logger = get_logger(__name__)

# Anything carrying an ``owner_id``
OwnedT = TypeVar("OwnedT")


class AuthorizationGuard:
    """
    Resolves credentials to principals and enforces ownership.

    Ownership failures on an existing resource raise NotFound when
    ``conceal_foreign_resources`` is on (the default), so a caller cannot
    tell "someone else's" from "does not exist"; with it off they raise
    AuthorizationDenied.
    """

    def __init__(
        self,
        session: AsyncSession,
        token_manager: Optional[IdentityTokenManager] = None,
        conceal_foreign_resources: Optional[bool] = None,
    ):
        self.session = session
        self.token_manager = token_manager or get_token_manager()
        if conceal_foreign_resources is None:
            conceal_foreign_resources = get_settings().conceal_foreign_resources
        self.conceal_foreign_resources = conceal_foreign_resources
        self.event_store = EventStore(session)

    async def resolve_principal(
        self,
        credential: Optional[str],
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Resolve a bearer credential to a principal.

        The principal is created on the first successful resolution of a
        new external identity. Later resolutions refresh the profile fields
        from the token but never rebind the identity.

        Raises:
            AuthenticationRequired: missing, invalid or expired credential
        """
        if not credential:
            raise AuthenticationRequired()

        claims = self.token_manager.verify_token(credential)
        if claims is None:
            raise AuthenticationRequired("Invalid or expired credential")

        user = await self.get_principal_by_subject(claims.sub)
        if user is None:
            user = await self._create_principal(claims, ip_address)
        else:
            self._refresh_profile(user, claims)

        principal_id_var.set(str(user.id))
        return user

    async def resolve_principal_optional(
        self,
        credential: Optional[str],
        ip_address: Optional[str] = None,
    ) -> Optional[User]:
        """Like resolve_principal, but None instead of AuthenticationRequired."""
        try:
            return await self.resolve_principal(credential, ip_address)
        except AuthenticationRequired:
            return None

    async def get_principal_by_subject(self, subject: str) -> Optional[User]:
        """Get a principal by external identity."""
        result = await self.session.execute(select(User).where(User.auth_subject == subject))
        return result.scalar_one_or_none()

    @staticmethod
    def owns(principal: Optional[User], owner_id: Optional[uuid.UUID]) -> bool:
        """Owner fast-path: True when the principal is the owner."""
        return principal is not None and owner_id is not None and principal.id == owner_id

    def require_owner_id(self, principal: User, owner_id: uuid.UUID) -> None:
        """
        Require the principal to act on its own scope.

        Raises:
            AuthorizationDenied: the scope belongs to someone else
        """
        if not self.owns(principal, owner_id):
            logger.info(
                "Denied write to foreign scope",
                extra={"owner_id": str(owner_id)},
            )
            raise AuthorizationDenied()

    def require_ownership(
        self,
        principal: User,
        resource: Optional[OwnedT],
        resource_name: str = "Resource",
    ) -> OwnedT:
        """
        Require ``resource`` to exist and be owned by ``principal``.

        Returns:
            The resource, for chaining

        Raises:
            NotFound: missing, or foreign while concealment is on
            AuthorizationDenied: foreign while concealment is off
        """
        if resource is None:
            raise NotFound(f"{resource_name} not found")

        if not self.owns(principal, getattr(resource, "owner_id")):
            logger.info(
                "Denied access to foreign resource",
                extra={"resource": resource_name, "resource_id": str(getattr(resource, "id", ""))},
            )
            if self.conceal_foreign_resources:
                raise NotFound(f"{resource_name} not found")
            raise AuthorizationDenied()

        return resource

    async def _create_principal(self, claims: IdentityClaims, ip_address: Optional[str]) -> User:
        user = User(
            auth_subject=claims.sub,
            email=claims.email.lower().strip(),
            display_name=claims.name,
            avatar_url=claims.picture,
            role=UserRole.FREE,
        )
        self.session.add(user)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.PRINCIPAL_CREATED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"email": user.email},
            ip_address=ip_address,
        )
        logger.info("Principal created", extra={"user_id": str(user.id)})
        return user

    @staticmethod
    def _refresh_profile(user: User, claims: IdentityClaims) -> None:
        email = claims.email.lower().strip()
        if email != user.email:
            user.email = email
        if claims.name and claims.name != user.display_name:
            user.display_name = claims.name
        if claims.picture and claims.picture != user.avatar_url:
            user.avatar_url = claims.picture
