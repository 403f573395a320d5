"""
Subject resolution.

Turns request credentials (and optionally a project id) into a Subject by
asking three collaborators: the identity provider, the user store and the
project membership store. Resolution only establishes facts; it never
decides that an action is forbidden.
"""
import asyncio
from collections.abc import Awaitable
from dataclasses import replace
from typing import Optional, Protocol, TypeVar

from app.core import config
from app.features.permissions.exceptions import AuthError, StoreUnavailable
from app.features.permissions.subject import Identity, MembershipRecord, Subject, UserRecord
from app.utils import get_logger


log = get_logger(__name__)

T = TypeVar("T")


class IdentityProvider(Protocol):
    async def authenticate(self, credentials: Optional[str]) -> Optional[Identity]:
        """Return the caller's identity, or None when the credentials are missing or invalid."""
        ...


class UserStore(Protocol):
    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        """Look up the user behind an identity. None when no such (active) user exists."""
        ...


class MembershipStore(Protocol):
    async def find_membership(self, project_id: str, user_id: str) -> Optional[MembershipRecord]:
        """Look up the user's membership row in a project. None when not a member."""
        ...


class SubjectResolver:
    """
    Resolve request credentials into a Subject.

    Every call is independent: nothing is cached between calls because roles
    and memberships can change between requests. A lookup that raises
    (StoreUnavailable or anything else) or exceeds `lookup_timeout` seconds
    yields a RESOLUTION_FAILURE error, which callers must treat as a denial.

    Usage:
        resolver = SubjectResolver(identity_provider, user_store, membership_store)
        resolved = await resolver.resolve(token, project_id="01J...")
        if isinstance(resolved, AuthError):
            ...
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        user_store: UserStore,
        membership_store: MembershipStore,
        lookup_timeout: Optional[float] = None,
    ):
        self.identity_provider = identity_provider
        self.user_store = user_store
        self.membership_store = membership_store
        self.lookup_timeout = (
            config.AUTH_LOOKUP_TIMEOUT_SECONDS if lookup_timeout is None else lookup_timeout
        )

    async def resolve(
        self,
        credentials: Optional[str],
        project_id: Optional[str] = None,
    ) -> Subject | AuthError:
        try:
            identity = await self._lookup(self.identity_provider.authenticate(credentials))
            if identity is None:
                log.info("Rejected request without a valid identity")
                return AuthError.unauthenticated()

            user = await self._lookup(self.user_store.find_user(identity.user_id))
            if user is None:
                log.info(f"Identity {identity.user_id} has no active user record")
                return AuthError.unauthenticated()

            subject = Subject(
                id=user.id,
                company_id=user.company_id,
                role=user.role,
                email=identity.email,
            )
            if project_id is None:
                return subject

            membership = await self._lookup(
                self.membership_store.find_membership(project_id, user.id)
            )
        except StoreUnavailable:
            log.exception("Subject lookup failed, denying request")
            return AuthError.resolution_failure()
        except asyncio.TimeoutError:
            log.error(f"Subject lookup timed out after {self.lookup_timeout}s, denying request")
            return AuthError.resolution_failure()
        except Exception:
            log.exception("Unexpected error while resolving subject, denying request")
            return AuthError.resolution_failure()

        if membership is None:
            log.debug(f"User {subject.id} is not a member of project {project_id}")
            return replace(subject, project_id=project_id)

        return replace(
            subject,
            project_id=project_id,
            project_role=membership.project_role,
            is_project_owner=membership.project_creator_id == subject.id,
        )

    async def _lookup(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.lookup_timeout)
