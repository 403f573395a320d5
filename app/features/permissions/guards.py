"""
Authorization guards.

A guard is a value with `check(subject) -> AuthorizationDecision`. Guards are
combined with AllOf (or `&`) and run by `authorize`, which resolves the
subject first so call sites never repeat the resolve-then-evaluate sequence.

Usage:
    guard = RequirePermission(Capability.CREATE_TASKS) & RequireRole([Role.MANAGER, Role.USER])
    decision = await authorize(resolver, token, guard, project_id=project_id)
    if not decision.allowed:
        ...
"""
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from app.features.permissions.access import subject_can_access_project
from app.features.permissions.enums import Capability, Combinator, Role
from app.features.permissions.evaluator import (
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
)
from app.features.permissions.exceptions import (
    REASON_NO_PROJECT_ACCESS,
    AuthError,
    AuthErrorKind,
)
from app.features.permissions.resolver import SubjectResolver
from app.features.permissions.subject import Subject
from app.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of a guard: allowed with the subject, or denied with a reason."""
    allowed: bool
    subject: Optional[Subject]
    reason: Optional[str] = None
    error: Optional[AuthErrorKind] = None

    @classmethod
    def allow(cls, subject: Subject) -> "AuthorizationDecision":
        return cls(allowed=True, subject=subject)

    @classmethod
    def deny(cls, error: AuthError, subject: Optional[Subject] = None) -> "AuthorizationDecision":
        return cls(allowed=False, subject=subject, reason=error.reason, error=error.kind)


class Guard(ABC):

    @abstractmethod
    def check(self, subject: Subject) -> AuthorizationDecision:
        ...

    def __and__(self, other: "Guard") -> "AllOf":
        return AllOf(self, other)


def _decide(subject: Subject, allowed: bool, error: AuthError) -> AuthorizationDecision:
    if allowed:
        return AuthorizationDecision.allow(subject)
    return AuthorizationDecision.deny(error, subject)


@dataclass(frozen=True)
class Authenticated(Guard):
    """Any resolved subject passes."""

    def check(self, subject: Subject) -> AuthorizationDecision:
        return AuthorizationDecision.allow(subject)


@dataclass(frozen=True)
class RequirePermission(Guard):
    capability: Capability

    def check(self, subject: Subject) -> AuthorizationDecision:
        return _decide(subject, has_permission(subject, self.capability), AuthError.forbidden())


@dataclass(frozen=True)
class RequireAll(Guard):
    capabilities: tuple[Capability, ...]

    def __init__(self, capabilities: Iterable[Capability]):
        object.__setattr__(self, "capabilities", tuple(capabilities))

    def check(self, subject: Subject) -> AuthorizationDecision:
        return _decide(subject, has_all_permissions(subject, self.capabilities), AuthError.forbidden())


@dataclass(frozen=True)
class RequireAny(Guard):
    capabilities: tuple[Capability, ...]

    def __init__(self, capabilities: Iterable[Capability]):
        object.__setattr__(self, "capabilities", tuple(capabilities))

    def check(self, subject: Subject) -> AuthorizationDecision:
        return _decide(subject, has_any_permission(subject, self.capabilities), AuthError.forbidden())


@dataclass(frozen=True)
class RequireRole(Guard):
    roles: frozenset[Role]

    def __init__(self, roles: Iterable[Role]):
        object.__setattr__(self, "roles", frozenset(Role(role) for role in roles))

    def check(self, subject: Subject) -> AuthorizationDecision:
        return _decide(subject, has_role(subject, self.roles), AuthError.forbidden())


@dataclass(frozen=True)
class RequireProjectAccess(Guard):
    """The subject must be able to see the project it was resolved against."""

    def check(self, subject: Subject) -> AuthorizationDecision:
        allowed = subject.project_id is not None and subject_can_access_project(subject)
        return _decide(subject, allowed, AuthError.forbidden(REASON_NO_PROJECT_ACCESS))


@dataclass(frozen=True)
class AllOf(Guard):
    """Runs guards in order; the first denial wins."""
    guards: tuple[Guard, ...]

    def __init__(self, *guards: Guard):
        object.__setattr__(self, "guards", tuple(guards))

    def check(self, subject: Subject) -> AuthorizationDecision:
        for guard in self.guards:
            decision = guard.check(subject)
            if not decision.allowed:
                return decision
        return AuthorizationDecision.allow(subject)


def guard_for(
    capabilities: Capability | str | Iterable[Capability],
    combinator: Combinator = Combinator.ALL,
) -> Guard:
    """
    Build the capability guard for one capability or a list combined with ALL / ANY.

    A single capability may be given by its wire name ("canEditTasks").
    """
    if isinstance(capabilities, (Capability, str)):
        return RequirePermission(Capability(capabilities))
    if Combinator(combinator) is Combinator.ANY:
        return RequireAny(capabilities)
    return RequireAll(capabilities)


async def authorize(
    resolver: SubjectResolver,
    credentials: Optional[str],
    guard: Guard,
    project_id: Optional[str] = None,
) -> AuthorizationDecision:
    """
    Resolve the subject and run the guard against it.

    With a project id, project visibility is checked before the guard, so a
    capability is never granted on a project the subject cannot see.
    """
    resolved = await resolver.resolve(credentials, project_id)
    if isinstance(resolved, AuthError):
        return AuthorizationDecision.deny(resolved)

    if project_id is not None:
        guard = AllOf(RequireProjectAccess(), guard)

    decision = guard.check(resolved)
    if not decision.allowed:
        log.info(
            f"Denied user {resolved.id} ({Role(resolved.role).value}) "
            f"project={project_id or '-'}: {decision.reason}"
        )
    return decision
