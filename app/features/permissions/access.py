"""
Project visibility and record scoping.

can_access_project answers whether a subject may see a project at all and is
checked before any project-scoped capability. scope_records narrows a list of
records that the store could not filter by itself.
"""
from collections.abc import Mapping, Sequence
from typing import Any, Optional, TypeVar, assert_never

from app.features.permissions.enums import ProjectRole, Role
from app.features.permissions.subject import Subject


T = TypeVar("T")


def can_access_project(
    role: Role,
    project_role: Optional[ProjectRole] = None,
    is_project_owner: Optional[bool] = None,
) -> bool:
    """
    OWNER and ADMIN see every project of their company. MANAGER and USER see
    a project only as a member of it or as its owner.
    """
    role = Role(role)
    match role:
        case Role.OWNER | Role.ADMIN:
            return True
        case Role.MANAGER | Role.USER:
            return project_role is not None or bool(is_project_owner)
        case _:
            assert_never(role)


def subject_can_access_project(subject: Subject) -> bool:
    return can_access_project(subject.role, subject.project_role, subject.is_project_owner)


def scope_records(records: Sequence[T], subject: Subject) -> Sequence[T]:
    """
    Return the records the subject may see.

    The caller must already have limited `records` to the subject's company.
    Records expose `creator_id` / `user_id` as attributes or mapping keys
    (`creatorId` / `userId` are accepted for mappings).
    """
    role = Role(subject.role)
    match role:
        case Role.OWNER | Role.ADMIN:
            return records
        case Role.MANAGER:
            # TODO: limit MANAGER to the projects they manage once that rule is decided
            return records
        case Role.USER:
            return [
                record for record in records
                if _owner_field(record, "creator_id", "creatorId") == subject.id
                or _owner_field(record, "user_id", "userId") == subject.id
            ]
        case _:
            assert_never(role)


def _owner_field(record: Any, name: str, camel_name: str) -> Optional[str]:
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        return record.get(camel_name)
    return getattr(record, name, None)
