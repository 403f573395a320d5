"""
Tests for permission evaluation.
"""
import logging

import pytest

from app.features.permissions.enums import Capability, ProjectRole, Role
from app.features.permissions.evaluator import (
    available_navigation_sections,
    effective_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
    permissions_for,
)
from app.features.permissions.matrix import baseline, override
from app.features.permissions.subject import Subject


def make_subject(role: Role, project_role: ProjectRole | None = None) -> Subject:
    return Subject(
        id="u1",
        company_id="c1",
        role=role,
        project_id="p1" if project_role else None,
        project_role=project_role,
    )


class TestEffectivePermissions:

    @pytest.mark.parametrize("role", list(Role))
    def test_without_project_role_is_baseline(self, role):
        assert effective_permissions(make_subject(role)) == baseline(role)

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("project_role", list(ProjectRole))
    def test_override_scoping(self, role, project_role):
        effective = effective_permissions(make_subject(role, project_role))
        overrides = override(project_role)

        for capability in Capability:
            if capability in overrides:
                assert effective[capability] == overrides[capability], capability
            else:
                assert effective[capability] == baseline(role)[capability], capability

    def test_result_is_total(self):
        effective = effective_permissions(make_subject(Role.USER, ProjectRole.VIEWER))
        assert set(effective) == set(Capability)

    def test_permissions_for_is_stable(self):
        assert permissions_for(Role.MANAGER, ProjectRole.MEMBER) is permissions_for(
            Role.MANAGER, ProjectRole.MEMBER
        )


class TestScenarios:

    def test_user_cannot_create_projects_tenant_wide(self):
        assert has_permission(make_subject(Role.USER), Capability.CREATE_PROJECTS) is False

    def test_member_creates_documents(self):
        subject = make_subject(Role.USER, ProjectRole.MEMBER)
        assert has_permission(subject, Capability.CREATE_DOCUMENTS) is True

    def test_viewer_override_restricts_manager(self):
        subject = make_subject(Role.MANAGER, ProjectRole.VIEWER)

        assert has_permission(make_subject(Role.MANAGER), Capability.EDIT_TASKS) is True
        assert has_permission(subject, Capability.EDIT_TASKS) is False

    def test_project_owner_grants_beyond_user_baseline(self):
        subject = make_subject(Role.USER, ProjectRole.OWNER)

        assert has_permission(subject, Capability.DELETE_PROJECTS) is True
        # not in the override map, stays at the USER baseline
        assert has_permission(subject, Capability.VIEW_REPORTS) is False

    def test_project_manager_cannot_delete_finances(self):
        subject = make_subject(Role.OWNER, ProjectRole.MANAGER)
        assert has_permission(subject, Capability.DELETE_FINANCES) is False


class TestAllAny:

    @pytest.mark.parametrize("role", list(Role))
    def test_empty_lists(self, role):
        subject = make_subject(role)

        assert has_all_permissions(subject, []) is True
        assert has_any_permission(subject, []) is False

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("project_role", [None, *ProjectRole])
    def test_match_single_checks(self, role, project_role):
        subject = make_subject(role, project_role)
        capabilities = [
            Capability.CREATE_PROJECTS,
            Capability.VIEW_FINANCES,
            Capability.EDIT_TASKS,
            Capability.CREATE_DOCUMENTS,
        ]
        singles = [has_permission(subject, c) for c in capabilities]

        assert has_all_permissions(subject, capabilities) == all(singles)
        assert has_any_permission(subject, capabilities) == any(singles)

    def test_mixed_list(self):
        subject = make_subject(Role.USER)
        capabilities = [Capability.VIEW_PROJECTS, Capability.CREATE_PROJECTS]

        assert has_all_permissions(subject, capabilities) is False
        assert has_any_permission(subject, capabilities) is True

    def test_accepts_generators(self):
        subject = make_subject(Role.OWNER)
        assert has_all_permissions(subject, (c for c in Capability)) is True

    def test_plain_string_roles(self, caplog):
        caplog.set_level(logging.DEBUG, logger="app.features.permissions.evaluator")
        subject = Subject(id="u1", company_id="c1", role="USER", project_id="p1", project_role="MEMBER")

        assert has_permission(subject, Capability.VIEW_PROJECTS) is True
        assert has_permission(subject, "canCreateDocuments") is True
        assert has_permission(subject, Capability.CREATE_PROJECTS) is False
        assert "role=USER project_role=MEMBER denied canCreateProjects" in caplog.text


class TestRolesAndNavigation:

    def test_has_role(self):
        subject = make_subject(Role.MANAGER)

        assert has_role(subject, [Role.OWNER, Role.MANAGER]) is True
        assert has_role(subject, [Role.OWNER]) is False
        assert has_role(subject, []) is False

    @pytest.mark.parametrize("role, expected", [
        (Role.OWNER, ["dashboard", "projects", "tasks", "documents", "approvals", "users", "reports", "settings"]),
        (Role.ADMIN, ["dashboard", "projects", "tasks", "documents", "approvals", "users", "reports", "settings"]),
        (Role.MANAGER, ["dashboard", "projects", "tasks", "documents", "approvals", "reports"]),
        (Role.USER, ["dashboard", "projects", "tasks", "documents", "approvals"]),
    ])
    def test_navigation_sections(self, role, expected):
        assert available_navigation_sections(role) == expected
