"""
Closed vocabularies used by the authorization engine.

Role is tenant-wide, ProjectRole is scoped to a single (project, user) membership,
Capability is the flat set of yes/no permissions the rest of the app asks about.
Values are the names used on the wire and in the database.
"""
import enum


class Role(str, enum.Enum):
    """Tenant-wide role of a user inside their company."""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class ProjectRole(str, enum.Enum):
    """Role of a user inside one project."""
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class Capability(str, enum.Enum):
    """
    Every capability the application can check.

    Grouping below is for readers only; the evaluator treats the set as flat.
    """
    # Users
    MANAGE_USERS = "canManageUsers"
    CREATE_USERS = "canCreateUsers"
    EDIT_USERS = "canEditUsers"
    DELETE_USERS = "canDeleteUsers"
    CHANGE_USER_ROLES = "canChangeUserRoles"

    # Company
    MANAGE_COMPANY = "canManageCompany"
    VIEW_COMPANY_SETTINGS = "canViewCompanySettings"
    EDIT_COMPANY_SETTINGS = "canEditCompanySettings"

    # Projects
    CREATE_PROJECTS = "canCreateProjects"
    EDIT_PROJECTS = "canEditProjects"
    DELETE_PROJECTS = "canDeleteProjects"
    VIEW_ALL_PROJECTS = "canViewAllProjects"
    MANAGE_PROJECT_MEMBERS = "canManageProjectMembers"
    VIEW_PROJECTS = "canViewProjects"
    EDIT_PROJECT_CLIENT_REQUISITES = "canEditProjectClientRequisites"

    # Tasks
    CREATE_TASKS = "canCreateTasks"
    EDIT_TASKS = "canEditTasks"
    DELETE_TASKS = "canDeleteTasks"
    ASSIGN_TASKS = "canAssignTasks"
    VIEW_ALL_TASKS = "canViewAllTasks"

    # Documents
    CREATE_DOCUMENTS = "canCreateDocuments"
    EDIT_DOCUMENTS = "canEditDocuments"
    DELETE_DOCUMENTS = "canDeleteDocuments"
    VIEW_ALL_DOCUMENTS = "canViewAllDocuments"
    APPROVE_DOCUMENTS = "canApproveDocuments"

    # Finance
    VIEW_FINANCES = "canViewFinances"
    CREATE_FINANCES = "canCreateFinances"
    EDIT_FINANCES = "canEditFinances"
    DELETE_FINANCES = "canDeleteFinances"
    VIEW_FINANCIAL_REPORTS = "canViewFinancialReports"

    # Estimates
    VIEW_ESTIMATES = "canViewEstimates"
    CREATE_ESTIMATES = "canCreateEstimates"
    EDIT_ESTIMATES = "canEditEstimates"
    DELETE_ESTIMATES = "canDeleteEstimates"

    # Approvals
    CREATE_APPROVALS = "canCreateApprovals"
    EDIT_APPROVALS = "canEditApprovals"
    DELETE_APPROVALS = "canDeleteApprovals"
    RESPOND_TO_APPROVALS = "canRespondToApprovals"
    VIEW_ALL_APPROVALS = "canViewAllApprovals"

    # Reports
    VIEW_REPORTS = "canViewReports"
    EXPORT_REPORTS = "canExportReports"

    # System
    VIEW_SYSTEM_SETTINGS = "canViewSystemSettings"
    EDIT_SYSTEM_SETTINGS = "canEditSystemSettings"


class Combinator(str, enum.Enum):
    """How a multi-capability requirement is combined."""
    ALL = "all"
    ANY = "any"
