"""Action catalog, role and plan names used by seeding and navigation.

Action slugs are ``<category>:<verb>`` and are what callers pass to permission
checks; ids are resolved from them at check time.
"""

ACTIONS = {
    # Project
    "PROJECT_CREATE": "project:create",
    "PROJECT_UPDATE": "project:update",
    "PROJECT_DELETE": "project:delete",
    "PROJECT_VIEW": "project:view",
    # Members
    "MEMBER_INVITE": "member:invite",
    "MEMBER_REMOVE": "member:remove",
    "MEMBER_UPDATE_ROLE": "member:update-role",
    "MEMBER_VIEW": "member:view",
    # Billing
    "BILLING_VIEW": "billing:view",
    "BILLING_UPDATE": "billing:update",
    # Settings
    "SETTINGS_UPDATE": "settings:update",
    "SETTINGS_VIEW": "settings:view",
    # Invitations
    "INVITATION_CREATE": "invitation:create",
    "INVITATION_DELETE": "invitation:delete",
    "INVITATION_VIEW": "invitation:view",
    # Dashboard
    "DASHBOARD_VIEW": "dashboard:view",
    "DASHBOARD_VIEW_ADVANCED": "dashboard:view-advanced",
}

ACTION_CATEGORIES = ("project", "member", "billing", "settings", "invitation", "dashboard")

# slug -> (display name, description)
ACTION_DETAILS = {
    ACTIONS["PROJECT_CREATE"]: ("Create Project", "Create new projects"),
    ACTIONS["PROJECT_UPDATE"]: ("Update Project", "Update project settings and details"),
    ACTIONS["PROJECT_DELETE"]: ("Delete Project", "Delete projects"),
    ACTIONS["PROJECT_VIEW"]: ("View Project", "View project information"),
    ACTIONS["MEMBER_INVITE"]: ("Invite Member", "Invite new members to projects"),
    ACTIONS["MEMBER_REMOVE"]: ("Remove Member", "Remove members from projects"),
    ACTIONS["MEMBER_UPDATE_ROLE"]: ("Update Member Role", "Change member roles"),
    ACTIONS["MEMBER_VIEW"]: ("View Members", "View project members"),
    ACTIONS["BILLING_VIEW"]: ("View Billing", "View billing information"),
    ACTIONS["BILLING_UPDATE"]: ("Update Billing", "Update billing settings"),
    ACTIONS["SETTINGS_UPDATE"]: ("Update Settings", "Update project settings"),
    ACTIONS["SETTINGS_VIEW"]: ("View Settings", "View project settings"),
    ACTIONS["INVITATION_CREATE"]: ("Create Invitation", "Create project invitations"),
    ACTIONS["INVITATION_DELETE"]: ("Delete Invitation", "Delete invitations"),
    ACTIONS["INVITATION_VIEW"]: ("View Invitations", "View project invitations"),
    ACTIONS["DASHBOARD_VIEW"]: ("View Dashboard", "View project dashboard"),
    ACTIONS["DASHBOARD_VIEW_ADVANCED"]: (
        "View Advanced Dashboard",
        "View advanced dashboard statistics",
    ),
}


def action_category(slug: str) -> str:
    """Category of a catalog slug (the part before the colon)."""
    return slug.split(":", 1)[0]


ROLE_OWNER = "OWNER"
ROLE_ADMIN = "ADMIN"
ROLE_MEMBER = "MEMBER"

PLAN_FREE = "free"
PLAN_PRO = "pro"
PLAN_BUSINESS = "business"
