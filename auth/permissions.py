"""Permission catalogue seeded into every tenant database."""

REWARDS_VIEW = "LMS_REWARDS_VIEW"
REWARDS_ADD = "LMS_REWARDS_ADD"
REWARDS_UPDATE = "LMS_REWARDS_UPDATE"
REWARDS_DELETE = "LMS_REWARDS_DELETE"
TENANT_POOL_VIEW = "LMS_TENANT_POOL_VIEW"

ALL_PERMISSIONS: list[str] = [
    REWARDS_VIEW,
    REWARDS_ADD,
    REWARDS_UPDATE,
    REWARDS_DELETE,
    TENANT_POOL_VIEW,
]

ADMIN_ROLE = "ADMIN"
STUDENT_ROLE = "STUDENT"

# Grants for roles that are not super-admin
DEFAULT_ROLE_GRANTS: dict[str, list[str]] = {
    ADMIN_ROLE: list(ALL_PERMISSIONS),
    STUDENT_ROLE: [REWARDS_VIEW],
}
