"""Database models."""

from db import AdminBase, TenantBase

# Import all models so Alembic and create_all can see them
from models.tenant import Tenant
from models.role import Role
from models.user import User
from models.permission import Permission, RolePermission

__all__ = [
    "AdminBase",
    "TenantBase",
    "Tenant",
    "Role",
    "User",
    "Permission",
    "RolePermission",
]
