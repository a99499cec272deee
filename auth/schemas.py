"""JWT identity claim schemas."""

from pydantic import BaseModel, ConfigDict


class IdentityClaims(BaseModel):
    """Verified identity carried by a bearer token.

    Produced once at login and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    role_id: int
    tenant_id: int | None  # None only for tokens minted outside a tenant; rejected by tenant resolution
    is_super_admin: bool
