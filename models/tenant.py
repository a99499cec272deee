"""Tenant model and schema (control-plane database)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import AdminBase


class Tenant(AdminBase):
    """Tenant ORM model - one row per customer organization."""

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Short code matched against the caller's email domain label (admin@acme.com -> acme)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    connection_string: Mapped[str] = mapped_column(String(1024), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


# Pydantic schemas
class TenantResponse(BaseModel):
    """Public view of a tenant. The connection string never leaves the server."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
