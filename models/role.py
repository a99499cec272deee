"""Role model (tenant database)."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import TenantBase


class Role(TenantBase):
    """Role ORM model."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
