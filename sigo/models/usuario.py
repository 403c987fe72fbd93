from __future__ import annotations

"""
User, Role & Branch-grant models.

Design decisions:
- `usuarios.id` is the identity provider's subject id (1:1 twin), so no
  default is generated here.
- Exactly one role per user.  Authorization branches on the three
  seeded role names; the catalog itself is extensible.
- `usuario_sucursal` is a plain association table.  A row grants a
  Cliente-role user visibility into that branch (and its client).
"""

import uuid

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin

ROLE_CLIENTE = "Cliente"
ROLE_GERENTE = "Gerente"
ROLE_ADMINISTRADOR = "Administrador"

# ── Association table ────────────────────────────────────────────────
usuario_sucursal = Table(
    "usuario_sucursal",
    Base.metadata,
    Column("usuario_id", ForeignKey("usuarios.id", ondelete="CASCADE"), primary_key=True),
    Column("sucursal_id", ForeignKey("sucursales.id", ondelete="CASCADE"), primary_key=True),
)


class Rol(Base, IntegerPrimaryKeyMixin):
    __tablename__ = "roles"

    nombre: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(256), nullable=True)

    def __repr__(self) -> str:
        return f"<Rol {self.nombre}>"


class Usuario(Base, TimestampMixin):
    __tablename__ = "usuarios"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    nombre: Mapped[str] = mapped_column(String(128), nullable=False)
    apellido: Mapped[str | None] = mapped_column(String(128), nullable=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    rol_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Usuario {self.email}>"
