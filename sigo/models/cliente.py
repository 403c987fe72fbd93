"""
Client (legal entity) and Branch models.

A Cliente owns zero or more Sucursales; every Sucursal belongs to
exactly one Cliente.  No ORM relationships are declared: related rows
are fetched by the enrichment layer in batched lookups.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Cliente(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "clientes"

    razon_social: Mapped[str] = mapped_column(String(256), nullable=False)
    rut: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    direccion: Mapped[str | None] = mapped_column(String(512), nullable=True)
    telefono: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)

    def __repr__(self) -> str:
        return f"<Cliente {self.razon_social}>"


class Sucursal(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "sucursales"

    nombre: Mapped[str] = mapped_column(String(256), nullable=False)
    direccion: Mapped[str | None] = mapped_column(String(512), nullable=True)
    telefono: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cliente_id: Mapped[int] = mapped_column(
        ForeignKey("clientes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Sucursal {self.nombre}>"
