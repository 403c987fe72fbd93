"""
Reference catalogs: saw types, saw states, sharpening types.

Small lookup tables.  `estados_sierra` must contain the two states the
domain logic transitions between (`En uso`, `Obsoleto`); they are seeded
by `sigo.rbac.catalog_seed`.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, IntegerPrimaryKeyMixin

ESTADO_EN_USO = "En uso"
ESTADO_OBSOLETO = "Obsoleto"


class TipoSierra(Base, IntegerPrimaryKeyMixin):
    __tablename__ = "tipos_sierra"

    nombre: Mapped[str] = mapped_column(String(128), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(512), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<TipoSierra {self.nombre}>"


class EstadoSierra(Base, IntegerPrimaryKeyMixin):
    __tablename__ = "estados_sierra"

    nombre: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(256), nullable=True)

    def __repr__(self) -> str:
        return f"<EstadoSierra {self.nombre}>"


class TipoAfilado(Base, IntegerPrimaryKeyMixin):
    __tablename__ = "tipos_afilado"

    nombre: Mapped[str] = mapped_column(String(128), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<TipoAfilado {self.nombre}>"
