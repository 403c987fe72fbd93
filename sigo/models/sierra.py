from __future__ import annotations

"""
Saw & Sharpening-record models.

- A Sierra belongs to one Sucursal and carries a type and a state.
  `codigo_barra` is indexed but NOT unique at the store level; the
  uniqueness pre-check lives in the saw service.
- An Afilado is open while `fecha_salida` is null.  `fecha_afilado`
  (entry) is set at creation and never changes; `fecha_salida` is set
  exactly once.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin, utcnow


class Sierra(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "sierras"

    codigo_barra: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    sucursal_id: Mapped[int] = mapped_column(
        ForeignKey("sucursales.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    tipo_sierra_id: Mapped[int] = mapped_column(ForeignKey("tipos_sierra.id"), nullable=False)
    estado_id: Mapped[int] = mapped_column(ForeignKey("estados_sierra.id"), nullable=False)
    fecha_registro: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Sierra {self.codigo_barra}>"


class Afilado(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "afilados"

    sierra_id: Mapped[int] = mapped_column(
        ForeignKey("sierras.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tipo_afilado_id: Mapped[int] = mapped_column(ForeignKey("tipos_afilado.id"), nullable=False)
    usuario_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("usuarios.id", ondelete="SET NULL"),
        nullable=True,
    )
    fecha_afilado: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    fecha_salida: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    observaciones: Mapped[str | None] = mapped_column(Text, nullable=True)
    ultimo_afilado: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_afilados_pendientes", "fecha_salida"),
    )

    def __repr__(self) -> str:
        return f"<Afilado sierra={self.sierra_id} salida={self.fecha_salida}>"
