"""
Audit log.

Append-only rows describing privileged bulk actions.  Writes are
best-effort: a failed insert is logged and never fails the action.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, IntegerPrimaryKeyMixin, utcnow


class Bitacora(Base, IntegerPrimaryKeyMixin):
    __tablename__ = "bitacora"

    usuario_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    accion: Mapped[str] = mapped_column(String(128), nullable=False)
    tabla: Mapped[str] = mapped_column(String(64), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(512), nullable=True)
    detalles: Mapped[str | None] = mapped_column(Text, nullable=True)
    fecha: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Bitacora {self.accion}>"
