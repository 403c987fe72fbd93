"""
Models package. Import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from sigo.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin, UUIDPrimaryKeyMixin
from sigo.models.bitacora import Bitacora
from sigo.models.catalogo import (
    ESTADO_EN_USO,
    ESTADO_OBSOLETO,
    EstadoSierra,
    TipoAfilado,
    TipoSierra,
)
from sigo.models.cliente import Cliente, Sucursal
from sigo.models.identity import AuthIdentity
from sigo.models.sierra import Afilado, Sierra
from sigo.models.usuario import (
    ROLE_ADMINISTRADOR,
    ROLE_CLIENTE,
    ROLE_GERENTE,
    Rol,
    Usuario,
    usuario_sucursal,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "IntegerPrimaryKeyMixin",
    "UUIDPrimaryKeyMixin",
    "Cliente",
    "Sucursal",
    "Rol",
    "Usuario",
    "usuario_sucursal",
    "ROLE_CLIENTE",
    "ROLE_GERENTE",
    "ROLE_ADMINISTRADOR",
    "TipoSierra",
    "EstadoSierra",
    "TipoAfilado",
    "ESTADO_EN_USO",
    "ESTADO_OBSOLETO",
    "Sierra",
    "Afilado",
    "Bitacora",
    "AuthIdentity",
]
