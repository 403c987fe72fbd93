"""
Context resolver: data-scope enforcement.

Every service query that touches branch- or client-owned data MUST pass
through the scope built here:

- Gerente / Administrador: unrestricted.  Filtering is skipped entirely
  (a distinct code path, not an allow-all list).
- Cliente: restricted to the union of their `usuario_sucursal` grants,
  plus the clients owning those branches.  No grants means an empty
  scope: listings return `[]`, never an error and never unscoped data.

Two ways to use a scope:

    # Listing: silently narrow, short-circuit when nothing is visible
    clauses = apply_scope(scope, Sucursal.id)
    if clauses is None:
        return []
    rows = await store.select(Sucursal, *clauses)

    # Single resource: explicitly deny
    ensure_access(scope, sucursal_id)          # raises ForbiddenError
"""

import enum
import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import ColumnElement

from sigo.core.exceptions import AuthError, ForbiddenError
from sigo.models.cliente import Sucursal
from sigo.models.usuario import ROLE_CLIENTE, Rol, Usuario, usuario_sucursal
from sigo.store.gateway import StoreGateway

logger = logging.getLogger(__name__)


class ScopeTarget(str, enum.Enum):
    SUCURSAL = "sucursal"
    CLIENTE = "cliente"


@dataclass
class CurrentUser:
    """The authenticated subject, as recorded in `usuarios`."""

    id: uuid.UUID
    nombre: str
    apellido: str | None
    email: str
    rol_id: int
    rol: str

    def summary(self) -> dict:
        return {"id": self.id, "nombre": self.nombre, "email": self.email, "rol": self.rol}


@dataclass
class DataScope:
    """
    Encapsulates the data-access boundaries for the current request.

    - restricted=False: full access, no filters needed.
    - restricted=True: every branch-bound query filters on `sucursal_ids`,
      every client-bound query on `cliente_ids`.
    """

    user_id: uuid.UUID
    role: str
    restricted: bool = False
    sucursal_ids: list[int] = field(default_factory=list)
    cliente_ids: list[int] = field(default_factory=list)

    def ids_for(self, target: ScopeTarget) -> list[int]:
        if target is ScopeTarget.CLIENTE:
            return self.cliente_ids
        return self.sucursal_ids


async def load_subject(subject_id: uuid.UUID, store: StoreGateway) -> CurrentUser:
    """
    Map a verified identity-provider subject to its local user and role.

    Raises AuthError when the subject has no usuarios row (recognised by
    the provider but not by this system).
    """
    usuario = await store.select_one(Usuario, Usuario.id == subject_id)
    if usuario is None:
        raise AuthError("Usuario no encontrado o no tiene permisos en el sistema")
    rol = await store.select_one(Rol, Rol.id == usuario["rol_id"])
    if rol is None:
        raise AuthError("Usuario no encontrado o no tiene permisos en el sistema")
    return CurrentUser(
        id=usuario["id"],
        nombre=usuario["nombre"],
        apellido=usuario.get("apellido"),
        email=usuario["email"],
        rol_id=usuario["rol_id"],
        rol=rol["nombre"],
    )


async def granted_sucursal_ids(user_id: uuid.UUID, store: StoreGateway) -> list[int]:
    grants = await store.select(
        usuario_sucursal,
        usuario_sucursal.c.usuario_id == user_id,
        columns=["sucursal_id"],
        order_by="sucursal_id",
    )
    return [g["sucursal_id"] for g in grants]


async def resolve_data_scope(user: CurrentUser, store: StoreGateway) -> DataScope:
    """Build a DataScope from the authenticated user's role and grants."""
    scope = DataScope(user_id=user.id, role=user.rol)

    if user.rol != ROLE_CLIENTE:
        return scope

    scope.restricted = True
    scope.sucursal_ids = await granted_sucursal_ids(user.id, store)
    if scope.sucursal_ids:
        sucursales = await store.select_in(Sucursal, scope.sucursal_ids, columns=["cliente_id"])
        # de-duplicated, first-seen order
        scope.cliente_ids = list(dict.fromkeys(s["cliente_id"] for s in sucursales))
    return scope


def apply_scope(
    scope: DataScope,
    column: ColumnElement,
    target: ScopeTarget = ScopeTarget.SUCURSAL,
) -> list[ColumnElement[bool]] | None:
    """
    Narrow a listing query to the caller's scope.

    Returns the extra predicates to add (empty list when unrestricted),
    or None when the caller can see nothing; the query must then be
    skipped and an empty result returned.
    """
    if not scope.restricted:
        return []
    ids = scope.ids_for(target)
    if not ids:
        return None
    return [column.in_(ids)]


def narrow_ids(scope: DataScope, ids: list[int], target: ScopeTarget = ScopeTarget.SUCURSAL) -> list[int]:
    """Intersect an id list with the scope, preserving order."""
    if not scope.restricted:
        return ids
    allowed = set(scope.ids_for(target))
    return [i for i in ids if i in allowed]


def can_access(scope: DataScope, target_id: int | None, target: ScopeTarget = ScopeTarget.SUCURSAL) -> bool:
    if not scope.restricted:
        return True
    return target_id is not None and target_id in scope.ids_for(target)


def ensure_access(
    scope: DataScope,
    target_id: int | None,
    target: ScopeTarget = ScopeTarget.SUCURSAL,
    message: str | None = None,
) -> None:
    """Deny access to a specific resource outside the scope (403, never 404)."""
    if can_access(scope, target_id, target):
        return
    logger.warning(
        "Scope denied for user %s: %s %s not in %s",
        scope.user_id,
        target.value,
        target_id,
        scope.ids_for(target),
    )
    raise ForbiddenError(message or "No tiene permisos para acceder a este recurso")
