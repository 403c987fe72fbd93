"""
User service.

A user exists twice: as an identity-provider record (credentials) and
as a `usuarios` row (name, role, grants), both keyed by the same UUID.
The two stores cannot share a transaction, so creation and deletion are
written as a small saga:

    create:  identity.create_user -> insert usuarios
             on local failure: identity.delete_user (compensation)
    delete:  delete grants -> delete usuarios -> identity.delete_user

A failed compensation or a failed trailing identity call is logged and
never surfaced; the caller only sees the outcome of the local write.
"""

import logging
import uuid

from sigo.core.exceptions import (
    ConflictError,
    ForbiddenError,
    IdentityError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from sigo.identity.provider import IdentityProvider
from sigo.models.cliente import Sucursal
from sigo.models.usuario import Rol, Usuario, usuario_sucursal
from sigo.rbac.context_resolver import CurrentUser, granted_sucursal_ids
from sigo.rbac.dependencies import PRIVILEGED_ROLES
from sigo.services import enrichment
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)

ROL = enrichment.Join("roles", Rol, "rol_id", ("id", "nombre"))


async def _get_or_404(usuario_id: uuid.UUID, store: StoreGateway) -> Row:
    usuario = await store.select_one(Usuario, Usuario.id == usuario_id)
    if usuario is None:
        raise NotFoundError("Usuario no encontrado")
    return usuario


async def list_usuarios(store: StoreGateway) -> list[Row]:
    usuarios = await store.select(Usuario, order_by="nombre")
    return await enrichment.enrich(store, usuarios, [ROL])


async def get_usuario(usuario_id: uuid.UUID, store: StoreGateway) -> Row:
    """User with role and granted branches."""
    usuario = await enrichment.enrich_one(store, await _get_or_404(usuario_id, store), [ROL])
    try:
        sucursal_ids = await granted_sucursal_ids(usuario_id, store)
        usuario["sucursales"] = await store.select_in(
            Sucursal, sucursal_ids, columns=["id", "nombre"]
        )
    except StoreError as exc:
        logger.error("Could not load branches of user %s: %s", usuario_id, exc.error)
        usuario["sucursales"] = []
    return usuario


async def create_usuario(data: dict, store: StoreGateway, identity: IdentityProvider) -> Row:
    """Create the identity record, then the local row; undo the identity if the row fails."""
    if not await store.exists(Rol, Rol.id == data["rol_id"]):
        raise NotFoundError("Rol no encontrado")

    try:
        subject_id = await identity.create_user(data["email"], data["password"])
    except IdentityError as exc:
        raise ConflictError("Error al crear el usuario en Auth", error=exc.error or exc.message)

    try:
        usuario = await store.insert(
            Usuario,
            {
                "id": subject_id,
                "nombre": data["nombre"],
                "apellido": data.get("apellido"),
                "email": data["email"],
                "rol_id": data["rol_id"],
            },
        )
    except StoreError as exc:
        try:
            await identity.delete_user(subject_id)
        except IdentityError as comp_exc:
            logger.warning(
                "Compensation failed, identity %s left orphaned: %s", subject_id, comp_exc.error
            )
        raise ConflictError("Error al crear el usuario en la base de datos", error=exc.error)

    logger.info("User %s created with role %s", usuario["id"], usuario["rol_id"])
    return usuario


async def update_usuario(
    usuario_id: uuid.UUID, data: dict, store: StoreGateway, identity: IdentityProvider
) -> Row:
    usuario = await _get_or_404(usuario_id, store)

    if data.get("rol_id") is not None and data["rol_id"] != usuario["rol_id"]:
        if not await store.exists(Rol, Rol.id == data["rol_id"]):
            raise NotFoundError("Rol no encontrado")

    values = {k: v for k, v in data.items() if v is not None}
    if not values:
        return usuario
    try:
        rows = await store.update(Usuario, values, Usuario.id == usuario_id)
    except StoreError as exc:
        raise ConflictError("Error al actualizar el usuario", error=exc.error)

    # identity follows the local row, never leads it
    email = values.get("email")
    if email and email != usuario["email"]:
        try:
            await identity.update_email(usuario_id, email)
        except IdentityError as exc:
            logger.error("E-mail of identity %s not synced: %s", usuario_id, exc.error or exc.message)
    return rows[0]


async def delete_usuario(usuario_id: uuid.UUID, store: StoreGateway, identity: IdentityProvider) -> None:
    await _get_or_404(usuario_id, store)

    try:
        await store.delete(usuario_sucursal, usuario_sucursal.c.usuario_id == usuario_id)
    except StoreError as exc:
        logger.error("Could not remove branch grants of user %s: %s", usuario_id, exc.error)

    try:
        await store.delete(Usuario, Usuario.id == usuario_id)
    except StoreError as exc:
        raise ConflictError("Error al eliminar el usuario", error=exc.error)

    try:
        await identity.delete_user(usuario_id)
    except IdentityError as exc:
        logger.warning("Identity %s not deleted after user removal: %s", usuario_id, exc.error)
    logger.info("User %s deleted", usuario_id)


async def asignar_sucursales(usuario_id: uuid.UUID, sucursal_ids: list[int], store: StoreGateway) -> str:
    """Replace the user's branch grants with `sucursal_ids`.  Returns the outcome message."""
    await _get_or_404(usuario_id, store)

    sucursal_ids = list(dict.fromkeys(sucursal_ids))
    existing = {s["id"] for s in await store.select_in(Sucursal, sucursal_ids, columns=["id"])}
    missing = [i for i in sucursal_ids if i not in existing]
    if missing:
        raise NotFoundError(f"Sucursales no encontradas: {', '.join(map(str, missing))}")

    await store.delete(usuario_sucursal, usuario_sucursal.c.usuario_id == usuario_id)
    if not sucursal_ids:
        return "Asignaciones de sucursales actualizadas correctamente"

    try:
        await store.insert_many(
            usuario_sucursal,
            [{"usuario_id": usuario_id, "sucursal_id": i} for i in sucursal_ids],
        )
    except StoreError as exc:
        raise ConflictError("Error al asignar sucursales", error=exc.error)
    logger.info("User %s granted branches %s", usuario_id, sucursal_ids)
    return "Sucursales asignadas correctamente"


async def cambiar_password(
    usuario_id: uuid.UUID,
    data: dict,
    user: CurrentUser,
    store: StoreGateway,
    identity: IdentityProvider,
) -> None:
    """
    Users change their own password by confirming the current one.
    Gerente / Administrador may reset anyone's without it.
    """
    own = user.id == usuario_id
    if not own and user.rol not in PRIVILEGED_ROLES:
        raise ForbiddenError("No tiene permisos para cambiar la contraseña de este usuario")

    await _get_or_404(usuario_id, store)

    if data["password"] != data["password_confirmation"]:
        raise ValidationError("Las contraseñas no coinciden")

    if own:
        current = data.get("current_password")
        if not current or not await identity.check_password(usuario_id, current):
            raise ValidationError("La contraseña actual es incorrecta")

    await identity.update_password(usuario_id, data["password"])
    logger.info("Password of user %s changed by %s", usuario_id, user.id)
