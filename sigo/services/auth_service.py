"""
Authentication service.

Handles:
- Login: the identity provider checks the credentials, the local
  `usuarios` row supplies role and branch grants.
- Registration by a Gerente / Administrador (same saga as user creation).
- Profile of the authenticated user.
"""

import logging

from sigo.core.exceptions import NotFoundError, StoreError, ValidationError
from sigo.identity.provider import IdentityProvider
from sigo.models.cliente import Sucursal
from sigo.models.usuario import ROLE_CLIENTE, Rol, Usuario
from sigo.rbac.context_resolver import CurrentUser, granted_sucursal_ids, load_subject
from sigo.services import usuario_service
from sigo.store.gateway import StoreGateway

logger = logging.getLogger(__name__)


async def _assigned_ids(user: CurrentUser, store: StoreGateway) -> list[int]:
    if user.rol != ROLE_CLIENTE:
        return []
    try:
        return await granted_sucursal_ids(user.id, store)
    except StoreError as exc:
        logger.error("Could not load branch grants of user %s: %s", user.id, exc.error)
        return []


async def login(email: str, password: str, store: StoreGateway, identity: IdentityProvider) -> dict:
    session = await identity.sign_in(email, password)

    if not await store.exists(Usuario, Usuario.id == session.subject_id):
        raise NotFoundError("Usuario no encontrado en el sistema")
    user = await load_subject(session.subject_id, store)

    logger.info("User %s logged in", user.id)
    return {
        "usuario": user.summary(),
        "sucursalesAsignadas": await _assigned_ids(user, store),
        "token": session.access_token,
    }


async def register(data: dict, store: StoreGateway, identity: IdentityProvider) -> dict:
    rol = await store.select_one(Rol, Rol.id == data["rol_id"])
    if rol is None:
        raise ValidationError("El rol especificado no existe o no es válido")

    usuario = await usuario_service.create_usuario(data, store, identity)
    return {
        "message": "Usuario registrado correctamente",
        "usuario": {
            "id": usuario["id"],
            "nombre": usuario["nombre"],
            "email": usuario["email"],
            "rol": rol["nombre"],
        },
    }


async def profile(user: CurrentUser, store: StoreGateway) -> dict:
    sucursales = []
    ids = await _assigned_ids(user, store)
    if ids:
        sucursales = await store.select_in(Sucursal, ids)
    return {"usuario": user.summary(), "sucursalesAsignadas": sucursales}
