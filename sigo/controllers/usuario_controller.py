"""
User controller.

User management is reserved to Gerente / Administrador.  The one
exception is `cambiar-password`, which any authenticated user may call
for their own account.
"""

import uuid

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.identity.provider import IdentityProvider, get_identity_provider
from sigo.rbac.context_resolver import CurrentUser
from sigo.rbac.dependencies import get_current_user, require_privileged
from sigo.schemas import (
    AsignarSucursalesRequest,
    CambiarPasswordRequest,
    CreateUsuarioRequest,
    UpdateUsuarioRequest,
)
from sigo.services import usuario_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/usuarios", tags=["Usuarios"])


@router.get("", dependencies=[Depends(require_privileged)])
async def list_usuarios(store: StoreGateway = Depends(get_store)):
    return ok(await usuario_service.list_usuarios(store))


@router.get("/{usuario_id}", dependencies=[Depends(require_privileged)])
async def get_usuario(usuario_id: uuid.UUID, store: StoreGateway = Depends(get_store)):
    return ok(await usuario_service.get_usuario(usuario_id, store))


@router.post("", status_code=201, dependencies=[Depends(require_privileged)])
async def create_usuario(
    body: CreateUsuarioRequest,
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    return ok(await usuario_service.create_usuario(body.model_dump(), store, identity))


@router.put("/{usuario_id}", dependencies=[Depends(require_privileged)])
async def update_usuario(
    usuario_id: uuid.UUID,
    body: UpdateUsuarioRequest,
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    return ok(await usuario_service.update_usuario(usuario_id, body.model_dump(), store, identity))


@router.put("/{usuario_id}/cambiar-password")
async def cambiar_password(
    usuario_id: uuid.UUID,
    body: CambiarPasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    await usuario_service.cambiar_password(usuario_id, body.model_dump(), user, store, identity)
    return ok(message="Contraseña actualizada correctamente")


@router.delete("/{usuario_id}", dependencies=[Depends(require_privileged)])
async def delete_usuario(
    usuario_id: uuid.UUID,
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    await usuario_service.delete_usuario(usuario_id, store, identity)
    return ok(message="Usuario eliminado correctamente")


@router.post("/{usuario_id}/sucursales", dependencies=[Depends(require_privileged)])
async def asignar_sucursales(
    usuario_id: uuid.UUID,
    body: AsignarSucursalesRequest,
    store: StoreGateway = Depends(get_store),
):
    message = await usuario_service.asignar_sucursales(usuario_id, body.sucursales, store)
    return ok(message=message)
