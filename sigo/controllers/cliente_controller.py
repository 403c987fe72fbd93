"""
Client controller.

Reads are open to every authenticated user and scope-filtered in the
service; writes require a Gerente or Administrador.
"""

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.rbac.context_resolver import DataScope
from sigo.rbac.dependencies import get_scope, require_privileged
from sigo.schemas import ClienteIn
from sigo.services import cliente_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/clientes", tags=["Clientes"])


@router.get("")
async def list_clientes(
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await cliente_service.list_clientes(store, scope))


@router.get("/{cliente_id}")
async def get_cliente(
    cliente_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await cliente_service.get_cliente(cliente_id, store, scope))


@router.post("", status_code=201, dependencies=[Depends(require_privileged)])
async def create_cliente(body: ClienteIn, store: StoreGateway = Depends(get_store)):
    return ok(await cliente_service.create_cliente(body.model_dump(), store))


@router.put("/{cliente_id}", dependencies=[Depends(require_privileged)])
async def update_cliente(
    cliente_id: int,
    body: ClienteIn,
    store: StoreGateway = Depends(get_store),
):
    return ok(await cliente_service.update_cliente(cliente_id, body.model_dump(), store))


@router.delete("/{cliente_id}", dependencies=[Depends(require_privileged)])
async def delete_cliente(cliente_id: int, store: StoreGateway = Depends(get_store)):
    await cliente_service.delete_cliente(cliente_id, store)
    return ok(message="Cliente eliminado correctamente")
