"""Branch controller.  Same split as clients: scoped reads, privileged writes."""

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.rbac.context_resolver import DataScope
from sigo.rbac.dependencies import get_scope, require_privileged
from sigo.schemas import SucursalIn
from sigo.services import sucursal_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/sucursales", tags=["Sucursales"])


@router.get("")
async def list_sucursales(
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sucursal_service.list_sucursales(store, scope))


@router.get("/cliente/{cliente_id}")
async def list_by_cliente(
    cliente_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sucursal_service.list_by_cliente(cliente_id, store, scope))


@router.get("/{sucursal_id}")
async def get_sucursal(
    sucursal_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sucursal_service.get_sucursal(sucursal_id, store, scope))


@router.post("", status_code=201, dependencies=[Depends(require_privileged)])
async def create_sucursal(body: SucursalIn, store: StoreGateway = Depends(get_store)):
    return ok(await sucursal_service.create_sucursal(body.model_dump(), store))


@router.put("/{sucursal_id}", dependencies=[Depends(require_privileged)])
async def update_sucursal(
    sucursal_id: int,
    body: SucursalIn,
    store: StoreGateway = Depends(get_store),
):
    return ok(await sucursal_service.update_sucursal(sucursal_id, body.model_dump(), store))


@router.delete("/{sucursal_id}", dependencies=[Depends(require_privileged)])
async def delete_sucursal(sucursal_id: int, store: StoreGateway = Depends(get_store)):
    await sucursal_service.delete_sucursal(sucursal_id, store)
    return ok(message="Sucursal eliminada correctamente")
