"""
Saw controller.

Every route requires authentication; Cliente-role users are confined
to their granted branches by the service.  Fixed paths are declared
before `/{sierra_id}` so they are not captured by it.
"""

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.rbac.context_resolver import DataScope
from sigo.rbac.dependencies import get_scope
from sigo.schemas import CreateSierraRequest, UpdateSierraRequest
from sigo.services import sierra_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/sierras", tags=["Sierras"])


@router.get("/todas")
async def list_sierras(
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sierra_service.list_sierras(store, scope))


@router.get("/codigo/{codigo}")
async def get_by_codigo(
    codigo: str,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    """Look a saw up by its barcode, with type, state, branch/client and history."""
    return ok(await sierra_service.get_by_codigo(codigo, store, scope))


@router.get("/sucursal/{sucursal_id}")
async def list_by_sucursal(
    sucursal_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sierra_service.list_by_sucursal(sucursal_id, store, scope))


@router.get("/cliente/{cliente_id}")
async def list_by_cliente(
    cliente_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sierra_service.list_by_cliente(cliente_id, store, scope))


@router.get("/{sierra_id}")
async def get_sierra(
    sierra_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await sierra_service.get_sierra(sierra_id, store, scope))


@router.post("", status_code=201)
async def create_sierra(
    body: CreateSierraRequest,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    sierra = await sierra_service.create_sierra(
        body.codigo, body.sucursal_id, body.tipo_sierra_id, store, scope
    )
    return ok(sierra)


@router.put("/{sierra_id}")
async def update_sierra(
    sierra_id: int,
    body: UpdateSierraRequest,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(
        await sierra_service.update_sierra(
            sierra_id, body.model_dump(exclude_unset=True), store, scope
        )
    )
