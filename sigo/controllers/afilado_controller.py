"""
Sharpening-record controller.

Open to every authenticated user except the bulk final-sharpening
flag, which needs a Gerente or Administrador.  Fixed paths come before
`/{afilado_id}`.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from sigo.core.responses import ok
from sigo.rbac.context_resolver import CurrentUser, DataScope
from sigo.rbac.dependencies import get_current_user, get_scope, require_privileged
from sigo.schemas import CreateAfiladoRequest, SalidaMasivaRequest, UltimoAfiladoMasivoRequest
from sigo.services import afilado_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/afilados", tags=["Afilados"])


# ── Transitions ──────────────────────────────────────────────────────
@router.post("", status_code=201)
async def create_afilado(
    body: CreateAfiladoRequest,
    user: CurrentUser = Depends(get_current_user),
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await afilado_service.create_afilado(body.model_dump(), user, store, scope))


@router.put("/{afilado_id}/salida")
async def registrar_salida(
    afilado_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await afilado_service.registrar_salida(afilado_id, store, scope))


@router.post("/salida-masiva")
async def registrar_salida_masiva(
    body: SalidaMasivaRequest,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    rows = await afilado_service.registrar_salida_masiva(body.afilado_ids, store, scope)
    return ok(rows, f"Se registró la salida de {len(rows)} afilados")


@router.post("/ultimo-afilado-masivo")
async def marcar_ultimo_masivo(
    body: UltimoAfiladoMasivoRequest,
    user: CurrentUser = Depends(require_privileged),
    store: StoreGateway = Depends(get_store),
):
    result = await afilado_service.marcar_ultimo_masivo(body.afiladoIds, user, store)
    return ok(
        result,
        f"Se han marcado {result['actualizados']} afilado(s) como último afilado correctamente.",
    )


# ── Queries ──────────────────────────────────────────────────────────
@router.get("/pendientes")
async def list_pendientes(
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await afilado_service.list_pendientes(store, scope))


@router.get("/todos")
async def list_afilados(
    desde: datetime | None = Query(None),
    hasta: datetime | None = Query(None),
    pendientes: bool = Query(False),
    sucursal_id: int | None = Query(None),
    cliente_id: int | None = Query(None),
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(
        await afilado_service.list_afilados(
            store,
            scope,
            desde=desde,
            hasta=hasta,
            pendientes=pendientes,
            sucursal_id=sucursal_id,
            cliente_id=cliente_id,
        )
    )


@router.get("/sierra/{sierra_id}")
async def list_by_sierra(
    sierra_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await afilado_service.list_by_sierra(sierra_id, store, scope))


@router.get("/sucursal/{sucursal_id}")
async def list_by_sucursal(
    sucursal_id: int,
    desde: datetime | None = Query(None),
    hasta: datetime | None = Query(None),
    pendientes: bool = Query(False),
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(
        await afilado_service.list_by_sucursal(
            sucursal_id, store, scope, desde=desde, hasta=hasta, pendientes=pendientes
        )
    )


@router.get("/cliente/{cliente_id}")
async def list_by_cliente(
    cliente_id: int,
    desde: datetime | None = Query(None),
    hasta: datetime | None = Query(None),
    pendientes: bool = Query(False),
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(
        await afilado_service.list_by_cliente(
            cliente_id, store, scope, desde=desde, hasta=hasta, pendientes=pendientes
        )
    )


@router.get("/{afilado_id}")
async def get_afilado(
    afilado_id: int,
    scope: DataScope = Depends(get_scope),
    store: StoreGateway = Depends(get_store),
):
    return ok(await afilado_service.get_afilado(afilado_id, store, scope))
