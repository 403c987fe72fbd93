"""
Branch service.

Listings are narrowed to the caller's granted branches; single-branch
reads deny with 403 outside the scope.  Branch deletion is blocked while
saws exist and removes the branch's user grants first.
"""

import logging

from sigo.core.exceptions import ConflictError, NotFoundError, StoreError
from sigo.models.cliente import Cliente, Sucursal
from sigo.models.sierra import Sierra
from sigo.models.usuario import usuario_sucursal
from sigo.rbac.context_resolver import DataScope, ScopeTarget, apply_scope, ensure_access
from sigo.services import enrichment
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)


async def list_sucursales(store: StoreGateway, scope: DataScope) -> list[Row]:
    clauses = apply_scope(scope, Sucursal.id)
    if clauses is None:
        return []
    sucursales = await store.select(Sucursal, *clauses, order_by="id")
    return await enrichment.enrich(store, sucursales, [enrichment.CLIENTE])


async def get_sucursal(sucursal_id: int, store: StoreGateway, scope: DataScope) -> Row:
    ensure_access(scope, sucursal_id, message="No tiene permisos para ver esta sucursal")

    sucursal = await store.select_one(Sucursal, Sucursal.id == sucursal_id)
    if sucursal is None:
        raise NotFoundError("Sucursal no encontrada")
    return await enrichment.enrich_one(
        store, sucursal, [enrichment.Join("clientes", Cliente, "cliente_id")]
    )


async def list_by_cliente(cliente_id: int, store: StoreGateway, scope: DataScope) -> list[Row]:
    ensure_access(
        scope,
        cliente_id,
        ScopeTarget.CLIENTE,
        "No tiene permisos para ver las sucursales de este cliente",
    )
    clauses = apply_scope(scope, Sucursal.id)
    if clauses is None:
        return []
    return await store.select(
        Sucursal, Sucursal.cliente_id == cliente_id, *clauses, order_by="nombre"
    )


async def _ensure_cliente(cliente_id: int, store: StoreGateway) -> None:
    if not await store.exists(Cliente, Cliente.id == cliente_id):
        raise NotFoundError("Cliente no encontrado")


async def create_sucursal(data: dict, store: StoreGateway) -> Row:
    await _ensure_cliente(data["cliente_id"], store)
    try:
        return await store.insert(Sucursal, data)
    except StoreError as exc:
        raise ConflictError("Error al crear la sucursal", error=exc.error)


async def update_sucursal(sucursal_id: int, data: dict, store: StoreGateway) -> Row:
    if not await store.exists(Sucursal, Sucursal.id == sucursal_id):
        raise NotFoundError("Sucursal no encontrada")
    if data.get("cliente_id") is not None:
        await _ensure_cliente(data["cliente_id"], store)
    try:
        rows = await store.update(Sucursal, data, Sucursal.id == sucursal_id)
    except StoreError as exc:
        raise ConflictError("Error al actualizar la sucursal", error=exc.error)
    return rows[0]


async def delete_sucursal(sucursal_id: int, store: StoreGateway) -> None:
    """Only a branch without saws can be deleted; its grants go with it."""
    if not await store.exists(Sucursal, Sucursal.id == sucursal_id):
        raise NotFoundError("Sucursal no encontrada")

    if await store.exists(Sierra, Sierra.sucursal_id == sucursal_id):
        raise ConflictError("No se puede eliminar la sucursal porque tiene sierras asociadas")

    try:
        removed = await store.delete(usuario_sucursal, usuario_sucursal.c.sucursal_id == sucursal_id)
        await store.delete(Sucursal, Sucursal.id == sucursal_id)
    except StoreError as exc:
        raise ConflictError("Error al eliminar la sucursal", error=exc.error)
    logger.info("Branch %s deleted along with %d grant(s)", sucursal_id, removed)
