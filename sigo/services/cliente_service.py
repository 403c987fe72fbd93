"""
Client service.

All reads are scope-filtered:
- Gerente / Administrador see every client.
- Cliente-role users see only the clients owning their granted branches.

Writes are restricted to privileged roles at the controller.
"""

import logging

from sigo.core.exceptions import ConflictError, NotFoundError, StoreError
from sigo.models.cliente import Cliente, Sucursal
from sigo.rbac.context_resolver import DataScope, ScopeTarget, apply_scope, ensure_access
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)


async def list_clientes(store: StoreGateway, scope: DataScope) -> list[Row]:
    clauses = apply_scope(scope, Cliente.id, ScopeTarget.CLIENTE)
    if clauses is None:
        return []
    return await store.select(Cliente, *clauses, order_by="id")


async def get_cliente(cliente_id: int, store: StoreGateway, scope: DataScope) -> Row:
    """Single client plus its branches (narrowed to the caller's grants)."""
    ensure_access(scope, cliente_id, ScopeTarget.CLIENTE, "No tiene permisos para ver este cliente")

    cliente = await store.select_one(Cliente, Cliente.id == cliente_id)
    if cliente is None:
        raise NotFoundError("Cliente no encontrado")

    sucursales: list[Row] = []
    clauses = apply_scope(scope, Sucursal.id)
    if clauses is not None:
        try:
            sucursales = await store.select(
                Sucursal, Sucursal.cliente_id == cliente_id, *clauses, order_by="nombre"
            )
        except StoreError as exc:
            logger.error("Could not load branches of client %s: %s", cliente_id, exc.error)

    return {**cliente, "sucursales": sucursales}


async def create_cliente(data: dict, store: StoreGateway) -> Row:
    try:
        return await store.insert(Cliente, data)
    except StoreError as exc:
        raise ConflictError("Error al crear el cliente", error=exc.error)


async def update_cliente(cliente_id: int, data: dict, store: StoreGateway) -> Row:
    if not await store.exists(Cliente, Cliente.id == cliente_id):
        raise NotFoundError("Cliente no encontrado")
    try:
        rows = await store.update(Cliente, data, Cliente.id == cliente_id)
    except StoreError as exc:
        raise ConflictError("Error al actualizar el cliente", error=exc.error)
    return rows[0]


async def delete_cliente(cliente_id: int, store: StoreGateway) -> None:
    """Only a client without branches can be deleted."""
    if not await store.exists(Cliente, Cliente.id == cliente_id):
        raise NotFoundError("Cliente no encontrado")

    if await store.exists(Sucursal, Sucursal.cliente_id == cliente_id):
        raise ConflictError("No se puede eliminar el cliente porque tiene sucursales asociadas")

    try:
        await store.delete(Cliente, Cliente.id == cliente_id)
    except StoreError as exc:
        raise ConflictError("Error al eliminar el cliente", error=exc.error)
    logger.info("Client %s deleted", cliente_id)
