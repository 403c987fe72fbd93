"""
Saw service.

- Barcode uniqueness is a write-time pre-check across the whole system
  (not per branch); the store has no unique constraint.
- New saws start in the `En uso` state; an `Obsoleto` saw cannot be moved
  back to any other state.
- Any role may create or edit saws, but Cliente-role users only inside
  their granted branches (both the current and the target branch).
"""

import logging

from sigo.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    UnexpectedError,
    ValidationError,
)
from sigo.models.catalogo import ESTADO_EN_USO, ESTADO_OBSOLETO, EstadoSierra, TipoSierra
from sigo.models.cliente import Sucursal
from sigo.models.sierra import Afilado, Sierra
from sigo.rbac.context_resolver import (
    DataScope,
    ScopeTarget,
    apply_scope,
    ensure_access,
    narrow_ids,
)
from sigo.services import enrichment
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)


# ── Reads ────────────────────────────────────────────────────────────

async def _with_history(sierra: Row, store: StoreGateway) -> Row:
    """Enrich a single saw and attach its sharpening history, newest first."""
    detailed = await enrichment.enrich_one(store, sierra, enrichment.SIERRA_JOINS)
    try:
        afilados = await store.select(
            Afilado, Afilado.sierra_id == sierra["id"], order_by="fecha_afilado", descending=True
        )
        afilados = await enrichment.enrich(store, afilados, [enrichment.TIPO_AFILADO])
    except StoreError as exc:
        logger.error("Could not load sharpening history of saw %s: %s", sierra["id"], exc.error)
        afilados = []
    detailed["afilados"] = afilados
    return detailed


async def get_by_codigo(codigo: str, store: StoreGateway, scope: DataScope) -> Row:
    sierra = await store.select_one(Sierra, Sierra.codigo_barra == codigo)
    if sierra is None:
        raise NotFoundError("Sierra no encontrada con ese código")
    ensure_access(scope, sierra["sucursal_id"], message="No tiene permisos para ver esta sierra")
    return await _with_history(sierra, store)


async def get_sierra(sierra_id: int, store: StoreGateway, scope: DataScope) -> Row:
    sierra = await store.select_one(Sierra, Sierra.id == sierra_id)
    if sierra is None:
        raise NotFoundError("Sierra no encontrada")
    ensure_access(scope, sierra["sucursal_id"], message="No tiene permisos para ver esta sierra")
    return await _with_history(sierra, store)


async def list_sierras(store: StoreGateway, scope: DataScope) -> list[Row]:
    clauses = apply_scope(scope, Sierra.sucursal_id)
    if clauses is None:
        return []
    sierras = await store.select(Sierra, *clauses, order_by="codigo_barra")
    return await enrichment.enrich(store, sierras, enrichment.SIERRA_JOINS)


async def list_by_sucursal(sucursal_id: int, store: StoreGateway, scope: DataScope) -> list[Row]:
    ensure_access(
        scope, sucursal_id, message="No tiene permisos para ver sierras de esta sucursal"
    )
    sierras = await store.select(
        Sierra, Sierra.sucursal_id == sucursal_id, order_by="codigo_barra"
    )
    return await enrichment.enrich(
        store, sierras, [enrichment.TIPO_SIERRA, enrichment.ESTADO_SIERRA]
    )


async def list_by_cliente(cliente_id: int, store: StoreGateway, scope: DataScope) -> list[Row]:
    ensure_access(
        scope,
        cliente_id,
        ScopeTarget.CLIENTE,
        "No tiene permisos para ver sierras de este cliente",
    )
    sucursales = await store.select(
        Sucursal, Sucursal.cliente_id == cliente_id, columns=["id"]
    )
    if not sucursales:
        raise NotFoundError("Cliente no encontrado o sin sucursales")

    sucursal_ids = narrow_ids(scope, [s["id"] for s in sucursales])
    if not sucursal_ids:
        return []
    sierras = await store.select(
        Sierra, Sierra.sucursal_id.in_(sucursal_ids), order_by="codigo_barra"
    )
    return await enrichment.enrich(store, sierras, enrichment.SIERRA_JOINS)


# ── Writes ───────────────────────────────────────────────────────────

async def _ensure_codigo_free(codigo: str, store: StoreGateway, exclude_id: int | None = None) -> None:
    clauses = [Sierra.codigo_barra == codigo]
    if exclude_id is not None:
        clauses.append(Sierra.id != exclude_id)
    if await store.exists(Sierra, *clauses):
        if exclude_id is None:
            raise ConflictError("Ya existe una sierra con ese código")
        raise ConflictError("Ya existe otra sierra con ese código")


async def _ensure_sucursal(sucursal_id: int, store: StoreGateway) -> None:
    if not await store.exists(Sucursal, Sucursal.id == sucursal_id):
        raise NotFoundError("Sucursal no encontrada")


async def _ensure_tipo(tipo_sierra_id: int, store: StoreGateway) -> None:
    if not await store.exists(TipoSierra, TipoSierra.id == tipo_sierra_id):
        raise NotFoundError("Tipo de sierra no encontrado")


async def create_sierra(
    codigo: str,
    sucursal_id: int,
    tipo_sierra_id: int,
    store: StoreGateway,
    scope: DataScope,
) -> Row:
    await _ensure_sucursal(sucursal_id, store)
    ensure_access(
        scope, sucursal_id, message="No tiene permisos para crear sierras en esta sucursal"
    )
    await _ensure_tipo(tipo_sierra_id, store)
    await _ensure_codigo_free(codigo, store)

    estado = await store.select_one(EstadoSierra, EstadoSierra.nombre == ESTADO_EN_USO)
    if estado is None:
        raise UnexpectedError(f'Error al obtener el estado "{ESTADO_EN_USO}"')

    try:
        sierra = await store.insert(
            Sierra,
            {
                "codigo_barra": codigo,
                "sucursal_id": sucursal_id,
                "tipo_sierra_id": tipo_sierra_id,
                "estado_id": estado["id"],
            },
        )
    except StoreError as exc:
        raise ConflictError("Error al crear la sierra", error=exc.error)
    logger.info("Saw %s (%s) registered in branch %s", sierra["id"], codigo, sucursal_id)
    return sierra


async def update_sierra(sierra_id: int, data: dict, store: StoreGateway, scope: DataScope) -> Row:
    """
    Partial update.  Only supplied fields are validated and written:
    `codigo` (barcode), `sucursal_id`, `tipo_sierra_id`, `estado_id`, `activo`.
    """
    sierra = await store.select_one(Sierra, Sierra.id == sierra_id)
    if sierra is None:
        raise NotFoundError("Sierra no encontrada")
    ensure_access(scope, sierra["sucursal_id"], message="No tiene permisos para modificar esta sierra")

    values: dict = {}

    sucursal_id = data.get("sucursal_id")
    if sucursal_id is not None:
        if sucursal_id != sierra["sucursal_id"]:
            await _ensure_sucursal(sucursal_id, store)
            ensure_access(
                scope,
                sucursal_id,
                message="No tiene permisos para asignar la sierra a esta sucursal",
            )
        values["sucursal_id"] = sucursal_id

    codigo = data.get("codigo")
    if codigo:
        if codigo != sierra["codigo_barra"]:
            await _ensure_codigo_free(codigo, store, exclude_id=sierra_id)
        values["codigo_barra"] = codigo

    tipo_sierra_id = data.get("tipo_sierra_id")
    if tipo_sierra_id is not None:
        if tipo_sierra_id != sierra["tipo_sierra_id"]:
            await _ensure_tipo(tipo_sierra_id, store)
        values["tipo_sierra_id"] = tipo_sierra_id

    estado_id = data.get("estado_id")
    if estado_id is not None:
        if estado_id != sierra["estado_id"]:
            actual = await store.select_one(EstadoSierra, EstadoSierra.id == sierra["estado_id"])
            # Obsoleto is terminal
            if actual is not None and actual["nombre"] == ESTADO_OBSOLETO:
                raise ValidationError("No se puede reactivar una sierra obsoleta")
            if not await store.exists(EstadoSierra, EstadoSierra.id == estado_id):
                raise NotFoundError("Estado de sierra no encontrado")
        values["estado_id"] = estado_id

    if data.get("activo") is not None:
        values["activo"] = data["activo"]

    if not values:
        return sierra

    try:
        rows = await store.update(Sierra, values, Sierra.id == sierra_id)
    except StoreError as exc:
        raise ConflictError("Error al actualizar la sierra", error=exc.error)
    return rows[0]
