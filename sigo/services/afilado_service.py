"""
Sharpening-record service.

A record is Open while `fecha_salida` is null and Closed once it is set;
there is no way back.  `ultimo_afilado` only ever goes false -> true and
retires the owning saw (state `Obsoleto`), after which the saw accepts no
new sharpenings.

Listings narrow silently to the caller's branches.  Access to a specific
saw, branch, client or record outside the scope is a 403.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import ColumnElement

from sigo.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    StoreError,
    UnexpectedError,
    ValidationError,
)
from sigo.models.base import utcnow
from sigo.models.catalogo import ESTADO_OBSOLETO, EstadoSierra, TipoAfilado
from sigo.models.cliente import Sucursal
from sigo.models.sierra import Afilado, Sierra
from sigo.rbac.context_resolver import (
    CurrentUser,
    DataScope,
    ScopeTarget,
    apply_scope,
    can_access,
    ensure_access,
    narrow_ids,
)
from sigo.services import audit_service, enrichment
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────

async def _estado_id(nombre: str, store: StoreGateway) -> int:
    estado = await store.select_one(EstadoSierra, EstadoSierra.nombre == nombre, columns=["id"])
    if estado is None:
        raise UnexpectedError(f'Error al obtener el estado "{nombre}"')
    return estado["id"]


async def _retire_sierras(sierra_ids: Sequence[int], store: StoreGateway) -> None:
    """Move the given saws to the Obsoleto state."""
    if not sierra_ids:
        return
    obsoleto_id = await _estado_id(ESTADO_OBSOLETO, store)
    await store.update(Sierra, {"estado_id": obsoleto_id}, Sierra.id.in_(list(sierra_ids)))
    logger.info("Saws %s marked %s", list(sierra_ids), ESTADO_OBSOLETO)


def _period_clauses(
    desde: datetime | None = None,
    hasta: datetime | None = None,
    pendientes: bool = False,
) -> list[ColumnElement[bool]]:
    clauses: list[ColumnElement[bool]] = []
    if desde is not None:
        clauses.append(Afilado.fecha_afilado >= desde)
    if hasta is not None:
        clauses.append(Afilado.fecha_afilado <= hasta)
    if pendientes:
        clauses.append(Afilado.fecha_salida.is_(None))
    return clauses


async def _visible_sierra_ids(
    store: StoreGateway,
    scope: DataScope,
    sucursal_ids: list[int] | None = None,
) -> list[int] | None:
    """
    Saw ids a listing may cover.

    None means "no narrowing needed" (unrestricted caller, no branch
    filter); an empty list means nothing is visible.
    """
    if sucursal_ids is None:
        clauses = apply_scope(scope, Sierra.sucursal_id)
        if clauses is None:
            return []
        if not clauses:
            return None
    else:
        sucursal_ids = narrow_ids(scope, sucursal_ids)
        if not sucursal_ids:
            return []
        clauses = [Sierra.sucursal_id.in_(sucursal_ids)]
    sierras = await store.select(Sierra, *clauses, columns=["id"])
    return [s["id"] for s in sierras]


async def _list(
    store: StoreGateway,
    sierra_ids: list[int] | None,
    *clauses: ColumnElement[bool],
    descending: bool = True,
) -> list[Row]:
    if sierra_ids is not None:
        if not sierra_ids:
            return []
        clauses = (*clauses, Afilado.sierra_id.in_(sierra_ids))
    afilados = await store.select(
        Afilado, *clauses, order_by="fecha_afilado", descending=descending
    )
    return await enrichment.enrich(store, afilados, enrichment.AFILADO_JOINS)


async def _sucursal_by_sierra(sierra_ids: Sequence[int], store: StoreGateway) -> dict[int, int]:
    sierras = await store.select_in(Sierra, set(sierra_ids), columns=["id", "sucursal_id"])
    return {s["id"]: s["sucursal_id"] for s in sierras}


# ── State transitions ────────────────────────────────────────────────

async def create_afilado(data: dict, user: CurrentUser, store: StoreGateway, scope: DataScope) -> Row:
    """
    Open a sharpening record on a saw.

    Order of checks: saw exists (404), saw in scope (403), saw not
    obsolete (400), sharpening type exists (404).
    """
    sierra = await store.select_one(Sierra, Sierra.id == data["sierra_id"])
    if sierra is None:
        raise NotFoundError("Sierra no encontrada")
    ensure_access(
        scope,
        sierra["sucursal_id"],
        message="No tiene permisos para registrar afilados para esta sierra",
    )

    estado = await store.select_one(EstadoSierra, EstadoSierra.id == sierra["estado_id"])
    if estado is not None and estado["nombre"] == ESTADO_OBSOLETO:
        raise ValidationError("No se puede afilar una sierra obsoleta")

    if not await store.exists(TipoAfilado, TipoAfilado.id == data["tipo_afilado_id"]):
        raise NotFoundError("Tipo de afilado no encontrado")

    ultimo = bool(data.get("ultimo_afilado"))
    try:
        afilado = await store.insert(
            Afilado,
            {
                "sierra_id": sierra["id"],
                "tipo_afilado_id": data["tipo_afilado_id"],
                "usuario_id": user.id,
                "fecha_afilado": utcnow(),
                "observaciones": data.get("observaciones"),
                "ultimo_afilado": ultimo,
            },
        )
    except StoreError as exc:
        raise ValidationError("Error al registrar el afilado", error=exc.error)

    if ultimo:
        await _retire_sierras([sierra["id"]], store)
    return afilado


async def registrar_salida(afilado_id: int, store: StoreGateway, scope: DataScope) -> Row:
    """Close one open record.  A record already closed is reported as not found."""
    afilado = await store.select_one(
        Afilado, Afilado.id == afilado_id, Afilado.fecha_salida.is_(None)
    )
    if afilado is None:
        raise NotFoundError("Afilado no encontrado o ya tiene fecha de salida")

    sucursales = await _sucursal_by_sierra([afilado["sierra_id"]], store)
    ensure_access(
        scope,
        sucursales.get(afilado["sierra_id"]),
        message="No tiene permisos para registrar la salida de este afilado",
    )

    # the null guard keeps a concurrent close from overwriting the exit time
    rows = await store.update(
        Afilado,
        {"fecha_salida": utcnow()},
        Afilado.id == afilado_id,
        Afilado.fecha_salida.is_(None),
    )
    if not rows:
        raise NotFoundError("Afilado no encontrado o ya tiene fecha de salida")
    return rows[0]


async def registrar_salida_masiva(
    afilado_ids: list[int], store: StoreGateway, scope: DataScope
) -> list[Row]:
    """
    Close every open record among `afilado_ids`.

    Records already closed are skipped.  If any open record lies outside
    the caller's scope the whole request is rejected before anything is
    written.  Returns the rows actually closed.
    """
    pendientes = await store.select(
        Afilado,
        Afilado.id.in_(afilado_ids),
        Afilado.fecha_salida.is_(None),
        columns=["id", "sierra_id"],
        order_by="id",
    )
    if not pendientes:
        raise NotFoundError("No se encontraron afilados pendientes con los IDs proporcionados")

    if scope.restricted:
        sucursales = await _sucursal_by_sierra([a["sierra_id"] for a in pendientes], store)
        for afilado in pendientes:
            if not can_access(scope, sucursales.get(afilado["sierra_id"])):
                raise ForbiddenError(
                    f"No tiene permisos para registrar la salida del afilado ID {afilado['id']}"
                )

    try:
        rows = await store.update(
            Afilado,
            {"fecha_salida": utcnow()},
            Afilado.id.in_([a["id"] for a in pendientes]),
            Afilado.fecha_salida.is_(None),
        )
    except StoreError as exc:
        raise ValidationError("Error al actualizar los afilados", error=exc.error)
    return sorted(rows, key=lambda r: r["id"])


async def marcar_ultimo_masivo(afilado_ids: list[int], user: CurrentUser, store: StoreGateway) -> dict:
    """
    Flag a batch of records as final sharpenings, all or nothing.

    The batch is rejected as a whole when any id is unknown or already
    final.  On success the owning saws are retired and an audit row is
    written.
    """
    afilado_ids = list(dict.fromkeys(afilado_ids))
    logger.info(
        "User %s (%s) marking records %s as final sharpening", user.id, user.email, afilado_ids
    )

    afilados = await store.select(
        Afilado,
        Afilado.id.in_(afilado_ids),
        columns=["id", "sierra_id", "ultimo_afilado"],
    )
    if not afilados:
        raise NotFoundError("No se encontraron afilados con los IDs proporcionados")

    found = {a["id"] for a in afilados}
    missing = [i for i in afilado_ids if i not in found]
    if missing:
        raise ValidationError(
            f"No se encontraron algunos afilados: {', '.join(map(str, missing))}"
        )

    ya_marcados = sorted(a["id"] for a in afilados if a["ultimo_afilado"])
    if ya_marcados:
        raise ValidationError(
            "Algunos afilados ya están marcados como último afilado: "
            + ", ".join(map(str, ya_marcados))
        )

    by_id = {a["id"]: a for a in afilados}
    sierra_ids = list(dict.fromkeys(by_id[i]["sierra_id"] for i in afilado_ids))

    try:
        await store.update(Afilado, {"ultimo_afilado": True}, Afilado.id.in_(afilado_ids))
    except StoreError as exc:
        raise UnexpectedError("Error al actualizar afilados", error=exc.error)
    await _retire_sierras(sierra_ids, store)

    await audit_service.record(
        store,
        user.id,
        "AFILADO_ULTIMO_AFILADO_MASIVO",
        "afilados",
        f"Marcó {len(afilado_ids)} afilado(s) como último afilado",
        {"afiladoIds": afilado_ids, "sierraIds": sierra_ids},
    )
    return {"actualizados": len(afilado_ids), "afiladoIds": afilado_ids, "sierraIds": sierra_ids}


# ── Queries ──────────────────────────────────────────────────────────

async def get_afilado(afilado_id: int, store: StoreGateway, scope: DataScope) -> Row:
    afilado = await store.select_one(Afilado, Afilado.id == afilado_id)
    if afilado is None:
        raise NotFoundError("Afilado no encontrado")
    if scope.restricted:
        sucursales = await _sucursal_by_sierra([afilado["sierra_id"]], store)
        ensure_access(
            scope,
            sucursales.get(afilado["sierra_id"]),
            message="No tiene permisos para ver este afilado",
        )
    return await enrichment.enrich_one(store, afilado, enrichment.AFILADO_JOINS)


async def list_by_sierra(sierra_id: int, store: StoreGateway, scope: DataScope) -> list[Row]:
    sierra = await store.select_one(Sierra, Sierra.id == sierra_id, columns=["id", "sucursal_id"])
    if sierra is None:
        raise NotFoundError("Sierra no encontrada")
    ensure_access(
        scope,
        sierra["sucursal_id"],
        message="No tiene permisos para ver los afilados de esta sierra",
    )
    afilados = await store.select(
        Afilado, Afilado.sierra_id == sierra_id, order_by="fecha_afilado", descending=True
    )
    return await enrichment.enrich(
        store, afilados, [enrichment.TIPO_AFILADO, enrichment.USUARIO]
    )


async def list_by_sucursal(
    sucursal_id: int,
    store: StoreGateway,
    scope: DataScope,
    desde: datetime | None = None,
    hasta: datetime | None = None,
    pendientes: bool = False,
) -> list[Row]:
    ensure_access(
        scope,
        sucursal_id,
        message="No tiene permisos para ver los afilados de esta sucursal",
    )
    sierra_ids = await _visible_sierra_ids(store, scope, [sucursal_id])
    return await _list(store, sierra_ids, *_period_clauses(desde, hasta, pendientes))


async def list_by_cliente(
    cliente_id: int,
    store: StoreGateway,
    scope: DataScope,
    desde: datetime | None = None,
    hasta: datetime | None = None,
    pendientes: bool = False,
) -> list[Row]:
    """Records of every visible saw of a client, each tagged with the saw's registration date."""
    ensure_access(
        scope,
        cliente_id,
        ScopeTarget.CLIENTE,
        "No tiene permisos para ver los afilados de este cliente",
    )
    sucursales = await store.select(Sucursal, Sucursal.cliente_id == cliente_id, columns=["id"])
    sucursal_ids = narrow_ids(scope, [s["id"] for s in sucursales])
    if not sucursal_ids:
        return []

    sierras = await store.select(
        Sierra, Sierra.sucursal_id.in_(sucursal_ids), columns=["id", "fecha_registro"]
    )
    registro = {s["id"]: s["fecha_registro"] for s in sierras}
    afilados = await _list(store, list(registro), *_period_clauses(desde, hasta, pendientes))
    for afilado in afilados:
        afilado["sierra_fecha_registro"] = registro.get(afilado["sierra_id"])
    return afilados


async def list_pendientes(store: StoreGateway, scope: DataScope) -> list[Row]:
    """Open records, oldest entry first."""
    sierra_ids = await _visible_sierra_ids(store, scope)
    return await _list(
        store, sierra_ids, *_period_clauses(pendientes=True), descending=False
    )


async def list_afilados(
    store: StoreGateway,
    scope: DataScope,
    desde: datetime | None = None,
    hasta: datetime | None = None,
    pendientes: bool = False,
    sucursal_id: int | None = None,
    cliente_id: int | None = None,
) -> list[Row]:
    """
    Every visible record, newest first.  `sucursal_id` / `cliente_id`
    narrow further; for Cliente-role callers they can only narrow inside
    the granted branches, never widen.
    """
    sucursal_ids: list[int] | None = None
    if cliente_id is not None:
        sucursales = await store.select(Sucursal, Sucursal.cliente_id == cliente_id, columns=["id"])
        sucursal_ids = [s["id"] for s in sucursales]
    if sucursal_id is not None:
        sucursal_ids = (
            [sucursal_id]
            if sucursal_ids is None
            else [i for i in sucursal_ids if i == sucursal_id]
        )

    sierra_ids = await _visible_sierra_ids(store, scope, sucursal_ids)
    return await _list(store, sierra_ids, *_period_clauses(desde, hasta, pendientes))
