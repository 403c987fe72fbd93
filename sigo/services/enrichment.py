"""
Enrichment: batched lookups that stand in for relational joins.

Given flat rows carrying foreign keys, `enrich` collects the distinct
ids per join, issues ONE membership lookup per related table, builds an
id → row map and splices the related row back onto every record under
the join's key.  Nested joins are resolved the same way on the related
rows, so `afilado → sierras → sucursales → clientes` costs one query
per level regardless of how many records there are.

Guarantees:
- Output order equals input order.
- A null foreign key, or one the lookup did not return, yields `{}`.
- A failed secondary lookup is logged and degrades to `{}` placeholders
  for that branch only.  The primary record's own fields always come
  back.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sigo.core.exceptions import StoreError
from sigo.models.catalogo import EstadoSierra, TipoAfilado, TipoSierra
from sigo.models.cliente import Cliente, Sucursal
from sigo.models.sierra import Sierra
from sigo.models.usuario import Usuario
from sigo.store.gateway import Row, StoreGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Join:
    key: str
    target: Any
    foreign_key: str
    columns: tuple[str, ...] | None = None
    nested: tuple["Join", ...] = ()

    def select_columns(self) -> list[str] | None:
        if self.columns is None:
            return None
        # the id and any key a nested join needs must always be fetched
        wanted = ["id", *self.columns, *(n.foreign_key for n in self.nested)]
        return list(dict.fromkeys(wanted))


async def enrich(store: StoreGateway, records: Sequence[Row], joins: Sequence[Join]) -> list[Row]:
    out = [dict(record) for record in records]
    if not out:
        return out
    for join in joins:
        related = await _lookup(store, join, out)
        for record in out:
            fk = record.get(join.foreign_key)
            match = related.get(fk) if fk is not None else None
            record[join.key] = dict(match) if match is not None else {}
    return out


async def enrich_one(store: StoreGateway, record: Row, joins: Sequence[Join]) -> Row:
    return (await enrich(store, [record], joins))[0]


async def _lookup(store: StoreGateway, join: Join, records: list[Row]) -> dict[Any, Row]:
    ids = list(
        dict.fromkeys(r[join.foreign_key] for r in records if r.get(join.foreign_key) is not None)
    )
    if not ids:
        return {}
    try:
        rows = await store.select_in(join.target, ids, columns=join.select_columns())
    except StoreError as exc:
        logger.warning("Enrichment lookup for %s failed, using placeholders: %s", join.key, exc.error)
        return {}
    if join.nested:
        rows = await enrich(store, rows, join.nested)
    return {row["id"]: row for row in rows}


# ── Join paths ───────────────────────────────────────────────────────

CLIENTE = Join("clientes", Cliente, "cliente_id", ("id", "razon_social"))

SUCURSAL = Join("sucursales", Sucursal, "sucursal_id", ("id", "nombre"), nested=(CLIENTE,))

TIPO_SIERRA = Join("tipos_sierra", TipoSierra, "tipo_sierra_id", ("id", "nombre"))
ESTADO_SIERRA = Join("estados_sierra", EstadoSierra, "estado_id", ("id", "nombre"))
TIPO_AFILADO = Join("tipos_afilado", TipoAfilado, "tipo_afilado_id", ("id", "nombre"))
USUARIO = Join("usuarios", Usuario, "usuario_id", ("id", "nombre", "apellido"))

SIERRA_JOINS: tuple[Join, ...] = (TIPO_SIERRA, ESTADO_SIERRA, SUCURSAL)

AFILADO_JOINS: tuple[Join, ...] = (
    TIPO_AFILADO,
    USUARIO,
    Join(
        "sierras",
        Sierra,
        "sierra_id",
        ("id", "codigo_barra", "fecha_registro"),
        nested=(TIPO_SIERRA, ESTADO_SIERRA, SUCURSAL),
    ),
)
