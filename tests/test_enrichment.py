"""
Tests for batched enrichment (join emulation).
"""

from sigo.core.exceptions import StoreError
from sigo.models import Sierra, TipoSierra
from sigo.services import enrichment
from sigo.store.gateway import StoreGateway


class CountingStore(StoreGateway):
    """Counts membership lookups per table."""

    def __init__(self, session):
        super().__init__(session)
        self.lookups: dict[str, int] = {}

    async def select_in(self, target, ids, *, key="id", columns=None):
        name = target.__tablename__ if hasattr(target, "__tablename__") else target.name
        self.lookups[name] = self.lookups.get(name, 0) + 1
        return await super().select_in(target, ids, key=key, columns=columns)


class FailingTipoSierraStore(StoreGateway):
    """Type catalog unreachable; everything else works."""

    async def select_in(self, target, ids, *, key="id", columns=None):
        if target is TipoSierra:
            raise StoreError(error="tipos_sierra unavailable")
        return await super().select_in(target, ids, key=key, columns=columns)


class TestEnrich:
    """Shape, order and batching of enriched records."""

    async def test_saw_join_path(self, store, world):
        sierra = await store.select_one(Sierra, Sierra.id == world["x1"])
        enriched = await enrichment.enrich_one(store, sierra, enrichment.SIERRA_JOINS)
        assert enriched["codigo_barra"] == "X1"
        assert enriched["tipos_sierra"]["nombre"] == "Cinta"
        assert enriched["estados_sierra"]["nombre"] == "En uso"
        assert enriched["sucursales"]["id"] == world["b1"]
        assert enriched["sucursales"]["clientes"]["razon_social"] == "Aserradero Sur"

    async def test_order_is_preserved(self, store, world):
        sierras = await store.select(Sierra, order_by="codigo_barra", descending=True)
        enriched = await enrichment.enrich(store, sierras, enrichment.SIERRA_JOINS)
        assert [s["codigo_barra"] for s in enriched] == ["Y1", "X1"]
        assert [s["sucursales"]["nombre"] for s in enriched] == ["D1", "B1"]

    async def test_one_lookup_per_table(self, db_session, world):
        counting = CountingStore(db_session)
        sierras = await counting.select(Sierra)
        await enrichment.enrich(counting, sierras * 3, enrichment.SIERRA_JOINS)
        assert counting.lookups == {
            "tipos_sierra": 1,
            "estados_sierra": 1,
            "sucursales": 1,
            "clientes": 1,
        }

    async def test_missing_foreign_key_yields_placeholder(self, store, world):
        afilado = {"id": 1, "sierra_id": world["x1"], "tipo_afilado_id": world["tipo_afilado_id"], "usuario_id": None}
        enriched = await enrichment.enrich_one(store, afilado, enrichment.AFILADO_JOINS)
        assert enriched["usuarios"] == {}
        assert enriched["tipos_afilado"]["nombre"] == "Completo"
        assert enriched["sierras"]["codigo_barra"] == "X1"

    async def test_unknown_foreign_key_yields_placeholder(self, store, world):
        record = {"id": 1, "sierra_id": 999999, "tipo_afilado_id": None, "usuario_id": None}
        enriched = await enrichment.enrich_one(store, record, enrichment.AFILADO_JOINS)
        assert enriched["sierras"] == {}
        assert enriched["tipos_afilado"] == {}
        assert enriched["sierra_id"] == 999999

    async def test_empty_input(self, store):
        assert await enrichment.enrich(store, [], enrichment.SIERRA_JOINS) == []

    async def test_partial_failure_degrades_to_placeholders(self, db_session, world):
        failing = FailingTipoSierraStore(db_session)
        sierra = await failing.select_one(Sierra, Sierra.id == world["x1"])
        enriched = await enrichment.enrich_one(failing, sierra, enrichment.SIERRA_JOINS)
        assert enriched["tipos_sierra"] == {}
        # the other branches still resolve
        assert enriched["estados_sierra"]["nombre"] == "En uso"
        assert enriched["sucursales"]["clientes"]["razon_social"] == "Aserradero Sur"
        assert enriched["codigo_barra"] == "X1"

    async def test_input_records_are_not_mutated(self, store, world):
        sierras = await store.select(Sierra)
        await enrichment.enrich(store, sierras, enrichment.SIERRA_JOINS)
        assert "tipos_sierra" not in sierras[0]
