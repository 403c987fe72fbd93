"""
Tests for saw endpoints.
"""

from sigo.models import Afilado, Cliente, Sierra


class TestSierraReads:
    """Lookups by id, barcode, branch and client."""

    async def test_get_by_codigo_nests_type_state_branch_and_client(
        self, client, gerente_headers, world
    ):
        response = await client.get("/api/sierras/codigo/X1", headers=gerente_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == world["x1"]
        assert data["tipos_sierra"] == {"id": world["tipo_sierra_id"], "nombre": "Cinta"}
        assert data["estados_sierra"]["nombre"] == "En uso"
        assert data["sucursales"]["nombre"] == "B1"
        assert data["sucursales"]["clientes"]["razon_social"] == "Aserradero Sur"
        assert data["afilados"] == []

    async def test_get_by_codigo_unknown(self, client, gerente_headers, world):
        response = await client.get("/api/sierras/codigo/NOEXISTE", headers=gerente_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Sierra no encontrada con ese código"

    async def test_get_by_codigo_outside_scope(self, client, cliente_headers, world):
        response = await client.get("/api/sierras/codigo/Y1", headers=cliente_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "No tiene permisos para ver esta sierra"

    async def test_get_by_id(self, client, cliente_headers, world):
        response = await client.get(f"/api/sierras/{world['x1']}", headers=cliente_headers)
        assert response.status_code == 200
        assert response.json()["data"]["codigo_barra"] == "X1"

    async def test_todas_is_scoped(self, client, gerente_headers, cliente_headers, world):
        todas = await client.get("/api/sierras/todas", headers=gerente_headers)
        assert [s["codigo_barra"] for s in todas.json()["data"]] == ["X1", "Y1"]

        propias = await client.get("/api/sierras/todas", headers=cliente_headers)
        assert [s["codigo_barra"] for s in propias.json()["data"]] == ["X1"]

    async def test_todas_without_grants_is_empty(self, client, sin_grants_headers, world):
        response = await client.get("/api/sierras/todas", headers=sin_grants_headers)
        assert response.json() == {"success": True, "data": []}

    async def test_by_sucursal(self, client, cliente_headers, world):
        response = await client.get(f"/api/sierras/sucursal/{world['b1']}", headers=cliente_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert [s["codigo_barra"] for s in data] == ["X1"]
        assert data[0]["tipos_sierra"]["nombre"] == "Cinta"

    async def test_by_sucursal_outside_scope(self, client, cliente_headers, world):
        response = await client.get(f"/api/sierras/sucursal/{world['b2']}", headers=cliente_headers)
        assert response.status_code == 403

    async def test_by_cliente(self, client, gerente_headers, world):
        response = await client.get(
            f"/api/sierras/cliente/{world['cliente_c']}", headers=gerente_headers
        )
        assert [s["codigo_barra"] for s in response.json()["data"]] == ["Y1"]

    async def test_by_cliente_without_branches(self, client, store, gerente_headers, world):
        vacio = await store.insert(Cliente, {"razon_social": "Sin Plantas", "rut": "1-9"})
        response = await client.get(f"/api/sierras/cliente/{vacio['id']}", headers=gerente_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Cliente no encontrado o sin sucursales"


class TestSierraWrites:
    """Registration and partial updates."""

    async def test_create_starts_in_use(self, client, cliente_headers, world):
        response = await client.post(
            "/api/sierras",
            headers=cliente_headers,
            json={"codigo": "X2", "sucursal_id": world["b1"], "tipo_sierra_id": world["tipo_sierra_id"]},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["codigo_barra"] == "X2"
        assert data["estado_id"] == world["en_uso_id"]
        assert data["activo"] is True

        fetched = await client.get("/api/sierras/codigo/X2", headers=cliente_headers)
        assert fetched.json()["data"]["sucursales"]["clientes"]["razon_social"] == "Aserradero Sur"

    async def test_create_duplicate_code(self, client, gerente_headers, store, world):
        response = await client.post(
            "/api/sierras",
            headers=gerente_headers,
            json={"codigo": "Y1", "sucursal_id": world["b2"], "tipo_sierra_id": world["tipo_sierra_id"]},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Ya existe una sierra con ese código"
        assert len(await store.select(Sierra, Sierra.codigo_barra == "Y1")) == 1

    async def test_create_outside_scope(self, client, cliente_headers, world):
        response = await client.post(
            "/api/sierras",
            headers=cliente_headers,
            json={"codigo": "Z9", "sucursal_id": world["d1"], "tipo_sierra_id": world["tipo_sierra_id"]},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "No tiene permisos para crear sierras en esta sucursal"

    async def test_create_unknown_branch(self, client, gerente_headers, world):
        response = await client.post(
            "/api/sierras",
            headers=gerente_headers,
            json={"codigo": "Z9", "sucursal_id": 99999, "tipo_sierra_id": world["tipo_sierra_id"]},
        )
        assert response.status_code == 404

    async def test_create_unknown_type(self, client, gerente_headers, world):
        response = await client.post(
            "/api/sierras",
            headers=gerente_headers,
            json={"codigo": "Z9", "sucursal_id": world["b1"], "tipo_sierra_id": 99999},
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Tipo de sierra no encontrado"

    async def test_update_code_and_branch(self, client, gerente_headers, world):
        response = await client.put(
            f"/api/sierras/{world['x1']}",
            headers=gerente_headers,
            json={"codigo": "X1-B", "sucursal_id": world["b2"]},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["codigo_barra"] == "X1-B"
        assert data["sucursal_id"] == world["b2"]

    async def test_update_to_existing_code(self, client, gerente_headers, world):
        response = await client.put(
            f"/api/sierras/{world['x1']}", headers=gerente_headers, json={"codigo": "Y1"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Ya existe otra sierra con ese código"

    async def test_update_keeping_own_code(self, client, gerente_headers, world):
        response = await client.put(
            f"/api/sierras/{world['x1']}",
            headers=gerente_headers,
            json={"codigo": "X1", "activo": False},
        )
        assert response.status_code == 200
        assert response.json()["data"]["activo"] is False

    async def test_update_move_outside_scope(self, client, cliente_headers, world):
        response = await client.put(
            f"/api/sierras/{world['x1']}",
            headers=cliente_headers,
            json={"sucursal_id": world["d1"]},
        )
        assert response.status_code == 403

    async def test_obsolete_saw_cannot_be_reactivated(self, client, store, cliente_headers, world):
        await client.post(
            "/api/afilados",
            headers=cliente_headers,
            json={
                "sierra_id": world["x1"],
                "tipo_afilado_id": world["tipo_afilado_id"],
                "ultimo_afilado": True,
            },
        )
        retirada = await store.select_one(Sierra, Sierra.id == world["x1"])
        assert retirada["estado_id"] != world["en_uso_id"]

        response = await client.put(
            f"/api/sierras/{world['x1']}",
            headers=cliente_headers,
            json={"estado_id": world["en_uso_id"]},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "No se puede reactivar una sierra obsoleta"
        sierra = await store.select_one(Sierra, Sierra.id == world["x1"])
        assert sierra["estado_id"] == retirada["estado_id"]

        again = await client.post(
            "/api/afilados",
            headers=cliente_headers,
            json={"sierra_id": world["x1"], "tipo_afilado_id": world["tipo_afilado_id"]},
        )
        assert again.status_code == 400
        assert len(await store.select(Afilado, Afilado.sierra_id == world["x1"])) == 1

    async def test_obsolete_saw_accepts_other_edits(self, client, store, gerente_headers, world):
        await client.post(
            "/api/afilados",
            headers=gerente_headers,
            json={
                "sierra_id": world["x1"],
                "tipo_afilado_id": world["tipo_afilado_id"],
                "ultimo_afilado": True,
            },
        )
        retirada = await store.select_one(Sierra, Sierra.id == world["x1"])
        response = await client.put(
            f"/api/sierras/{world['x1']}",
            headers=gerente_headers,
            json={"estado_id": retirada["estado_id"], "activo": False},
        )
        assert response.status_code == 200
        assert response.json()["data"]["activo"] is False
