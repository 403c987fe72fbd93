"""
Tests for catalog endpoints.
"""


class TestCatalogLists:
    async def test_estados_sierra(self, client, cliente_headers):
        response = await client.get("/api/catalogos/estados-sierra", headers=cliente_headers)
        assert response.status_code == 200
        assert [e["nombre"] for e in response.json()["data"]] == ["En uso", "Obsoleto"]

    async def test_tipos(self, client, cliente_headers, world):
        sierra = await client.get("/api/catalogos/tipos-sierra", headers=cliente_headers)
        assert [t["nombre"] for t in sierra.json()["data"]] == ["Cinta"]

        afilado = await client.get("/api/catalogos/tipos-afilado", headers=cliente_headers)
        assert [t["nombre"] for t in afilado.json()["data"]] == ["Completo"]

    async def test_requires_authentication(self, client):
        response = await client.get("/api/catalogos/tipos-sierra")
        assert response.status_code == 401

    async def test_roles_privileged_only(self, client, gerente_headers, cliente_headers):
        response = await client.get("/api/catalogos/roles", headers=gerente_headers)
        assert response.status_code == 200
        assert [r["nombre"] for r in response.json()["data"]] == [
            "Administrador",
            "Cliente",
            "Gerente",
        ]

        denied = await client.get("/api/catalogos/roles", headers=cliente_headers)
        assert denied.status_code == 403


class TestTipoSierra:
    """Saw type maintenance."""

    async def test_create_is_active(self, client, gerente_headers):
        response = await client.post(
            "/api/catalogos/tipos-sierra",
            headers=gerente_headers,
            json={"nombre": "Circular", "descripcion": "Disco", "activo": False},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["nombre"] == "Circular"
        assert data["activo"] is True

    async def test_update(self, client, gerente_headers, world):
        response = await client.put(
            f"/api/catalogos/tipos-sierra/{world['tipo_sierra_id']}",
            headers=gerente_headers,
            json={"nombre": "Cinta ancha", "activo": False},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["nombre"] == "Cinta ancha"
        assert data["descripcion"] is None
        assert data["activo"] is False

    async def test_update_without_activo_reactivates(self, client, gerente_headers, world):
        await client.put(
            f"/api/catalogos/tipos-sierra/{world['tipo_sierra_id']}",
            headers=gerente_headers,
            json={"nombre": "Cinta", "activo": False},
        )
        response = await client.put(
            f"/api/catalogos/tipos-sierra/{world['tipo_sierra_id']}",
            headers=gerente_headers,
            json={"nombre": "Cinta"},
        )
        assert response.json()["data"]["activo"] is True

    async def test_update_not_found(self, client, gerente_headers):
        response = await client.put(
            "/api/catalogos/tipos-sierra/99999", headers=gerente_headers, json={"nombre": "X"}
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Tipo de sierra no encontrado"

    async def test_create_forbidden_for_cliente(self, client, cliente_headers):
        response = await client.post(
            "/api/catalogos/tipos-sierra", headers=cliente_headers, json={"nombre": "X"}
        )
        assert response.status_code == 403


class TestEnvelope:
    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/api/no-existe")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}
