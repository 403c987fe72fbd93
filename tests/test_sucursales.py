"""
Tests for branch endpoints.
"""

from conftest import make_user
from sigo.models import ROLE_CLIENTE, Sucursal, usuario_sucursal


def sucursal_body(cliente_id: int, nombre: str = "Planta Norte") -> dict:
    return {
        "nombre": nombre,
        "direccion": "Ruta 5 km 10",
        "telefono": "+56 2 2222 2222",
        "cliente_id": cliente_id,
    }


class TestSucursalReads:
    """Scoped reads."""

    async def test_gerente_lists_all_with_client(self, client, gerente_headers, world):
        response = await client.get("/api/sucursales", headers=gerente_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert [s["id"] for s in data] == [world["b1"], world["b2"], world["d1"]]
        assert data[0]["clientes"] == {"id": world["cliente_a"], "razon_social": "Aserradero Sur"}

    async def test_cliente_lists_granted_only(self, client, cliente_headers, world):
        response = await client.get("/api/sucursales", headers=cliente_headers)
        assert [s["id"] for s in response.json()["data"]] == [world["b1"]]

    async def test_no_grants_lists_empty(self, client, sin_grants_headers):
        response = await client.get("/api/sucursales", headers=sin_grants_headers)
        assert response.json() == {"success": True, "data": []}

    async def test_get_outside_scope_is_403(self, client, cliente_headers, world):
        response = await client.get(f"/api/sucursales/{world['b2']}", headers=cliente_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "No tiene permisos para ver esta sucursal"

    async def test_get_includes_full_client(self, client, gerente_headers, world):
        response = await client.get(f"/api/sucursales/{world['b1']}", headers=gerente_headers)
        assert response.status_code == 200
        assert response.json()["data"]["clientes"]["rut"] == "76.111.111-1"

    async def test_get_not_found(self, client, gerente_headers):
        response = await client.get("/api/sucursales/99999", headers=gerente_headers)
        assert response.status_code == 404

    async def test_by_cliente_is_narrowed(self, client, cliente_headers, world):
        response = await client.get(
            f"/api/sucursales/cliente/{world['cliente_a']}", headers=cliente_headers
        )
        assert response.status_code == 200
        assert [s["id"] for s in response.json()["data"]] == [world["b1"]]

    async def test_by_cliente_outside_scope_is_403(self, client, cliente_headers, world):
        response = await client.get(
            f"/api/sucursales/cliente/{world['cliente_c']}", headers=cliente_headers
        )
        assert response.status_code == 403


class TestSucursalWrites:
    """Privileged CRUD."""

    async def test_create(self, client, gerente_headers, world):
        response = await client.post(
            "/api/sucursales", headers=gerente_headers, json=sucursal_body(world["cliente_a"])
        )
        assert response.status_code == 201
        assert response.json()["data"]["cliente_id"] == world["cliente_a"]

    async def test_create_unknown_client(self, client, gerente_headers, world):
        response = await client.post(
            "/api/sucursales", headers=gerente_headers, json=sucursal_body(99999)
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Cliente no encontrado"

    async def test_update(self, client, gerente_headers, world):
        response = await client.put(
            f"/api/sucursales/{world['b2']}",
            headers=gerente_headers,
            json=sucursal_body(world["cliente_a"], nombre="B2 renovada"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["nombre"] == "B2 renovada"

    async def test_delete_with_saws_is_blocked(self, client, store, gerente_headers, world):
        response = await client.delete(f"/api/sucursales/{world['b1']}", headers=gerente_headers)
        assert response.status_code == 400
        assert response.json()["message"] == (
            "No se puede eliminar la sucursal porque tiene sierras asociadas"
        )
        assert await store.exists(Sucursal, Sucursal.id == world["b1"])

    async def test_delete_removes_grants(self, client, store, identity, gerente_headers, world):
        usuario = await make_user(
            store, identity, "b2@example.com", ROLE_CLIENTE, sucursal_ids=(world["b2"],)
        )
        response = await client.delete(f"/api/sucursales/{world['b2']}", headers=gerente_headers)
        assert response.status_code == 200
        assert not await store.exists(Sucursal, Sucursal.id == world["b2"])
        assert not await store.exists(
            usuario_sucursal, usuario_sucursal.c.usuario_id == usuario["id"]
        )

    async def test_delete_forbidden_for_cliente(self, client, cliente_headers, world):
        response = await client.delete(f"/api/sucursales/{world['b2']}", headers=cliente_headers)
        assert response.status_code == 403
