"""
Pytest configuration and fixtures for backend tests.

Each test gets its own file-backed SQLite database (aiosqlite), with the
schema created from the models and the reference catalogs seeded.  The
app's `get_db` and `get_identity_provider` dependencies are overridden
to point at it.
"""

import os
import tempfile

# Must be set before anything from `sigo` is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.gettempdir(), "sigo-test-bootstrap.db"
)
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sigo.core.database import get_db
from sigo.identity.provider import LocalIdentityProvider, get_identity_provider
from sigo.main import app
from sigo.models import (
    ROLE_ADMINISTRADOR,
    ROLE_CLIENTE,
    ROLE_GERENTE,
    Base,
    Cliente,
    Rol,
    Sierra,
    Sucursal,
    TipoAfilado,
    TipoSierra,
    Usuario,
    usuario_sucursal,
)
from sigo.models.catalogo import ESTADO_EN_USO, EstadoSierra
from sigo.rbac.catalog_seed import seed
from sigo.store.gateway import StoreGateway

PASSWORD = "secreto123"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh database per test, schema created and catalogs seeded."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sigo.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed(session)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return StoreGateway(db_session)


@pytest.fixture
def identity(session_factory):
    return LocalIdentityProvider(session_factory)


@pytest_asyncio.fixture
async def client(session_factory, identity):
    """HTTP client bound to the app, with database and identity overrides."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Seed helpers ─────────────────────────────────────────────────────

async def role_id(store: StoreGateway, nombre: str) -> int:
    rol = await store.select_one(Rol, Rol.nombre == nombre)
    return rol["id"]


async def make_user(
    store: StoreGateway,
    identity: LocalIdentityProvider,
    email: str,
    rol: str,
    sucursal_ids: tuple[int, ...] = (),
    nombre: str = "Test",
) -> dict:
    """Create identity + usuarios row (+ grants) directly, bypassing the API."""
    subject_id = await identity.create_user(email, PASSWORD)
    usuario = await store.insert(
        Usuario,
        {
            "id": subject_id,
            "nombre": nombre,
            "apellido": "Usuario",
            "email": email,
            "rol_id": await role_id(store, rol),
        },
    )
    await store.insert_many(
        usuario_sucursal,
        [{"usuario_id": subject_id, "sucursal_id": s} for s in sucursal_ids],
    )
    return usuario


async def login_headers(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, f"Login failed: {response.json()}"
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


# ── Catalog & domain fixtures ────────────────────────────────────────

@pytest_asyncio.fixture
async def catalogos(store):
    """One saw type and one sharpening type."""
    tipo_sierra = await store.insert(TipoSierra, {"nombre": "Cinta", "descripcion": "Sierra de cinta"})
    tipo_afilado = await store.insert(TipoAfilado, {"nombre": "Completo"})
    en_uso = await store.select_one(EstadoSierra, EstadoSierra.nombre == ESTADO_EN_USO)
    return {
        "tipo_sierra_id": tipo_sierra["id"],
        "tipo_afilado_id": tipo_afilado["id"],
        "en_uso_id": en_uso["id"],
    }


@pytest_asyncio.fixture
async def world(store, catalogos):
    """
    Two clients:
        A (Aserradero Sur) -> B1, B2 ; saw X1 in B1
        C (Maderas Norte)  -> D1     ; saw Y1 in D1
    """
    cliente_a = await store.insert(
        Cliente,
        {"razon_social": "Aserradero Sur", "rut": "76.111.111-1", "email": "sur@example.com"},
    )
    cliente_c = await store.insert(
        Cliente,
        {"razon_social": "Maderas Norte", "rut": "76.222.222-2", "email": "norte@example.com"},
    )
    b1 = await store.insert(Sucursal, {"nombre": "B1", "cliente_id": cliente_a["id"]})
    b2 = await store.insert(Sucursal, {"nombre": "B2", "cliente_id": cliente_a["id"]})
    d1 = await store.insert(Sucursal, {"nombre": "D1", "cliente_id": cliente_c["id"]})
    x1 = await store.insert(
        Sierra,
        {
            "codigo_barra": "X1",
            "sucursal_id": b1["id"],
            "tipo_sierra_id": catalogos["tipo_sierra_id"],
            "estado_id": catalogos["en_uso_id"],
        },
    )
    y1 = await store.insert(
        Sierra,
        {
            "codigo_barra": "Y1",
            "sucursal_id": d1["id"],
            "tipo_sierra_id": catalogos["tipo_sierra_id"],
            "estado_id": catalogos["en_uso_id"],
        },
    )
    return {
        **catalogos,
        "cliente_a": cliente_a["id"],
        "cliente_c": cliente_c["id"],
        "b1": b1["id"],
        "b2": b2["id"],
        "d1": d1["id"],
        "x1": x1["id"],
        "y1": y1["id"],
    }


@pytest_asyncio.fixture
async def gerente(store, identity):
    return await make_user(store, identity, "gerente@example.com", ROLE_GERENTE, nombre="Gerardo")


@pytest_asyncio.fixture
async def gerente_headers(client, gerente):
    return await login_headers(client, "gerente@example.com")


@pytest_asyncio.fixture
async def admin_headers(client, store, identity):
    await make_user(store, identity, "admin@example.com", ROLE_ADMINISTRADOR)
    return await login_headers(client, "admin@example.com")


@pytest_asyncio.fixture
async def cliente_user(store, identity, world):
    """Cliente-role user granted branch B1 only."""
    return await make_user(
        store, identity, "cliente@example.com", ROLE_CLIENTE, sucursal_ids=(world["b1"],)
    )


@pytest_asyncio.fixture
async def cliente_headers(client, cliente_user):
    return await login_headers(client, "cliente@example.com")


@pytest_asyncio.fixture
async def sin_grants_headers(client, store, identity, world):
    """Cliente-role user with no branch grants at all."""
    await make_user(store, identity, "vacio@example.com", ROLE_CLIENTE)
    return await login_headers(client, "vacio@example.com")
