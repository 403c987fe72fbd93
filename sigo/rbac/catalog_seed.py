"""
Reference-catalog seeding script.

Run this once against a live database to populate the roles and saw
states the authorization and lifecycle logic depend on.  It is
IDEMPOTENT and safe to re-run.

Usage:
    python -m sigo.rbac.catalog_seed
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sigo.core.config import settings
from sigo.models.catalogo import ESTADO_EN_USO, ESTADO_OBSOLETO, EstadoSierra
from sigo.models.usuario import ROLE_ADMINISTRADOR, ROLE_CLIENTE, ROLE_GERENTE, Rol

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
# 1.  CANONICAL ROLES
# ────────────────────────────────────────────────────────────────────
ROLES: list[dict[str, str]] = [
    {"nombre": ROLE_CLIENTE, "descripcion": "Acceso de lectura a las sucursales asignadas"},
    {"nombre": ROLE_GERENTE, "descripcion": "Gestión completa del sistema"},
    {"nombre": ROLE_ADMINISTRADOR, "descripcion": "Administración de clientes, sucursales y afilados"},
]

# ────────────────────────────────────────────────────────────────────
# 2.  SAW STATES
# ────────────────────────────────────────────────────────────────────
ESTADOS_SIERRA: list[dict[str, str]] = [
    {"nombre": ESTADO_EN_USO, "descripcion": "Sierra operativa"},
    {"nombre": ESTADO_OBSOLETO, "descripcion": "Sierra retirada tras su último afilado"},
]


# ────────────────────────────────────────────────────────────────────
# 3.  SEED FUNCTION (idempotent)
# ────────────────────────────────────────────────────────────────────
async def seed(session: AsyncSession) -> None:
    """Create roles & saw states if they don't already exist."""

    existing_roles = set((await session.execute(select(Rol.nombre))).scalars().all())
    for data in ROLES:
        if data["nombre"] not in existing_roles:
            session.add(Rol(**data))

    existing_estados = set((await session.execute(select(EstadoSierra.nombre))).scalars().all())
    for data in ESTADOS_SIERRA:
        if data["nombre"] not in existing_estados:
            session.add(EstadoSierra(**data))

    await session.commit()
    logger.info("Reference catalogs seeded.")


# ────────────────────────────────────────────────────────────────────
# 4.  CLI entrypoint:  python -m sigo.rbac.catalog_seed
# ────────────────────────────────────────────────────────────────────
async def main() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as session:
        await seed(session)
    await engine.dispose()
    print("✔  Roles and saw states seeded successfully.")


if __name__ == "__main__":
    asyncio.run(main())
