"""
One-time bootstrap script: creates the first Gerente user.

Usage:
    python -m sigo.scripts.create_admin

You only need this ONCE.  After the first manager exists, everybody
else is created through POST /api/usuarios or /api/auth/register.
"""

import asyncio
import getpass

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sigo.core.config import settings
from sigo.core.exceptions import AppError
from sigo.identity.provider import LocalIdentityProvider
from sigo.models.usuario import ROLE_GERENTE, Rol, Usuario
from sigo.rbac.catalog_seed import seed
from sigo.services import usuario_service
from sigo.store.gateway import StoreGateway


async def create_admin() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    identity = LocalIdentityProvider(session_factory)

    async with session_factory() as session:
        # ── Collect input ────────────────────────────────────────────
        print("\n🔧  SIGO Afilado: First Manager Setup\n")
        email = input("  Email:     ").strip()
        nombre = input("  Nombre:    ").strip()
        apellido = input("  Apellido:  ").strip()
        password = getpass.getpass("  Password:  ")
        confirm = getpass.getpass("  Confirm:   ")

        if password != confirm:
            print("\n❌  Passwords do not match.")
            await engine.dispose()
            return

        if not email or not nombre or not password:
            print("\n❌  Email, nombre and password are required.")
            await engine.dispose()
            return

        store = StoreGateway(session)

        # ── Check for existing user ──────────────────────────────────
        if await store.exists(Usuario, Usuario.email == email):
            print(f"\n❌  User with email '{email}' already exists.")
            await engine.dispose()
            return

        # ── Roles must exist; seeding is idempotent ──────────────────
        await seed(session)
        rol = await store.select_one(Rol, Rol.nombre == ROLE_GERENTE)

        # ── Create identity + local row ──────────────────────────────
        try:
            usuario = await usuario_service.create_usuario(
                {
                    "nombre": nombre,
                    "apellido": apellido or None,
                    "email": email,
                    "password": password,
                    "rol_id": rol["id"],
                },
                store,
                identity,
            )
        except AppError as exc:
            print(f"\n❌  {exc.message}: {exc.error}")
            await engine.dispose()
            return

        print("\n✅  Manager user created successfully!")
        print(f"    ID:    {usuario['id']}")
        print(f"    Email: {usuario['email']}")
        print(f"    Rol:   {ROLE_GERENTE}")
        print("\n   You can now log in via POST /api/auth/login\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
