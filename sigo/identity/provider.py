"""
Identity provider: credential verification & identity lifecycle.

The rest of the application only sees the `IdentityProvider` interface:
verify a bearer token and get back a stable subject id, sign in with
e-mail + password, and create / update / delete identity records.

`LocalIdentityProvider` keeps identities in the `auth_identities` table
and issues JWTs signed with `SECRET_KEY`.  It runs on its OWN sessions
(not the request session), so its writes commit independently, the
same way a remote provider would behave.  Callers that pair an identity
write with a local write must compensate on failure themselves.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sigo.core.database import async_session_factory
from sigo.core.exceptions import AuthError, IdentityError
from sigo.core.security import create_access_token, decode_access_token, hash_password, verify_password
from sigo.models.identity import AuthIdentity

logger = logging.getLogger(__name__)


@dataclass
class IdentitySession:
    subject_id: uuid.UUID
    email: str
    access_token: str


class IdentityProvider(ABC):
    """Interface; see `LocalIdentityProvider` for the default implementation."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> IdentitySession:
        raise NotImplementedError

    @abstractmethod
    async def verify(self, token: str) -> uuid.UUID:
        raise NotImplementedError

    @abstractmethod
    async def create_user(self, email: str, password: str) -> uuid.UUID:
        raise NotImplementedError

    @abstractmethod
    async def update_email(self, subject_id: uuid.UUID, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_password(self, subject_id: uuid.UUID, password: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def check_password(self, subject_id: uuid.UUID, password: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete_user(self, subject_id: uuid.UUID) -> None:
        raise NotImplementedError


class LocalIdentityProvider(IdentityProvider):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _get(self, session: AsyncSession, **criteria) -> AuthIdentity | None:
        stmt = select(AuthIdentity).filter_by(**criteria)
        return (await session.execute(stmt)).scalar_one_or_none()

    # ── Authentication ───────────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        """Raises AuthError on unknown e-mail or wrong password."""
        async with self._session_factory() as session:
            identity = await self._get(session, email=email)
        if identity is None or not verify_password(password, identity.password_hash):
            raise AuthError("Credenciales inválidas")
        token = create_access_token({"sub": str(identity.id), "email": identity.email})
        return IdentitySession(subject_id=identity.id, email=identity.email, access_token=token)

    async def verify(self, token: str) -> uuid.UUID:
        """Return the subject id of a valid token whose identity still exists."""
        payload = decode_access_token(token)
        try:
            subject_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise AuthError("Token inválido o expirado")
        async with self._session_factory() as session:
            identity = await self._get(session, id=subject_id)
        if identity is None:
            raise AuthError("Token inválido o expirado")
        return subject_id

    async def check_password(self, subject_id: uuid.UUID, password: str) -> bool:
        async with self._session_factory() as session:
            identity = await self._get(session, id=subject_id)
        return identity is not None and verify_password(password, identity.password_hash)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def create_user(self, email: str, password: str) -> uuid.UUID:
        subject_id = uuid.uuid4()
        async with self._session_factory() as session:
            session.add(
                AuthIdentity(id=subject_id, email=email, password_hash=hash_password(password))
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise IdentityError(
                    "Error al crear el usuario",
                    error="Ya existe un usuario registrado con ese email",
                )
            except SQLAlchemyError as exc:
                await session.rollback()
                raise IdentityError("Error al crear el usuario", error=str(exc))
        logger.info("Identity %s created for %s", subject_id, email)
        return subject_id

    async def update_email(self, subject_id: uuid.UUID, email: str) -> None:
        await self._update(subject_id, email=email)

    async def update_password(self, subject_id: uuid.UUID, password: str) -> None:
        await self._update(subject_id, password_hash=hash_password(password))

    async def delete_user(self, subject_id: uuid.UUID) -> None:
        async with self._session_factory() as session:
            try:
                await session.execute(delete(AuthIdentity).where(AuthIdentity.id == subject_id))
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise IdentityError("Error al eliminar el usuario de autenticación", error=str(exc))
        logger.info("Identity %s deleted", subject_id)

    async def _update(self, subject_id: uuid.UUID, **values) -> None:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(AuthIdentity).where(AuthIdentity.id == subject_id).values(**values)
                )
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise IdentityError("Error al actualizar el usuario de autenticación", error=str(exc))
        if result.rowcount == 0:
            raise IdentityError("Usuario de autenticación no encontrado")


_provider = LocalIdentityProvider(async_session_factory)


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the process-wide identity provider."""
    return _provider
