"""
Identity-provider record.

Owned by `sigo.identity.provider.LocalIdentityProvider`, never touched
by domain services.  The id doubles as the `usuarios.id` of the local
twin, but there is deliberately no foreign key between the two: they
are written by different parties and can drift when a compensating
delete fails.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from sigo.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AuthIdentity(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "auth_identities"

    email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)

    def __repr__(self) -> str:
        return f"<AuthIdentity {self.email}>"
