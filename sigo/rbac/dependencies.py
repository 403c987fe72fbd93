"""
RBAC dependencies: authentication & role enforcement.

`get_current_user` verifies the bearer token with the identity
provider and loads the local user + role.  `get_scope` adds the data
scope.  `require_role` is a *dependency factory*:

    @router.post("/", dependencies=[Depends(require_role(ROLE_GERENTE, ROLE_ADMINISTRADOR))])
    async def create_cliente(...): ...

Or inject the user object:
    user: CurrentUser = Depends(require_role(ROLE_GERENTE))
"""

import logging

from fastapi import Depends

from sigo.core.exceptions import AuthError, ForbiddenError
from sigo.core.security import oauth2_scheme
from sigo.identity.provider import IdentityProvider, get_identity_provider
from sigo.models.usuario import ROLE_ADMINISTRADOR, ROLE_GERENTE
from sigo.rbac.context_resolver import CurrentUser, DataScope, load_subject, resolve_data_scope
from sigo.store.gateway import StoreGateway, get_store

logger = logging.getLogger("rbac")

PRIVILEGED_ROLES = (ROLE_GERENTE, ROLE_ADMINISTRADOR)


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    identity: IdentityProvider = Depends(get_identity_provider),
    store: StoreGateway = Depends(get_store),
) -> CurrentUser:
    if not token:
        raise AuthError("Acceso denegado. Token no proporcionado.")
    subject_id = await identity.verify(token)
    return await load_subject(subject_id, store)


async def get_scope(
    user: CurrentUser = Depends(get_current_user),
    store: StoreGateway = Depends(get_store),
) -> DataScope:
    return await resolve_data_scope(user, store)


class require_role:
    """
    Dependency factory.

    Can be used as:
        Depends(require_role("Gerente"))
        Depends(require_role("Gerente", "Administrador"))
    """

    def __init__(self, *roles: str):
        self.roles = set(roles)

    async def __call__(self, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.rol not in self.roles:
            logger.warning(
                "Role denied for user %s, required one of %s, has %s",
                user.id,
                sorted(self.roles),
                user.rol,
            )
            raise ForbiddenError(
                f"Acceso denegado. Se requiere rol(es): {', '.join(sorted(self.roles))}"
            )
        return user


require_privileged = require_role(*PRIVILEGED_ROLES)
