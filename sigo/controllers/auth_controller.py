"""
Auth controller: login, registration & profile.

Login is PUBLIC.  Registration requires a Gerente or Administrador;
the profile requires any authenticated user.
"""

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.identity.provider import IdentityProvider, get_identity_provider
from sigo.rbac.context_resolver import CurrentUser
from sigo.rbac.dependencies import get_current_user, require_privileged
from sigo.schemas import LoginRequest, RegisterRequest
from sigo.services import auth_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Authenticate with email + password → user summary, granted branch ids and token."""
    return ok(await auth_service.login(body.email, body.password, store, identity))


@router.post("/register", status_code=201, dependencies=[Depends(require_privileged)])
async def register(
    body: RegisterRequest,
    store: StoreGateway = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    return ok(await auth_service.register(body.model_dump(), store, identity))


@router.get("/profile")
async def profile(
    user: CurrentUser = Depends(get_current_user),
    store: StoreGateway = Depends(get_store),
):
    return ok(await auth_service.profile(user, store))
