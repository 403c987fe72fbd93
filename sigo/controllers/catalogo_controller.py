"""Catalog controller: read-only lists plus saw-type maintenance."""

from fastapi import APIRouter, Depends

from sigo.core.responses import ok
from sigo.rbac.dependencies import get_current_user, require_privileged
from sigo.schemas import TipoSierraIn
from sigo.services import catalogo_service
from sigo.store.gateway import StoreGateway, get_store

router = APIRouter(
    prefix="/api/catalogos",
    tags=["Catalogos"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/tipos-sierra")
async def list_tipos_sierra(store: StoreGateway = Depends(get_store)):
    return ok(await catalogo_service.list_tipos_sierra(store))


@router.get("/tipos-afilado")
async def list_tipos_afilado(store: StoreGateway = Depends(get_store)):
    return ok(await catalogo_service.list_tipos_afilado(store))


@router.get("/estados-sierra")
async def list_estados_sierra(store: StoreGateway = Depends(get_store)):
    return ok(await catalogo_service.list_estados_sierra(store))


@router.get("/roles", dependencies=[Depends(require_privileged)])
async def list_roles(store: StoreGateway = Depends(get_store)):
    return ok(await catalogo_service.list_roles(store))


@router.post("/tipos-sierra", status_code=201, dependencies=[Depends(require_privileged)])
async def create_tipo_sierra(body: TipoSierraIn, store: StoreGateway = Depends(get_store)):
    return ok(
        await catalogo_service.create_tipo_sierra(
            {"nombre": body.nombre, "descripcion": body.descripcion}, store
        )
    )


@router.put("/tipos-sierra/{tipo_id}", dependencies=[Depends(require_privileged)])
async def update_tipo_sierra(
    tipo_id: int,
    body: TipoSierraIn,
    store: StoreGateway = Depends(get_store),
):
    return ok(await catalogo_service.update_tipo_sierra(tipo_id, body.model_dump(), store))
