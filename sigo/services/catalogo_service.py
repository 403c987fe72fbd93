"""Reference catalogs: saw types, sharpening types, saw states and roles."""

from sigo.core.exceptions import ConflictError, NotFoundError, StoreError
from sigo.models.catalogo import EstadoSierra, TipoAfilado, TipoSierra
from sigo.models.usuario import Rol
from sigo.store.gateway import Row, StoreGateway


async def list_tipos_sierra(store: StoreGateway) -> list[Row]:
    return await store.select(TipoSierra, order_by="nombre")


async def list_tipos_afilado(store: StoreGateway) -> list[Row]:
    return await store.select(TipoAfilado, order_by="nombre")


async def list_estados_sierra(store: StoreGateway) -> list[Row]:
    return await store.select(EstadoSierra, order_by="nombre")


async def list_roles(store: StoreGateway) -> list[Row]:
    return await store.select(Rol, order_by="nombre")


async def create_tipo_sierra(data: dict, store: StoreGateway) -> Row:
    try:
        return await store.insert(TipoSierra, {**data, "activo": True})
    except StoreError as exc:
        raise ConflictError("Error al crear tipo de sierra", error=exc.error)


async def update_tipo_sierra(tipo_id: int, data: dict, store: StoreGateway) -> Row:
    """Full replacement; an omitted `activo` re-activates the type."""
    if not await store.exists(TipoSierra, TipoSierra.id == tipo_id):
        raise NotFoundError("Tipo de sierra no encontrado")
    values = {
        "nombre": data["nombre"],
        "descripcion": data.get("descripcion"),
        "activo": data["activo"] if data.get("activo") is not None else True,
    }
    try:
        rows = await store.update(TipoSierra, values, TipoSierra.id == tipo_id)
    except StoreError as exc:
        raise ConflictError("Error al actualizar tipo de sierra", error=exc.error)
    return rows[0]
