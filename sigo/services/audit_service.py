"""Best-effort audit trail in `bitacora`."""

import json
import logging
import uuid
from typing import Any

from sigo.core.exceptions import StoreError
from sigo.models.bitacora import Bitacora
from sigo.store.gateway import StoreGateway

logger = logging.getLogger(__name__)


async def record(
    store: StoreGateway,
    usuario_id: uuid.UUID | None,
    accion: str,
    tabla: str,
    descripcion: str,
    detalles: dict[str, Any] | None = None,
) -> None:
    """Append one audit row.  A failed write is logged and swallowed."""
    try:
        await store.insert(
            Bitacora,
            {
                "usuario_id": usuario_id,
                "accion": accion,
                "tabla": tabla,
                "descripcion": descripcion,
                "detalles": json.dumps(detalles, default=str) if detalles is not None else None,
            },
        )
    except StoreError as exc:
        logger.warning("Audit entry %s for user %s not written: %s", accion, usuario_id, exc.error)
