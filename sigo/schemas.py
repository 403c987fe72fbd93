"""
Pydantic schemas for request bodies.

Kept in a single file, like the routes they serve.  Responses are the
gateway's plain row dicts wrapped in the `{success, data}` envelope, so
only inputs are modelled here.
"""

from pydantic import BaseModel, EmailStr, Field


# ── Auth ─────────────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    nombre: str = Field(min_length=1)
    apellido: str | None = None
    email: EmailStr
    password: str = Field(min_length=6)
    rol_id: int


# ── Cliente ──────────────────────────────────────────────────────────
class ClienteIn(BaseModel):
    razon_social: str = Field(min_length=1)
    rut: str = Field(min_length=1)
    direccion: str = Field(min_length=1)
    telefono: str = Field(min_length=1)
    email: EmailStr


# ── Sucursal ─────────────────────────────────────────────────────────
class SucursalIn(BaseModel):
    nombre: str = Field(min_length=1)
    direccion: str = Field(min_length=1)
    telefono: str = Field(min_length=1)
    cliente_id: int


# ── Sierra ───────────────────────────────────────────────────────────
class CreateSierraRequest(BaseModel):
    codigo: str = Field(min_length=1)
    sucursal_id: int
    tipo_sierra_id: int


class UpdateSierraRequest(BaseModel):
    codigo: str | None = Field(default=None, min_length=1)
    sucursal_id: int | None = None
    tipo_sierra_id: int | None = None
    estado_id: int | None = None
    activo: bool | None = None


# ── Afilado ──────────────────────────────────────────────────────────
class CreateAfiladoRequest(BaseModel):
    sierra_id: int
    tipo_afilado_id: int
    observaciones: str | None = None
    ultimo_afilado: bool = False


class SalidaMasivaRequest(BaseModel):
    afilado_ids: list[int] = Field(min_length=1)


class UltimoAfiladoMasivoRequest(BaseModel):
    afiladoIds: list[int] = Field(min_length=1)


# ── Usuario ──────────────────────────────────────────────────────────
class CreateUsuarioRequest(BaseModel):
    nombre: str = Field(min_length=1)
    apellido: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    rol_id: int


class UpdateUsuarioRequest(BaseModel):
    nombre: str = Field(min_length=1)
    apellido: str = Field(min_length=1)
    email: EmailStr | None = None
    rol_id: int


class AsignarSucursalesRequest(BaseModel):
    sucursales: list[int]


class CambiarPasswordRequest(BaseModel):
    current_password: str | None = None
    password: str = Field(min_length=6)
    password_confirmation: str = Field(min_length=1)


# ── Catálogos ────────────────────────────────────────────────────────
class TipoSierraIn(BaseModel):
    nombre: str = Field(min_length=1)
    descripcion: str | None = None
    activo: bool | None = None
