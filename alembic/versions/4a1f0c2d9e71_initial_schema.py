"""initial schema

Revision ID: 4a1f0c2d9e71
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a1f0c2d9e71"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create catalogs, clients/branches, users, saws, sharpenings, audit log and identities."""
    # ── Catalogs ─────────────────────────────────────────────────────
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=64), nullable=False),
        sa.Column("descripcion", sa.String(length=256), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("nombre"),
    )
    op.create_table(
        "tipos_sierra",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=128), nullable=False),
        sa.Column("descripcion", sa.String(length=512), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "estados_sierra",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=64), nullable=False),
        sa.Column("descripcion", sa.String(length=256), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("nombre"),
    )
    op.create_table(
        "tipos_afilado",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=128), nullable=False),
        sa.Column("descripcion", sa.String(length=512), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Clients & branches ───────────────────────────────────────────
    op.create_table(
        "clientes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("razon_social", sa.String(length=256), nullable=False),
        sa.Column("rut", sa.String(length=32), nullable=False),
        sa.Column("direccion", sa.String(length=512), nullable=True),
        sa.Column("telefono", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=256), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clientes_rut", "clientes", ["rut"])
    op.create_table(
        "sucursales",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=256), nullable=False),
        sa.Column("direccion", sa.String(length=512), nullable=True),
        sa.Column("telefono", sa.String(length=32), nullable=True),
        sa.Column("cliente_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["cliente_id"], ["clientes.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sucursales_cliente_id", "sucursales", ["cliente_id"])

    # ── Users & grants ───────────────────────────────────────────────
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("nombre", sa.String(length=128), nullable=False),
        sa.Column("apellido", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("rol_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["rol_id"], ["roles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"], unique=True)
    op.create_table(
        "usuario_sucursal",
        sa.Column("usuario_id", sa.Uuid(), nullable=False),
        sa.Column("sucursal_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sucursal_id"], ["sucursales.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("usuario_id", "sucursal_id"),
    )

    # ── Saws & sharpenings ───────────────────────────────────────────
    op.create_table(
        "sierras",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("codigo_barra", sa.String(length=128), nullable=False),
        sa.Column("sucursal_id", sa.Integer(), nullable=False),
        sa.Column("tipo_sierra_id", sa.Integer(), nullable=False),
        sa.Column("estado_id", sa.Integer(), nullable=False),
        sa.Column("fecha_registro", sa.Date(), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sucursal_id"], ["sucursales.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["tipo_sierra_id"], ["tipos_sierra.id"]),
        sa.ForeignKeyConstraint(["estado_id"], ["estados_sierra.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sierras_codigo_barra", "sierras", ["codigo_barra"])
    op.create_index("ix_sierras_sucursal_id", "sierras", ["sucursal_id"])
    op.create_table(
        "afilados",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sierra_id", sa.Integer(), nullable=False),
        sa.Column("tipo_afilado_id", sa.Integer(), nullable=False),
        sa.Column("usuario_id", sa.Uuid(), nullable=True),
        sa.Column("fecha_afilado", sa.DateTime(timezone=True), nullable=False),
        sa.Column("fecha_salida", sa.DateTime(timezone=True), nullable=True),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column(
            "ultimo_afilado",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sierra_id"], ["sierras.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tipo_afilado_id"], ["tipos_afilado.id"]),
        sa.ForeignKeyConstraint(["usuario_id"], ["usuarios.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_afilados_sierra_id", "afilados", ["sierra_id"])
    op.create_index("ix_afilados_pendientes", "afilados", ["fecha_salida"])

    # ── Audit log & identities ───────────────────────────────────────
    op.create_table(
        "bitacora",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("usuario_id", sa.Uuid(), nullable=True),
        sa.Column("accion", sa.String(length=128), nullable=False),
        sa.Column("tabla", sa.String(length=64), nullable=False),
        sa.Column("descripcion", sa.String(length=512), nullable=True),
        sa.Column("detalles", sa.Text(), nullable=True),
        sa.Column("fecha", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "auth_identities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("password_hash", sa.String(length=512), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_auth_identities_email", "auth_identities", ["email"], unique=True)


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_index("ix_auth_identities_email", table_name="auth_identities")
    op.drop_table("auth_identities")
    op.drop_table("bitacora")
    op.drop_index("ix_afilados_pendientes", table_name="afilados")
    op.drop_index("ix_afilados_sierra_id", table_name="afilados")
    op.drop_table("afilados")
    op.drop_index("ix_sierras_sucursal_id", table_name="sierras")
    op.drop_index("ix_sierras_codigo_barra", table_name="sierras")
    op.drop_table("sierras")
    op.drop_table("usuario_sucursal")
    op.drop_index("ix_usuarios_email", table_name="usuarios")
    op.drop_table("usuarios")
    op.drop_index("ix_sucursales_cliente_id", table_name="sucursales")
    op.drop_table("sucursales")
    op.drop_index("ix_clientes_rut", table_name="clientes")
    op.drop_table("clientes")
    op.drop_table("tipos_afilado")
    op.drop_table("estados_sierra")
    op.drop_table("tipos_sierra")
    op.drop_table("roles")
