"""
Tests for data-scope resolution and filtering.
"""

import uuid

import pytest

from conftest import make_user
from sigo.core.exceptions import AuthError, ForbiddenError
from sigo.models import ROLE_CLIENTE, ROLE_GERENTE, Sucursal
from sigo.rbac.context_resolver import (
    DataScope,
    ScopeTarget,
    apply_scope,
    can_access,
    ensure_access,
    load_subject,
    narrow_ids,
    resolve_data_scope,
)


class TestResolveDataScope:
    """Role and grants decide the scope."""

    async def test_gerente_is_unrestricted(self, store, identity, world):
        usuario = await make_user(store, identity, "g@example.com", ROLE_GERENTE)
        user = await load_subject(usuario["id"], store)
        scope = await resolve_data_scope(user, store)
        assert scope.restricted is False
        assert scope.sucursal_ids == []

    async def test_cliente_gets_grants_and_derived_clients(self, store, identity, world):
        usuario = await make_user(
            store,
            identity,
            "c@example.com",
            ROLE_CLIENTE,
            sucursal_ids=(world["b1"], world["b2"], world["d1"]),
        )
        user = await load_subject(usuario["id"], store)
        scope = await resolve_data_scope(user, store)
        assert scope.restricted is True
        assert sorted(scope.sucursal_ids) == sorted([world["b1"], world["b2"], world["d1"]])
        # B1 and B2 share client A: de-duplicated
        assert sorted(scope.cliente_ids) == sorted([world["cliente_a"], world["cliente_c"]])

    async def test_cliente_without_grants_has_empty_scope(self, store, identity, world):
        usuario = await make_user(store, identity, "nada@example.com", ROLE_CLIENTE)
        user = await load_subject(usuario["id"], store)
        scope = await resolve_data_scope(user, store)
        assert scope.restricted is True
        assert scope.sucursal_ids == []
        assert scope.cliente_ids == []

    async def test_unknown_subject_is_auth_error(self, store):
        with pytest.raises(AuthError) as exc:
            await load_subject(uuid.uuid4(), store)
        assert exc.value.status_code == 401


class TestApplyScope:
    """Listing filters narrow silently; single-resource checks deny."""

    def test_unrestricted_adds_no_predicates(self):
        scope = DataScope(user_id=uuid.uuid4(), role=ROLE_GERENTE)
        assert apply_scope(scope, Sucursal.id) == []

    def test_empty_scope_short_circuits(self):
        scope = DataScope(user_id=uuid.uuid4(), role=ROLE_CLIENTE, restricted=True)
        assert apply_scope(scope, Sucursal.id) is None

    def test_restricted_scope_adds_membership_predicate(self):
        scope = DataScope(
            user_id=uuid.uuid4(), role=ROLE_CLIENTE, restricted=True, sucursal_ids=[3, 5]
        )
        clauses = apply_scope(scope, Sucursal.id)
        assert len(clauses) == 1
        assert "IN" in str(clauses[0]).upper()

    def test_client_target_uses_client_ids(self):
        scope = DataScope(
            user_id=uuid.uuid4(),
            role=ROLE_CLIENTE,
            restricted=True,
            sucursal_ids=[3],
            cliente_ids=[],
        )
        assert apply_scope(scope, Sucursal.cliente_id, ScopeTarget.CLIENTE) is None

    def test_narrow_ids_preserves_order(self):
        scope = DataScope(
            user_id=uuid.uuid4(), role=ROLE_CLIENTE, restricted=True, sucursal_ids=[9, 2]
        )
        assert narrow_ids(scope, [1, 2, 3, 9]) == [2, 9]

    def test_ensure_access_denies_outside_scope(self):
        scope = DataScope(
            user_id=uuid.uuid4(), role=ROLE_CLIENTE, restricted=True, sucursal_ids=[1]
        )
        assert can_access(scope, 1)
        with pytest.raises(ForbiddenError) as exc:
            ensure_access(scope, 7, message="No tiene permisos para ver esta sucursal")
        assert exc.value.status_code == 403
        assert exc.value.message == "No tiene permisos para ver esta sucursal"

    def test_ensure_access_denies_missing_target_for_restricted(self):
        scope = DataScope(
            user_id=uuid.uuid4(), role=ROLE_CLIENTE, restricted=True, sucursal_ids=[1]
        )
        with pytest.raises(ForbiddenError):
            ensure_access(scope, None)

    def test_ensure_access_passes_unrestricted(self):
        scope = DataScope(user_id=uuid.uuid4(), role=ROLE_GERENTE)
        ensure_access(scope, 12345)
