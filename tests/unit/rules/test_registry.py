"""Unit tests for PrivilegeRegistry and Scope."""

from __future__ import annotations

import threading
import warnings

import pytest
from structlog.testing import capture_logs

from authzkit.kernel.errors import DuplicateRuleWarning, InvalidPrivilegeError, ScopeMisuseError
from authzkit.rules import Privilege, PrivilegeRegistry, Scope, priv


# ---------------------------------------------------------------------------
# Global layer
# ---------------------------------------------------------------------------


class TestGlobalLayer:
    def test_add_global(self, authz_registry: PrivilegeRegistry) -> None:
        assert authz_registry.add_global(priv("Book", "list")) is True
        assert authz_registry.view() == (priv("Book", "list"),)
        assert len(authz_registry) == 1

    def test_insertion_order_preserved(self, authz_registry: PrivilegeRegistry) -> None:
        rules = [priv("Book", "a"), priv("Book", "b"), priv("Book", "c")]
        for r in rules:
            authz_registry.add_global(r)
        assert list(authz_registry.view()) == rules

    def test_duplicate_skipped_with_warning(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global(priv("Book", "list"))
        with pytest.warns(DuplicateRuleWarning, match="Book => list"):
            assert authz_registry.add_global(priv("Book", "list", {})) is False
        assert len(authz_registry.view()) == 1

    def test_duplicate_is_logged(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global(priv("Book", "list"))
        with capture_logs() as logs, warnings.catch_warnings():
            warnings.simplefilter("ignore", DuplicateRuleWarning)
            authz_registry.add_global(priv("Book", "list"))
        dupes = [e for e in logs if e["event"] == "privilege.duplicate_skipped"]
        assert len(dupes) == 1
        assert dupes[0]["log_level"] == "warning"
        assert dupes[0]["rule"] == "Book => list()"

    def test_rejects_non_privilege(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(InvalidPrivilegeError):
            authz_registry.add_global(("Book", "list"))  # type: ignore[arg-type]

    def test_role_group_binds_role(self, authz_registry: PrivilegeRegistry) -> None:
        count = authz_registry.add_global_group("admin", [priv("User", "edit"), ("Book", "remove")])
        assert count == 2
        assert {p.role for p in authz_registry.view()} == {"admin"}

    def test_role_group_does_not_mutate_input(self, authz_registry: PrivilegeRegistry) -> None:
        p = priv("User", "edit")
        authz_registry.add_global_group("admin", [p])
        assert p.role is None

    def test_same_rule_for_two_roles_is_not_duplicate(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global_group("admin", [priv("User", "edit")])
        authz_registry.add_global_group("owner", [priv("User", "edit")])
        assert len(authz_registry.view()) == 2

    @pytest.mark.parametrize("role", ["", "-", "  ", None])
    def test_invalid_role_name(self, authz_registry: PrivilegeRegistry, role: object) -> None:
        with pytest.raises(InvalidPrivilegeError):
            authz_registry.add_global_group(role, [priv("User", "edit")])  # type: ignore[arg-type]

    def test_unscoped_group_keeps_roles_absent(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global_unscoped([("Book", "read"), priv("Book", "search")])
        assert all(p.role is None for p in authz_registry.view())

    def test_unscoped_group_keeps_explicit_role(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global_unscoped([Privilege("Book", "read", role="reader")])
        assert authz_registry.view()[0].role == "reader"

    def test_unscoped_batch_is_all_or_nothing(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(InvalidPrivilegeError):
            authz_registry.add_global_unscoped([("Book", "read"), ("Book", "")])
        assert authz_registry.view() == ()

    def test_concurrent_writes_are_not_lost(self, authz_registry: PrivilegeRegistry) -> None:
        def worker(n: int) -> None:
            for i in range(50):
                authz_registry.add_global(priv("Res", f"a{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(authz_registry.view()) == 400


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


class TestScopes:
    def test_begin_generates_id(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope(roles=["admin"])
        assert isinstance(scope, Scope)
        assert scope.id in authz_registry.active_scopes
        assert scope.roles == ("admin",)

    def test_view_of_fresh_scope_is_global(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global(priv("Book", "list"))
        scope = authz_registry.begin_scope("s1")
        assert authz_registry.view(scope) == authz_registry.view()

    def test_scoped_rule_visible_only_in_its_scope(self, authz_registry: PrivilegeRegistry) -> None:
        s1 = authz_registry.begin_scope("s1")
        s2 = authz_registry.begin_scope("s2")
        authz_registry.add_scoped(s1, priv("Book", "read"))
        assert priv("Book", "read") in authz_registry.view(s1)
        assert priv("Book", "read") not in authz_registry.view(s2)
        assert priv("Book", "read") not in authz_registry.view()

    def test_view_accepts_scope_id(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.begin_scope("s1")
        authz_registry.add_scoped("s1", priv("Book", "read"))
        assert authz_registry.view("s1") == (priv("Book", "read"),)

    def test_view_is_global_then_scoped(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global(priv("Book", "list"))
        scope = authz_registry.begin_scope()
        authz_registry.add_scoped(scope, priv("Book", "read"))
        assert authz_registry.view(scope) == (priv("Book", "list"), priv("Book", "read"))

    def test_scoped_dedup_against_global(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.add_global(priv("Book", "list"))
        scope = authz_registry.begin_scope()
        with pytest.warns(DuplicateRuleWarning):
            assert authz_registry.add_scoped(scope, priv("Book", "list")) is False
        assert len(authz_registry.view(scope)) == 1

    def test_scoped_dedup_within_scope(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.add_scoped(scope, priv("Book", "read"))
        with pytest.warns(DuplicateRuleWarning):
            authz_registry.add_scoped(scope, priv("Book", "read"))
        assert len(authz_registry.view(scope)) == 1

    def test_scopes_are_independent_for_dedup(self, authz_registry: PrivilegeRegistry) -> None:
        s1 = authz_registry.begin_scope()
        s2 = authz_registry.begin_scope()
        with warnings.catch_warnings():
            warnings.simplefilter("error", DuplicateRuleWarning)
            assert authz_registry.add_scoped(s1, priv("Book", "read")) is True
            assert authz_registry.add_scoped(s2, priv("Book", "read")) is True

    def test_global_not_deduplicated_against_scopes(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.add_scoped(scope, priv("Book", "read"))
        assert authz_registry.add_global(priv("Book", "read")) is True

    def test_scoped_groups(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.add_scoped_group(scope, "editors", [("Book", "edit", {"book_id": 3})])
        authz_registry.add_scoped_unscoped(scope, [("Book", "read")])
        roles = [p.role for p in authz_registry.view(scope)]
        assert roles == ["editors", None]

    def test_end_scope_discards_layer(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope("s1")
        authz_registry.add_scoped(scope, priv("Book", "read"))
        authz_registry.end_scope(scope)
        assert "s1" not in authz_registry.active_scopes
        fresh = authz_registry.begin_scope("s1")
        assert authz_registry.view(fresh) == ()

    def test_context_manager_ends_scope_on_error(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(RuntimeError):
            with authz_registry.scope("s1") as scope:
                authz_registry.add_scoped(scope, priv("Book", "read"))
                raise RuntimeError("handler failed")
        assert authz_registry.active_scopes == frozenset()

    def test_duplicate_active_scope_id(self, authz_registry: PrivilegeRegistry) -> None:
        authz_registry.begin_scope("s1")
        with pytest.raises(ScopeMisuseError):
            authz_registry.begin_scope("s1")

    def test_scope_context_is_chainable(self) -> None:
        scope = Scope("s", roles=["a"])
        assert scope.set_context("book") is scope
        assert scope.context == "book"

    def test_scope_rejects_string_roles(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(TypeError):
            authz_registry.begin_scope(roles="admin")

    def test_scoped_unscoped_batch_is_all_or_nothing(self, authz_registry: PrivilegeRegistry) -> None:
        with authz_registry.scope() as scope:
            with pytest.raises(InvalidPrivilegeError):
                authz_registry.add_scoped_unscoped(scope, [("Book", "read"), 42])
            assert authz_registry.view(scope) == ()

    def test_get_scope_by_id_returns_handle(self, authz_registry: PrivilegeRegistry) -> None:
        with authz_registry.scope("req-1", roles=["admin"], context="ctx") as scope:
            assert authz_registry.get_scope("req-1") is scope
            assert authz_registry.get_scope(scope) is scope
            assert authz_registry.get_scope("req-1").roles == ("admin",)


class TestScopeMisuse:
    def test_write_to_unknown_scope(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(ScopeMisuseError):
            authz_registry.add_scoped("nope", priv("Book", "read"))

    def test_read_unknown_scope(self, authz_registry: PrivilegeRegistry) -> None:
        with pytest.raises(ScopeMisuseError):
            authz_registry.view("nope")

    def test_write_after_end(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.end_scope(scope)
        with pytest.raises(ScopeMisuseError):
            authz_registry.add_scoped(scope, priv("Book", "read"))

    def test_read_after_end(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.end_scope(scope)
        with pytest.raises(ScopeMisuseError):
            authz_registry.view(scope)

    def test_end_twice(self, authz_registry: PrivilegeRegistry) -> None:
        scope = authz_registry.begin_scope()
        authz_registry.end_scope(scope)
        with pytest.raises(ScopeMisuseError):
            authz_registry.end_scope(scope)

    def test_get_scope_after_end(self, authz_registry: PrivilegeRegistry) -> None:
        with authz_registry.scope("req-1"):
            pass
        with pytest.raises(ScopeMisuseError):
            authz_registry.get_scope("req-1")
