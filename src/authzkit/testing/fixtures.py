"""Testing fixtures – isolated registries and engines per test.

Enable with ``pytest_plugins = ["authzkit.testing.fixtures"]`` in a root conftest.
"""
from __future__ import annotations

import pytest

from authzkit.engine import Authorization
from authzkit.rules import AttributeResolver, PrivilegeRegistry
from authzkit.testing.fakes import RecordingDecisionSink


@pytest.fixture
def authz_registry() -> PrivilegeRegistry:
    return PrivilegeRegistry()


@pytest.fixture
def authz_resolver() -> AttributeResolver:
    return AttributeResolver()


@pytest.fixture
def decision_sink() -> RecordingDecisionSink:
    return RecordingDecisionSink()


@pytest.fixture
def authorization(
    authz_registry: PrivilegeRegistry,
    authz_resolver: AttributeResolver,
    decision_sink: RecordingDecisionSink,
) -> Authorization:
    return Authorization(registry=authz_registry, resolver=authz_resolver, sink=decision_sink)


__all__ = ["authorization", "authz_registry", "authz_resolver", "decision_sink"]
