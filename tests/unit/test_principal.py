"""Testes para domain/principal.py."""

from __future__ import annotations

from types import SimpleNamespace

from sqlsession.domain.principal import (
    PRINCIPAL_NAME_INDEX_NAME,
    SECURITY_CONTEXT,
    resolve_principal_name,
)
from sqlsession.domain.session import MapSession


class TestResolvePrincipalName:
    """Testes para resolve_principal_name."""

    def test_explicit_attribute_wins(self) -> None:
        session = MapSession(
            attributes={
                PRINCIPAL_NAME_INDEX_NAME: "alice",
                SECURITY_CONTEXT: {"authentication": {"name": "bob"}},
            }
        )
        assert resolve_principal_name(session) == "alice"

    def test_security_context_mapping(self) -> None:
        session = MapSession(attributes={SECURITY_CONTEXT: {"authentication": {"name": "bob"}}})
        assert resolve_principal_name(session) == "bob"

    def test_security_context_object(self) -> None:
        context = SimpleNamespace(authentication=SimpleNamespace(name="carol"))
        session = MapSession(attributes={SECURITY_CONTEXT: context})
        assert resolve_principal_name(session) == "carol"

    def test_without_authentication(self) -> None:
        assert resolve_principal_name(MapSession()) is None
        session = MapSession(attributes={SECURITY_CONTEXT: {"authentication": None}})
        assert resolve_principal_name(session) is None
