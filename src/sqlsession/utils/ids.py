"""Geradores de identificadores."""

from __future__ import annotations

import uuid


def new_session_id() -> str:
    """Gera um session_id único (exposto ao cliente, pode ser regenerado)."""

    return str(uuid.uuid4())


def new_primary_key() -> str:
    """Gera a chave primária de armazenamento (estável durante a vida da sessão)."""

    return str(uuid.uuid4())
