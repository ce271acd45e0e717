"""Enums de domínio para persistência de sessão (modos de save/flush e deltas)."""

from __future__ import annotations

from enum import StrEnum


class SaveMode(StrEnum):
    """Define quais acessos a atributos contam como alteração persistível."""

    ON_SET_ATTRIBUTE = "on_set_attribute"
    """Somente set/remove explícitos marcam o atributo como alterado."""

    ON_GET_ATTRIBUTE = "on_get_attribute"
    """Leituras também marcam o atributo (re-persiste valores lidos)."""

    ALWAYS = "always"
    """Todo atributo da sessão é regravado a cada save."""


class FlushMode(StrEnum):
    """Define quando as alterações são enviadas ao banco."""

    ON_SAVE = "on_save"
    """Alterações acumulam até o save explícito."""

    IMMEDIATE = "immediate"
    """Cada mutação na sessão persiste de forma síncrona."""


class ChangeKind(StrEnum):
    """Tipo líquido de alteração de um atributo dentro de um ciclo de save."""

    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
