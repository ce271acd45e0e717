"""Política de SaveMode: decide quais acessos a atributos viram alteração."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from sqlsession.domain.attribute_changes import AttributeDiffTracker
from sqlsession.domain.enums import SaveMode


class AttributeAccess(StrEnum):
    """Tipo de acesso a um atributo de sessão."""

    SET = "set"
    REMOVE = "remove"
    GET = "get"


class SaveModePolicy:
    """Encaminha acessos a atributos para o AttributeDiffTracker conforme o SaveMode.

    Uma instância é compartilhada pelo repositório com todas as sessões que ele
    cria; o modo é lido no momento do acesso.

    - ON_SET_ATTRIBUTE: apenas set/remove
    - ON_GET_ATTRIBUTE: set/remove e leituras de valor não-nulo
    - ALWAYS: set/remove; todos os atributos são marcados em `prepare_for_save`
    """

    def __init__(self, save_mode: SaveMode = SaveMode.ON_SET_ATTRIBUTE) -> None:
        self.save_mode = save_mode

    def forwards(self, access: AttributeAccess) -> bool:
        """Retorna True se o acesso deve ser registrado como alteração."""
        if access is AttributeAccess.GET:
            return self.save_mode is SaveMode.ON_GET_ATTRIBUTE
        return True

    def record(
        self,
        tracker: AttributeDiffTracker,
        access: AttributeAccess,
        name: str,
        *,
        exists: bool = True,
        value: Any = None,
    ) -> None:
        if not self.forwards(access):
            return
        if access is AttributeAccess.SET:
            tracker.record_set(name, exists)
        elif access is AttributeAccess.REMOVE:
            tracker.record_remove(name, exists)
        elif value is not None:
            tracker.touch(name)

    def prepare_for_save(self, tracker: AttributeDiffTracker, attribute_names: Iterable[str]) -> None:
        """Em SaveMode.ALWAYS marca todos os atributos atuais como alterados."""
        if self.save_mode is not SaveMode.ALWAYS:
            return
        for name in attribute_names:
            tracker.touch(name)
