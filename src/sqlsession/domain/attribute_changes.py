"""Rastreamento de alterações de atributos de sessão entre dois saves.

Cada nome de atributo guarda no máximo um registro: o tipo líquido da
alteração (ADDED, UPDATED ou REMOVED) desde o último `clear()`. Operações
sucessivas sobre o mesmo nome são coalescidas:

    anterior   operação   existe   resultado
    --------   --------   ------   ---------
    (nenhum)   set        não      ADDED
    (nenhum)   set        sim      UPDATED
    (nenhum)   remove     não      (nada)
    (nenhum)   remove     sim      REMOVED
    ADDED      set        -        ADDED
    ADDED      remove     -        (registro apagado)
    UPDATED    set        -        UPDATED
    UPDATED    remove     -        REMOVED
    REMOVED    set        -        UPDATED
    REMOVED    remove     -        REMOVED

"existe" indica se a sessão tinha valor não-nulo para o atributo antes da
operação. Um atributo ADDED nunca chegou ao banco, portanto nunca vira
UPDATED nem REMOVED; um atributo REMOVED que volta a ser definido ainda
tem linha no banco, portanto vira UPDATED.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlsession.domain.enums import ChangeKind


@dataclass(frozen=True, slots=True)
class AttributeChange:
    """Alteração líquida de um atributo."""

    name: str
    kind: ChangeKind


class AttributeDiffTracker:
    """Mantém o delta coalescido de atributos de uma única sessão.

    Não é thread-safe: uma sessão pertence a um único contexto de request.
    """

    def __init__(self) -> None:
        self._changes: dict[str, ChangeKind] = {}

    def record_set(self, name: str, exists: bool) -> None:
        """Registra um set explícito de valor não-nulo."""
        prior = self._changes.get(name)
        if prior is None:
            self._changes[name] = ChangeKind.UPDATED if exists else ChangeKind.ADDED
        elif prior is ChangeKind.ADDED:
            return
        else:
            self._changes[name] = ChangeKind.UPDATED

    def record_remove(self, name: str, exists: bool) -> None:
        """Registra uma remoção explícita."""
        prior = self._changes.get(name)
        if prior is None:
            if exists:
                self._changes[name] = ChangeKind.REMOVED
        elif prior is ChangeKind.ADDED:
            del self._changes[name]
        else:
            self._changes[name] = ChangeKind.REMOVED

    def touch(self, name: str) -> None:
        """Marca um atributo existente como UPDATED (leitura ou SaveMode.ALWAYS).

        Atributos ADDED ou REMOVED no ciclo corrente não são afetados.
        """
        if name not in self._changes:
            self._changes[name] = ChangeKind.UPDATED

    def kind_of(self, name: str) -> ChangeKind | None:
        return self._changes.get(name)

    def changes(self, kind: ChangeKind | None = None) -> list[AttributeChange]:
        """Retorna as alterações registradas, opcionalmente filtradas por tipo."""
        return [
            AttributeChange(name=name, kind=change_kind)
            for name, change_kind in self._changes.items()
            if kind is None or change_kind is kind
        ]

    def has_changes(self) -> bool:
        return bool(self._changes)

    def clear(self) -> None:
        self._changes.clear()

    def __len__(self) -> int:
        return len(self._changes)

    def __contains__(self, name: object) -> bool:
        return name in self._changes
