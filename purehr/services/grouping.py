from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from purehr.domain.models import Group, Person
from purehr.services.partitioner import partition

log = logging.getLogger(__name__)


class BoardChange(str, Enum):
    PARTITION = "partition"
    REASSIGN = "reassign"


Listener = Callable[[BoardChange], None]


class GroupBoard:
    """
    Liste de groupes de référence. Zones et jetons en sont dérivés.
    - regroup(roster, size) → nouvelle partition (seul moyen de changer le nombre de groupes)
    - move_member(pid, target) → déplacement atomique d'une personne
    """

    def __init__(self, groups: Sequence[Group] = (), rng: random.Random | None = None) -> None:
        self._groups: Tuple[Group, ...] = tuple(groups)
        self.rng = rng
        self._listeners: List[Listener] = []

    # --- lecture
    @property
    def groups(self) -> Tuple[Group, ...]:
        return self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def get(self, group_id: int) -> Optional[Group]:
        for g in self._groups:
            if g.id == group_id:
                return g
        return None

    def group_of(self, person_id: str) -> Optional[Group]:
        for g in self._groups:
            if any(m.id == person_id for m in g.members):
                return g
        return None

    def total_members(self) -> int:
        return sum(len(g.members) for g in self._groups)

    # --- abonnements
    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: BoardChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    # --- mutations
    def regroup(self, roster: Sequence[Person], group_size: int) -> Tuple[Group, ...]:
        if group_size < 1:
            log.warning("Taille de groupe %s ignorée, groupes inchangés", group_size)
            return self._groups
        self._groups = tuple(partition(roster, group_size, self.rng))
        self._notify(BoardChange.PARTITION)
        return self._groups

    def replace(self, groups: Sequence[Group]) -> None:
        """Fixe une liste de groupes externe (ex. reprise d'un export)."""
        self._groups = tuple(groups)
        self._notify(BoardChange.PARTITION)

    def clear(self) -> None:
        self.replace(())

    def move_member(self, person_id: str, target_group_id: int) -> bool:
        source = self.group_of(person_id)
        target = self.get(target_group_id)
        if source is None or target is None or source.id == target.id:
            return False

        # copie complète puis bascule en une affectation : aucun état intermédiaire visible
        updated = tuple(Group(id=g.id, name=g.name, members=list(g.members)) for g in self._groups)
        src = next(g for g in updated if g.id == source.id)
        dst = next(g for g in updated if g.id == target.id)
        idx = next(i for i, m in enumerate(src.members) if m.id == person_id)
        person = src.members.pop(idx)
        dst.members.append(person)
        self._groups = updated

        log.info("%s déplacé(e) de %s vers %s", person.name, source.name, target.name)
        self._notify(BoardChange.REASSIGN)
        return True
