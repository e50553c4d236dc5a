from __future__ import annotations

import logging
import random
from typing import List, Sequence, TypeVar

from purehr.domain.models import Group, Person, group_name

log = logging.getLogger(__name__)

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> List[T]:
    """Copie mélangée (Fisher–Yates), chaque permutation équiprobable."""
    rng = rng or random.Random()
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def partition(roster: Sequence[Person], group_size: int, rng: random.Random | None = None) -> List[Group]:
    """
    Mélange la liste puis la découpe en groupes de ``group_size``.
    Le dernier groupe peut être plus petit. Taille < 1 : aucun groupe.
    """
    if group_size < 1:
        return []

    chunks = chunked(shuffled(roster, rng), group_size)
    groups = [Group(id=i + 1, name=group_name(i + 1), members=chunk) for i, chunk in enumerate(chunks)]
    log.info("Partition : %d personne(s) en %d groupe(s) de %d", len(roster), len(groups), group_size)
    return groups
