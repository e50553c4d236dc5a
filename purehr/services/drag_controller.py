"""
Glisser-déposer d'un jeton vers une autre zone.

Automate à trois états : idle → dragging → (idle | reassigning → idle).
Les transitions sont des fonctions pures sur ``DragState`` ; ``DragController``
applique leurs effets (épinglage, activité de la simulation, déplacement
dans le ``GroupBoard``). Aucune dépendance à Qt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from purehr.domain.models import Zone
from purehr.services.room_layout import hit_test

log = logging.getLogger(__name__)


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    REASSIGNING = "reassigning"


@dataclass(frozen=True)
class DragState:
    phase: DragPhase = DragPhase.IDLE
    token_id: Optional[str] = None
    origin_group: Optional[int] = None
    x: float = 0.0
    y: float = 0.0
    target_group: Optional[int] = None
    # écart jeton − pointeur mesuré à la saisie
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def token_position(self) -> Tuple[float, float]:
        return self.x + self.offset_x, self.y + self.offset_y


IDLE = DragState()


@dataclass(frozen=True)
class Reassignment:
    person_id: str
    source_group: int
    target_group: int


# --- transitions pures

def press(
    state: DragState, token_id: str, group_id: int, x: float, y: float,
    offset_x: float = 0.0, offset_y: float = 0.0,
) -> DragState:
    if state.phase is not DragPhase.IDLE:
        return state
    return DragState(DragPhase.DRAGGING, token_id, group_id, x, y, offset_x=offset_x, offset_y=offset_y)


def move(state: DragState, x: float, y: float) -> DragState:
    if state.phase is not DragPhase.DRAGGING:
        return state
    return replace(state, x=x, y=y)


def release(state: DragState, x: float, y: float, zones: Dict[int, Zone]) -> DragState:
    if state.phase is not DragPhase.DRAGGING:
        return state
    # la zone visée est celle sous le jeton lâché, pas sous le pointeur
    target = hit_test(zones, x + state.offset_x, y + state.offset_y)
    if target is None or target == state.origin_group:
        return IDLE
    return replace(state, phase=DragPhase.REASSIGNING, x=x, y=y, target_group=target)


def finish(state: DragState) -> DragState:
    return IDLE


# --- contrôleur

class DragController:
    """Relie l'automate à une scène exposant ``engine``, ``zones`` et ``board``."""

    def __init__(self, scene) -> None:
        self.scene = scene
        self.state: DragState = IDLE

    @property
    def dragging(self) -> bool:
        return self.state.phase is DragPhase.DRAGGING

    def press(self, x: float, y: float) -> bool:
        engine = self.scene.engine
        if engine is None or engine.stopped or self.state.phase is not DragPhase.IDLE:
            return False
        token = engine.token_at(x, y)
        if token is None:
            return False
        self.state = press(self.state, token.id, token.group_id, x, y, token.x - x, token.y - y)
        engine.pin(token.id, token.x, token.y)
        engine.reheat(engine.params.drag_alpha_target)
        return True

    def move(self, x: float, y: float) -> None:
        if not self.dragging:
            return
        self.state = move(self.state, x, y)
        engine = self.scene.engine
        if engine is not None and not engine.stopped:
            engine.pin(self.state.token_id, *self.state.token_position)

    def release(self, x: float, y: float) -> Optional[Reassignment]:
        if not self.dragging:
            return None
        self._let_go()
        self.state = release(self.state, x, y, self.scene.zones)
        if self.state.phase is not DragPhase.REASSIGNING:
            return None

        pending = self.state
        moved = self.scene.board.move_member(pending.token_id, pending.target_group)
        self.state = finish(self.state)
        if not moved:
            log.warning("Déplacement de %s impossible", pending.token_id)
            return None
        return Reassignment(pending.token_id, pending.origin_group, pending.target_group)

    def cancel(self) -> None:
        if self.dragging:
            self._let_go()
        self.state = IDLE

    def _let_go(self) -> None:
        engine = self.scene.engine
        if engine is None or engine.stopped:
            return
        engine.unpin(self.state.token_id)
        engine.reheat(0.0)
