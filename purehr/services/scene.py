from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from purehr.domain.models import RoomStyle, Zone
from purehr.services.drag_controller import DragController
from purehr.services.grouping import BoardChange, GroupBoard
from purehr.services.room_layout import estimate_height, layout
from purehr.services.simulation import SimulationParams, TokenSimulation, TokenView, token_radius

log = logging.getLogger(__name__)


class SeatingScene:
    """
    État dérivé d'une vue de placement : zones + simulation unique.

    - changement de groupes ou de style → jetons reconstruits
    - redimensionnement → zones recalculées, jetons conservés
    - stop() → simulation arrêtée ; start() en reconstruit une neuve
    """

    def __init__(
        self,
        board: GroupBoard,
        style: RoomStyle = RoomStyle.CLUSTER,
        width: float = 800.0,
        min_height: float = 600.0,
        rng: random.Random | None = None,
        params: SimulationParams | None = None,
    ) -> None:
        self.board = board
        self.style = RoomStyle.parse(style)
        self.width = float(width)
        self.min_height = float(min_height)
        self.rng = rng
        self.params = params
        self.zones: Dict[int, Zone] = {}
        self.engine: Optional[TokenSimulation] = None
        self.drag = DragController(self)
        self._running = False
        self.start()

    # --- cycle de vie
    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self.board.add_listener(self._on_board_changed)
        self._relayout()
        self._rebuild()

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self.board.remove_listener(self._on_board_changed)
        self.drag.cancel()
        self._discard_engine()

    # --- géométrie
    @property
    def height(self) -> float:
        return estimate_height(self.style, self.width, len(self.board.groups), self.min_height)

    def set_style(self, style) -> None:
        style = RoomStyle.parse(style)
        if style is self.style:
            return
        self.style = style
        self._relayout()
        self._rebuild()

    def resize(self, width: float, min_height: float | None = None) -> None:
        self.width = float(width)
        if min_height is not None:
            self.min_height = float(min_height)
        self._relayout()
        if self.engine is not None:
            self.engine.update_zones(self.zones)

    # --- boucle
    def tick(self) -> bool:
        if self.engine is None:
            return False
        engine = self.engine
        moved = engine.tick()
        if engine.stopped and self._running:
            # pas en échec : la scène repart d'une simulation neuve
            log.warning("Simulation interrompue, reconstruction depuis les groupes")
            self._rebuild()
            # échec dès le premier pas : pas de relance image après image
            return engine.ticks > 0 and self.engine.active
        return moved

    def snapshot(self) -> List[TokenView]:
        return self.engine.snapshot() if self.engine is not None else []

    # --- interne
    def _on_board_changed(self, change: BoardChange) -> None:
        # la géométrie ne dépend que du nombre de groupes
        if change is BoardChange.PARTITION:
            self._relayout()
        self._rebuild()

    def _relayout(self) -> None:
        self.zones = layout(self.style, self.width, self.height, self.board.groups)

    def _discard_engine(self) -> None:
        if self.engine is not None:
            self.engine.stop()
        self.engine = None

    def _rebuild(self) -> None:
        self.drag.cancel()
        self._discard_engine()
        if not self._running:
            return
        self.engine = TokenSimulation(
            self.zones,
            self.board.groups,
            radius=token_radius(self.style),
            rng=self.rng,
            params=self.params,
        )
        log.debug("Simulation reconstruite : %d jeton(s), style %s", len(self.engine.tokens), self.style.value)
