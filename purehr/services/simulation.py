"""
Simulation physique des jetons (un par personne) dans leurs zones.

Chaque pas : ressort vers le centre de la zone, collisions entre jetons,
légère répulsion générale, amortissement puis intégration. Le résultat est
ensuite borné dans la zone (contrainte dure, prioritaire sur la physique).
L'activité ``alpha`` décroît à chaque pas pour que la scène se stabilise.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from math import isfinite, sqrt
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from purehr.domain.models import Group, RoomStyle, Token, Zone

log = logging.getLogger(__name__)

TOKEN_RADIUS = 18.0
THEATER_TOKEN_RADIUS = 14.0


def token_radius(style: RoomStyle) -> float:
    return THEATER_TOKEN_RADIUS if style is RoomStyle.THEATER else TOKEN_RADIUS


@dataclass(frozen=True)
class SimulationParams:
    # forces
    center_strength: float = 0.08
    collide_padding: float = 2.0
    collide_strength: float = 1.0
    collide_iterations: int = 2
    charge_strength: float = -10.0
    charge_distance_min2: float = 1.0
    # activité
    alpha_start: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 0.02
    velocity_decay: float = 0.4
    drag_alpha_target: float = 0.3
    relayout_alpha: float = 0.3
    # placement
    jitter: float = 10.0
    label_margin: float = 20.0


@dataclass(frozen=True)
class TokenView:
    """Copie en lecture seule d'un jeton, pour le rendu."""
    id: str
    group_id: int
    name: str
    radius: float
    x: float
    y: float
    pinned: bool


def _bounded(value: float, lo: float, hi: float, fallback: float) -> float:
    if hi < lo:
        return fallback
    if not isfinite(value):
        return lo
    return max(lo, min(hi, value))


def clamp_to_zone(zone: Zone, x: float, y: float, radius: float, top_margin: float = 0.0) -> Tuple[float, float]:
    """
    Ramène (x, y) dans la zone, rayon et bandeau de titre déduits.
    Zone trop petite pour le jeton : coin haut-gauche de la zone.
    """
    nx = _bounded(x, zone.x + radius, zone.x + zone.width - radius, zone.x)
    ny = _bounded(y, zone.y + radius + top_margin, zone.y + zone.height - radius, zone.y)
    return nx, ny


class TokenSimulation:
    def __init__(
        self,
        zones: Dict[int, Zone],
        groups: Sequence[Group],
        radius: float = TOKEN_RADIUS,
        rng: random.Random | None = None,
        params: SimulationParams | None = None,
    ) -> None:
        self.params = params or SimulationParams()
        self.rng = rng or random.Random()
        self.zones: Dict[int, Zone] = dict(zones)
        self.alpha = self.params.alpha_start
        self.alpha_target = 0.0
        self.ticks = 0
        self._stopped = False
        self._tokens: List[Token] = self._seed(groups, radius)
        self._by_id: Dict[str, Token] = {t.id: t for t in self._tokens}

    # --- construction
    def _seed(self, groups: Iterable[Group], radius: float) -> List[Token]:
        jitter = self.params.jitter
        tokens: List[Token] = []
        for g in groups:
            zone = self.zones.get(g.id)
            if zone is None:
                continue
            cx, cy = zone.center
            for m in g.members:
                tokens.append(Token(
                    id=m.id,
                    group_id=g.id,
                    name=m.name,
                    radius=radius,
                    x=cx + (self.rng.random() - 0.5) * jitter,
                    y=cy + (self.rng.random() - 0.5) * jitter,
                ))
        return tokens

    # --- état
    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def settled(self) -> bool:
        floor = self.params.alpha_min
        return self.alpha < floor and self.alpha_target < floor

    @property
    def active(self) -> bool:
        return not self._stopped and not self.settled

    @property
    def tokens(self) -> List[Token]:
        return list(self._tokens)

    def token(self, token_id: str) -> Optional[Token]:
        return self._by_id.get(token_id)

    def token_at(self, x: float, y: float) -> Optional[Token]:
        # le dernier dessiné est au-dessus
        for t in reversed(self._tokens):
            dx, dy = x - t.x, y - t.y
            if dx * dx + dy * dy <= t.radius * t.radius:
                return t
        return None

    def snapshot(self) -> List[TokenView]:
        return [TokenView(t.id, t.group_id, t.name, t.radius, t.x, t.y, t.pinned) for t in self._tokens]

    # --- pilotage
    def update_zones(self, zones: Dict[int, Zone]) -> None:
        """Nouvelles cibles, jetons et vitesses conservés.

        Les jetons sont ramenés tout de suite dans leur nouvelle zone, même
        si la scène est stabilisée, puis l'activité est relancée pour
        qu'ils se replacent autour des nouveaux centres.
        """
        zones = dict(zones)
        if zones == self.zones:
            return
        self.zones = zones
        if self._stopped:
            return
        self._clamp()
        self.alpha = max(self.alpha, self.params.relayout_alpha)

    def pin(self, token_id: str, x: float, y: float) -> None:
        t = self._by_id.get(token_id)
        if t is None:
            return
        t.fx, t.fy = x, y
        t.x, t.y = x, y

    def unpin(self, token_id: str) -> None:
        t = self._by_id.get(token_id)
        if t is not None:
            t.fx = t.fy = None

    def reheat(self, target: float) -> None:
        """Fixe l'activité visée ; une cible > alpha_min relance une scène stabilisée."""
        if self._stopped:
            raise RuntimeError("Simulation arrêtée : en construire une nouvelle")
        self.alpha_target = target

    def stop(self) -> None:
        if not self._stopped:
            log.debug("Simulation arrêtée après %d pas (%d jetons)", self.ticks, len(self._tokens))
        self._stopped = True

    # --- boucle
    def tick(self) -> bool:
        """Un pas de simulation. Retourne False si rien n'a bougé."""
        if not self.active:
            return False
        try:
            self._step()
        except Exception:
            # ne jamais remonter à l'hôte : on coupe proprement
            log.exception("Pas de simulation en échec, arrêt de la simulation")
            self.stop()
            return False
        self.ticks += 1
        return True

    def run(self, max_ticks: int) -> int:
        done = 0
        while done < max_ticks and self.tick():
            done += 1
        return done

    def _step(self) -> None:
        p = self.params
        self.alpha += (self.alpha_target - self.alpha) * p.alpha_decay

        self._apply_center(self.alpha)
        for _ in range(p.collide_iterations):
            self._apply_collide()
        self._apply_charge(self.alpha)
        self._integrate()
        self._clamp()

    def _jiggle(self) -> float:
        v = 0.0
        while v == 0.0:
            v = (self.rng.random() - 0.5) * 1e-6
        return v

    def _apply_center(self, alpha: float) -> None:
        k = self.params.center_strength * alpha
        for t in self._tokens:
            if t.pinned:
                continue
            zone = self.zones.get(t.group_id)
            if zone is None:
                continue
            cx, cy = zone.center
            t.vx += (cx - t.x) * k
            t.vy += (cy - t.y) * k

    def _apply_collide(self) -> None:
        pad = self.params.collide_padding
        strength = self.params.collide_strength
        tokens = self._tokens
        for i, a in enumerate(tokens):
            ra = a.radius + pad
            ra2 = ra * ra
            xi = a.x + a.vx
            yi = a.y + a.vy
            for b in tokens[i + 1:]:
                rb = b.radius + pad
                r = ra + rb
                dx = xi - b.x - b.vx
                dy = yi - b.y - b.vy
                dist2 = dx * dx + dy * dy
                if dist2 >= r * r:
                    continue
                if dx == 0:
                    dx = self._jiggle()
                    dist2 += dx * dx
                if dy == 0:
                    dy = self._jiggle()
                    dist2 += dy * dy
                dist = sqrt(dist2)
                k = (r - dist) / dist * strength
                dx *= k
                dy *= k
                share = rb * rb / (ra2 + rb * rb)
                if not a.pinned:
                    a.vx += dx * share
                    a.vy += dy * share
                if not b.pinned:
                    b.vx -= dx * (1 - share)
                    b.vy -= dy * (1 - share)

    def _apply_charge(self, alpha: float) -> None:
        strength = self.params.charge_strength * alpha
        dmin2 = self.params.charge_distance_min2
        tokens = self._tokens
        for i, a in enumerate(tokens):
            for b in tokens[i + 1:]:
                dx = b.x - a.x
                dy = b.y - a.y
                dist2 = dx * dx + dy * dy
                if dx == 0:
                    dx = self._jiggle()
                    dist2 += dx * dx
                if dy == 0:
                    dy = self._jiggle()
                    dist2 += dy * dy
                if dist2 < dmin2:
                    dist2 = sqrt(dmin2 * dist2)
                k = strength / dist2
                if not a.pinned:
                    a.vx += dx * k
                    a.vy += dy * k
                if not b.pinned:
                    b.vx -= dx * k
                    b.vy -= dy * k

    def _integrate(self) -> None:
        keep = 1 - self.params.velocity_decay
        for t in self._tokens:
            if t.pinned:
                t.x, t.y = t.fx, t.fy
                t.vx = t.vy = 0.0
                continue
            t.vx *= keep
            t.vy *= keep
            t.x += t.vx
            t.y += t.vy

    def _clamp(self) -> None:
        margin = self.params.label_margin
        for t in self._tokens:
            if t.pinned:
                continue
            zone = self.zones.get(t.group_id)
            if zone is None:
                continue
            t.x, t.y = clamp_to_zone(zone, t.x, t.y, t.radius, margin)
