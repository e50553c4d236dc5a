"""
Calcul des zones (une par groupe) selon la configuration de salle.

Chaque style a sa propre fonction ``(width, height, count) -> [(x, y, w, h), ...]``
exprimée dans le repère utile (après marge). ``layout`` applique la marge,
la palette et associe les rectangles aux groupes dans leur ordre.
"""
from __future__ import annotations

from dataclasses import dataclass
from math import ceil, floor, sqrt
from typing import Callable, Dict, List, Sequence, Tuple

from purehr.domain.models import Group, RoomStyle, Zone

PADDING = 20.0
STAGE_HEIGHT = 60.0

CLUSTER_MIN_WIDTH = 260.0
CLASSROOM_MIN_WIDTH = 240.0
THEATER_MIN_WIDTH = 180.0

# hauteurs utilisées par l'estimation de hauteur requise
CARD_HEIGHT = 220.0
CARD_GAP = 20.0
THEATER_ROW_HEIGHT = 140.0
THEATER_GAP = 10.0
HOLLOW_CELL_HEIGHT = 200.0
BOTTOM_MARGIN = 40.0

PALETTE = ["#5AC8FA", "#AF52DE", "#FF2D55", "#5856D6", "#FF9500", "#34C759", "#00C7BE", "#FFCC00"]

Rect = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Area:
    """Surface utile (hors marge) de la salle."""
    width: float
    height: float

    @classmethod
    def from_canvas(cls, width: float, height: float) -> "Area":
        return cls(max(0.0, width - 2 * PADDING), max(0.0, height - 2 * PADDING))


def grid_columns(width: float, min_cell_width: float) -> int:
    return max(1, int(floor(width / min_cell_width)))


def grid_rows(count: int, cols: int) -> int:
    return max(1, ceil(count / cols))


def u_side_count(count: int) -> int:
    return ceil((count - 1) / 2) if count > 0 else 0


def hollow_grid_size(count: int) -> int:
    """Côté de la grille : ceil(sqrt(n+1)), agrandi si le pourtour est trop court."""
    if count <= 0:
        return 0
    size = ceil(sqrt(count + 1))
    while 4 * size - 4 < count:
        size += 1
    return size


def stage_height(style: RoomStyle) -> float:
    return STAGE_HEIGHT if style.has_stage else 0.0


def _grid(area: Area, count: int, min_cell_width: float, top: float = 0.0) -> List[Rect]:
    cols = grid_columns(area.width, min_cell_width)
    rows = grid_rows(count, cols)
    w = area.width / cols
    h = max(0.0, area.height - top) / rows
    return [((i % cols) * w, top + (i // cols) * h, w, h) for i in range(count)]


def _cluster(area: Area, count: int, top: float) -> List[Rect]:
    return _grid(area, count, CLUSTER_MIN_WIDTH, top)


def _classroom(area: Area, count: int, top: float) -> List[Rect]:
    return _grid(area, count, CLASSROOM_MIN_WIDTH, top)


def _theater(area: Area, count: int, top: float) -> List[Rect]:
    return _grid(area, count, THEATER_MIN_WIDTH, top)


def _u_shape(area: Area, count: int, top: float) -> List[Rect]:
    if count <= 0:
        return []

    if count <= 3:
        # trois emplacements fixes : gauche, bas-centre, droite
        w = area.width / 3
        h = max(0.0, area.height - top)
        slots = [
            (0.0, top, w, h),
            (w, top + h * 0.4, w, h * 0.6),
            (w * 2, top, w, h),
        ]
        return slots[:count]

    side = u_side_count(count)
    bottom = max(1, count - side * 2)

    col_w = area.width * 0.25
    bottom_y = area.height - area.height / (side + 1)
    row_h = max(0.0, (bottom_y - top) / side)
    bottom_w = (area.width * 0.5) / bottom
    bottom_h = area.height - bottom_y

    rects: List[Rect] = []
    rects += [(0.0, top + i * row_h, col_w, row_h) for i in range(side)]
    rects += [(col_w + i * bottom_w, bottom_y, bottom_w, bottom_h) for i in range(bottom)]
    rects += [(area.width - col_w, top + i * row_h, col_w, row_h) for i in range(side)]
    return rects[:count]


def _hollow(area: Area, count: int, top: float) -> List[Rect]:
    size = hollow_grid_size(count)
    if not size:
        return []
    w = area.width / size
    h = area.height / size
    rects: List[Rect] = []
    for row in range(size):
        for col in range(size):
            inner = 0 < row < size - 1 and 0 < col < size - 1
            if not inner and len(rects) < count:
                rects.append((col * w, row * h, w, h))
    return rects


STYLE_LAYOUTS: Dict[RoomStyle, Callable[[Area, int, float], List[Rect]]] = {
    RoomStyle.CLUSTER: _cluster,
    RoomStyle.CLASSROOM: _classroom,
    RoomStyle.THEATER: _theater,
    RoomStyle.U_SHAPE: _u_shape,
    RoomStyle.HOLLOW: _hollow,
}


def layout(style: RoomStyle, width: float, height: float, groups: Sequence[Group]) -> Dict[int, Zone]:
    """Zone par id de groupe. Fonction pure : mêmes entrées, mêmes zones."""
    rects = STYLE_LAYOUTS[style](Area.from_canvas(width, height), len(groups), stage_height(style))
    zones: Dict[int, Zone] = {}
    for idx, (x, y, w, h) in enumerate(rects):
        gid = groups[idx].id
        zones[gid] = Zone(
            group_id=gid,
            x=x + PADDING,
            y=y + PADDING,
            width=w,
            height=h,
            color=PALETTE[idx % len(PALETTE)],
        )
    return zones


def estimate_height(style: RoomStyle, width: float, group_count: int, min_height: float) -> float:
    """Hauteur minimale du canevas pour que les zones restent lisibles."""
    if group_count <= 0:
        return float(min_height)

    stage = stage_height(style)

    if style is RoomStyle.CLUSTER:
        rows = grid_rows(group_count, grid_columns(width, CLUSTER_MIN_WIDTH))
        required = rows * (CARD_HEIGHT + CARD_GAP) + BOTTOM_MARGIN
    elif style is RoomStyle.CLASSROOM:
        rows = grid_rows(group_count, grid_columns(width, CLASSROOM_MIN_WIDTH))
        required = stage + rows * (CARD_HEIGHT + CARD_GAP) + BOTTOM_MARGIN
    elif style is RoomStyle.THEATER:
        rows = grid_rows(group_count, grid_columns(width, THEATER_MIN_WIDTH))
        required = stage + rows * (THEATER_ROW_HEIGHT + THEATER_GAP) + BOTTOM_MARGIN
    elif style is RoomStyle.U_SHAPE:
        required = stage + u_side_count(group_count) * CARD_HEIGHT + BOTTOM_MARGIN
    else:
        required = hollow_grid_size(group_count) * HOLLOW_CELL_HEIGHT + BOTTOM_MARGIN

    return float(max(min_height, required))


def hit_test(zones: Dict[int, Zone], px: float, py: float) -> int | None:
    """Id du groupe dont la zone contient le point (première trouvée)."""
    for gid, zone in zones.items():
        if zone.contains(px, py):
            return gid
    return None
