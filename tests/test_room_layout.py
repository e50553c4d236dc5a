import sys
from itertools import combinations
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from purehr.domain.models import Group, RoomStyle, group_name
from purehr.services.room_layout import (
    PADDING, PALETTE, STAGE_HEIGHT, estimate_height, hit_test, hollow_grid_size, layout, stage_height
)

CANVASES = [(800, 600), (1200, 900), (1920, 1080), (300, 200), (100, 50)]


def _groups(n):
    return [Group(id=i + 1, name=group_name(i + 1)) for i in range(n)]


@pytest.mark.parametrize("style", list(RoomStyle))
def test_zones_never_overlap(style):
    for width, height in CANVASES:
        for n in range(1, 51):
            zones = layout(style, width, height, _groups(n))
            assert len(zones) == n
            for a, b in combinations(zones.values(), 2):
                assert a.overlap_area(b) < 1e-6, (style, width, height, n, a, b)


@pytest.mark.parametrize("style", list(RoomStyle))
def test_layout_is_idempotent(style):
    groups = _groups(13)
    assert layout(style, 1000, 700, groups) == layout(style, 1000, 700, groups)


@pytest.mark.parametrize("style", list(RoomStyle))
def test_empty_group_list_gives_empty_map(style):
    assert layout(style, 800, 600, []) == {}


@pytest.mark.parametrize("style", list(RoomStyle))
def test_zone_sizes_never_negative(style):
    for n in (1, 3, 4, 9, 30):
        for zone in layout(style, 60, 30, _groups(n)).values():
            assert zone.width >= 0 and zone.height >= 0


def test_zone_owners_match_groups_and_colors_cycle():
    groups = _groups(10)
    zones = layout(RoomStyle.CLUSTER, 800, 600, groups)

    assert list(zones) == [g.id for g in groups]
    assert all(z.group_id == gid for gid, z in zones.items())
    assert zones[1].color == PALETTE[0]
    assert zones[9].color == PALETTE[0]
    assert zones[10].color == PALETTE[1]


def test_cluster_grid_geometry():
    zones = layout(RoomStyle.CLUSTER, 800, 600, _groups(5))

    # 760 de large utile → 2 colonnes, 3 rangées
    assert zones[1].x == PADDING and zones[1].y == PADDING
    assert zones[1].width == pytest.approx(380)
    assert zones[1].height == pytest.approx(560 / 3)
    assert zones[2].x == pytest.approx(PADDING + 380)
    assert zones[3].y == pytest.approx(PADDING + 560 / 3)


def test_classroom_and_theater_sit_below_stage():
    classroom = layout(RoomStyle.CLASSROOM, 800, 600, _groups(4))
    theater = layout(RoomStyle.THEATER, 800, 600, _groups(4))

    assert classroom[1].y == pytest.approx(PADDING + STAGE_HEIGHT)
    # 760 / 240 → 3 colonnes ; 760 / 180 → 4 colonnes
    assert classroom[1].width == pytest.approx(760 / 3)
    assert theater[1].width == pytest.approx(190)
    assert theater[4].y == pytest.approx(PADDING + STAGE_HEIGHT)


def test_u_shape_small_counts_use_fixed_slots():
    zones = layout(RoomStyle.U_SHAPE, 920, 700, _groups(3))
    w = 880 / 3
    h = 660 - STAGE_HEIGHT

    assert (zones[1].x, zones[1].y, zones[1].height) == pytest.approx((PADDING, PADDING + STAGE_HEIGHT, h))
    assert zones[2].x == pytest.approx(PADDING + w)
    assert zones[2].y == pytest.approx(PADDING + STAGE_HEIGHT + h * 0.4)
    assert zones[2].height == pytest.approx(h * 0.6)
    assert zones[3].x == pytest.approx(PADDING + 2 * w)


def test_u_shape_left_bottom_right_order():
    width, height = 1040, 840
    usable_w, usable_h = 1000, 800
    zones = layout(RoomStyle.U_SHAPE, width, height, _groups(7))

    # 3 à gauche, 1 en bas, 3 à droite
    bottom_y = usable_h - usable_h / 4
    for gid in (1, 2, 3):
        assert zones[gid].x == pytest.approx(PADDING)
        assert zones[gid].width == pytest.approx(usable_w * 0.25)
    assert zones[4].x == pytest.approx(PADDING + usable_w * 0.25)
    assert zones[4].y == pytest.approx(PADDING + bottom_y)
    assert zones[4].width == pytest.approx(usable_w * 0.5)
    for gid in (5, 6, 7):
        assert zones[gid].x == pytest.approx(PADDING + usable_w * 0.75)
    assert zones[1].y < zones[2].y < zones[3].y


def test_u_shape_four_groups_fills_left_then_bottom_then_right():
    zones = layout(RoomStyle.U_SHAPE, 1040, 840, _groups(4))

    assert zones[1].x == zones[2].x == pytest.approx(PADDING)
    assert zones[3].x == pytest.approx(PADDING + 250)
    assert zones[4].x == pytest.approx(PADDING + 750)


def test_hollow_eight_groups_on_3x3_perimeter():
    zones = layout(RoomStyle.HOLLOW, 640, 640, _groups(8))

    cells = [(0, 0), (1, 0), (2, 0), (0, 1), (2, 1), (0, 2), (1, 2), (2, 2)]
    for gid, (col, row) in enumerate(cells, start=1):
        assert zones[gid].x == pytest.approx(PADDING + col * 200)
        assert zones[gid].y == pytest.approx(PADDING + row * 200)
        assert zones[gid].width == pytest.approx(200)
    # centre laissé vide
    assert hit_test(zones, 320, 320) is None


def test_hollow_grid_grows_when_perimeter_is_short():
    assert hollow_grid_size(1) == 2
    assert hollow_grid_size(8) == 3
    assert hollow_grid_size(12) == 4
    assert hollow_grid_size(15) == 5
    assert len(layout(RoomStyle.HOLLOW, 1000, 1000, _groups(15))) == 15


def test_hit_test_first_match_and_misses():
    zones = layout(RoomStyle.CLUSTER, 800, 600, _groups(4))

    assert hit_test(zones, 100, 100) == 1
    assert hit_test(zones, 700, 500) == 4
    # point sur la frontière commune : la première zone l'emporte
    assert hit_test(zones, 400, 100) == 1
    assert hit_test(zones, 5, 5) is None


def test_estimate_height_per_style():
    assert estimate_height(RoomStyle.CLUSTER, 800, 10, 600) == 4 * 240 + 40
    assert estimate_height(RoomStyle.CLASSROOM, 480, 3, 500) == 60 + 2 * 240 + 40
    assert estimate_height(RoomStyle.THEATER, 720, 10, 600) == 600
    assert estimate_height(RoomStyle.THEATER, 720, 20, 600) == 60 + 5 * 150 + 40
    assert estimate_height(RoomStyle.U_SHAPE, 800, 7, 600) == 60 + 3 * 220 + 40
    assert estimate_height(RoomStyle.HOLLOW, 800, 8, 600) == 3 * 200 + 40


@pytest.mark.parametrize("style", list(RoomStyle))
def test_estimate_height_without_groups_is_min_height(style):
    assert estimate_height(style, 800, 0, 480) == 480


def test_room_style_parse_rejects_unknown_values():
    assert RoomStyle.parse("u-shape") is RoomStyle.U_SHAPE
    assert RoomStyle.parse(" Theater ") is RoomStyle.THEATER
    assert RoomStyle.parse("u_shape") is RoomStyle.U_SHAPE
    with pytest.raises(ValueError):
        RoomStyle.parse("banquet")


@pytest.mark.parametrize("style", list(RoomStyle))
def test_zones_start_below_stage_only_for_staged_styles(style):
    zones = layout(style, 800, 600, _groups(4))
    top = min(z.y for z in zones.values())

    assert stage_height(style) == (STAGE_HEIGHT if style.has_stage else 0.0)
    assert top == pytest.approx(PADDING + stage_height(style))
