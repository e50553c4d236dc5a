import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from purehr.domain.models import Person, RoomStyle, Zone
from purehr.services import drag_controller as fsm
from purehr.services.drag_controller import DragPhase, Reassignment
from purehr.services.grouping import GroupBoard
from purehr.services.scene import SeatingScene


def _scene(n=20, size=5, seed=7):
    board = GroupBoard(rng=random.Random(seed))
    board.regroup([Person(id=f"p-{i}", name=f"Personne {i}") for i in range(n)], size)
    scene = SeatingScene(board, RoomStyle.CLUSTER, width=800, min_height=600, rng=random.Random(seed))
    scene.engine.run(120)
    return scene


def _sizes(board):
    return {g.id: len(g.members) for g in board.groups}


def _token_of(scene, group_id):
    return next(t for t in scene.engine.tokens if t.group_id == group_id)


ZONES = {
    1: Zone(1, 0, 0, 100, 100, "#fff"),
    2: Zone(2, 100, 0, 100, 100, "#fff"),
}


# --- transitions pures

def test_press_only_from_idle():
    dragging = fsm.press(fsm.IDLE, "p-1", 1, 10, 10)

    assert dragging.phase is DragPhase.DRAGGING
    assert (dragging.token_id, dragging.origin_group) == ("p-1", 1)
    assert fsm.press(dragging, "p-2", 2, 0, 0) is dragging


def test_move_ignored_unless_dragging():
    assert fsm.move(fsm.IDLE, 5, 5) is fsm.IDLE
    moved = fsm.move(fsm.press(fsm.IDLE, "p-1", 1, 10, 10), 40, 50)
    assert (moved.x, moved.y) == (40, 50)


def test_release_into_other_zone_goes_reassigning():
    state = fsm.release(fsm.press(fsm.IDLE, "p-1", 1, 10, 10), 150, 50, ZONES)

    assert state.phase is DragPhase.REASSIGNING
    assert state.target_group == 2
    assert fsm.finish(state) is fsm.IDLE


def test_release_on_origin_or_outside_goes_idle():
    dragging = fsm.press(fsm.IDLE, "p-1", 1, 10, 10)

    assert fsm.release(dragging, 50, 50, ZONES) is fsm.IDLE
    assert fsm.release(dragging, 500, 500, ZONES) is fsm.IDLE
    assert fsm.release(fsm.IDLE, 150, 50, ZONES) is fsm.IDLE


# --- contrôleur sur une scène réelle

def test_drag_from_group_2_to_group_4_moves_only_that_person():
    scene = _scene()
    board = scene.board
    before = _sizes(board)
    token = _token_of(scene, 2)

    assert scene.drag.press(token.x, token.y)
    person_id = scene.drag.state.token_id
    assert board.group_of(person_id).id == 2

    cx, cy = scene.zones[4].center
    scene.drag.move(cx, cy)
    result = scene.drag.release(cx, cy)

    assert result == Reassignment(person_id, 2, 4)
    assert board.group_of(person_id).id == 4
    after = _sizes(board)
    assert after[2] == before[2] - 1
    assert after[4] == before[4] + 1
    assert after[1] == before[1] and after[3] == before[3]
    assert board.total_members() == 20
    assert scene.drag.state is fsm.IDLE
    # jetons reconstruits depuis le board
    assert scene.engine.token(person_id).group_id == 4


def test_release_on_origin_zone_changes_nothing():
    scene = _scene()
    groups = scene.board.groups
    token = _token_of(scene, 2)
    engine = scene.engine

    scene.drag.press(token.x, token.y)
    grabbed = scene.drag.state.token_id
    x, y = scene.zones[2].center
    assert scene.drag.release(x, y) is None

    assert scene.board.groups is groups
    assert scene.engine is engine
    assert not engine.token(grabbed).pinned
    assert engine.alpha_target == 0.0


def test_release_outside_all_zones_changes_nothing():
    scene = _scene()
    groups = scene.board.groups
    token = _token_of(scene, 3)

    scene.drag.press(token.x, token.y)
    assert scene.drag.release(-200, -200) is None

    assert scene.board.groups is groups
    assert scene.drag.state is fsm.IDLE


def test_press_pins_token_and_reheats():
    scene = _scene()
    engine = scene.engine
    token = _token_of(scene, 1)

    assert scene.drag.press(token.x, token.y)
    grabbed = engine.token(scene.drag.state.token_id)
    assert grabbed.pinned
    assert engine.alpha_target == engine.params.drag_alpha_target

    state = scene.drag.state
    scene.drag.move(30, 30)
    engine.tick()
    assert (grabbed.x, grabbed.y) == (30 + state.offset_x, 30 + state.offset_y)


def test_press_on_empty_spot_does_nothing():
    scene = _scene()

    assert not scene.drag.press(5, 5)
    assert scene.drag.state is fsm.IDLE
    assert scene.drag.release(5, 5) is None


def test_rebuild_during_drag_cancels_it():
    scene = _scene()
    token = _token_of(scene, 1)
    scene.drag.press(token.x, token.y)

    scene.set_style(RoomStyle.THEATER)

    assert scene.drag.state is fsm.IDLE
    assert not scene.drag.dragging


def test_grab_keeps_offset_between_pointer_and_token():
    scene = _scene()
    engine = scene.engine
    token = _token_of(scene, 1)
    before = {t.id: (t.x, t.y) for t in engine.tokens}

    assert scene.drag.press(token.x + 6, token.y - 4)
    grabbed = engine.token(scene.drag.state.token_id)
    grab_start = before[grabbed.id]
    # aucun saut à la saisie
    assert (grabbed.x, grabbed.y) == grab_start

    scene.drag.move(token.x + 26, token.y + 16)
    engine.tick()

    assert grabbed.x == pytest.approx(grab_start[0] + 20)
    assert grabbed.y == pytest.approx(grab_start[1] + 20)


def test_drop_target_is_taken_under_the_token():
    dragging = fsm.press(fsm.IDLE, "p-1", 1, 90, 50, offset_x=15, offset_y=0)

    # pointeur encore dans la zone 1, jeton déjà dans la zone 2
    state = fsm.release(dragging, 95, 50, ZONES)

    assert state.phase is DragPhase.REASSIGNING
    assert state.target_group == 2
    assert state.token_position == (110, 50)
