import os
import random
import sys
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from purehr.domain.models import Person, RoomStyle, Roster
from purehr.services.grouping import GroupBoard
from purehr.services.scene import SeatingScene
from purehr.ui.pages.roster_page import region_summary
from purehr.ui.widgets.group_canvas import GroupCanvas


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


def test_viewport_change_wakes_settled_canvas(qapp):
    board = GroupBoard(rng=random.Random(1))
    board.regroup([Person(id=f"p-{i}", name=f"P{i}") for i in range(12)], 4)
    scene = SeatingScene(board, RoomStyle.CLUSTER, width=1200, min_height=600, rng=random.Random(1))
    canvas = GroupCanvas(scene)
    scene.engine.run(5000)
    canvas._timer.stop()

    canvas.set_viewport(500, 400)

    assert scene.engine.active
    assert canvas._timer.isActive()
    canvas.shutdown()


def test_region_summary_lists_known_regions_first():
    roster = Roster()
    for name in ("A", "B", "C"):
        roster.add_person(name)
    roster.check_in("A", "南區")
    roster.check_in("B", "北區")

    assert region_summary(roster) == "Présents par région : 北區 : 1 | 南區 : 1"
    assert region_summary(Roster()) == "Présents par région : aucun"
