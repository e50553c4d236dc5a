from __future__ import annotations
import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QMessageBox, QPushButton, QScrollArea,
    QSpinBox, QSplitter, QTreeWidget, QTreeWidgetItem, QVBoxLayout, QWidget
)

from purehr.core.constants import DEFAULT_GROUP_SIZE
from purehr.domain.models import ROOM_INFOS, RoomStyle, Roster
from purehr.services.grouping import GroupBoard
from purehr.services.scene import SeatingScene
from purehr.ui.widgets.group_canvas import GroupCanvas

log = logging.getLogger(__name__)


class RoomScrollArea(QScrollArea):
    """Transmet la taille visible au canevas pour recalculer les zones."""

    def __init__(self, canvas: GroupCanvas, parent=None):
        super().__init__(parent)
        self.canvas = canvas
        self.setWidgetResizable(True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setWidget(canvas)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        size = self.viewport().size()
        self.canvas.set_viewport(size.width(), size.height())


class GroupingPage(QWidget):
    def __init__(self, roster: Roster, board: GroupBoard, *, group_size: int = DEFAULT_GROUP_SIZE,
                 room_style: RoomStyle = RoomStyle.CLUSTER, on_changed=None):
        super().__init__()
        self.roster = roster
        self.board = board
        self.on_changed = on_changed

        root = QVBoxLayout(self)

        # ---------- Paramètres ----------
        gb_params = QGroupBox("Regroupement", self)
        hb = QHBoxLayout(gb_params)
        form = QFormLayout()
        self.group_size = QSpinBox(self); self.group_size.setRange(1, 500); self.group_size.setValue(group_size)
        self.room_style = QComboBox(self)
        for style in RoomStyle:
            self.room_style.addItem(ROOM_INFOS[style].name, style.value)
        self.room_style.setCurrentIndex(self.room_style.findData(room_style.value))
        form.addRow("Personnes par groupe", self.group_size)
        form.addRow("Configuration de salle", self.room_style)
        hb.addLayout(form)
        hb.addStretch(1)
        self.btn_generate = QPushButton("Lancer le regroupement", self)
        self.btn_generate.clicked.connect(self.generate_groups)
        hb.addWidget(self.btn_generate)
        root.addWidget(gb_params)

        # ---------- Infos configuration ----------
        self.lbl_room = QLabel("", self); self.lbl_room.setWordWrap(True)
        root.addWidget(self.lbl_room)

        # ---------- Salle + liste ----------
        self.scene = SeatingScene(board, style=room_style)
        self.canvas = GroupCanvas(self.scene, self)
        self.canvas.reassigned.connect(self._on_reassigned)
        self.scroll = RoomScrollArea(self.canvas, self)

        self.tree = QTreeWidget(self)
        self.tree.setHeaderLabels(["Groupe / Nom", "Département"])
        self.tree.setColumnWidth(0, 160)

        splitter = QSplitter(Qt.Horizontal, self)
        splitter.addWidget(self.scroll)
        splitter.addWidget(self.tree)
        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 1)
        root.addWidget(splitter, 1)

        self.lbl_empty = QLabel("Réglez la taille des groupes puis lancez le regroupement.", self)
        self.lbl_empty.setAlignment(Qt.AlignCenter)
        root.addWidget(self.lbl_empty)

        self.room_style.currentIndexChanged.connect(self._on_style_changed)
        self._update_room_info()
        self.reload()

    # --------- Actions ----------
    def generate_groups(self):
        people = self.roster.people
        if not people:
            QMessageBox.information(self, "Aucune personne", "Ajoutez des participants avant de lancer le regroupement.")
            return
        try:
            self.board.regroup(people, self.group_size.value())
        except Exception as exc:
            log.exception("Regroupement échoué")
            QMessageBox.critical(self, "Erreur", str(exc))
            return
        self.reload()
        if self.on_changed: self.on_changed()

    def shutdown(self):
        self.canvas.shutdown()

    def reload(self):
        has_groups = len(self.board) > 0
        self.btn_generate.setText("Refaire les groupes" if has_groups else "Lancer le regroupement")
        self.lbl_empty.setVisible(not has_groups)
        self._fill_tree()
        self.canvas.refresh()

    # --------- Handlers ----------
    def _on_style_changed(self, _index: int):
        style = RoomStyle.parse(self.room_style.currentData())
        self.scene.set_style(style)
        self._update_room_info()
        self.canvas.refresh()

    def _on_reassigned(self, person_id: str, source: int, target: int):
        self.reload()
        if self.on_changed: self.on_changed()

    # --------- Rendu ----------
    def _update_room_info(self):
        info = ROOM_INFOS[self.scene.style]
        self.lbl_room.setText(
            f"<b>{info.name}</b> : {info.description}<br>"
            f"Effectif conseillé : {info.capacity} | Usage : {info.scenario}<br>"
            f"<span style='color:#2e7d32'>+ {info.pros}</span> &nbsp; "
            f"<span style='color:#e65100'>− {info.cons}</span>"
        )

    def _fill_tree(self):
        self.tree.clear()
        for group in self.board.groups:
            top = QTreeWidgetItem([f"{group.name} ({len(group.members)} 人)", ""])
            for m in group.members:
                QTreeWidgetItem(top, [m.name, m.department or ""])
            self.tree.addTopLevelItem(top)
            top.setExpanded(True)
