from __future__ import annotations
from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QTableView, QLineEdit, QComboBox, QMessageBox, QLabel
)
from purehr.core.constants import BUSINESS_UNITS, DEFAULT_REGION
from purehr.domain.models import Roster

REGIONS = ["北區", "中區", "南區", "東區"]


def region_summary(roster: Roster) -> str:
    """Présents par région, dans l'ordre des régions connues."""
    counts = roster.counts_by_region()
    order = REGIONS + sorted(r for r in counts if r not in REGIONS)
    parts = [f"{r} : {counts[r]}" for r in order if r in counts]
    return "Présents par région : " + (" | ".join(parts) if parts else "aucun")


class RosterModel(QAbstractTableModel):
    COLS = ["ID", "Nom", "Département", "Présent", "Arrivée", "Région"]

    def __init__(self, roster: Roster):
        super().__init__()
        self.roster = roster
        self.rows = []

    def reload(self):
        self.beginResetModel()
        self.rows = self.roster.people
        self.endResetModel()

    def rowCount(self, parent=None): return len(self.rows)
    def columnCount(self, parent=None): return len(self.COLS)

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            return self.COLS[section]
        return None

    def data(self, index: QModelIndex, role=Qt.DisplayRole):
        if not index.isValid(): return None
        r = self.rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            c = index.column()
            if c == 0: return r.id
            if c == 1: return r.name
            if c == 2: return r.department or ""
            if c == 3: return "Oui" if r.attended else "Non"
            if c == 4: return r.check_in_time.strftime("%H:%M:%S") if r.check_in_time else ""
            if c == 5: return r.region or ""
        return None

    def flags(self, index: QModelIndex):
        if index.column() in (1, 2):
            return Qt.ItemIsSelectable | Qt.ItemIsEnabled | Qt.ItemIsEditable
        return Qt.ItemIsSelectable | Qt.ItemIsEnabled

    def setData(self, index: QModelIndex, value, role=Qt.EditRole):
        if role != Qt.EditRole: return False
        r = self.rows[index.row()]
        c = index.column()
        text = str(value).strip()
        if c == 1:
            if not text: return False
            self.roster.update_person(r.id, name=text)
        elif c == 2:
            self.roster.update_person(r.id, department=text or None)
        else:
            return False
        self.dataChanged.emit(index, index)
        return True

class RosterPage(QWidget):
    def __init__(self, roster: Roster, on_changed):
        super().__init__()
        self.roster = roster
        self.on_changed = on_changed

        v = QVBoxLayout(self)
        h = QHBoxLayout()
        self.in_name = QLineEdit(self); self.in_name.setPlaceholderText("Nom")
        self.in_dept = QComboBox(self); self.in_dept.setEditable(True)
        self.in_dept.addItem("")
        self.in_dept.addItems(BUSINESS_UNITS)
        btn_add = QPushButton("Ajouter", self); btn_add.clicked.connect(self.add_clicked)
        self.in_name.returnPressed.connect(self.add_clicked)
        for w in (self.in_name, self.in_dept, btn_add):
            h.addWidget(w)
        v.addLayout(h)

        self.model = RosterModel(self.roster)
        self.table = QTableView(self); self.table.setModel(self.model)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        v.addWidget(self.table)

        h2 = QHBoxLayout()
        self.region = QComboBox(self); self.region.addItems(REGIONS)
        self.region.setCurrentText(DEFAULT_REGION)
        btn_check = QPushButton("Pointer la sélection", self)
        btn_check.clicked.connect(self.check_in_selected)
        btn_del = QPushButton("Supprimer la sélection", self)
        btn_del.clicked.connect(self.delete_selected)
        self.in_checkin = QLineEdit(self); self.in_checkin.setPlaceholderText("Pointer par nom")
        self.in_checkin.returnPressed.connect(self.check_in_by_name)
        h2.addWidget(QLabel("Région", self)); h2.addWidget(self.region); h2.addWidget(btn_check)
        h2.addWidget(self.in_checkin)
        h2.addStretch(1); h2.addWidget(btn_del)
        v.addLayout(h2)

        self.lbl_regions = QLabel("", self)
        v.addWidget(self.lbl_regions)
        self.reload()

    def reload(self):
        self.model.reload()
        self.lbl_regions.setText(region_summary(self.roster))

    def _selected_ids(self) -> list[str]:
        sel = self.table.selectionModel().selectedRows()
        return [self.model.index(r.row(), 0).data() for r in sel]

    def add_clicked(self):
        name = self.in_name.text().strip()
        if not name:
            QMessageBox.warning(self, "Champ requis", "Le nom est obligatoire."); return
        try:
            self.roster.add_person(name, self.in_dept.currentText())
        except Exception as e:
            QMessageBox.critical(self, "Erreur", str(e)); return
        self.in_name.clear()
        self.reload()
        if self.on_changed: self.on_changed()

    def check_in_selected(self):
        ids = set(self._selected_ids())
        if not ids: return
        self.roster.check_in_ids(ids, self.region.currentText())
        self.reload()
        if self.on_changed: self.on_changed()

    def check_in_by_name(self):
        name = self.in_checkin.text().strip()
        if not name: return
        if self.roster.check_in(name, self.region.currentText()) is None:
            QMessageBox.warning(self, "Introuvable", f"Aucun participant nommé « {name} »."); return
        self.in_checkin.clear()
        self.reload()
        if self.on_changed: self.on_changed()

    def delete_selected(self):
        ids = self._selected_ids()
        if not ids: return
        for pid in ids:
            self.roster.remove_person(pid)
        self.reload()
        if self.on_changed: self.on_changed()
