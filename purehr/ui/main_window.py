from __future__ import annotations
import logging
from pathlib import Path
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QTabWidget,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from purehr.core.constants import APP_NAME, DEFAULT_GROUP_SIZE
from purehr.domain.models import RoomStyle, Roster
from purehr.services.export_service import ExportService, default_csv_name
from purehr.services.grouping import GroupBoard
from purehr.services.import_service import ImportService
from purehr.ui.dialogs.bulk_add_dialog import BulkAddDialog
from purehr.ui.pages.grouping_page import GroupingPage
from purehr.ui.pages.roster_page import RosterPage

log = logging.getLogger(__name__)

class MainWindow(QMainWindow):
    def __init__(
        self,
        roster: Roster,
        board: GroupBoard,
        import_service: ImportService,
        export_service: ExportService,
        *,
        group_size: int = DEFAULT_GROUP_SIZE,
        room_style: RoomStyle = RoomStyle.CLUSTER,
    ) -> None:
        super().__init__()
        self.roster = roster
        self.board = board
        self.import_service = import_service
        self.export_service = export_service

        self.setWindowTitle(APP_NAME)
        self.resize(1200, 800)

        # Tabs / pages
        central = QWidget(self)
        v = QVBoxLayout(central)
        self.tabs = QTabWidget(self)
        v.addWidget(self.tabs)
        self.setCentralWidget(central)

        self.page_roster = RosterPage(self.roster, on_changed=self._update_status)
        self.page_groups = GroupingPage(
            self.roster, self.board,
            group_size=group_size, room_style=room_style, on_changed=self._update_status,
        )
        self.export_service.room_style_getter = lambda: self.page_groups.scene.style

        self.tabs.addTab(self.page_roster, "Participants")
        self.tabs.addTab(self.page_groups, "Groupes")

        # StatusBar
        self.status = QStatusBar(self)
        self.setStatusBar(self.status)
        self.lbl_people = QLabel("Participants: 0", self)
        self.lbl_attendance = QLabel("Présents: 0/0", self)
        self.lbl_groups = QLabel("Groupes: 0", self)
        self.status.addPermanentWidget(self.lbl_people)
        self.status.addPermanentWidget(self.lbl_attendance)
        self.status.addPermanentWidget(self.lbl_groups)

        # Menus & Toolbar
        self._create_actions()
        self._create_menus()
        self._create_toolbar()
        self._update_status()

    # --- Actions/menus/toolbar
    def _create_actions(self) -> None:
        self.act_quit = QAction("Quitter", self); self.act_quit.setShortcut(QKeySequence.Quit)
        self.act_clear = QAction("Vider la liste", self)

        self.act_import_excel = QAction("Importer depuis Excel…", self)
        self.act_import_csv = QAction("Importer depuis CSV…", self)
        self.act_import_ui = QAction("Ajouter en masse…", self)
        self.act_import_demo = QAction("Données de démo", self)
        self.act_export_csv = QAction("Exporter groupes (CSV)…", self)
        self.act_export_excel = QAction("Exporter groupes (Excel)…", self)
        self.act_export_pdf = QAction("Exporter groupes (PDF)…", self)

        self.act_quit.triggered.connect(self.close)
        self.act_clear.triggered.connect(self.on_clear_roster)

        self.act_import_excel.triggered.connect(self.on_import_excel)
        self.act_import_csv.triggered.connect(self.on_import_csv)
        self.act_import_ui.triggered.connect(self.on_import_ui)
        self.act_import_demo.triggered.connect(self.on_import_demo)
        self.act_export_csv.triggered.connect(self.on_export_csv)
        self.act_export_excel.triggered.connect(self.on_export_excel)
        self.act_export_pdf.triggered.connect(self.on_export_pdf)

    def _create_menus(self) -> None:
        bar = self.menuBar()
        m_file = bar.addMenu("&Fichier")
        m_file.addAction(self.act_clear)
        m_file.addSeparator()
        m_file.addAction(self.act_quit)

        m_import = bar.addMenu("&Importer")
        m_import.addAction(self.act_import_excel)
        m_import.addAction(self.act_import_csv)
        m_import.addAction(self.act_import_ui)
        m_import.addAction(self.act_import_demo)

        m_export = bar.addMenu("&Exporter")
        m_export.addAction(self.act_export_csv)
        m_export.addAction(self.act_export_excel)
        m_export.addAction(self.act_export_pdf)

    def _create_toolbar(self) -> None:
        tb = QToolBar("Actions", self)
        tb.setMovable(False)
        tb.setToolButtonStyle(Qt.ToolButtonTextBesideIcon)
        self.addToolBar(Qt.TopToolBarArea, tb)
        tb.addAction(self.act_import_excel)
        tb.addAction(self.act_import_ui)
        tb.addAction(self.act_import_demo)
        tb.addSeparator()
        tb.addAction(self.act_export_csv)
        tb.addAction(self.act_export_excel)
        tb.addAction(self.act_export_pdf)

    # --- Handlers
    def on_import_excel(self):
        path, _ = QFileDialog.getOpenFileName(self, "Importer depuis Excel", "", "Excel (*.xlsx)")
        if not path:
            return
        self._run_import(lambda: self.import_service.import_from_excel(path), "Import Excel échoué")

    def on_import_csv(self):
        path, _ = QFileDialog.getOpenFileName(self, "Importer depuis CSV", "", "CSV (*.csv *.txt)")
        if not path:
            return
        self._run_import(lambda: self.import_service.import_from_csv(path), "Import CSV échoué")

    def on_import_ui(self):
        dlg = BulkAddDialog(self)
        if not dlg.exec():
            return
        text = dlg.get_text()
        if not text.strip():
            QMessageBox.information(self, "Aucune ligne", "Aucune personne détectée dans le texte fourni.")
            return
        dept = dlg.get_default_department()
        self._run_import(lambda: self.import_service.import_from_text(text, dept), "Ajout en masse échoué")

    def on_import_demo(self):
        self._run_import(self.import_service.import_demo, "Génération des données de démo échouée")

    def _run_import(self, action, failure: str):
        try:
            added = action()
        except Exception as exc:
            log.exception(failure)
            QMessageBox.critical(self, "Erreur d'import", str(exc))
            return

        self.page_roster.reload()
        self._update_status()
        QMessageBox.information(self, "Import terminé", f"{added} personne(s) ajoutée(s).")

    def on_clear_roster(self):
        if QMessageBox.question(self, "Vider la liste", "Supprimer toutes les personnes et les groupes ?") != QMessageBox.Yes:
            return
        self.roster.clear()
        self.board.clear()
        self.page_roster.reload()
        self.page_groups.reload()
        self._update_status()

    def on_export_csv(self):
        self._run_export(default_csv_name(), "CSV (*.csv)", self.export_service.export_csv, "Export CSV échoué")

    def on_export_excel(self):
        suggested = default_csv_name().replace(".csv", ".xlsx")
        self._run_export(suggested, "Excel (*.xlsx)", self.export_service.export_excel, "Export Excel échoué")

    def on_export_pdf(self):
        suggested = default_csv_name().replace(".csv", ".pdf")
        self._run_export(suggested, "PDF (*.pdf)", self.export_service.export_groups_pdf, "Export PDF échoué")

    def _run_export(self, suggested: str, file_filter: str, action, failure: str):
        if not len(self.board):
            QMessageBox.warning(self, "Aucun groupe", "Lancez un regroupement avant d'exporter.")
            return

        path, _ = QFileDialog.getSaveFileName(self, "Exporter", suggested, file_filter)
        if not path:
            return

        try:
            output = action(Path(path))
        except Exception as exc:
            log.exception(failure)
            QMessageBox.critical(self, "Erreur d'export", str(exc))
            return

        QMessageBox.information(self, "Export terminé", f"Fichier généré : {output}")

    def _update_status(self):
        attended, total = self.roster.attendance_counts()
        self.lbl_people.setText(f"Participants: {total}")
        self.lbl_attendance.setText(f"Présents: {attended}/{total}")
        self.lbl_groups.setText(f"Groupes: {len(self.board)}")

    def closeEvent(self, event):
        self.page_groups.shutdown()
        super().closeEvent(event)
