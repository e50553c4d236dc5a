from __future__ import annotations
import logging, sys
from PySide6.QtWidgets import QApplication

from purehr.core.config import load_config
from purehr.core.logging import setup_logging
from purehr.core.constants import APP_NAME, APP_VERSION
from purehr.domain.models import Roster
from purehr.services.export_service import ExportService
from purehr.services.grouping import GroupBoard
from purehr.services.import_service import ImportService
from purehr.ui.main_window import MainWindow

def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    cfg = load_config()
    setup_logging(cfg.log_dir)
    logging.getLogger(__name__).info(
        "%s %s démarré (groupes de %d, salle %s)", APP_NAME, APP_VERSION, cfg.group_size, cfg.room_style.value
    )

    roster = Roster()
    board = GroupBoard()

    import_svc = ImportService(roster)
    export_svc = ExportService(board)
    win = MainWindow(
        roster, board, import_svc, export_svc,
        group_size=cfg.group_size, room_style=cfg.room_style,
    )

    win.show()
    return app.exec()

if __name__ == "__main__":
    raise SystemExit(main())
