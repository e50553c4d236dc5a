from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QComboBox, QDialog, QDialogButtonBox, QFormLayout, QLabel, QTextEdit, QVBoxLayout

from purehr.core.constants import BUSINESS_UNITS


class BulkAddDialog(QDialog):
    """Dialog simple pour coller plusieurs personnes en une fois."""

    def __init__(self, parent=None, initial_text: str = ""):
        super().__init__(parent)
        self.setWindowTitle("Ajout en masse")

        layout = QVBoxLayout(self)

        instructions = QLabel(
            "Collez une ligne par personne :\n"
            "Nom[, Département]  (une numérotation « 1. » en tête est ignorée)",
            self,
        )
        instructions.setWordWrap(True)
        layout.addWidget(instructions)

        form = QFormLayout()
        self.default_dept = QComboBox(self)
        self.default_dept.addItem("(aucun)", None)
        for unit in BUSINESS_UNITS:
            self.default_dept.addItem(unit, unit)
        form.addRow("Département par défaut", self.default_dept)
        layout.addLayout(form)

        self.text = QTextEdit(self)
        self.text.setPlaceholderText(
            "Exemple :\n"
            "陳怡君, 東森購物\n"
            "2. 林志明"
        )
        self.text.setPlainText(initial_text)
        layout.addWidget(self.text)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)
        layout.addWidget(btns)

    def get_text(self) -> str:
        return self.text.toPlainText()

    def get_default_department(self) -> Optional[str]:
        return self.default_dept.currentData()
