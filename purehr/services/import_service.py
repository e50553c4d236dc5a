from __future__ import annotations

import logging
import random
import re
import unicodedata
from pathlib import Path
from typing import List, Optional

from openpyxl import load_workbook

from purehr.core.constants import BUSINESS_UNITS
from purehr.domain.models import Person
from purehr.services.partitioner import shuffled

log = logging.getLogger(__name__)

_NUMBERING = re.compile(r"^\d+[.)]\s*")

DEMO_SURNAMES = ["陳", "林", "黃", "張", "李", "王", "吳", "劉", "蔡", "楊", "許", "鄭", "謝", "郭", "洪"]
DEMO_GIVEN_NAMES = ["怡君", "欣怡", "雅婷", "志明", "雅雯", "家豪", "宗翰", "冠宇", "淑芬", "承翰", "俊傑", "建宏", "美玲", "惠君", "淑惠"]


def parse_text(content: str, default_department: Optional[str] = None) -> List[Person]:
    """Une personne par ligne : ``Nom[, Département]``.

    Le département de la ligne est prioritaire sur ``default_department``.
    Les numérotations en début de ligne (« 1. », « 2) ») sont retirées.
    Les ids sont provisoires, le roster les renumérote à l'ajout.
    """

    people: List[Person] = []
    lines = [line for line in re.split(r"\r?\n", content or "") if line.strip()]
    for idx, line in enumerate(lines):
        parts = line.split(",")
        name = _NUMBERING.sub("", parts[0].strip())
        dept = parts[1].strip() if len(parts) > 1 and parts[1].strip() else default_department
        if name:
            people.append(Person(id=f"import-{idx}", name=name, department=dept or None))
    return people


def generate_demo_text(rng: random.Random | None = None) -> str:
    """2 à 3 personnes par business unit, lignes « Nom, Unité » mélangées."""
    rng = rng or random.Random()
    lines: List[str] = []
    for unit in BUSINESS_UNITS:
        for _ in range(2 + rng.randint(0, 1)):
            name = rng.choice(DEMO_SURNAMES) + rng.choice(DEMO_GIVEN_NAMES)
            lines.append(f"{name}, {unit}")
    return "\n".join(shuffled(lines, rng))


class ImportService:
    """Service d'import (texte collé, CSV & Excel) vers le roster."""

    def __init__(self, roster=None) -> None:
        self.roster = roster

    # --- public API ------------------------------------------------------
    def import_from_text(self, content: str, default_department: Optional[str] = None) -> int:
        roster = self._require_roster()
        added = 0
        for p in parse_text(content, default_department):
            roster.add_person(p.name, p.department)
            added += 1
        log.info("Import texte : %d personne(s)", added)
        return added

    def import_from_csv(self, file_path: str | Path, default_department: Optional[str] = None) -> int:
        # utf-8-sig : accepte aussi les fichiers produits par notre propre export
        text = Path(file_path).read_text(encoding="utf-8-sig")
        return self.import_from_text(text, default_department)

    def import_from_excel(self, file_path: str | Path, default_department: Optional[str] = None) -> int:
        """Importe les personnes depuis un fichier Excel.

        Le format attendu est une feuille avec les colonnes :
        - Nom (ou 姓名 / name)
        - Département (optionnel, ou 部門 / department)
        """

        roster = self._require_roster()
        wb = load_workbook(filename=file_path, read_only=True)
        try:
            rows = list(wb.active.iter_rows(values_only=True))
        finally:
            wb.close()
        if not rows:
            return 0

        header = [self._normalize_header(h) for h in rows[0]]
        col_idx = self._map_columns(header)

        added = 0
        for raw in rows[1:]:
            if not raw or all(v is None or str(v).strip() == "" for v in raw):
                continue

            name = _NUMBERING.sub("", self._read_cell(raw, col_idx.get("name")))
            dept = self._read_cell(raw, col_idx.get("department")) or default_department
            if not name:
                # ligne sans nom : on ignore
                continue

            roster.add_person(name, dept)
            added += 1

        log.info("Import Excel %s : %d personne(s)", file_path, added)
        return added

    def import_demo(self, rng: random.Random | None = None) -> int:
        return self.import_from_text(generate_demo_text(rng))

    # --- helpers ---------------------------------------------------------
    def _require_roster(self):
        if self.roster is None:
            raise RuntimeError("Roster non fourni pour l'import")
        return self.roster

    def _normalize_header(self, value) -> str:
        if value is None:
            return ""
        text = str(value).strip().lower()
        text = "".join(c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn")
        # Ignore additional hints such as "(optionnel)" that may appear in the header
        if "(" in text:
            text = text.split("(", 1)[0].strip()
        return text.replace(" ", "")

    def _map_columns(self, header: list[str]) -> dict[str, int | None]:
        mapping = {
            "name": {"nom", "name", "姓名", "nomcomplet"},
            "department": {"departement", "department", "部門", "service", "unite"},
        }

        idx: dict[str, int | None] = {key: None for key in mapping}
        for i, col in enumerate(header):
            for field, names in mapping.items():
                if col in names and idx[field] is None:
                    idx[field] = i
        if idx["name"] is None:
            raise ValueError("Colonne « Nom » manquante dans l'Excel")
        return idx

    def _read_cell(self, row: tuple, index: int | None) -> str:
        if index is None or index >= len(row):
            return ""
        value = row[index]
        return "" if value is None else str(value).strip()
