import random
import sys
from pathlib import Path

import pytest
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from purehr.core.constants import BUSINESS_UNITS
from purehr.domain.models import Roster
from purehr.services.import_service import ImportService, generate_demo_text, parse_text


def _excel(path, rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


def test_parse_text_strips_numbering_and_blank_lines():
    people = parse_text("1. 陳怡君, 東森購物\n\n2) 林志明\n  \n王小明 , \n")

    assert [p.name for p in people] == ["陳怡君", "林志明", "王小明"]
    assert people[0].department == "東森購物"
    assert people[1].department is None
    assert people[2].department is None


def test_parse_text_line_department_wins_over_default():
    people = parse_text("A, 東森新聞\nB", default_department="東森房屋")

    assert people[0].department == "東森新聞"
    assert people[1].department == "東森房屋"


def test_import_from_text_adds_to_roster_with_fresh_ids():
    roster = Roster()
    roster.add_person("Déjà là")
    importer = ImportService(roster)

    added = importer.import_from_text("Alice, RH\nBob")

    assert added == 2
    assert [p.id for p in roster.people] == ["p-1", "p-2", "p-3"]
    assert roster.find_by_name("Alice")[0].department == "RH"


def test_import_csv_accepts_bom(tmp_path):
    path = tmp_path / "liste.csv"
    path.write_text("陳怡君,東森購物\n林志明\n", encoding="utf-8-sig")
    roster = Roster()

    added = ImportService(roster).import_from_csv(path)

    assert added == 2
    assert roster.people[0].name == "陳怡君"


def test_import_excel_maps_headers(tmp_path):
    path = _excel(tmp_path / "people.xlsx", [
        ["部門", "姓名"],
        ["東森購物", "陳怡君"],
        [None, "林志明"],
        [None, None],
        ["東森新聞", ""],
    ])
    roster = Roster()

    added = ImportService(roster).import_from_excel(path, default_department="東森房屋")

    assert added == 2
    assert [(p.name, p.department) for p in roster.people] == [
        ("陳怡君", "東森購物"),
        ("林志明", "東森房屋"),
    ]


def test_import_excel_headers_are_accent_and_case_insensitive(tmp_path):
    path = _excel(tmp_path / "people.xlsx", [
        ["NOM (obligatoire)", "Département"],
        ["Claire", "Vente"],
    ])
    roster = Roster()

    assert ImportService(roster).import_from_excel(path) == 1
    assert roster.people[0].department == "Vente"


def test_import_excel_without_name_column_fails(tmp_path):
    path = _excel(tmp_path / "people.xlsx", [["Prénom", "Métier"], ["Alice", "Dev"]])

    with pytest.raises(ValueError):
        ImportService(Roster()).import_from_excel(path)


def test_import_requires_a_roster():
    with pytest.raises(RuntimeError):
        ImportService().import_from_text("Alice")


def test_demo_text_covers_every_business_unit():
    text = generate_demo_text(random.Random(3))
    lines = text.splitlines()

    assert 2 * len(BUSINESS_UNITS) <= len(lines) <= 3 * len(BUSINESS_UNITS)
    units = {line.split(", ")[1] for line in lines}
    assert units == set(BUSINESS_UNITS)


def test_import_demo_fills_roster():
    roster = Roster()

    added = ImportService(roster).import_demo(random.Random(3))

    assert added == len(roster) >= 2 * len(BUSINESS_UNITS)
    assert all(p.department in BUSINESS_UNITS for p in roster)
