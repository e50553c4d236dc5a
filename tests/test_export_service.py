import sys
from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from purehr.domain.models import Group, Person, RoomStyle
from purehr.services.export_service import ExportService, csv_rows, default_csv_name
from purehr.services.grouping import GroupBoard


def _board():
    return GroupBoard([
        Group(1, "第 1 組", [Person("p-1", "陳怡君", "東森購物"), Person("p-2", "林志明")]),
        Group(2, "第 2 組", [Person("p-3", "王小明", "東森新聞")]),
    ])


def test_csv_rows_one_per_member():
    assert list(csv_rows(_board().groups)) == [
        ["第 1 組", "陳怡君", "東森購物"],
        ["第 1 組", "林志明", ""],
        ["第 2 組", "王小明", "東森新聞"],
    ]


def test_default_csv_name():
    assert default_csv_name(date(2024, 3, 9)) == "分組結果_2024-03-09.csv"


def test_export_csv_has_bom_and_header(tmp_path):
    out = ExportService(_board()).export_csv(tmp_path / "groupes.csv")

    raw = out.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    assert raw.decode("utf-8-sig").splitlines() == [
        "組別,姓名,部門",
        "第 1 組,陳怡君,東森購物",
        "第 1 組,林志明,",
        "第 2 組,王小明,東森新聞",
    ]


def test_export_excel_sheets(tmp_path):
    service = ExportService(_board(), room_style_getter=lambda: RoomStyle.HOLLOW)

    out = service.export_excel(tmp_path / "groupes.xlsx")

    wb = load_workbook(out)
    assert wb.sheetnames == ["Groupes", "Résumé"]
    rows = list(wb["Groupes"].iter_rows(values_only=True))
    assert rows[0] == ("組別", "姓名", "部門")
    assert len(rows) == 4
    summary = dict(wb["Résumé"].iter_rows(values_only=True))
    assert summary["Groupes"] == 2
    assert summary["Personnes"] == 3
    assert summary["Configuration"] == "hollow"


def test_export_pdf_creates_file(tmp_path):
    out = ExportService(_board()).export_groups_pdf(tmp_path / "groupes.pdf")

    assert out.exists()
    assert out.read_bytes().startswith(b"%PDF")


def test_export_pdf_many_groups_spans_pages(tmp_path):
    groups = [
        Group(i, f"第 {i} 組", [Person(f"p-{i}-{j}", f"Personne {j}") for j in range(8)])
        for i in range(1, 21)
    ]

    out = ExportService(GroupBoard(groups)).export_groups_pdf(tmp_path / "groupes.pdf")

    assert out.stat().st_size > 0


def test_export_without_groups_fails(tmp_path):
    with pytest.raises(RuntimeError):
        ExportService(GroupBoard()).export_csv(tmp_path / "x.csv")
    with pytest.raises(RuntimeError):
        ExportService().export_excel(tmp_path / "x.xlsx")
