from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from purehr.core.constants import CSV_FILENAME_PREFIX, CSV_HEADER
from purehr.domain.models import Group
from purehr.services.room_layout import PALETTE

log = logging.getLogger(__name__)

# police CID embarquée par reportlab, couvre le chinois traditionnel
CJK_FONT = "MSung-Light"


def csv_rows(groups: Iterable[Group]) -> Iterator[List[str]]:
    """Une ligne par (groupe, membre) : nom du groupe, nom, département."""
    for group in groups:
        for member in group.members:
            yield [group.name, member.name, member.department or ""]


def default_csv_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"{CSV_FILENAME_PREFIX}_{today.isoformat()}.csv"


class ExportService:
    """Service d'export (CSV, Excel, PDF des groupes)."""

    def __init__(self, board=None, room_style_getter=None) -> None:
        self.board = board
        self.room_style_getter = room_style_getter

    def export_csv(self, output_path: str | Path) -> Path:
        """CSV UTF-8 avec BOM pour qu'Excel reconnaisse l'encodage."""

        groups = self._require_groups()
        output_path = Path(output_path)
        with open(output_path, "w", encoding="utf-8-sig", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            writer.writerows(csv_rows(groups))
        log.info("Export CSV : %s (%d groupe(s))", output_path, len(groups))
        return output_path

    def export_excel(self, output_path: str | Path) -> Path:
        """Génère un Excel : une ligne par membre + un onglet de résumé."""

        groups = self._require_groups()
        output_path = Path(output_path)

        wb = Workbook()
        ws = wb.active
        ws.title = "Groupes"
        ws.append(CSV_HEADER)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for idx, group in enumerate(groups):
            fill = PatternFill("solid", fgColor=PALETTE[idx % len(PALETTE)].lstrip("#"))
            for row in csv_rows([group]):
                ws.append(row)
                ws.cell(row=ws.max_row, column=1).fill = fill

        wrap_align = Alignment(wrap_text=True, vertical="top")
        for row in ws.iter_rows(min_row=2):
            for cell in row:
                cell.alignment = wrap_align
        ws.freeze_panes = "A2"
        ws.column_dimensions["A"].width = 12
        ws.column_dimensions["B"].width = 18
        ws.column_dimensions["C"].width = 18

        # Résumé minimal
        summary = wb.create_sheet("Résumé")
        summary.append(["Groupes", len(groups)])
        summary.append(["Personnes", sum(len(g.members) for g in groups)])
        style = self._room_style_label()
        if style:
            summary.append(["Configuration", style])
        for group in groups:
            summary.append([group.name, len(group.members)])

        wb.save(output_path)
        log.info("Export Excel : %s", output_path)
        return output_path

    def export_groups_pdf(self, output_path: str | Path, title: str = "分組結果") -> Path:
        """
        Génère un PDF avec une carte par groupe :
        - bandeau coloré avec le nom du groupe et l'effectif
        - liste des membres (nom + département)
        """
        groups = self._require_groups()
        output_path = Path(output_path)
        self._register_fonts()
        self._render_cards(output_path=output_path, title=title, groups=groups)
        log.info("Export PDF : %s", output_path)
        return output_path

    # --- helpers ---------------------------------------------------------
    def _require_groups(self) -> Sequence[Group]:
        if self.board is None:
            raise RuntimeError("Groupes non fournis pour l'export")
        groups = list(self.board.groups)
        if not groups:
            raise RuntimeError("Aucun groupe à exporter. Lancez un regroupement avant d'exporter.")
        return groups

    def _room_style_label(self) -> str:
        if not self.room_style_getter:
            return ""
        style = self.room_style_getter()
        return getattr(style, "value", str(style or ""))

    def _register_fonts(self) -> None:
        if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))

    def _render_cards(self, *, output_path: Path, title: str, groups: Sequence[Group]) -> None:
        c = canvas.Canvas(str(output_path), pagesize=A4)
        page_width, page_height = A4

        margin = 12 * mm
        h_spacing = 6 * mm
        v_spacing = 6 * mm
        title_height = 12 * mm
        card_width = (page_width - 2 * margin - h_spacing) / 2
        header_height = 9 * mm
        line_height = 5.5 * mm

        x_positions = [margin, margin + card_width + h_spacing]
        top = page_height - margin - title_height

        def new_page(first: bool) -> float:
            if not first:
                c.showPage()
            c.setFont(CJK_FONT, 16)
            c.setFillColor(colors.black)
            c.drawString(margin, page_height - margin - 6 * mm, title)
            return top

        y = new_page(first=True)
        col = 0
        row_height = 0.0
        for idx, group in enumerate(groups):
            card_height = header_height + max(1, len(group.members)) * line_height + 4 * mm
            if y - card_height < margin:
                y = new_page(first=False)
                col = 0
                row_height = 0.0

            self._draw_card(
                c=c,
                origin_x=x_positions[col],
                origin_y=y - card_height,
                width=card_width,
                height=card_height,
                header_height=header_height,
                line_height=line_height,
                group=group,
                color=colors.HexColor(PALETTE[idx % len(PALETTE)]),
            )
            row_height = max(row_height, card_height)
            col += 1
            if col == len(x_positions):
                col = 0
                y -= row_height + v_spacing
                row_height = 0.0

        c.save()

    def _draw_card(
        self,
        *,
        c: canvas.Canvas,
        origin_x: float,
        origin_y: float,
        width: float,
        height: float,
        header_height: float,
        line_height: float,
        group: Group,
        color,
    ) -> None:
        padding = 4 * mm

        c.saveState()
        c.translate(origin_x, origin_y)

        # Contour de la carte
        c.setStrokeColor(color)
        c.setLineWidth(1)
        c.roundRect(0, 0, width, height, radius=3 * mm, stroke=1, fill=0)

        # Bandeau du groupe
        c.setFillColor(color)
        c.rect(0, height - header_height, width, header_height, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont(CJK_FONT, 12)
        c.drawString(padding, height - header_height + 3 * mm, group.name)
        c.drawRightString(width - padding, height - header_height + 3 * mm, f"{len(group.members)} 人")

        # Membres
        c.setFillColor(colors.black)
        c.setFont(CJK_FONT, 10)
        y = height - header_height - line_height
        if not group.members:
            c.drawString(padding, y, "—")
        for member in group.members:
            line = member.name
            if member.department:
                line = f"{line}  ({member.department})"
            c.drawString(padding, y, line)
            y -= line_height

        c.restoreState()
