"""
PDF Export
----------
Renders business plans and comparative analyses to A4 PDFs with fpdf2.

Layout is driven by an explicit vertical cursor (mm from the top edge) rather
than fpdf2's automatic page breaks:

  body line        6 mm, new page once the cursor passes 270 mm
  subsection line  5 mm, indented 5 mm
  subsection head  new page first if the cursor is past 250 mm

The table of contents is a placeholder page filled in at output time, so it
shows the pages sections actually landed on.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from fpdf import FPDF

from prediktor.models.schemas import (
    SECTION_TITLES,
    ComparativeAnalysis,
    GeneratedBusinessPlan,
)
from prediktor.utils.validation import format_fcfa

logger = logging.getLogger(__name__)

MARGIN = 20
BODY_BREAK_Y = 270
SUBSECTION_BREAK_Y = 250
BODY_LINE_HEIGHT = 6
SUB_LINE_HEIGHT = 5
SUB_INDENT = 5
FONT = "Helvetica"

PRIMARY = (0, 58, 112)
SECONDARY = (242, 142, 43)
MUTED = (150, 150, 150)
TEXT = (40, 40, 40)
PIE_COLORS = [(0, 58, 112), (242, 142, 43), (89, 161, 79), (225, 87, 89)]

_PDF_REPLACEMENTS = {
    "\u2013": "-",
    "\u2014": " - ",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2026": "...",
    "\u00a0": " ",
    "\u202f": " ",
    "\u2022": "-",
    "\u2264": "<=",
    "\u2265": ">=",
}


def sanitise_for_pdf(text: str) -> str:
    """Map common typographic characters to latin-1, replace anything else."""
    for char, replacement in _PDF_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def build_export_filename(prefix: str, display_name: str, on: Optional[date] = None) -> str:
    """('Business_Plan', 'Acme Foods') -> 'Business_Plan_Acme_Foods_2024-05-01.pdf'"""
    on = on or date.today()
    name = re.sub(r"\s+", "_", display_name.strip()) or "Untitled"
    return f"{prefix}_{name}_{on.isoformat()}.pdf"


def format_generated_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%d/%m/%Y")
    except ValueError:
        return value


# ─── Page Writer ─────────────────────────────────────────────────────────────


class PageWriter:
    """FPDF document plus the running cursor shared by every section."""

    def __init__(self, title: str):
        self.pdf = FPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(False)
        self.pdf.set_title(sanitise_for_pdf(title))
        self.pdf.set_creator("Prediktor")
        self.y = MARGIN
        self.blank_page = False
        # (section title, page) pairs, as drawn on the TOC page
        self.toc_entries: List[Tuple[str, int]] = []

    @property
    def width(self) -> float:
        return self.pdf.w

    @property
    def height(self) -> float:
        return self.pdf.h

    @property
    def content_width(self) -> float:
        return self.pdf.w - 2 * MARGIN

    def new_page(self) -> None:
        if not self.blank_page:
            self.pdf.add_page()
        self.blank_page = False
        self.y = MARGIN

    def font(self, size: float, style: str = "", color: Tuple[int, int, int] = TEXT) -> None:
        self.pdf.set_font(FONT, style, size)
        self.pdf.set_text_color(*color)

    def text_at(self, x: float, y: float, text: str) -> None:
        self.pdf.text(x, y, sanitise_for_pdf(text))

    def centered(self, y: float, text: str) -> None:
        text = sanitise_for_pdf(text)
        x = (self.width - self.pdf.get_string_width(text)) / 2
        self.pdf.text(x, y, text)

    def wrap(self, text: str, max_width: float) -> List[str]:
        """Greedy word wrap on the current font; paragraphs are kept apart."""
        lines: List[str] = []
        for paragraph in sanitise_for_pdf(text or "").splitlines():
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if current and self.pdf.get_string_width(candidate) > max_width:
                    lines.append(current)
                    current = word
                else:
                    current = candidate
            if current:
                lines.append(current)
        return lines

    def paragraph(self, text: str, line_height: float = BODY_LINE_HEIGHT, indent: float = 0) -> None:
        for line in self.wrap(text, self.content_width - indent):
            if self.y > BODY_BREAK_Y:
                self.new_page()
            self.pdf.text(MARGIN + indent, self.y, line)
            self.y += line_height

    def section_title(self, title: str) -> None:
        self.pdf.start_section(sanitise_for_pdf(title))
        self.font(16, "B", PRIMARY)
        self.text_at(MARGIN, self.y, title.upper())
        self.y += 15

    def subsection(self, title: str, content: str) -> None:
        if self.y > SUBSECTION_BREAK_Y:
            self.new_page()
        self.font(12, "B")
        self.text_at(MARGIN, self.y, title)
        self.y += 8
        self.font(10)
        self.paragraph(content, SUB_LINE_HEIGHT, SUB_INDENT)
        self.y += 5

    def bullets(self, title: str, items: Iterable[str]) -> None:
        self.subsection(title, "\n".join(f"- {item}" for item in items))

    def table_of_contents(self) -> None:
        """Reserve a page for the TOC; it is drawn once every section is placed."""
        self.new_page()
        self.pdf.insert_toc_placeholder(self._render_toc)
        # The placeholder already broke to a fresh page
        self.blank_page = True
        self.y = MARGIN

    def _render_toc(self, pdf: FPDF, outline) -> None:
        y = MARGIN + 20
        pdf.set_font(FONT, "B", 16)
        pdf.set_text_color(*PRIMARY)
        pdf.text(MARGIN, y, "TABLE OF CONTENTS")
        y += 20
        pdf.set_font(FONT, "", 12)
        pdf.set_text_color(*TEXT)
        for entry in outline:
            page = str(entry.page_number)
            pdf.text(MARGIN, y, entry.name)
            pdf.text(self.width - MARGIN - pdf.get_string_width(page), y, page)
            self.toc_entries.append((entry.name, entry.page_number))
            y += 8

    def footer_line(self, text: str) -> None:
        self.font(8, "", MUTED)
        self.centered(self.height - 20, text)

    def output(self) -> bytes:
        return bytes(self.pdf.output())


# ─── Charts ──────────────────────────────────────────────────────────────────


def _legend(w: PageWriter, x: float, y: float, labels: Sequence[Tuple[str, Tuple[int, int, int]]]) -> None:
    w.font(8)
    for label, color in labels:
        w.pdf.set_fill_color(*color)
        w.pdf.rect(x, y - 3, 4, 4, style="F")
        w.text_at(x + 6, y, label)
        x += w.pdf.get_string_width(label) + 14


def bar_chart(
    w: PageWriter,
    title: str,
    groups: Sequence[Tuple[str, float, float]],
    height: float = 60,
) -> None:
    """Grouped bars, company next to sector, one group per label."""
    if w.y + height + 25 > BODY_BREAK_Y:
        w.new_page()
    w.font(12, "B")
    w.text_at(MARGIN, w.y, title)
    top = w.y + 6
    bottom = top + height
    peak = max([max(c, s) for _, c, s in groups] + [0])

    w.pdf.set_draw_color(*MUTED)
    w.pdf.line(MARGIN, bottom, MARGIN + w.content_width, bottom)

    slot = w.content_width / max(len(groups), 1)
    bar = slot / 3
    for i, (label, company, sector) in enumerate(groups):
        x = MARGIN + i * slot + bar / 2
        for j, (value, color) in enumerate(((company, PRIMARY), (sector, SECONDARY))):
            h = height * max(value, 0) / peak if peak > 0 else 0
            w.pdf.set_fill_color(*color)
            w.pdf.rect(x + j * bar, bottom - h, bar, h, style="F")
        w.font(8)
        w.text_at(x, bottom + 5, label)

    _legend(w, MARGIN, bottom + 12, [("Company", PRIMARY), ("Sector", SECONDARY)])
    w.y = bottom + 22


def line_chart(
    w: PageWriter,
    title: str,
    points: Sequence[Tuple[str, float, float]],
    height: float = 60,
) -> None:
    """Two series over the same periods."""
    if w.y + height + 25 > BODY_BREAK_Y:
        w.new_page()
    w.font(12, "B")
    w.text_at(MARGIN, w.y, title)
    top = w.y + 6
    bottom = top + height
    values = [v for _, c, s in points for v in (c, s)]
    low, high = min(values + [0]), max(values + [0])
    span = (high - low) or 1

    w.pdf.set_draw_color(*MUTED)
    w.pdf.line(MARGIN, bottom, MARGIN + w.content_width, bottom)

    step = w.content_width / max(len(points) - 1, 1)

    def xy(i: int, value: float) -> Tuple[float, float]:
        return MARGIN + i * step, bottom - height * (value - low) / span

    for series, color in ((1, PRIMARY), (2, SECONDARY)):
        w.pdf.set_draw_color(*color)
        w.pdf.set_line_width(0.6)
        coords = [xy(i, p[series]) for i, p in enumerate(points)]
        for (x1, y1), (x2, y2) in zip(coords, coords[1:]):
            w.pdf.line(x1, y1, x2, y2)
    w.pdf.set_line_width(0.2)

    w.font(8)
    for i, (period, _, _) in enumerate(points):
        x, _ = xy(i, low)
        w.text_at(x - w.pdf.get_string_width(period) / 2, bottom + 5, period)

    _legend(w, MARGIN, bottom + 12, [("Company", PRIMARY), ("Sector", SECONDARY)])
    w.y = bottom + 22


def pie_chart(
    w: PageWriter,
    title: str,
    slices: Sequence[Tuple[str, float]],
    radius: float = 30,
) -> None:
    """Slices drawn as filled polygons, proportional to each value."""
    if w.y + 2 * radius + 25 > BODY_BREAK_Y:
        w.new_page()
    w.font(12, "B")
    w.text_at(MARGIN, w.y, title)
    cx = MARGIN + radius
    cy = w.y + 8 + radius
    total = sum(max(v, 0) for _, v in slices)

    angle = -math.pi / 2
    legend_y = cy - radius + 5
    for i, (label, value) in enumerate(slices):
        color = PIE_COLORS[i % len(PIE_COLORS)]
        share = max(value, 0) / total if total > 0 else 0
        if share > 0:
            sweep = 2 * math.pi * share
            steps = max(int(sweep / 0.05), 2)
            points = [(cx, cy)] + [
                (cx + radius * math.cos(angle + sweep * k / steps),
                 cy + radius * math.sin(angle + sweep * k / steps))
                for k in range(steps + 1)
            ]
            w.pdf.set_fill_color(*color)
            w.pdf.polygon(points, style="F")
            angle += sweep
        w.pdf.set_fill_color(*color)
        w.pdf.rect(cx + radius + 15, legend_y - 3, 4, 4, style="F")
        w.font(9)
        w.text_at(cx + radius + 21, legend_y, f"{label}: {value:g} ({share * 100:.0f}%)")
        legend_y += 7

    w.y = cy + radius + 10


# ─── Service ─────────────────────────────────────────────────────────────────


class PDFExportService:
    def export_business_plan(self, plan: GeneratedBusinessPlan) -> bytes:
        return self.render_business_plan(plan).output()

    def render_business_plan(self, plan: GeneratedBusinessPlan) -> PageWriter:
        meta = plan.metadata
        w = PageWriter(f"Business Plan - {meta.company_name}")

        w.new_page()
        w.font(24, "B", PRIMARY)
        w.centered(80, "BUSINESS PLAN")
        w.font(18)
        w.centered(100, meta.company_name)
        w.font(14)
        w.centered(115, meta.industry)
        w.font(12)
        w.centered(140, f"Generated on {format_generated_date(meta.generated_at)}")
        w.footer_line("Document generated by Prediktor - sector analysis platform")

        w.table_of_contents()

        for name, section in plan.sections():
            w.new_page()
            w.section_title(section.title or SECTION_TITLES[name])
            w.font(11)
            w.paragraph(section.content)
            if section.subsections:
                w.y += 10
                for sub in section.subsections:
                    w.subsection(sub.title, sub.content)

        logger.info(f"Rendered business plan PDF for '{meta.company_name}' ({w.pdf.page_no()} pages)")
        return w

    def export_analysis(self, analysis: ComparativeAnalysis, company_name: Optional[str] = None) -> bytes:
        return self.render_analysis(analysis, company_name).output()

    def render_analysis(
        self, analysis: ComparativeAnalysis, company_name: Optional[str] = None
    ) -> PageWriter:
        company = analysis.company_data
        sector = analysis.sector_data
        health = analysis.health_score
        display_name = company_name or company.sector
        w = PageWriter(f"Sector Analysis - {display_name}")

        w.new_page()
        w.font(24, "B", PRIMARY)
        w.centered(80, "SECTOR ANALYSIS")
        w.font(18)
        w.centered(100, display_name)
        w.font(14)
        w.centered(115, f"Sector: {company.sector}")
        w.font(12)
        w.centered(140, f"Generated on {date.today().strftime('%d/%m/%Y')}")
        w.footer_line("Document generated by Prediktor - sector analysis platform")

        w.table_of_contents()

        w.new_page()
        w.section_title("Overview")
        w.font(11)
        w.paragraph(
            f"Revenue {format_fcfa(company.revenue)}, expenses {format_fcfa(company.expenses)}, "
            f"{company.employees} employees ({company.year})."
        )
        w.y += 6
        w.bullets("Health score", [
            f"Overall: {health.overall:g}/100",
            f"Profitability: {health.profitability:g}/100",
            f"Efficiency: {health.efficiency:g}/100",
            f"Growth: {health.growth:g}/100",
            f"Market position: {health.market_position:g}/100",
        ])
        position = analysis.competitive_position
        w.subsection(
            f"Competitive position: {position.position} ({position.score:g}/100)",
            position.description,
        )

        w.new_page()
        w.section_title("Charts")
        bar_chart(w, "Revenue comparison", [
            (p.label, p.company, p.sector) for p in analysis.charts.revenue_comparison
        ])
        line_chart(w, "Profitability trend (%)", [
            (p.period, p.company, p.sector) for p in analysis.charts.profitability_trend
        ])
        pie_chart(w, "Health score breakdown", [
            ("Profitability", health.profitability),
            ("Efficiency", health.efficiency),
            ("Growth", health.growth),
            ("Market position", health.market_position),
        ])

        w.new_page()
        w.section_title("Sector insights")
        w.font(11)
        w.paragraph(
            f"Average revenue {format_fcfa(sector.average_revenue)}, growth {sector.growth_rate:g}%, "
            f"market size {format_fcfa(sector.market_size)}."
        )
        w.y += 6
        w.bullets("Trends", sector.trends)
        w.bullets("Challenges", sector.challenges)
        w.bullets("Opportunities", sector.opportunities)
        w.bullets("Strengths", health.details.strengths)
        w.bullets("Weaknesses", health.details.weaknesses)

        w.new_page()
        w.section_title("Recommendations")
        recs = analysis.recommendations
        w.bullets("Immediate", recs.immediate)
        w.bullets("Short term", recs.short_term)
        w.bullets("Long term", recs.long_term)

        logger.info(f"Rendered analysis PDF for '{display_name}' ({w.pdf.page_no()} pages)")
        return w
