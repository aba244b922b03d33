"""
pdf_export.py
=============
Financial Health Check PDF generator.

Covers the sections of the client dashboard:
  1.  Header band                      – product name + subtitle (first page)
  2.  Title & metadata                 – company, industry, period, date
  3.  Executive Summary                – margin leak / surplus vs. industry
  4.  Benchmark Comparison             – 4-row table, status from metric_status()
  5.  Benchmark Chart                  – you vs. industry vs. best in class
  6.  Detected Margin Leaks            – warnings, then strengths
  7.  Strategic Roadmap                – fixed three-step plan
  Footer on every page                 – CTA, "Page X of N", copyright
"""

import io
import os
import datetime
import logging
import tempfile
from pathlib import Path
from xml.sax.saxutils import escape

import numpy as np

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.enums import TA_LEFT, TA_CENTER
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Image, KeepTogether
)
from reportlab.platypus.flowables import Flowable
from reportlab.pdfgen import canvas as rl_canvas

from health_engine.benchmark import compare_to_benchmark
from health_engine.constants import PRODUCT_NAME, PRODUCT_SUBTITLE, STATUS_POSITIVE, STATUS_NEGATIVE
from health_engine.errors import ReportRenderError
from health_engine.formatting import format_metric
from health_engine.models import HealthCheckResult

_logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────
# BRAND / DESIGN CONSTANTS
# ─────────────────────────────────────────────────────────────────
NAVY        = colors.HexColor("#1E293B")
EMERALD     = colors.HexColor("#10B981")
EMERALD_BG  = colors.HexColor("#ECFDF5")
SOFT_RED    = colors.HexColor("#EF4444")
SOFT_RED_BG = colors.HexColor("#FEF2F2")
MUTED       = colors.HexColor("#64748B")
LIGHT_BG    = colors.HexColor("#F8FAFC")
GREY_LINE   = colors.HexColor("#E5E7EB")
WHITE       = colors.white

PAGE_W, PAGE_H = A4
MARGIN    = 20 * mm
CONTENT_W = PAGE_W - 2 * MARGIN
HEADER_H  = 45 * mm
FOOTER_H  = 30 * mm

FILE_PREFIX = PRODUCT_NAME.split()[0]
REPORT_TITLE = "Report: Your Company's Profitability Map"
FOOTER_CTA = "Want to recover profit? Book a session with a Controller."
COPYRIGHT = f"{PRODUCT_NAME} © 2025"
COMPANY_PLACEHOLDER = "Not provided"

STATUS_LABELS = {
    STATUS_POSITIVE: ("Good",    EMERALD),
    STATUS_NEGATIVE: ("Alert",   SOFT_RED),
}
NEUTRAL_LABEL = ("Neutral", MUTED)

ROADMAP_STEPS = [
    ("Cost-Center Allocation",
     "Introduce cost centers for precise tracking of costs in every department."),
    ("AI Budgeting",
     "Use artificial intelligence to forecast the budget and detect variances automatically."),
    ("TDABC Model",
     "Implement Time-Driven Activity-Based Costing for accurate allocation of overhead costs."),
]

# ─────────────────────────────────────────────────────────────────
# MATPLOTLIB THEME
# ─────────────────────────────────────────────────────────────────
CHART_COLORS = ["#10B981", "#475569", "#1E293B"]

MPL_STYLE = {
    "font.family":          "DejaVu Sans",
    "axes.facecolor":       "#FAFBFC",
    "figure.facecolor":     "white",
    "axes.edgecolor":       "#D1D5DB",
    "axes.grid":            True,
    "grid.color":           "#E5E7EB",
    "grid.linestyle":       "--",
    "grid.linewidth":       0.5,
    "axes.spines.top":      False,
    "axes.spines.right":    False,
    "axes.titlesize":       9,
    "axes.titleweight":     "bold",
    "axes.titlecolor":      "#1E293B",
    "axes.labelsize":       8,
    "xtick.labelsize":      7.5,
    "ytick.labelsize":      7.5,
    "legend.fontsize":      7.5,
    "legend.framealpha":    0.85,
    "legend.edgecolor":     "#E5E7EB",
}

def _mpl_to_img(fig, dpi=160):
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight", facecolor=fig.get_facecolor())
    buf.seek(0)
    plt.close(fig)
    return buf

def _long_date(d):
    return f"{d:%B} {d.day}, {d.year}"

# ─────────────────────────────────────────────────────────────────
# CUSTOM FLOWABLES
# ─────────────────────────────────────────────────────────────────
class RoadmapStep(Flowable):
    """Numbered circle, title and wrapped description; optional connector to the next step."""
    def __init__(self, number, title, description, styles, connector=True, height=28*mm):
        super().__init__()
        self.number = number; self.title = title
        self.connector = connector
        self.width = CONTENT_W; self._height = height
        self._desc = Paragraph(escape(description), styles["body"])

    def wrap(self, *a): return self.width, self._height

    def draw(self):
        c = self.canv
        r = 5 * mm
        cx, cy = r, self._height - r
        # Connector to the next circle
        if self.connector:
            c.setStrokeColor(EMERALD)
            c.setLineWidth(1.4)
            c.line(cx, cy - r, cx, 0)
        # Step circle
        c.setFillColor(EMERALD)
        c.circle(cx, cy, r, fill=1, stroke=0)
        c.setFillColor(WHITE)
        c.setFont("Helvetica-Bold", 12)
        c.drawCentredString(cx, cy - 4, str(self.number))
        # Title
        text_x = 2 * r + 6 * mm
        c.setFillColor(NAVY)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(text_x, self._height - 6 * mm, self.title)
        # Description
        avail = self.width - text_x
        _, h = self._desc.wrap(avail, self._height)
        self._desc.drawOn(c, text_x, self._height - 9 * mm - h)


class NumberedCanvas(rl_canvas.Canvas):
    """Canvas that defers the footer until the total page count is known."""

    def __init__(self, *args, **kwargs):
        rl_canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_footer(page_count)
            rl_canvas.Canvas.showPage(self)
        rl_canvas.Canvas.save(self)

    def draw_footer(self, page_count):
        pw, _ = self._pagesize
        self.saveState()
        # Footer rule
        self.setStrokeColor(NAVY)
        self.setLineWidth(0.3)
        self.line(MARGIN, 25*mm, pw - MARGIN, 25*mm)
        # CTA
        self.setFillColor(NAVY)
        self.setFont("Helvetica-Bold", 10)
        self.drawString(MARGIN, 18*mm, FOOTER_CTA)
        # Page number
        self.setFillColor(MUTED)
        self.setFont("Helvetica", 9)
        self.drawRightString(pw - MARGIN, 18*mm, f"Page {self._pageNumber} of {page_count}")
        # Branding
        self.setFont("Helvetica", 8)
        self.drawString(MARGIN, 10*mm, COPYRIGHT)
        self.restoreState()


def _on_first_page(canvas, doc):
    """Full-bleed navy header band with product name and subtitle."""
    canvas.saveState()
    pw, ph = A4
    canvas.setFillColor(NAVY)
    canvas.rect(0, ph - HEADER_H, pw, HEADER_H, fill=1, stroke=0)
    canvas.setFillColor(WHITE)
    canvas.setFont("Helvetica-Bold", 24)
    canvas.drawString(MARGIN, ph - 22*mm, PRODUCT_NAME)
    canvas.setFont("Helvetica", 11)
    canvas.drawString(MARGIN, ph - 32*mm, PRODUCT_SUBTITLE)
    canvas.restoreState()


def _on_later_pages(canvas, doc):
    pass  # footer is drawn by NumberedCanvas


# ─────────────────────────────────────────────────────────────────
# STYLES
# ─────────────────────────────────────────────────────────────────
def _styles():
    def S(name, **kw): return ParagraphStyle(name, **kw)
    return {
        "title":      S("title",     fontName="Helvetica-Bold", fontSize=20, textColor=NAVY, leading=24, spaceAfter=4*mm),
        "meta":       S("meta",      fontName="Helvetica",      fontSize=10, textColor=MUTED, leading=14),
        "h1":         S("h1",        fontName="Helvetica-Bold", fontSize=14, textColor=NAVY, spaceBefore=4, spaceAfter=8),
        "h_panel":    S("hPanel",    fontName="Helvetica-Bold", fontSize=12, textColor=NAVY, spaceAfter=6),
        "h_warn":     S("hWarn",     fontName="Helvetica-Bold", fontSize=11, textColor=SOFT_RED, spaceBefore=2, spaceAfter=6),
        "h_good":     S("hGood",     fontName="Helvetica-Bold", fontSize=11, textColor=EMERALD, spaceBefore=8, spaceAfter=6),
        "body":       S("body",      fontName="Helvetica",      fontSize=10, textColor=MUTED, leading=14),
        "item_warn":  S("itemWarn",  fontName="Helvetica-Bold", fontSize=10, textColor=SOFT_RED, leading=13),
        "item_good":  S("itemGood",  fontName="Helvetica-Bold", fontSize=10, textColor=EMERALD, leading=13),
        "item_desc":  S("itemDesc",  fontName="Helvetica",      fontSize=10, textColor=MUTED, leading=13, leftIndent=4*mm),
        "th":         S("th",        fontName="Helvetica-Bold", fontSize=10, textColor=WHITE, alignment=TA_CENTER),
        "th_left":    S("thL",       fontName="Helvetica-Bold", fontSize=10, textColor=WHITE, alignment=TA_LEFT),
        "td":         S("td",        fontName="Helvetica",      fontSize=10, textColor=NAVY, alignment=TA_CENTER),
        "td_bl":      S("tdBL",      fontName="Helvetica-Bold", fontSize=10, textColor=NAVY, alignment=TA_LEFT),
    }


# ─────────────────────────────────────────────────────────────────
# SHARED TABLE STYLE
# ─────────────────────────────────────────────────────────────────
def _ts():
    return TableStyle([
        ("BACKGROUND",    (0, 0), (-1, 0), NAVY),
        ("VALIGN",        (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING",    (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("LEFTPADDING",   (0, 0), (-1, -1), 6),
        ("RIGHTPADDING",  (0, 0), (-1, -1), 6),
        ("LINEBELOW",     (0, 1), (-1, -2), 0.25, GREY_LINE),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [WHITE, LIGHT_BG]),
    ])


def _panel(flowables, bg):
    """Single-cell table used as a filled box around wrapped content."""
    t = Table([[flowables]], colWidths=[CONTENT_W])
    t.setStyle(TableStyle([
        ("BACKGROUND",    (0, 0), (-1, -1), bg),
        ("TOPPADDING",    (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
        ("LEFTPADDING",   (0, 0), (-1, -1), 8),
        ("RIGHTPADDING",  (0, 0), (-1, -1), 8),
    ]))
    return t


# ─────────────────────────────────────────────────────────────────
# SECTIONS
# ─────────────────────────────────────────────────────────────────
def _build_title(story, styles, result, generated_at):
    story.append(Spacer(1, HEADER_H - 10*mm))
    story.append(Paragraph(escape(REPORT_TITLE), styles["title"]))
    meta_lines = [
        f"Company: {result.company_name or COMPANY_PLACEHOLDER}",
        f"Industry: {result.benchmark.industry_name}",
        f"Period: {result.report.period}",
        f"Generated: {_long_date(generated_at)}",
    ]
    for line in meta_lines:
        story.append(Paragraph(escape(line), styles["meta"]))
    story.append(Spacer(1, 8*mm))


def executive_summary_text(result: HealthCheckResult) -> str:
    """Margin-leak sentence; wording depends on the sign of margin minus benchmark."""
    margin = result.metrics.gross_margin
    avg = result.benchmark.avg_margin
    diff = margin - avg
    if diff < 0:
        return (f"A margin leak of {abs(diff):.1f} p.p. below the industry average "
                f"({avg:.1f}%) was detected. Your gross margin is {margin:.1f}%. "
                f"The potential to recover profitability is significant.")
    return (f"Your gross margin ({margin:.1f}%) exceeds the industry average "
            f"({avg:.1f}%) by {diff:.1f} p.p. The company shows good financial "
            f"health compared with its competitors.")


def _build_executive_summary(story, styles, result):
    panel = _panel([
        Paragraph("Executive Summary", styles["h_panel"]),
        Paragraph(escape(executive_summary_text(result)), styles["body"]),
    ], LIGHT_BG)
    story.append(KeepTogether([panel, Spacer(1, 8*mm)]))


def _build_benchmark_table(story, styles, comparisons):
    hdr = [Paragraph("Metric", styles["th_left"])] + [
        Paragraph(h, styles["th"]) for h in ["Your Result", "Industry Average", "Status"]]
    rows = [hdr]
    status_cmds = []
    for i, comp in enumerate(comparisons, start=1):
        label, color = STATUS_LABELS.get(comp.status, NEUTRAL_LABEL)
        rows.append([
            Paragraph(comp.label, styles["td_bl"]),
            format_metric(comp.metric, comp.value),
            format_metric(comp.metric, comp.benchmark_value),
            label,
        ])
        status_cmds.append(("TEXTCOLOR", (3, i), (3, i), color))
        if color is not MUTED:
            status_cmds.append(("FONTNAME", (3, i), (3, i), "Helvetica-Bold"))

    cw = [CONTENT_W * 0.36, CONTENT_W * 0.20, CONTENT_W * 0.24, CONTENT_W * 0.20]
    tbl = Table(rows, colWidths=cw, repeatRows=1)
    style = _ts()
    style.add("ALIGN", (1, 1), (-1, -1), "CENTER")
    style.add("FONTSIZE", (1, 1), (-1, -1), 10)
    style.add("TEXTCOLOR", (1, 1), (2, -1), NAVY)
    for cmd in status_cmds:
        style.add(*cmd)
    tbl.setStyle(style)

    story.append(KeepTogether([
        Paragraph("Comparison with the Industry Benchmark", styles["h1"]),
        tbl,
    ]))
    story.append(Spacer(1, 6*mm))


def _benchmark_chart(comparisons, figsize=(6.8, 2.7)):
    labels = [c.label for c in comparisons]
    series = {
        "Your company":     [c.value for c in comparisons],
        "Industry average": [c.benchmark_value for c in comparisons],
        "Best in class":    [c.best_in_class for c in comparisons],
    }
    with plt.rc_context(MPL_STYLE):
        fig, ax = plt.subplots(figsize=figsize)
        x = np.arange(len(labels))
        w = 0.8 / len(series)
        for i, (name, vals) in enumerate(series.items()):
            ax.bar(x + i * w - 0.4 + w / 2, vals, w, label=name,
                   color=CHART_COLORS[i % len(CHART_COLORS)], alpha=0.9, zorder=3)
        ax.set_xticks(x); ax.set_xticklabels(labels)
        ax.legend(loc="upper right")
        ax.set_title("Benchmark Comparison", pad=6)
        fig.tight_layout()
        return fig


def _build_chart(story, comparisons):
    img = _mpl_to_img(_benchmark_chart(comparisons))
    iw = CONTENT_W; ih = iw * 0.4
    story.append(Image(img, width=iw, height=ih))
    story.append(Spacer(1, 6*mm))


def _insight_items(recs, title_style, desc_style, bg):
    items = []
    for rec in recs:
        items.append(_panel([
            Paragraph(f"• {escape(rec.title)}", title_style),
            Paragraph(escape(rec.description), desc_style),
        ], bg))
        items.append(Spacer(1, 3*mm))
    return items


def _build_insights(story, styles, result):
    warnings = result.warnings
    strengths = result.strengths
    if not warnings and not strengths:
        return

    story.append(Paragraph("Detected Margin Leaks", styles["h1"]))
    if warnings:
        story.append(Paragraph("Areas needing attention:", styles["h_warn"]))
        story.extend(_insight_items(warnings, styles["item_warn"], styles["item_desc"], SOFT_RED_BG))
    if strengths:
        story.append(Paragraph("Strengths:", styles["h_good"]))
        story.extend(_insight_items(strengths, styles["item_good"], styles["item_desc"], EMERALD_BG))
    story.append(Spacer(1, 6*mm))


def _build_roadmap(story, styles):
    steps = [Paragraph("Strategic Roadmap", styles["h1"])]
    for i, (title, desc) in enumerate(ROADMAP_STEPS, start=1):
        steps.append(RoadmapStep(i, title, desc, styles, connector=i < len(ROADMAP_STEPS)))
    story.append(KeepTogether(steps))


# ─────────────────────────────────────────────────────────────────
# MAIN ENTRY POINTS
# ─────────────────────────────────────────────────────────────────
def report_filename(period: str, timestamp_ms: int = None) -> str:
    """<product>_Report_<period>_<unix-millis>.pdf; the timestamp keeps repeated exports distinct."""
    if timestamp_ms is None:
        timestamp_ms = int(datetime.datetime.now().timestamp() * 1000)
    return f"{FILE_PREFIX}_Report_{period}_{timestamp_ms}.pdf"


def generate_health_report_pdf(result: HealthCheckResult, generated_at: datetime.datetime = None) -> bytes:
    """
    Render the full health-check report.

    Returns:
        bytes: Complete PDF byte string for st.download_button.

    Raises:
        ReportRenderError: If layout or emission fails. Nothing is returned
            in that case, so no partial document can reach the caller.
        MissingBenchmarkError: If result.benchmark is None.
    """
    generated_at = generated_at or datetime.datetime.now()
    buf = io.BytesIO()

    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=MARGIN, rightMargin=MARGIN,
        topMargin=MARGIN, bottomMargin=FOOTER_H + 2*mm,
        title=f"{PRODUCT_NAME}: {PRODUCT_SUBTITLE}",
        author=PRODUCT_NAME,
        subject=f"Financial health report {result.report.period}",
        creator=PRODUCT_NAME,
    )

    # Table and chart rows always come from the comparator
    comparisons = compare_to_benchmark(result.metrics, result.benchmark)

    ST = _styles()
    story = []
    try:
        _build_title(story, ST, result, generated_at)
        _build_executive_summary(story, ST, result)
        _build_benchmark_table(story, ST, comparisons)
        _build_chart(story, comparisons)
        _build_insights(story, ST, result)
        _build_roadmap(story, ST)
        doc.build(story, onFirstPage=_on_first_page, onLaterPages=_on_later_pages,
                  canvasmaker=NumberedCanvas)
    except Exception as exc:
        _logger.exception("PDF rendering failed for period %s", result.report.period)
        raise ReportRenderError(f"Could not render report for {result.report.period}: {exc}") from exc

    buf.seek(0)
    return buf.read()


def save_health_report_pdf(result: HealthCheckResult, directory, generated_at: datetime.datetime = None) -> Path:
    """
    Render and write the report into ``directory``.

    The PDF is written to a temporary file in the same directory and then
    renamed, so the target path either holds a complete document or does
    not exist.
    """
    generated_at = generated_at or datetime.datetime.now()
    pdf_bytes = generate_health_report_pdf(result, generated_at)

    directory = Path(directory)
    target = directory / report_filename(result.report.period, int(generated_at.timestamp() * 1000))
    tmp_path = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".pdf.part")
        with os.fdopen(fd, "wb") as fh:
            fh.write(pdf_bytes)
        os.replace(tmp_path, target)
    except OSError as exc:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ReportRenderError(f"Could not write report to {target}: {exc}") from exc

    _logger.info("Saved health report %s (%d bytes)", target, len(pdf_bytes))
    return target
