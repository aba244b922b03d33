# ui/dashboard.py
"""
Client Dashboard
================
KPI cards, benchmark chart, gauges, insights, report history and the PDF
download for one HealthCheckResult.
"""

from __future__ import annotations

import datetime
import logging
from typing import List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from health_engine.benchmark import compare_to_benchmark
from health_engine.config import Settings
from health_engine.constants import STATUS_NEGATIVE, STATUS_POSITIVE
from health_engine.errors import HealthCheckError
from health_engine.formatting import (
    format_currency, format_days, format_difference, format_metric, format_multiple, format_percent,
)
from health_engine.history import build_metrics_history, period_over_period_change
from health_engine.models import AIRecommendation, HealthCheckResult, MetricComparison
from health_engine.session import SessionContext
from health_engine.store import RecordStore
from pdf_export import generate_health_report_pdf, report_filename, save_health_report_pdf

_logger = logging.getLogger(__name__)

# ── Design tokens ─────────────────────────────────────────────────────────────
UP      = "#10B981"
DOWN    = "#EF4444"
NAVY    = "#1E293B"
GREY    = "#64748B"
BORDER  = "#E5E5EA"
CARD_BG = "transparent"

STATUS_COLORS = {STATUS_POSITIVE: UP, STATUS_NEGATIVE: DOWN}

_CHART_LAYOUT = dict(
    template="plotly_white",
    plot_bgcolor="rgba(0,0,0,0)",
    paper_bgcolor="rgba(0,0,0,0)",
    font=dict(family="'Inter', 'Segoe UI', sans-serif", size=12),
)

_INSIGHT_COLORS = {"warning": DOWN, "success": UP, "info": GREY}


def _status_color(status: str) -> str:
    return STATUS_COLORS.get(status, GREY)


# ── UI helpers ────────────────────────────────────────────────────────────────

def _metric_card(label: str, value_str: str, trend_str: str, color: str) -> str:
    return f"""
<div style="background:{CARD_BG};border-radius:12px;padding:16px 18px;
     border:1px solid {BORDER};height:100%;">
  <div style="font-size:11px;font-weight:600;letter-spacing:0.05em;color:{GREY};
              text-transform:uppercase;margin-bottom:6px;">{label}</div>
  <div style="font-size:26px;font-weight:700;line-height:1.1;">{value_str}</div>
  <div style="font-size:12px;font-weight:600;color:{color};margin-top:6px;">{trend_str}</div>
</div>"""


def _verdict_card(title: str, body: str, color: str) -> str:
    return f"""
<div style="background:{CARD_BG};border-radius:12px;padding:14px 18px;border:1px solid {BORDER};
     border-left:4px solid {color};margin-bottom:10px;">
  <div style="font-size:14px;font-weight:700;color:{color};margin-bottom:4px;">{title}</div>
  <div style="font-size:13px;opacity:0.85;line-height:1.6;">{body}</div>
</div>"""


def _section_header(title: str, subtitle: str = "") -> None:
    sub = (f'<p style="color:{GREY};font-size:14px;margin:2px 0 0 0;">{subtitle}</p>'
           if subtitle else "")
    st.markdown(
        f'<div style="margin:28px 0 12px 0;">'
        f'<h3 style="font-size:20px;font-weight:700;margin:0;">{title}</h3>{sub}</div>',
        unsafe_allow_html=True)


# ── Sections ──────────────────────────────────────────────────────────────────

def _render_kpi_cards(comparisons: List[MetricComparison]) -> None:
    cols = st.columns(len(comparisons))
    for col, comp in zip(cols, comparisons):
        arrow = "▲" if comp.trend == "up" else "▼"
        decimals = 0 if comp.metric == "cash_cycle" else (2 if comp.metric == "efficiency" else 1)
        trend = f"{arrow} {format_difference(comp.difference, decimals)}"
        with col:
            st.markdown(_metric_card(comp.label, format_metric(comp.metric, comp.value), trend,
                                     _status_color(comp.status)), unsafe_allow_html=True)


def _benchmark_chart(comparisons: List[MetricComparison]) -> go.Figure:
    labels = [c.label for c in comparisons]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Your company", x=labels, y=[c.value for c in comparisons],
        marker_color=[_status_color(c.status) for c in comparisons],
    ))
    fig.add_trace(go.Bar(
        name="Industry average", x=labels, y=[c.benchmark_value for c in comparisons],
        marker_color=GREY,
    ))
    fig.add_trace(go.Bar(
        name="Best in class", x=labels, y=[c.best_in_class for c in comparisons],
        marker_color=NAVY,
    ))
    fig.update_layout(barmode="group", height=360, margin=dict(l=10, r=10, t=30, b=10),
                      legend=dict(orientation="h", y=1.12), **_CHART_LAYOUT)
    return fig


def _gauge(comp: MetricComparison) -> go.Figure:
    fig = go.Figure(go.Indicator(
        mode="gauge+number+delta",
        value=comp.value,
        title={"text": comp.label, "font": {"size": 14}},
        delta={"reference": comp.benchmark_value,
               "increasing": {"color": DOWN if comp.inverted else UP},
               "decreasing": {"color": UP if comp.inverted else DOWN}},
        gauge={
            "axis": {"range": [0, max(comp.gauge_max, comp.value, comp.benchmark_value)]},
            "bar": {"color": _status_color(comp.status)},
            "threshold": {"line": {"color": NAVY, "width": 3}, "value": comp.benchmark_value},
        },
    ))
    fig.update_layout(height=220, margin=dict(l=20, r=20, t=50, b=10), **_CHART_LAYOUT)
    return fig


def _render_insights(recommendations: List[AIRecommendation]) -> None:
    for rec in recommendations:
        st.markdown(_verdict_card(rec.title, rec.description, _INSIGHT_COLORS.get(rec.type, GREY)),
                    unsafe_allow_html=True)


def _render_history(store: RecordStore, session: SessionContext) -> None:
    try:
        history = build_metrics_history(store.list_reports(session.user_id))
    except HealthCheckError as exc:
        _logger.exception("Could not load report history for %s", session.user_id)
        st.error(f"Could not load report history: {exc}")
        return
    if history.empty:
        st.caption("No stored reports yet.")
        return

    table_df = pd.DataFrame({
        "Period":         history["period"],
        "Revenue":        history["revenue"].map(format_currency),
        "Gross Margin":   history["gross_margin"].map(format_percent),
        "Admin Burden":   history["admin_burden"].map(format_percent),
        "Efficiency":     history["efficiency"].map(format_multiple),
        "Cash Cycle":     history["cash_cycle"].map(format_days),
    })
    change = period_over_period_change(history)
    table_df["Margin Δ"] = change["gross_margin"].map(lambda v: format_difference(v, 1, " p.p."))
    table_df["Cash Cycle Δ"] = change["cash_cycle"].map(lambda v: format_difference(v, 0, " days"))
    table_height = min(38 + 35 * len(table_df), 420)
    st.dataframe(table_df, hide_index=True, width="stretch", height=table_height)


def _render_export(result: HealthCheckResult, settings: Settings) -> None:
    col_dl, col_save = st.columns(2)
    now = datetime.datetime.now()
    try:
        pdf_bytes = generate_health_report_pdf(result, generated_at=now)
    except HealthCheckError as exc:
        st.error(f"Could not build the PDF report: {exc}")
        return

    with col_dl:
        st.download_button(
            label="⬇ Download PDF report",
            data=pdf_bytes,
            file_name=report_filename(result.report.period, int(now.timestamp() * 1000)),
            mime="application/pdf",
            width="stretch",
        )
    with col_save:
        if st.button("Save report to server", width="stretch"):
            try:
                path = save_health_report_pdf(result, settings.report_dir, generated_at=now)
            except HealthCheckError as exc:
                st.error(f"Could not save the PDF report: {exc}")
            else:
                st.success(f"Saved {path}")


# ── Page ──────────────────────────────────────────────────────────────────────

def render_dashboard(result: HealthCheckResult, store: RecordStore, session: SessionContext,
                     settings: Settings) -> None:
    st.markdown(
        '<h1 style="font-size:32px;font-weight:800;margin-bottom:2px;">Financial Health Check</h1>',
        unsafe_allow_html=True,
    )
    st.caption(f"{result.benchmark.industry_name} · period {result.report.period} · "
               f"revenue {format_currency(result.report.revenue)}")

    comparisons = compare_to_benchmark(result.metrics, result.benchmark)
    _render_kpi_cards(comparisons)

    _section_header("Benchmark comparison", "You vs. the industry average and best in class")
    st.plotly_chart(_benchmark_chart(comparisons), use_container_width=True)

    gauge_cols = st.columns(len(comparisons))
    for col, comp in zip(gauge_cols, comparisons):
        with col:
            st.plotly_chart(_gauge(comp), use_container_width=True)

    _section_header("AI insights", f"{len(result.warnings)} area(s) needing attention, "
                                   f"{len(result.strengths)} strength(s)")
    _render_insights(result.recommendations)

    _section_header("Report history")
    _render_history(store, session)

    _section_header("Export")
    _render_export(result, settings)
