# ui/upload.py
"""
Upload page: pick an industry and run a (simulated) JPK_KR upload.
"""

from __future__ import annotations

import logging
from typing import MutableMapping, Optional

import streamlit as st

from health_engine.analysis import load_latest_health_check, run_health_check
from health_engine.config import Settings
from health_engine.constants import DEFAULT_BENCHMARKS, INDUSTRIES, PRODUCT_NAME, PRODUCT_SUBTITLE
from health_engine.errors import HealthCheckError
from health_engine.models import HealthCheckResult
from health_engine.session import SessionContext
from health_engine.store import RecordStore

_logger = logging.getLogger(__name__)

BORDER = "#E5E5EA"
GREY   = "#6E6E73"


def _industry_label(industry: str) -> str:
    return DEFAULT_BENCHMARKS.get(industry, {}).get("industry_name", industry)


def render_upload(store: RecordStore, session: SessionContext, settings: Settings) -> Optional[HealthCheckResult]:
    """
    Render the upload form. Returns the new HealthCheckResult after a
    successful run, otherwise None.
    """
    st.markdown(
        f'<h1 style="font-size:32px;font-weight:800;margin-bottom:2px;">{PRODUCT_NAME}</h1>'
        f'<p style="color:{GREY};font-size:15px;margin-top:0;">{PRODUCT_SUBTITLE}</p>',
        unsafe_allow_html=True,
    )
    st.markdown(f'<hr style="border:none;border-top:1px solid {BORDER};margin:14px 0 18px 0;">',
                unsafe_allow_html=True)

    col_form, col_info = st.columns([0.55, 0.45], gap="large")

    with col_info:
        st.markdown("**How it works**")
        st.caption(
            "Upload your JPK_KR ledger export. We derive gross margin, administrative "
            "burden, employee efficiency and the cash conversion cycle, then compare "
            "them with the average company in your industry."
        )
        st.caption("This build simulates the parsing step with realistic sample figures.")

    with col_form:
        industry = st.selectbox("Industry", list(INDUSTRIES), format_func=_industry_label,
                                key="upload_industry")
        company_name = st.text_input("Company name (optional)", value=settings.company_name or "",
                                     key="upload_company")

        if not st.button("Upload JPK file (simulated)", type="primary", width="stretch"):
            return None

        with st.spinner("Analysing ledger…"):
            try:
                result = run_health_check(store, session, industry,
                                          company_name=company_name.strip() or None)
            except HealthCheckError as exc:
                _logger.exception("Health check failed for user %s", session.user_id)
                st.error(f"Analysis failed: {exc}")
                return None

    st.session_state["industry"] = industry
    st.session_state["health_result"] = result
    return result


def restore_latest_result(state: MutableMapping, store: RecordStore, session: SessionContext,
                          settings: Settings) -> Optional[HealthCheckResult]:
    """
    Rebuild the dashboard bundle from the user's newest stored report.

    The industry is the last analysed one, else the one picked on this
    page. Returns None when no industry is known or nothing is stored.
    HealthCheckError from the store or the pipeline propagates.
    """
    industry = state.get("industry") or state.get("upload_industry")
    if not industry:
        return None
    result = load_latest_health_check(store, session, industry, company_name=settings.company_name)
    if result is not None:
        state["industry"] = result.benchmark.industry_type
        state["health_result"] = result
    return result
