# app.py
"""
SmartController AI - Financial Health Check
===========================================

Client-facing app:
- Upload (simulated JPK_KR ledger) for a chosen industry
- Dashboard with KPI cards, benchmark chart, gauges and AI insights
- Report history across stored uploads
- PDF export (download or save to HEALTH_CHECK_REPORT_DIR)

Data lives in Supabase when SUPABASE_URL / SUPABASE_ANON_KEY are set,
otherwise in a per-session in-memory store.
"""
import sys
import logging

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

import streamlit as st

from health_engine.config import get_settings
from health_engine.constants import PRODUCT_NAME
from health_engine.errors import HealthCheckError
from health_engine.session import SessionContext, anonymous_session
from health_engine.store import build_record_store

from ui.upload import render_upload, restore_latest_result
from ui.dashboard import render_dashboard

SETTINGS = get_settings()

logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
_logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Streamlit setup
# ---------------------------------------------------------
st.set_page_config(page_title=PRODUCT_NAME, layout="wide")


# ---------------------------------------------------------
# Session + record store
# ---------------------------------------------------------
def _current_session() -> SessionContext:
    """Identity for this browser session; set by the auth flow when present."""
    user_id = st.session_state.get("user_id")
    if user_id:
        return SessionContext(
            user_id=user_id,
            email=st.session_state.get("user_email"),
            roles=frozenset(st.session_state.get("user_roles", ())),
            access_token=st.session_state.get("access_token"),
        )
    return anonymous_session()


SESSION = _current_session()

if "record_store" not in st.session_state:
    st.session_state["record_store"] = build_record_store(SETTINGS, access_token=SESSION.access_token)
STORE = st.session_state["record_store"]

# ---------------------------------------------------------
# Router state
# ---------------------------------------------------------
if "page" not in st.session_state:
    st.session_state["page"] = "upload"
if "health_result" not in st.session_state:
    st.session_state["health_result"] = None
if "industry" not in st.session_state:
    st.session_state["industry"] = None


def _restore_latest_result():
    try:
        return restore_latest_result(st.session_state, STORE, SESSION, SETTINGS)
    except HealthCheckError as e:
        _logger.warning("Could not restore latest health check for %s: %s", SESSION.user_id, e)
        st.sidebar.error(f"Could not load your last report: {e}")
        return None


# =================================================================
# SIDEBAR
# =================================================================
current_page = st.session_state.get("page", "upload")

st.sidebar.markdown(
    f"""
    <div style="text-align:center;font-weight:900;font-size:30px;line-height:1.05;margin:0.2rem 0 0.9rem 0;">
        {PRODUCT_NAME}
    </div>
    """,
    unsafe_allow_html=True,
)
st.sidebar.markdown("---")

if st.sidebar.button("Upload", width="stretch",
                     type="primary" if current_page == "upload" else "secondary"):
    st.session_state["page"] = "upload"
    st.rerun()

if st.sidebar.button("Dashboard", width="stretch",
                     type="primary" if current_page == "dashboard" else "secondary"):
    # Returning user: no analysis in this browser session yet
    if st.session_state["health_result"] is None:
        _restore_latest_result()
    if st.session_state["health_result"] is not None:
        st.session_state["page"] = "dashboard"
        st.rerun()
    else:
        st.sidebar.warning("Upload a JPK file first.")

# =================================================================
# PAGES
# =================================================================
if st.session_state["page"] == "upload":
    if render_upload(STORE, SESSION, SETTINGS) is not None:
        st.session_state["page"] = "dashboard"
        st.rerun()

elif st.session_state["page"] == "dashboard":
    result = st.session_state["health_result"]
    if result is None:
        st.session_state["page"] = "upload"
        st.rerun()
    render_dashboard(result, STORE, SESSION, SETTINGS)

st.sidebar.markdown("---")
if SESSION.email:
    st.sidebar.caption(f"Signed in as {SESSION.email}" + (" (staff)" if SESSION.is_staff else ""))
st.sidebar.caption("Supabase" if SETTINGS.use_remote_store else "Local session store")
