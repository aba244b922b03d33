# tests/test_upload.py
# -----------------------------------------------------------------------
# Tests for restore_latest_result in ui/upload.py
#
# A plain dict stands in for st.session_state; the in-memory record
# store holds the previously uploaded reports.
# -----------------------------------------------------------------------

import sys
import os

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from health_engine.analysis import run_health_check
from health_engine.config import Settings
from health_engine.errors import MissingBenchmarkError
from health_engine.session import anonymous_session
from health_engine.store import InMemoryRecordStore
from ui.upload import restore_latest_result

SETTINGS = Settings(company_name="Acme")


# ═══════════════════════════════════════════════════════════════════════
# restore_latest_result
# ═══════════════════════════════════════════════════════════════════════

class TestRestoreLatestResult:

    def _stored(self, industry="it_services"):
        store = InMemoryRecordStore()
        session = anonymous_session("u1")
        latest = run_health_check(store, session, industry, rng=np.random.default_rng(4))
        return store, session, latest

    def test_returning_user_uses_selected_industry(self):
        store, session, latest = self._stored()
        state = {"industry": None, "health_result": None, "upload_industry": "it_services"}

        result = restore_latest_result(state, store, session, SETTINGS)

        assert result.report == latest.report
        assert result.company_name == "Acme"
        assert state["health_result"] is result
        assert state["industry"] == "it_services"

    def test_last_analysed_industry_wins(self):
        store, session, _ = self._stored("ecommerce")
        state = {"industry": "ecommerce", "upload_industry": "manufacturing"}
        result = restore_latest_result(state, store, session, SETTINGS)
        assert result.benchmark.industry_type == "ecommerce"

    def test_nothing_stored(self):
        state = {"industry": None, "health_result": None, "upload_industry": "manufacturing"}
        assert restore_latest_result(state, InMemoryRecordStore(), anonymous_session("u1"), SETTINGS) is None
        assert state["health_result"] is None

    def test_no_industry_known(self):
        store, session, _ = self._stored()
        state = {"industry": None, "health_result": None}
        assert restore_latest_result(state, store, session, SETTINGS) is None
        assert state["health_result"] is None

    def test_pipeline_errors_propagate(self):
        store = InMemoryRecordStore(benchmarks={})
        session = anonymous_session("u1")
        store.insert_report("u1", self._stored()[2].report)
        state = {"upload_industry": "it_services", "health_result": None}
        with pytest.raises(MissingBenchmarkError):
            restore_latest_result(state, store, session, SETTINGS)
        assert state["health_result"] is None
