# store.py
# ------------------------------------------------------------------
# Record-store boundary.
#
# The engine never talks to the database directly. Callers hand it
# values obtained through a RecordStore:
#   - list_reports(user_id)     financial_reports rows, newest first
#   - get_benchmark(industry)   one industry_benchmarks row or None
#   - insert_report(user_id, r) persist a newly generated report
#
# Two implementations:
#   InMemoryRecordStore  – process-local, seeded with DEFAULT_BENCHMARKS.
#   SupabaseRecordStore  – PostgREST over HTTP. Every request has an
#                          explicit timeout and exponential-backoff retry
#                          on 429/503 and connection errors (writes only
#                          when the connection was never made); others
#                          raise RecordStoreError with the status code.
# ------------------------------------------------------------------

from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

import requests

from health_engine.constants import DEFAULT_BENCHMARKS
from health_engine.errors import RecordStoreError
from health_engine.models import Benchmark, FinancialReport

_logger = logging.getLogger(__name__)

REPORTS_TABLE = "financial_reports"
BENCHMARKS_TABLE = "industry_benchmarks"


class RecordStore(Protocol):
    def list_reports(self, user_id: str, limit: Optional[int] = None) -> List[FinancialReport]: ...

    def get_benchmark(self, industry: str) -> Optional[Benchmark]: ...

    def insert_report(self, user_id: str, report: FinancialReport) -> dict: ...


def report_to_row(user_id: str, report: FinancialReport) -> dict:
    """Insert payload for the financial_reports table."""
    return {"user_id": user_id, **report.to_row()}


# =================================================================
# In-memory store
# =================================================================

class InMemoryRecordStore:
    """Process-local store used in development and tests."""

    def __init__(self, benchmarks: Optional[Dict[str, dict]] = None):
        seed = DEFAULT_BENCHMARKS if benchmarks is None else benchmarks
        self._benchmarks = {key: dict(row) for key, row in seed.items()}
        self._reports: List[dict] = []
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def list_reports(self, user_id: str, limit: Optional[int] = None) -> List[FinancialReport]:
        with self._lock:
            rows = [r for r in self._reports if r["user_id"] == user_id]
        rows.sort(key=lambda r: r["_seq"], reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [FinancialReport.from_row(r) for r in rows]

    def get_benchmark(self, industry: str) -> Optional[Benchmark]:
        row = self._benchmarks.get(industry)
        return Benchmark.from_row(row) if row else None

    def insert_report(self, user_id: str, report: FinancialReport) -> dict:
        row = report_to_row(user_id, report)
        row["id"] = str(uuid.uuid4())
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        with self._lock:
            row["_seq"] = next(self._sequence)
            self._reports.append(row)
        _logger.info("Stored report %s for user %s (period %s)", row["id"], user_id, report.period)
        return {k: v for k, v in row.items() if not k.startswith("_")}


# =================================================================
# Supabase (PostgREST) store
# =================================================================

# Request timeouts: (connect_timeout_s, read_timeout_s)
_TIMEOUT = (10, 30)

# Retry configuration
_MAX_RETRIES = 3
_RETRY_BACKOFF_BASE = 1.5   # seconds; doubles each retry

# Only these are retried after a timeout or dropped connection
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


class SupabaseRecordStore:
    """
    RecordStore backed by a Supabase project's REST endpoint.

    Row-level security applies: pass the signed-in user's access token so
    queries run with their permissions. Without it, the anon key is used.
    """

    def __init__(self, base_url: str, api_key: str, access_token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        if not base_url or not api_key:
            raise ValueError("SupabaseRecordStore needs both a base URL and an API key")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._http = session or requests.Session()

    def _headers(self, prefer: Optional[str] = None) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request_with_retry(self, method: str, table: str, params: Optional[dict] = None,
                            payload: Optional[dict] = None, prefer: Optional[str] = None):
        """
        Send one PostgREST request with timeout and retry.

        Retries on:
          - 429 Too Many Requests (honours Retry-After)
          - 503 Service Unavailable
          - requests.ConnectionError / requests.Timeout for GET; a POST is
            retried only on ConnectTimeout, since otherwise the row may
            already have been written

        Does NOT retry on other 4xx/5xx responses.
        """
        url = f"{self.base_url}/rest/v1/{table}"
        last_exc = None

        for attempt in range(_MAX_RETRIES):
            try:
                resp = self._http.request(
                    method, url, params=params, json=payload,
                    headers=self._headers(prefer), timeout=_TIMEOUT,
                )

                if resp.status_code in (200, 201):
                    return resp.json()

                if resp.status_code in (429, 503):
                    wait = _RETRY_BACKOFF_BASE * (2 ** attempt)
                    retry_after = resp.headers.get("Retry-After")
                    if retry_after:
                        try:
                            wait = max(wait, float(retry_after))
                        except ValueError:
                            pass
                    _logger.warning("%s %s returned %s; retrying in %.1fs",
                                    method, table, resp.status_code, wait)
                    time.sleep(wait)
                    last_exc = RecordStoreError(table, resp.status_code, resp.reason)
                    continue

                raise RecordStoreError(table, resp.status_code, resp.text or resp.reason)

            except RecordStoreError:
                raise
            except (requests.ConnectionError, requests.Timeout) as exc:
                if method not in _IDEMPOTENT_METHODS and not isinstance(exc, requests.ConnectTimeout):
                    raise RecordStoreError(table, None, f"{method} outcome unknown: {exc}") from exc
                wait = _RETRY_BACKOFF_BASE * (2 ** attempt)
                _logger.warning("%s %s failed (%s); retrying in %.1fs", method, table, exc, wait)
                time.sleep(wait)
                last_exc = exc
                continue

        raise RecordStoreError(table, None, f"Failed after {_MAX_RETRIES} retries: {last_exc}")

    def list_reports(self, user_id: str, limit: Optional[int] = None) -> List[FinancialReport]:
        params = {
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }
        if limit is not None:
            params["limit"] = str(limit)
        rows = self._request_with_retry("GET", REPORTS_TABLE, params=params)
        return [FinancialReport.from_row(row) for row in rows]

    def get_benchmark(self, industry: str) -> Optional[Benchmark]:
        params = {
            "select": "*",
            "industry_type": f"eq.{industry}",
            "limit": "1",
        }
        rows = self._request_with_retry("GET", BENCHMARKS_TABLE, params=params)
        if not rows:
            return None
        return Benchmark.from_row(rows[0])

    def insert_report(self, user_id: str, report: FinancialReport) -> dict:
        rows = self._request_with_retry(
            "POST", REPORTS_TABLE,
            payload=report_to_row(user_id, report),
            prefer="return=representation",
        )
        stored = rows[0] if isinstance(rows, list) and rows else {}
        _logger.info("Stored report %s for user %s (period %s)",
                     stored.get("id"), user_id, report.period)
        return stored


def build_record_store(settings, access_token: Optional[str] = None) -> RecordStore:
    """Pick the Supabase store when credentials are configured, else in-memory."""
    if settings.use_remote_store:
        return SupabaseRecordStore(settings.supabase_url, settings.supabase_anon_key,
                                   access_token=access_token)
    _logger.info("SUPABASE_URL / SUPABASE_ANON_KEY not set; using in-memory record store")
    return InMemoryRecordStore()
