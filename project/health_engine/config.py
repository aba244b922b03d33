# config.py
# ------------------------------------------------------------------
# Runtime settings read from the environment.
#
# Credentials are never hard-coded. Set them before launching the app:
#   export SUPABASE_URL="https://<project>.supabase.co"
#   export SUPABASE_ANON_KEY="<anon key>"
# Without both, the app runs on the in-memory record store seeded with
# constants.DEFAULT_BENCHMARKS.
# ------------------------------------------------------------------

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

_DEFAULT_REPORT_DIR = "reports"
_DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_anon_key: str = ""
    report_dir: Path = Path(_DEFAULT_REPORT_DIR)
    log_level: str = _DEFAULT_LOG_LEVEL
    company_name: Optional[str] = None

    @property
    def use_remote_store(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def get_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ).
    """
    env = os.environ if environ is None else environ
    return Settings(
        supabase_url=env.get("SUPABASE_URL", "").strip().rstrip("/"),
        supabase_anon_key=env.get("SUPABASE_ANON_KEY", "").strip(),
        report_dir=Path(env.get("HEALTH_CHECK_REPORT_DIR", _DEFAULT_REPORT_DIR)),
        log_level=env.get("HEALTH_CHECK_LOG_LEVEL", _DEFAULT_LOG_LEVEL).upper(),
        company_name=env.get("HEALTH_CHECK_COMPANY_NAME") or None,
    )
