"""Environment-driven settings.

Values come from the process environment, optionally seeded from a ``.env``
file next to the package or at the repository root. Variables that are
already set in the process are never overridden.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

MODULE_DIR = Path(__file__).resolve().parent
REPO_ROOT = MODULE_DIR.parent

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_SHEET_RANGE = "Sheet1!A:N"

logger = logging.getLogger("name_fortune")


def _is_truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _first_nonempty_env(*keys: str) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "").strip().upper() or "INFO"
    if level == "WARN":
        return "WARNING"
    if level not in LOG_LEVELS:
        logger.warning("Invalid LOG_LEVEL=%r; using INFO", raw)
        return "INFO"
    return level


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default


def load_env_files() -> None:
    for path in (MODULE_DIR / ".env", REPO_ROOT / ".env"):
        if path.is_file():
            load_dotenv(dotenv_path=path, override=False)


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str]
    gemini_model: str
    gemini_timeout_sec: float
    service_account_email: Optional[str]
    service_account_private_key: Optional[str]
    sheet_id: Optional[str]
    sheet_range: str
    allowed_origins: list[str]
    log_level: str
    scoring_profile: str
    refinement_enabled: bool

    @property
    def refinement_configured(self) -> bool:
        return self.refinement_enabled and bool(self.gemini_api_key)

    @property
    def sheets_configured(self) -> bool:
        return bool(self.service_account_email and self.service_account_private_key and self.sheet_id)


def settings_from_env() -> Settings:
    private_key = _first_nonempty_env("GOOGLE_PRIVATE_KEY")
    if private_key:
        # Keys pasted into dashboards usually carry literal "\n" sequences.
        private_key = private_key.replace("\\n", "\n")
    origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
    return Settings(
        gemini_api_key=_first_nonempty_env("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        gemini_model=_first_nonempty_env("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        gemini_timeout_sec=_env_float("GEMINI_TIMEOUT_SEC", 30.0, minimum=1.0),
        service_account_email=_first_nonempty_env("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
        service_account_private_key=private_key,
        sheet_id=_first_nonempty_env("GOOGLE_SHEET_ID"),
        sheet_range=_first_nonempty_env("GOOGLE_SHEET_RANGE") or DEFAULT_SHEET_RANGE,
        allowed_origins=origins or ["*"],
        log_level=_log_level(os.getenv("LOG_LEVEL")),
        scoring_profile=(os.getenv("SCORING_PROFILE", "standard").strip() or "standard").lower(),
        refinement_enabled=_is_truthy(os.getenv("REFINEMENT_ENABLED", "1")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_env_files()
    return settings_from_env()
