"""Append analysis results to a Google Sheet with a service account.

Persistence is a side channel: failures are logged and swallowed so the
analysis response is never affected.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from name_fortune.config import Settings
from name_fortune.models import AnalysisResult

logger = logging.getLogger("name_fortune")

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

ROW_COLUMNS = [
    "timestamp",
    "name",
    "hanja",
    "score",
    "grade",
    "personalityTitle",
    "personalityDesc",
    "recommended1",
    "recommended2",
    "recommended3",
    "avoid1",
    "avoid2",
    "avoid3",
    "ip",
]

FORWARDED_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "client-ip", "x-nf-client-connection-ip")


def extract_client_ip(headers: Mapping[str, str], fallback: Optional[str] = None) -> str:
    for header in FORWARDED_IP_HEADERS:
        value = (headers.get(header) or "").strip()
        if value:
            # x-forwarded-for lists the original client first.
            return value.split(",")[0].strip()
    return fallback or "unknown"


def build_row(
    result: AnalysisResult,
    *,
    name: str,
    hanja: str,
    ip: str,
    timestamp: Optional[datetime] = None,
) -> list[Any]:
    ts = (timestamp or datetime.now(timezone.utc)).isoformat()
    return [
        ts,
        name,
        hanja or "",
        result.score,
        result.grade,
        result.personality_title,
        result.personality_desc,
        result.recommended1,
        result.recommended2,
        result.recommended3,
        result.avoid1,
        result.avoid2,
        result.avoid3,
        ip,
    ]


def _build_credentials(settings: Settings):
    from google.oauth2 import service_account

    info = {
        "type": "service_account",
        "client_email": settings.service_account_email,
        "private_key": settings.service_account_private_key,
        "token_uri": TOKEN_URI,
    }
    return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)


def _build_sheets_service(settings: Settings):
    from googleapiclient.discovery import build

    credentials = _build_credentials(settings)
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


def append_row(settings: Settings, row: list[Any], service: Any = None) -> dict[str, Any]:
    """Append one row to the configured range. Raises on API failure."""
    sheets = service or _build_sheets_service(settings)
    request = sheets.spreadsheets().values().append(
        spreadsheetId=settings.sheet_id,
        range=settings.sheet_range,
        valueInputOption="USER_ENTERED",
        insertDataOption="INSERT_ROWS",
        body={"values": [row]},
    )
    return request.execute()


async def persist_analysis(
    settings: Settings,
    result: AnalysisResult,
    *,
    name: str,
    hanja: str,
    ip: str,
    request_id: str = "",
    service: Any = None,
) -> bool:
    """Append the result when persistence is configured; return whether a row was written."""
    if not settings.sheets_configured:
        logger.debug("Sheet persistence not configured request_id=%s", request_id)
        return False
    row = build_row(result, name=name, hanja=hanja, ip=ip)
    try:
        await asyncio.to_thread(append_row, settings, row, service)
    except Exception as e:
        logger.warning(
            "Sheet append failed request_id=%s error_type=%s error=%s",
            request_id,
            type(e).__name__,
            str(e),
        )
        return False
    logger.info("Sheet row appended request_id=%s range=%s", request_id, settings.sheet_range)
    return True
