"""Best-effort refinement of the local result through the Gemini text API.

The local result is always computed first. A reply from the external model
replaces it only when it parses into a usable score; every failure keeps the
local result and is reported through logging, never to the caller.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from name_fortune.config import DEFAULT_GEMINI_MODEL
from name_fortune.models import AnalysisResult
from name_fortune.scoring import grade_for

logger = logging.getLogger("name_fortune")
audit_logger = logging.getLogger("refinement_audit")

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GENERATION_CONFIG = {
    "temperature": 0.3,
    "topK": 20,
    "topP": 0.8,
    "maxOutputTokens": 1024,
}

# Example score printed in the prompt template; a reply echoing it back is degenerate.
SENTINEL_SCORE = 75
MIN_OVERRIDE_SCORE = 1
MAX_OVERRIDE_SCORE = 100

_LINE_PREFIX = r"^[\s*#>•\-]*(?:\(?\d{1,2}[.)]\s*)?[\s*#>•\-]*"

FIELD_LABELS = [
    ("score", "점수"),
    ("grade", "등급"),
    ("personality_title", "성향제목"),
    ("personality_desc", "성향설명"),
    ("recommended1", "추천물건1"),
    ("recommended2", "추천물건2"),
    ("recommended3", "추천물건3"),
    ("avoid1", "피할물건1"),
    ("avoid2", "피할물건2"),
    ("avoid3", "피할물건3"),
]

FIELD_PATTERNS: list[tuple[str, re.Pattern]] = [
    (key, re.compile(_LINE_PREFIX + label + r"\s*\**\s*[:：]\s*\**\s*" + (r"(\d+)" if key == "score" else r"(.+)")))
    for key, label in FIELD_LABELS
]


class RefinementError(RuntimeError):
    """The external model could not be reached or returned an unusable payload."""


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _canonical_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _sha256_hex(value: Any) -> str:
    return hashlib.sha256(_canonical_json(value).encode("utf-8")).hexdigest()


def build_prompt(name: str, hanja: str = "") -> str:
    return f"""한국의 전통적인 작명 이론을 바탕으로 다음 이름을 분석해주세요.

이름: {name}
한자: {hanja or '없음'}

반드시 다음 형식으로만 답변해주세요:

점수: 85
등급: 우수
성향제목: 리더십이 강한 성향
성향설명: 타고난 지도력과 추진력을 가지고 있습니다.
추천물건1: 황금 반지
추천물건2: 붉은 보석
추천물건3: 나무 목걸이
피할물건1: 검은 옷
피할물건2: 차가운 금속
피할물건3: 깨지는 그릇

위 형식을 정확히 따라 {name} 이름을 분석해주세요."""


def build_gemini_payload(prompt: str) -> dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": dict(GENERATION_CONFIG),
    }


def extract_candidate_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise RefinementError(f"Gemini API 응답 오류: {_canonical_json(data)[:500]}") from e
    if not isinstance(text, str):
        raise RefinementError("Gemini API 응답 텍스트가 문자열이 아닙니다.")
    return text


async def call_gemini_api(
    prompt: str,
    *,
    api_key: str,
    model: str = DEFAULT_GEMINI_MODEL,
    client: Optional[httpx.AsyncClient] = None,
    timeout_sec: float = 30.0,
) -> str:
    if not api_key:
        raise RefinementError("Gemini API 키가 설정되지 않았습니다.")

    url = GEMINI_ENDPOINT.format(model=model)
    payload = build_gemini_payload(prompt)
    owns_client = client is None
    http_client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec, connect=10.0))
    try:
        response = await http_client.post(url, params={"key": api_key}, json=payload)
    finally:
        if owns_client:
            await http_client.aclose()

    if not response.is_success:
        raise RefinementError(f"Gemini API 호출 실패: {response.status_code} {response.reason_phrase}")
    try:
        data = response.json()
    except ValueError as e:
        raise RefinementError("Gemini API 응답이 JSON 형식이 아닙니다.") from e
    return extract_candidate_text(data)


def parse_reply(text: Optional[str]) -> dict[str, Any]:
    """Parse the line-oriented reply template.

    Returns ``{"score": None}`` when the reply is empty or carries no score in
    1..100; unmatched lines are ignored.
    """
    if not isinstance(text, str) or not text.strip():
        logger.debug("Refinement reply is empty")
        return {"score": None}

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    result: dict[str, Any] = {}
    for line in lines:
        for key, pattern in FIELD_PATTERNS:
            match = pattern.search(line)
            if not match:
                continue
            value = match.group(1).strip()
            if key == "score":
                result[key] = int(value)
            elif value:
                result[key] = value.strip("* ")
            break

    score = result.get("score")
    if isinstance(score, int) and MIN_OVERRIDE_SCORE <= score <= MAX_OVERRIDE_SCORE:
        return result
    logger.debug("Refinement reply has no usable score parsed=%s", result)
    return {"score": None}


def is_usable_override(parsed: dict[str, Any]) -> bool:
    score = parsed.get("score") if isinstance(parsed, dict) else None
    if not isinstance(score, int) or isinstance(score, bool):
        return False
    if score < MIN_OVERRIDE_SCORE or score > MAX_OVERRIDE_SCORE:
        return False
    return score != SENTINEL_SCORE


def merge_override(local: AnalysisResult, parsed: dict[str, Any]) -> AnalysisResult:
    """Apply parsed fields over the local result; fields the reply lacks stay local."""
    update = {key: value for key, value in parsed.items() if value is not None}
    if "grade" not in update:
        update["grade"] = grade_for(update["score"])
    detailed = dict(local.detailed_analysis or {})
    detailed["source"] = "gemini"
    update["detailed_analysis"] = detailed
    return local.model_copy(update=update)


def _emit_refinement_audit_event(
    *,
    request_id: str,
    input_hash: str,
    model_used: str,
    outcome: str,
) -> dict[str, str]:
    event = {
        "request_id": request_id,
        "input_hash": input_hash,
        "timestamp_utc": _utc_iso_now(),
        "model_used": model_used,
        "outcome": outcome,
    }
    audit_logger.info(_canonical_json(event))
    return event


async def refine_result(
    local: AnalysisResult,
    *,
    name: str,
    hanja: str,
    api_key: Optional[str],
    model: str = DEFAULT_GEMINI_MODEL,
    request_id: str = "",
    client: Optional[httpx.AsyncClient] = None,
    timeout_sec: float = 30.0,
) -> AnalysisResult:
    """Return the refined result, or ``local`` unchanged on any failure."""
    if not api_key:
        logger.info("Gemini API key not configured; using local result request_id=%s", request_id)
        return local

    input_hash = _sha256_hex({"name": name, "hanja": hanja})
    model_used = f"gemini/{model}"
    try:
        logger.info("Refinement call started request_id=%s model=%s", request_id, model)
        reply = await call_gemini_api(
            build_prompt(name, hanja),
            api_key=api_key,
            model=model,
            client=client,
            timeout_sec=timeout_sec,
        )
        logger.debug("Refinement reply received request_id=%s length=%s", request_id, len(reply))
        parsed = parse_reply(reply)
    except Exception as e:
        logger.warning(
            "Refinement failed, using local result request_id=%s error_type=%s error=%s",
            request_id,
            type(e).__name__,
            str(e),
        )
        _emit_refinement_audit_event(
            request_id=request_id, input_hash=input_hash, model_used=model_used, outcome="error"
        )
        return local

    if not is_usable_override(parsed):
        logger.info(
            "Refinement reply rejected request_id=%s parsed_score=%s", request_id, parsed.get("score")
        )
        _emit_refinement_audit_event(
            request_id=request_id, input_hash=input_hash, model_used=model_used, outcome="rejected"
        )
        return local

    _emit_refinement_audit_event(
        request_id=request_id, input_hash=input_hash, model_used=model_used, outcome="applied"
    )
    return merge_override(local, parsed)
