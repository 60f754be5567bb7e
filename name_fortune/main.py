"""Name fortune backend (FastAPI).

- Local scoring: stroke grids + five-element / yin-yang / pronunciation harmony
- Optional refinement: Gemini text API, local result kept on any failure
- Optional persistence: Google Sheets append, failures swallowed
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from name_fortune.config import get_settings
from name_fortune.models import NameAnalyzeRequest
from name_fortune.refinement import refine_result
from name_fortune.saju import four_pillars_from_strings
from name_fortune.scoring import analyze_name, resolve_config
from name_fortune.sheets import extract_client_ip, persist_analysis

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s - %(message)s",
)

logger = logging.getLogger("name_fortune")

ANALYZE_PATHS = ("/analyze-name", "/.netlify/functions/analyze-name")

EMPTY_NAME_MESSAGE = "이름을 입력해주세요."
INVALID_BODY_MESSAGE = "잘못된 요청 형식입니다."
SERVER_ERROR_MESSAGE = "서버 오류가 발생했습니다."


def _cors_headers(request: Optional[Request] = None) -> dict[str, str]:
    origins = get_settings().allowed_origins
    origin = request.headers.get("origin", "") if request is not None else ""
    if "*" in origins:
        allow_origin = "*"
    elif origin in origins:
        allow_origin = origin
    else:
        allow_origin = origins[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


def _json_response(status_code: int, body: dict[str, Any], request: Optional[Request] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=_cors_headers(request))


def _failure(status_code: int, message: str, request: Optional[Request] = None) -> JSONResponse:
    return _json_response(status_code, {"success": False, "error": message}, request)


def _resolve_request_id(request: Optional[Request]) -> str:
    if request is not None:
        for header in ("x-request-id", "x-correlation-id"):
            value = (request.headers.get(header) or "").strip()
            if value:
                return value
    return str(uuid4())


app = FastAPI(title="Name Fortune Backend")


# ------------------------------------------------------------------------------
# API endpoints: Health Check
# ------------------------------------------------------------------------------
@app.get("/health")
def health():
    settings = get_settings()
    config = resolve_config(settings.scoring_profile)
    return {
        "status": "ok",
        "refinement_configured": settings.refinement_configured,
        "model": settings.gemini_model,
        "sheets_configured": settings.sheets_configured,
        "scoring_profile": config.name,
        "local_score_ceiling": config.score_ceiling(),
    }


# ------------------------------------------------------------------------------
# API endpoints: Name analysis
# ------------------------------------------------------------------------------
async def analyze_name_options(request: Request) -> Response:
    return Response(status_code=200, content=b"", headers=_cors_headers(request))


async def analyze_name_method_not_allowed(request: Request) -> JSONResponse:
    return _json_response(405, {"error": "Method Not Allowed"}, request)


async def analyze_name_endpoint(request: Request) -> JSONResponse:
    request_id = _resolve_request_id(request)
    try:
        try:
            payload = await request.json()
        except ValueError:
            return _failure(400, INVALID_BODY_MESSAGE, request)
        if not isinstance(payload, dict):
            return _failure(400, INVALID_BODY_MESSAGE, request)
        try:
            body = NameAnalyzeRequest.model_validate(payload)
        except ValidationError as e:
            logger.info("Rejected analysis payload request_id=%s errors=%s", request_id, e.error_count())
            return _failure(400, INVALID_BODY_MESSAGE, request)

        name = (body.name or "").strip()
        hanja = (body.hanja or "").strip()
        if not name:
            return _failure(400, EMPTY_NAME_MESSAGE, request)

        settings = get_settings()
        logger.info("Analysis started request_id=%s name=%s hanja=%s", request_id, name, hanja or "-")

        local = analyze_name(name, hanja, resolve_config(settings.scoring_profile))
        four_pillars = four_pillars_from_strings(body.birth_date, body.birth_time, body.gender)
        if four_pillars is not None:
            detailed = dict(local.detailed_analysis or {})
            detailed["fourPillars"] = four_pillars
            local = local.model_copy(update={"detailed_analysis": detailed})
        logger.info("Local analysis done request_id=%s score=%s grade=%s", request_id, local.score, local.grade)

        result = local
        if settings.refinement_configured:
            result = await refine_result(
                local,
                name=name,
                hanja=hanja,
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                request_id=request_id,
                timeout_sec=settings.gemini_timeout_sec,
            )
        else:
            logger.info("Refinement disabled or key missing; using local result request_id=%s", request_id)

        client_ip = extract_client_ip(request.headers, request.client.host if request.client else None)
        await persist_analysis(
            settings,
            result,
            name=name,
            hanja=hanja,
            ip=client_ip,
            request_id=request_id,
        )

        logger.info("Analysis finished request_id=%s score=%s source=%s", request_id, result.score,
                    (result.detailed_analysis or {}).get("source"))
        return _json_response(200, {"success": True, "data": result.to_payload()}, request)
    except Exception:
        logger.exception("Analysis failed request_id=%s", request_id)
        return _failure(500, SERVER_ERROR_MESSAGE, request)


for _path in ANALYZE_PATHS:
    app.add_api_route(_path, analyze_name_endpoint, methods=["POST"])
    app.add_api_route(_path, analyze_name_options, methods=["OPTIONS"], include_in_schema=False)
    app.add_api_route(
        _path,
        analyze_name_method_not_allowed,
        methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE"],
        include_in_schema=False,
    )
