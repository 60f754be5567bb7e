from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_NAME_LENGTH = 10
MAX_HANJA_LENGTH = 20


class NameAnalyzeRequest(BaseModel):
    """Inbound payload. Only ``name`` is required, and it is checked by the handler."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    hanja: Optional[str] = ""
    birth_date: Optional[str] = None
    birth_time: Optional[str] = None
    gender: Optional[str] = None


class AnalysisResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: int = Field(..., ge=0, le=100)
    grade: str
    personality_title: str
    personality_desc: str
    recommended1: str
    recommended2: str
    recommended3: str
    avoid1: str
    avoid2: str
    avoid3: str
    detailed_analysis: Optional[dict[str, Any]] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
