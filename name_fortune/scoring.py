"""Deterministic local name scoring.

Pipeline: normalise input -> per-character strokes -> grids -> harmony
sub-scores -> weighted aggregate, grade and personality profile.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any

from name_fortune.grids import BUCKET_SCORES, compute_grids, fortune_bucket, grid_scores, grids_subscore, reduce_81
from name_fortune.hangul import name_strokes
from name_fortune.harmony import (
    POSITIVE_HANJA_MEANINGS,
    dominant_element,
    five_element_score,
    hanja_meaning_score,
    pronunciation_score,
    round_half_up,
    yin_yang_dominance,
    yin_yang_score,
)
from name_fortune.models import MAX_HANJA_LENGTH, MAX_NAME_LENGTH, AnalysisResult
from name_fortune.personality import (
    PersonalityProfile,
    ProfileContext,
    grid_profile_index,
    profile_for_grid,
    select_profile,
)

THREE_TIER_GRADES: tuple[tuple[int, str], ...] = (
    (85, "우수"),
    (70, "보통"),
)
FIVE_TIER_GRADES: tuple[tuple[int, str], ...] = (
    (90, "최우수"),
    (85, "우수"),
    (75, "양호"),
    (65, "보통"),
)
LOWEST_GRADE = "개선필요"

STRUCTURE_BASE_SCORES = {2: 75, 3: 85, 4: 80}
STRUCTURE_DEFAULT_SCORE = 70
STRUCTURE_HANJA_BONUS = 5

SUBSCORE_KEYS = ("structure", "grids", "five_elements", "yin_yang", "pronunciation", "hanja_meaning")

# Highest value each sub-score can take. Yin-yang balance is the share of the
# minority polarity, so it never exceeds half.
SUBSCORE_CEILINGS = {
    "structure": min(100, max(STRUCTURE_BASE_SCORES.values()) + STRUCTURE_HANJA_BONUS),
    "grids": max(BUCKET_SCORES.values()),
    "five_elements": 100,
    "yin_yang": 50,
    "pronunciation": 100,
    "hanja_meaning": max(meaning.score for meaning in POSITIVE_HANJA_MEANINGS.values()),
}


@dataclass(frozen=True)
class ScoringConfig:
    name: str
    weights: dict[str, float]
    floor: int = 60
    ceiling: int = 100
    plus_one: bool = True
    grades: tuple[tuple[int, str], ...] = THREE_TIER_GRADES

    def __post_init__(self) -> None:
        missing = [key for key in SUBSCORE_KEYS if key not in self.weights]
        if missing:
            raise ValueError(f"weights missing sub-scores: {missing}")
        if abs(sum(self.weights.values()) - 1.0) > 1e-9:
            raise ValueError("weights must sum to 1.0")
        if self.floor > self.ceiling:
            raise ValueError("floor must not exceed ceiling")

    def score_ceiling(self) -> int:
        """Upper bound on the local score; every sub-score at its own ceiling."""
        return clamp_score(sum(self.weights[key] * SUBSCORE_CEILINGS[key] for key in SUBSCORE_KEYS), self)


DEFAULT_CONFIG = ScoringConfig(
    name="standard",
    weights={
        "structure": 0.15,
        "grids": 0.30,
        "five_elements": 0.25,
        "yin_yang": 0.15,
        "pronunciation": 0.10,
        "hanja_meaning": 0.05,
    },
)

CLASSIC_CONFIG = ScoringConfig(
    name="classic",
    weights={
        "structure": 0.25,
        "grids": 0.25,
        "five_elements": 0.20,
        "yin_yang": 0.15,
        "pronunciation": 0.10,
        "hanja_meaning": 0.05,
    },
    floor=65,
)

SCORING_CONFIGS = {config.name: config for config in (DEFAULT_CONFIG, CLASSIC_CONFIG)}


def resolve_config(profile_name: str | None = None) -> ScoringConfig:
    raw = profile_name if profile_name is not None else os.getenv("SCORING_PROFILE", "standard")
    return SCORING_CONFIGS.get(str(raw or "").strip().lower(), DEFAULT_CONFIG)


@dataclass
class ScoreBreakdown:
    structure: float
    grids: float
    five_elements: float
    yin_yang: float
    pronunciation: float
    hanja_meaning: float
    extras: dict[str, Any] = field(default_factory=dict)

    def weighted_total(self, weights: dict[str, float]) -> float:
        return sum(weights[key] * getattr(self, key) for key in SUBSCORE_KEYS)

    def as_dict(self) -> dict[str, float]:
        data = asdict(self)
        data.pop("extras", None)
        return data


def normalize_input(name: Any, hanja: Any = "") -> tuple[str, str]:
    """Trim and bound the inputs; raise ``ValueError`` for an empty name."""
    text = name.strip() if isinstance(name, str) else ""
    if not text:
        raise ValueError("name must not be empty")
    hanja_text = hanja.strip() if isinstance(hanja, str) else ""
    return text[:MAX_NAME_LENGTH], hanja_text[:MAX_HANJA_LENGTH]


def grade_for(score: int, grades: tuple[tuple[int, str], ...] = THREE_TIER_GRADES) -> str:
    for threshold, label in grades:
        if score >= threshold:
            return label
    return LOWEST_GRADE


def structure_score(name: str, hanja: str = "") -> int:
    score = STRUCTURE_BASE_SCORES.get(len(name), STRUCTURE_DEFAULT_SCORE)
    if hanja:
        score += STRUCTURE_HANJA_BONUS
    return min(100, score)


def clamp_score(value: float, config: ScoringConfig) -> int:
    return int(max(config.floor, min(config.ceiling, round_half_up(value))))


def compute_breakdown(name: str, hanja: str = "", config: ScoringConfig = DEFAULT_CONFIG) -> ScoreBreakdown:
    strokes = name_strokes(name, hanja)
    grids = compute_grids(strokes, name, plus_one=config.plus_one)
    meaning = hanja_meaning_score(hanja)
    return ScoreBreakdown(
        structure=structure_score(name, hanja),
        grids=round(grids_subscore(grids), 2),
        five_elements=five_element_score(name),
        yin_yang=yin_yang_score(name),
        pronunciation=pronunciation_score(name),
        hanja_meaning=meaning.score,
        extras={
            "strokes": strokes,
            "grids": grids,
            "hanja_categories": meaning.categories,
            "hanja_issues": meaning.issues,
        },
    )


def _result_from_profile(
    score: int,
    grade: str,
    profile: PersonalityProfile,
    detailed: dict[str, Any] | None = None,
) -> AnalysisResult:
    return AnalysisResult(
        score=score,
        grade=grade,
        personality_title=profile.title,
        personality_desc=profile.description,
        recommended1=profile.recommended[0],
        recommended2=profile.recommended[1],
        recommended3=profile.recommended[2],
        avoid1=profile.avoid[0],
        avoid2=profile.avoid[1],
        avoid3=profile.avoid[2],
        detailed_analysis=detailed,
    )


def _grid_details(grids) -> dict[str, Any]:
    return {
        key: {"value": value, "reduced": reduce_81(value), "fortune": fortune_bucket(value), "score": score}
        for (key, value), score in zip(grids._asdict().items(), grid_scores(grids).values())
    }


def analyze_name(name: Any, hanja: Any = "", config: ScoringConfig = DEFAULT_CONFIG) -> AnalysisResult:
    name_text, hanja_text = normalize_input(name, hanja)
    breakdown = compute_breakdown(name_text, hanja_text, config)
    score = clamp_score(breakdown.weighted_total(config.weights), config)

    element = dominant_element(name_text)
    balance = yin_yang_dominance(name_text)
    categories = breakdown.extras["hanja_categories"]
    profile = select_profile(ProfileContext(element, balance, frozenset(categories)))

    detailed = {
        "scoringProfile": config.name,
        "breakdown": breakdown.as_dict(),
        "strokes": breakdown.extras["strokes"],
        "grids": _grid_details(breakdown.extras["grids"]),
        "dominantElement": element,
        "yinYang": balance,
        "hanjaIssues": breakdown.extras["hanja_issues"],
        "source": "local",
    }
    return _result_from_profile(score, grade_for(score, config.grades), profile, detailed)


def analyze_name_by_grid(name: Any, hanja: Any = "", config: ScoringConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """Grid-only variant: the profile is chosen from the person grid alone."""
    name_text, hanja_text = normalize_input(name, hanja)
    grids = compute_grids(name_strokes(name_text, hanja_text), name_text, plus_one=config.plus_one)
    score = clamp_score(grids_subscore(grids), config)
    detailed = {
        "grids": _grid_details(grids),
        "profileIndex": grid_profile_index(grids),
        "source": "local",
    }
    return _result_from_profile(score, grade_for(score, config.grades), profile_for_grid(grids), detailed)
