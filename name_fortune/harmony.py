"""Harmony sub-scorers: five elements, yin-yang, pronunciation and Hanja meaning.

Each scorer is a pure function of the name (or Hanja string) returning a
sub-score on a 0-100 scale.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import NamedTuple

from name_fortune.hangul import name_decompositions, to_jamo

WOOD, FIRE, EARTH, METAL, WATER = "목", "화", "토", "금", "수"
ELEMENT_ORDER = [WOOD, FIRE, EARTH, METAL, WATER]

CONSONANT_ELEMENTS = {
    "ㄱ": WOOD, "ㅋ": WOOD, "ㄲ": WOOD,
    "ㄴ": FIRE, "ㄷ": FIRE, "ㄹ": FIRE, "ㅌ": FIRE, "ㄸ": FIRE,
    "ㅇ": EARTH, "ㅎ": EARTH,
    "ㅅ": METAL, "ㅈ": METAL, "ㅊ": METAL, "ㅆ": METAL, "ㅉ": METAL,
    "ㅁ": WATER, "ㅂ": WATER, "ㅍ": WATER, "ㅃ": WATER,
}

GENERATES = {WOOD: FIRE, FIRE: EARTH, EARTH: METAL, METAL: WATER, WATER: WOOD}
DESTROYS = {WOOD: EARTH, EARTH: WATER, WATER: FIRE, FIRE: METAL, METAL: WOOD}

YANG, YIN, BALANCED = "양", "음", "균형"

YANG_VOWELS = {"ㅏ", "ㅐ", "ㅑ", "ㅒ", "ㅗ", "ㅘ", "ㅙ", "ㅚ", "ㅛ"}
YIN_VOWELS = {"ㅓ", "ㅔ", "ㅕ", "ㅖ", "ㅜ", "ㅝ", "ㅞ", "ㅟ", "ㅠ", "ㅡ", "ㅢ", "ㅣ"}

ELEMENT_BASE_SCORE = 50
GENERATIVE_BONUS = 15
DESTRUCTIVE_PENALTY = 10
IDENTICAL_BONUS = 5
NEUTRAL_BALANCE_SCORE = 50

PRONUNCIATION_BASE_SCORE = 70
REPEATED_INITIAL_PENALTY = 10
REPEATED_VOWEL_PENALTY = 5
DIFFICULT_SEQUENCE_PENALTY = 10
SOFT_INITIAL_BONUS = 3
SOFT_INITIALS = {"ㄴ", "ㄹ", "ㅁ", "ㅇ"}

# Final consonant followed by the next syllable's initial.
DIFFICULT_SEQUENCES = (
    "ㄱㄲ", "ㄷㄸ", "ㅂㅃ", "ㅅㅆ", "ㅈㅉ",
    "ㄱㅋ", "ㄷㅌ", "ㅂㅍ",
    "ㄴㄹ", "ㄹㄴ",
)

NEUTRAL_HANJA_SCORE = 70


class HanjaMeaning(NamedTuple):
    meaning: str
    category: str
    score: int


POSITIVE_HANJA_MEANINGS = {
    "智": HanjaMeaning("지혜", "지혜", 92),
    "賢": HanjaMeaning("어질다", "지혜", 90),
    "哲": HanjaMeaning("밝다", "지혜", 88),
    "仁": HanjaMeaning("어질다", "덕성", 88),
    "德": HanjaMeaning("덕", "덕성", 90),
    "善": HanjaMeaning("착하다", "덕성", 86),
    "恩": HanjaMeaning("은혜", "덕성", 85),
    "福": HanjaMeaning("복", "재물", 92),
    "吉": HanjaMeaning("길하다", "재물", 88),
    "榮": HanjaMeaning("영화", "성공", 90),
    "成": HanjaMeaning("이루다", "성공", 86),
    "英": HanjaMeaning("꽃부리", "재능", 86),
    "秀": HanjaMeaning("빼어나다", "재능", 88),
    "俊": HanjaMeaning("준걸", "재능", 88),
    "明": HanjaMeaning("밝다", "광명", 88),
    "光": HanjaMeaning("빛", "광명", 86),
    "炫": HanjaMeaning("밝다", "광명", 84),
    "美": HanjaMeaning("아름답다", "아름다움", 86),
    "雅": HanjaMeaning("맑다", "아름다움", 84),
    "和": HanjaMeaning("화목하다", "조화", 88),
    "平": HanjaMeaning("평평하다", "조화", 82),
    "安": HanjaMeaning("편안하다", "안정", 85),
    "泰": HanjaMeaning("크다", "안정", 86),
    "壽": HanjaMeaning("목숨", "장수", 90),
    "永": HanjaMeaning("길다", "장수", 86),
}

NEGATIVE_HANJA_MEANINGS = {
    "死": HanjaMeaning("죽다", "죽음", 20),
    "亡": HanjaMeaning("망하다", "죽음", 25),
    "病": HanjaMeaning("병", "질병", 25),
    "悲": HanjaMeaning("슬프다", "슬픔", 30),
    "哀": HanjaMeaning("슬프다", "슬픔", 30),
    "苦": HanjaMeaning("쓰다", "고난", 30),
    "孤": HanjaMeaning("외롭다", "고독", 35),
    "寡": HanjaMeaning("적다", "고독", 35),
    "貧": HanjaMeaning("가난하다", "빈곤", 30),
    "凶": HanjaMeaning("흉하다", "흉", 20),
}


class HanjaMeaningScore(NamedTuple):
    score: int
    categories: list[str]
    issues: list[str]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def element_sequence(name: str) -> list[str]:
    return [CONSONANT_ELEMENTS[parts.initial] for parts in name_decompositions(name)]


def five_element_score(name: str) -> int:
    elements = element_sequence(name)
    score = ELEMENT_BASE_SCORE
    for current, following in zip(elements, elements[1:]):
        if GENERATES[current] == following:
            score += GENERATIVE_BONUS
        elif DESTROYS[current] == following:
            score -= DESTRUCTIVE_PENALTY
        elif current == following:
            score += IDENTICAL_BONUS
    return int(_clamp(score, 0, 100))


def dominant_element(name: str) -> str | None:
    """Most frequent element; ties go to the element that appears first in the name."""
    elements = element_sequence(name)
    if not elements:
        return None
    counts = Counter(elements)
    best = max(counts.values())
    for element in elements:
        if counts[element] == best:
            return element
    return None


def yin_yang_counts(name: str) -> tuple[int, int]:
    yang = yin = 0
    for parts in name_decompositions(name):
        if parts.vowel in YANG_VOWELS:
            yang += 1
        elif parts.vowel in YIN_VOWELS:
            yin += 1
    return yang, yin


def yin_yang_score(name: str) -> int:
    yang, yin = yin_yang_counts(name)
    total = yang + yin
    if total == 0:
        return NEUTRAL_BALANCE_SCORE
    return round_half_up(100 * min(yang, yin) / total)


def yin_yang_dominance(name: str) -> str:
    yang, yin = yin_yang_counts(name)
    if yang > yin:
        return YANG
    if yin > yang:
        return YIN
    return BALANCED


def pronunciation_score(name: str) -> int:
    decomposed = name_decompositions(name)
    score = PRONUNCIATION_BASE_SCORE
    for current, following in zip(decomposed, decomposed[1:]):
        if current.initial == following.initial:
            score -= REPEATED_INITIAL_PENALTY
        if current.vowel == following.vowel:
            score -= REPEATED_VOWEL_PENALTY

    jamo = to_jamo(name)
    for sequence in DIFFICULT_SEQUENCES:
        score -= DIFFICULT_SEQUENCE_PENALTY * jamo.count(sequence)

    score += SOFT_INITIAL_BONUS * sum(1 for parts in decomposed if parts.initial in SOFT_INITIALS)
    return int(_clamp(score, 50, 100))


def lookup_hanja_meaning(glyph: str) -> tuple[HanjaMeaning | None, bool]:
    """Return ``(meaning, is_positive)``; ``(None, False)`` for unknown glyphs."""
    if glyph in POSITIVE_HANJA_MEANINGS:
        return POSITIVE_HANJA_MEANINGS[glyph], True
    if glyph in NEGATIVE_HANJA_MEANINGS:
        return NEGATIVE_HANJA_MEANINGS[glyph], False
    return None, False


def hanja_meaning_score(hanja: str) -> HanjaMeaningScore:
    """Average the meaning scores of each glyph.

    Issues are descriptive only and never change the score.
    """
    glyphs = [ch for ch in (hanja or "") if not ch.isspace()]
    if not glyphs:
        return HanjaMeaningScore(NEUTRAL_HANJA_SCORE, [], [])

    scores: list[int] = []
    categories: list[str] = []
    has_positive = has_negative = False
    for glyph in glyphs:
        meaning, positive = lookup_hanja_meaning(glyph)
        if meaning is None:
            scores.append(NEUTRAL_HANJA_SCORE)
            continue
        scores.append(meaning.score)
        categories.append(meaning.category)
        if positive:
            has_positive = True
        else:
            has_negative = True

    issues: list[str] = []
    for category, count in Counter(categories).items():
        if count > 1:
            issues.append(f"'{category}' 의미가 {count}번 중복됩니다.")
    if has_positive and has_negative:
        issues.append("긍정적인 의미와 부정적인 의미가 함께 섞여 있습니다.")

    average = sum(scores) / len(scores)
    return HanjaMeaningScore(
        int(_clamp(round_half_up(average), 30, 100)),
        list(dict.fromkeys(categories)),
        issues,
    )
