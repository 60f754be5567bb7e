"""Five-grid (오격) derivation and the 81-number fortune table."""

from __future__ import annotations

from typing import NamedTuple

MISSING_POSITION_STROKES = 10

TWO_CHAR_SURNAMES = {
    "남궁", "황보", "제갈", "사공", "선우", "서문", "독고", "동방", "어금", "망절", "장곡",
}

GREAT_FORTUNE = "대길"
FORTUNE = "길"
NEUTRAL = "평"
MISFORTUNE = "흉"

BUCKET_SCORES = {
    GREAT_FORTUNE: 100,
    FORTUNE: 85,
    NEUTRAL: 65,
    MISFORTUNE: 40,
}

_GREAT_FORTUNE_NUMBERS = {
    1, 3, 5, 11, 13, 15, 16, 21, 23, 24, 25, 31, 32, 33, 41, 45, 47, 48, 52, 63, 65, 67, 81,
}
_FORTUNE_NUMBERS = {6, 7, 8, 17, 18, 29, 35, 37, 38, 39, 57, 58, 61, 68, 73, 75}
_NEUTRAL_NUMBERS = {27, 30, 51, 53, 55, 71, 77, 78}


def _bucket_for(number: int) -> str:
    if number in _GREAT_FORTUNE_NUMBERS:
        return GREAT_FORTUNE
    if number in _FORTUNE_NUMBERS:
        return FORTUNE
    if number in _NEUTRAL_NUMBERS:
        return NEUTRAL
    return MISFORTUNE


# Index 0 is unused; entries 1..81 hold the bucket of each number.
SURI_TABLE: tuple[str, ...] = ("",) + tuple(_bucket_for(n) for n in range(1, 82))

GRID_WEIGHTS = {
    "person": 0.35,
    "earth": 0.25,
    "total": 0.20,
    "heaven": 0.10,
    "outer": 0.10,
}


class GridSet(NamedTuple):
    heaven: int
    person: int
    earth: int
    outer: int
    total: int


def reduce_81(value: int) -> int:
    remainder = int(value) % 81
    return 81 if remainder == 0 else remainder


def fortune_bucket(value: int) -> str:
    return SURI_TABLE[reduce_81(value)]


def grid_score(value: int) -> int:
    return BUCKET_SCORES[fortune_bucket(value)]


def has_two_char_surname(name: str) -> bool:
    return len(name) >= 2 and name[:2] in TWO_CHAR_SURNAMES


def compute_grids(strokes: list[int], name: str = "", plus_one: bool = True) -> GridSet:
    """Derive the five grids from per-character stroke counts.

    The layout depends on the character count. Four-character names use a
    2+2 split when the first two characters form a known two-character
    surname, and a 1+3 split otherwise.
    """
    count = len(strokes)
    if count == 2:
        s0, s1 = strokes
        adjust = 1 if plus_one else 0
        return GridSet(
            heaven=s0 + adjust,
            person=s0 + s1,
            earth=s1 + adjust,
            outer=2,
            total=s0 + s1,
        )
    if count == 3:
        s0, s1, s2 = strokes
        return GridSet(
            heaven=s0,
            person=s0 + s1,
            earth=s1 + s2,
            outer=s0 + s2,
            total=s0 + s1 + s2,
        )
    if count == 4:
        s0, s1, s2, s3 = strokes
        if has_two_char_surname(name):
            return GridSet(
                heaven=s0 + s1,
                person=s1 + s2,
                earth=s2 + s3,
                outer=s0 + s3,
                total=s0 + s1 + s2 + s3,
            )
        return GridSet(
            heaven=s0,
            person=s0 + s1,
            earth=s1 + s2 + s3,
            outer=s0 + s3,
            total=s0 + s1 + s2 + s3,
        )

    first = strokes[0] if count > 0 else MISSING_POSITION_STROKES
    second = strokes[1] if count > 1 else MISSING_POSITION_STROKES
    rest = sum(strokes[2:]) if count > 2 else MISSING_POSITION_STROKES
    return GridSet(
        heaven=first,
        person=first + second,
        earth=second + rest,
        outer=first + rest,
        total=first + second + rest,
    )


def grid_scores(grids: GridSet) -> dict[str, int]:
    return {key: grid_score(value) for key, value in grids._asdict().items()}


def grids_subscore(grids: GridSet) -> float:
    scores = grid_scores(grids)
    return sum(GRID_WEIGHTS[key] * scores[key] for key in GRID_WEIGHTS)
