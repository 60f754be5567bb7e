"""Hangul syllable decomposition and stroke-count tables.

Every table in this module is a read-only constant built at import time.
Unsupported characters never raise; they contribute zero strokes (Hangul
mode) or the default Hanja stroke count (Hanja mode).
"""

from __future__ import annotations

from typing import NamedTuple

HANGUL_BASE = 0xAC00
HANGUL_SYLLABLE_COUNT = 11172
INITIAL_RADIX = 588
FINAL_RADIX = 28

INITIALS = [
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
]

VOWELS = [
    "ㅏ", "ㅐ", "ㅑ", "ㅒ", "ㅓ", "ㅔ", "ㅕ", "ㅖ", "ㅗ", "ㅘ", "ㅙ",
    "ㅚ", "ㅛ", "ㅜ", "ㅝ", "ㅞ", "ㅟ", "ㅠ", "ㅡ", "ㅢ", "ㅣ",
]

FINALS = [
    "", "ㄱ", "ㄲ", "ㄳ", "ㄴ", "ㄵ", "ㄶ", "ㄷ", "ㄹ", "ㄺ",
    "ㄻ", "ㄼ", "ㄽ", "ㄾ", "ㄿ", "ㅀ", "ㅁ", "ㅂ", "ㅄ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
]

CONSONANT_STROKES = {
    "ㄱ": 2, "ㄲ": 4, "ㄴ": 2, "ㄷ": 3, "ㄸ": 6, "ㄹ": 5, "ㅁ": 4,
    "ㅂ": 4, "ㅃ": 8, "ㅅ": 2, "ㅆ": 4, "ㅇ": 1, "ㅈ": 3, "ㅉ": 6,
    "ㅊ": 4, "ㅋ": 3, "ㅌ": 4, "ㅍ": 4, "ㅎ": 3,
}

VOWEL_STROKES = {
    "ㅏ": 2, "ㅐ": 3, "ㅑ": 3, "ㅒ": 4, "ㅓ": 2, "ㅔ": 3, "ㅕ": 3,
    "ㅖ": 4, "ㅗ": 2, "ㅘ": 4, "ㅙ": 5, "ㅚ": 3, "ㅛ": 3, "ㅜ": 2,
    "ㅝ": 4, "ㅞ": 5, "ㅟ": 3, "ㅠ": 3, "ㅡ": 1, "ㅢ": 2, "ㅣ": 1,
}

# Compound finals count the strokes of both parts.
FINAL_STROKES = {
    **CONSONANT_STROKES,
    "ㄳ": 4, "ㄵ": 5, "ㄶ": 5, "ㄺ": 7, "ㄻ": 9, "ㄼ": 9,
    "ㄽ": 7, "ㄾ": 9, "ㄿ": 9, "ㅀ": 8, "ㅄ": 6,
}

DEFAULT_HANJA_STROKES = 8

# Original-form (원획) stroke counts for common surname and given-name glyphs.
HANJA_STROKES = {
    # surnames
    "金": 8, "李": 7, "朴": 6, "崔": 11, "鄭": 19, "姜": 9, "趙": 14,
    "尹": 4, "張": 11, "林": 8, "韓": 17, "吳": 7, "徐": 10, "申": 5,
    "權": 22, "黃": 12, "安": 6, "宋": 7, "洪": 10, "劉": 15, "全": 6,
    "高": 10, "文": 4, "孫": 10, "梁": 11, "白": 5, "許": 11, "南": 9,
    "宮": 10, "諸": 16, "葛": 15, "皇": 9, "甫": 7,
    # given names
    "吉": 6, "童": 12, "民": 5, "秀": 7, "智": 12, "賢": 15, "俊": 9,
    "英": 11, "美": 9, "恩": 10, "浩": 11, "成": 7, "永": 5, "貞": 9,
    "和": 8, "善": 12, "仁": 4, "明": 8, "正": 5, "光": 6, "東": 8,
    "慧": 15, "珍": 10, "娟": 10, "哲": 10, "宇": 6, "柱": 9, "相": 9,
    "熙": 13, "德": 15, "福": 14, "壽": 14, "榮": 14, "泰": 10, "平": 5,
    "世": 5, "在": 6, "元": 4, "炫": 9, "允": 4, "書": 10, "夏": 10,
    "雅": 12, "娜": 10, "敏": 11, "洙": 10, "鎭": 18, "昊": 8, "奎": 9,
    # unfavourable meanings, kept so their stroke counts are exact
    "死": 6, "病": 10, "亡": 3, "悲": 12, "苦": 11, "孤": 8, "寡": 14,
    "貧": 11, "凶": 4, "哀": 9,
}


class Decomposition(NamedTuple):
    initial: str
    vowel: str
    final: str


def decompose(char: str) -> Decomposition | None:
    """Split one Hangul syllable into initial, vowel and (possibly empty) final."""
    if not isinstance(char, str) or len(char) != 1:
        return None
    offset = ord(char) - HANGUL_BASE
    if offset < 0 or offset >= HANGUL_SYLLABLE_COUNT:
        return None
    return Decomposition(
        INITIALS[offset // INITIAL_RADIX],
        VOWELS[(offset % INITIAL_RADIX) // FINAL_RADIX],
        FINALS[offset % FINAL_RADIX],
    )


def hangul_strokes(char: str) -> int:
    parts = decompose(char)
    if parts is None:
        return 0
    strokes = CONSONANT_STROKES[parts.initial] + VOWEL_STROKES[parts.vowel]
    if parts.final:
        strokes += FINAL_STROKES[parts.final]
    return strokes


def hanja_strokes(glyph: str) -> int:
    return HANJA_STROKES.get(glyph, DEFAULT_HANJA_STROKES)


def name_strokes(name: str, hanja: str = "") -> list[int]:
    """Per-position stroke counts.

    When Hanja is supplied, position ``i`` uses ``hanja[i]``; positions the
    Hanja string does not cover fall back to the Hangul count of ``name[i]``.
    """
    hanja_chars = [ch for ch in (hanja or "") if not ch.isspace()]
    strokes: list[int] = []
    for idx, ch in enumerate(name):
        if idx < len(hanja_chars):
            strokes.append(hanja_strokes(hanja_chars[idx]))
        else:
            strokes.append(hangul_strokes(ch))
    return strokes


def name_decompositions(name: str) -> list[Decomposition]:
    """Decompositions of the Hangul syllables in ``name``, skipping anything else."""
    out: list[Decomposition] = []
    for ch in name:
        parts = decompose(ch)
        if parts is not None:
            out.append(parts)
    return out


def to_jamo(name: str) -> str:
    return "".join("".join(parts) for parts in name_decompositions(name))
