"""Personality profile catalogs.

Two selection paths exist. ``select_profile`` walks an ordered list of
(predicate, profile) pairs and returns the first match, ending in an
unconditional default. ``profile_for_grid`` indexes a fixed catalog of eight
profiles by the person grid alone.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from name_fortune.grids import GridSet, reduce_81
from name_fortune.harmony import EARTH, FIRE, METAL, WATER, WOOD, YANG, YIN


class PersonalityProfile(NamedTuple):
    title: str
    description: str
    recommended: tuple[str, str, str]
    avoid: tuple[str, str, str]


class ProfileContext(NamedTuple):
    dominant_element: str | None
    yin_yang: str
    hanja_categories: frozenset[str] = frozenset()


LEADER = PersonalityProfile(
    "리더십이 강한 성향",
    "타고난 지도력과 카리스마를 가지고 있으며, 사람들을 이끄는 능력이 뛰어납니다.",
    ("황금 액세서리", "붉은 보석", "목재 장식품"),
    ("검은 의류", "날카로운 도구", "차가운 금속"),
)
CREATIVE = PersonalityProfile(
    "창의적이고 예술적인 성향",
    "뛰어난 상상력과 창의성을 가지고 있으며, 예술적 감각이 발달되어 있습니다.",
    ("색상 있는 보석", "나비 모양 장식", "꽃무늬 소품"),
    ("무채색 옷", "각진 가구", "인공적인 소재"),
)
STEADY = PersonalityProfile(
    "안정적이고 신중한 성향",
    "차분하고 신중한 성격으로 주변 사람들에게 안정감을 주는 든든한 존재입니다.",
    ("자연석 팔찌", "초록색 식물", "둥근 모양 소품"),
    ("너무 밝은 색", "번쩍이는 장식", "소음이 나는 물건"),
)
ENERGETIC = PersonalityProfile(
    "활동적이고 에너지 넘치는 성향",
    "왕성한 활동력과 긍정적인 에너지로 주변을 활기차게 만드는 성격입니다.",
    ("스포츠 용품", "밝은 색 액세서리", "움직이는 장식"),
    ("어두운 공간", "무거운 장신구", "정적인 환경"),
)
WISE = PersonalityProfile(
    "지혜롭고 통찰력 있는 성향",
    "깊이 생각하고 핵심을 꿰뚫어 보는 통찰력으로 주변의 신뢰를 얻습니다.",
    ("푸른색 만년필", "원목 책상 소품", "수정 원석"),
    ("어수선한 장식", "자극적인 향", "깨진 거울"),
)
AMBITIOUS = PersonalityProfile(
    "성공을 향해 나아가는 성향",
    "목표를 분명히 세우고 끈기 있게 밀어붙여 원하는 결과를 만들어 냅니다.",
    ("황금색 지갑", "노란 꽃", "도자기 화병"),
    ("구멍 난 지갑", "시든 식물", "낡은 신발"),
)
PRINCIPLED = PersonalityProfile(
    "원칙적이고 결단력 있는 성향",
    "옳고 그름이 분명하며, 필요할 때 과감하게 결정을 내리는 추진력이 있습니다.",
    ("은색 시계", "흰색 셔츠", "금속 펜"),
    ("붉은 조명", "뜨거운 향초", "뾰족한 장식"),
)
GROWING = PersonalityProfile(
    "성장을 추구하는 성향",
    "새로운 것을 배우고 도전하는 것을 즐기며, 꾸준히 자신을 발전시킵니다.",
    ("화분", "초록색 노트", "나무 책갈피"),
    ("녹슨 금속", "건조한 공간", "딱딱한 플라스틱"),
)
CARING = PersonalityProfile(
    "섬세하고 배려심 깊은 성향",
    "다른 사람의 마음을 잘 헤아리고, 세심한 배려로 관계를 따뜻하게 만듭니다.",
    ("은은한 향초", "파스텔 톤 소품", "부드러운 천"),
    ("강렬한 원색", "거친 소재", "시끄러운 장난감"),
)
BALANCED_PROFILE = PersonalityProfile(
    "균형 잡힌 조화로운 성향",
    "어느 한쪽에 치우치지 않는 균형 감각으로 갈등을 부드럽게 조율합니다.",
    ("도자기 컵", "베이지색 쿠션", "원형 거울"),
    ("극단적인 색 조합", "한쪽으로 기운 가구", "어지러운 무늬"),
)

ProfilePredicate = Callable[[ProfileContext], bool]

CONDITIONAL_PROFILES: list[tuple[ProfilePredicate, PersonalityProfile]] = [
    (lambda ctx: "지혜" in ctx.hanja_categories, WISE),
    (lambda ctx: bool({"재물", "성공"} & ctx.hanja_categories), AMBITIOUS),
    (lambda ctx: ctx.dominant_element == WOOD and ctx.yin_yang == YANG, LEADER),
    (lambda ctx: ctx.dominant_element == FIRE, ENERGETIC),
    (lambda ctx: ctx.dominant_element == EARTH, STEADY),
    (lambda ctx: ctx.dominant_element == METAL, PRINCIPLED),
    (lambda ctx: ctx.dominant_element == WATER and ctx.yin_yang == YIN, CREATIVE),
    (lambda ctx: ctx.dominant_element == WOOD, GROWING),
    (lambda ctx: ctx.yin_yang == YIN, CARING),
    (lambda ctx: True, BALANCED_PROFILE),
]

GRID_PROFILES: tuple[PersonalityProfile, ...] = (
    LEADER,
    CREATIVE,
    STEADY,
    ENERGETIC,
    WISE,
    PRINCIPLED,
    GROWING,
    CARING,
)


def select_profile(
    context: ProfileContext,
    candidates: list[tuple[ProfilePredicate, PersonalityProfile]] = CONDITIONAL_PROFILES,
) -> PersonalityProfile:
    for predicate, profile in candidates:
        if predicate(context):
            return profile
    return BALANCED_PROFILE


def grid_profile_index(grids: GridSet) -> int:
    return reduce_81(grids.person) % len(GRID_PROFILES)


def profile_for_grid(grids: GridSet) -> PersonalityProfile:
    return GRID_PROFILES[grid_profile_index(grids)]
