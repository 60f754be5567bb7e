"""Four pillars (사주) from a birth date and optional birth time.

Year and month borders are the real solar-term crossings (입춘 and the other
절기) computed with the Swiss Ephemeris and read in Korea Standard Time.
Birth times are local clock time in Seoul; a missing time is read as noon.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional
import pytz
import swisseph as swe

logger = logging.getLogger("name_fortune")

KST = pytz.timezone("Asia/Seoul")
SWE_FLAGS = swe.FLG_MOSEPH  # analytic ephemeris, no data files required

CHEONGAN = ["갑", "을", "병", "정", "무", "기", "경", "신", "임", "계"]
CHEONGAN_HANJA = ["甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸"]
CHEONGAN_ELEMENTS = ["목", "목", "화", "화", "토", "토", "금", "금", "수", "수"]

JIJI = ["자", "축", "인", "묘", "진", "사", "오", "미", "신", "유", "술", "해"]
JIJI_HANJA = ["子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥"]
JIJI_ELEMENTS = ["수", "토", "목", "목", "토", "화", "화", "토", "금", "금", "토", "수"]

ELEMENTS = ["목", "화", "토", "금", "수"]

# Solar longitude of each 절(節) that opens a month, in calendar order.
# The second value is the month order counted from the 인(寅) month.
MONTH_TERMS = [
    (285.0, 11),  # 소한
    (315.0, 0),  # 입춘
    (345.0, 1),  # 경칩
    (15.0, 2),  # 청명
    (45.0, 3),  # 입하
    (75.0, 4),  # 망종
    (105.0, 5),  # 소서
    (135.0, 6),  # 입추
    (165.0, 7),  # 백로
    (195.0, 8),  # 한로
    (225.0, 9),  # 입동
    (255.0, 10),  # 대설
]
IPCHUN_LONGITUDE = 315.0

MIN_BIRTH_YEAR = 1900
MAX_BIRTH_YEAR = 2100
DEFAULT_BIRTH_TIME = time(12, 0)

DAY_EPOCH = date(1900, 1, 1)
DAY_EPOCH_INDEX = 10  # 甲戌

MALE_VALUES = {"male", "m", "남", "남성", "남자"}
FEMALE_VALUES = {"female", "f", "여", "여성", "여자"}


@dataclass(frozen=True)
class Pillar:
    stem: int
    branch: int

    @property
    def label(self) -> str:
        return CHEONGAN[self.stem] + JIJI[self.branch]

    @property
    def hanja(self) -> str:
        return CHEONGAN_HANJA[self.stem] + JIJI_HANJA[self.branch]

    def elements(self) -> tuple[str, str]:
        return CHEONGAN_ELEMENTS[self.stem], JIJI_ELEMENTS[self.branch]

    def to_dict(self) -> dict[str, str]:
        return {
            "stem": CHEONGAN[self.stem],
            "branch": JIJI[self.branch],
            "label": self.label,
            "hanja": self.hanja,
        }


def _pillar_from_cycle(index: int) -> Pillar:
    index %= 60
    return Pillar(index % 10, index % 12)


def _julday_utc(moment: datetime) -> float:
    utc = moment.astimezone(timezone.utc)
    hours = utc.hour + utc.minute / 60 + utc.second / 3600
    return swe.julday(utc.year, utc.month, utc.day, hours, swe.GREG_CAL)


def _utc_from_julday(jd: float) -> datetime:
    year, month, day, hours = swe.revjul(jd, swe.GREG_CAL)
    return datetime(year, month, day, tzinfo=timezone.utc) + timedelta(hours=hours)


@lru_cache(maxsize=512)
def solar_term_kst(year: int, longitude: float) -> datetime:
    """First moment in ``year`` when the Sun reaches ``longitude``, in KST."""
    start = _julday_utc(datetime(year, 1, 1, tzinfo=timezone.utc))
    crossing = swe.solcross_ut(float(longitude), start, SWE_FLAGS)
    return _utc_from_julday(crossing).astimezone(KST)


def birth_moment(birth: date, birth_time: Optional[time] = None) -> datetime:
    return KST.localize(datetime.combine(birth, birth_time if birth_time is not None else DEFAULT_BIRTH_TIME))


def saju_year(moment: datetime) -> int:
    year = moment.year
    return year - 1 if moment < solar_term_kst(year, IPCHUN_LONGITUDE) else year


def year_pillar(moment: datetime) -> Pillar:
    return _pillar_from_cycle(saju_year(moment) - 4)


def month_order(moment: datetime) -> int:
    order = 10  # before 소한 the 자(子) month of the previous year still runs
    for longitude, border_order in MONTH_TERMS:
        if moment >= solar_term_kst(moment.year, longitude):
            order = border_order
    return order


def month_pillar(moment: datetime) -> Pillar:
    order = month_order(moment)
    year_stem = year_pillar(moment).stem
    return Pillar(((year_stem % 5) * 2 + 2 + order) % 10, (order + 2) % 12)


def day_pillar(birth: date) -> Pillar:
    return _pillar_from_cycle((birth - DAY_EPOCH).days + DAY_EPOCH_INDEX)


def hour_pillar(day: Pillar, birth_time: time) -> Pillar:
    branch = ((birth_time.hour + 1) // 2) % 12
    return Pillar(((day.stem % 5) * 2 + branch) % 10, branch)


def normalize_gender(raw: Optional[str]) -> Optional[str]:
    value = (raw or "").strip().lower()
    if value in MALE_VALUES:
        return "male"
    if value in FEMALE_VALUES:
        return "female"
    return None


def luck_direction(year: Pillar, gender: Optional[str]) -> Optional[str]:
    """양남음녀 run forward (순행), everyone else backward (역행)."""
    if gender is None:
        return None
    yang_year = year.stem % 2 == 0
    forward = (yang_year and gender == "male") or (not yang_year and gender == "female")
    return "순행" if forward else "역행"


@dataclass(frozen=True)
class FourPillars:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Optional[Pillar]
    gender: Optional[str] = None

    def pillars(self) -> list[Pillar]:
        return [p for p in (self.year, self.month, self.day, self.hour) if p is not None]

    def element_counts(self) -> dict[str, int]:
        counts = Counter(element for pillar in self.pillars() for element in pillar.elements())
        return {element: counts.get(element, 0) for element in ELEMENTS}

    def to_dict(self) -> dict[str, Any]:
        counts = self.element_counts()
        return {
            "year": self.year.to_dict(),
            "month": self.month.to_dict(),
            "day": self.day.to_dict(),
            "hour": self.hour.to_dict() if self.hour else None,
            "dayMaster": CHEONGAN[self.day.stem],
            "elements": counts,
            "missingElements": [element for element, count in counts.items() if count == 0],
            "luckDirection": luck_direction(self.year, self.gender),
        }


def compute_four_pillars(birth: date, birth_time: Optional[time] = None, gender: Optional[str] = None) -> FourPillars:
    moment = birth_moment(birth, birth_time)
    day = day_pillar(birth)
    return FourPillars(
        year=year_pillar(moment),
        month=month_pillar(moment),
        day=day,
        hour=hour_pillar(day, birth_time) if birth_time is not None else None,
        gender=normalize_gender(gender),
    )


def parse_birth(birth_date: Optional[str], birth_time: Optional[str] = None) -> tuple[date, Optional[time]]:
    """Parse ``YYYY-MM-DD`` and ``HH:MM``; raises ``ValueError`` on bad input."""
    parsed_date = datetime.strptime((birth_date or "").strip(), "%Y-%m-%d").date()
    if not MIN_BIRTH_YEAR <= parsed_date.year <= MAX_BIRTH_YEAR:
        raise ValueError(f"birth year must be between {MIN_BIRTH_YEAR} and {MAX_BIRTH_YEAR}")
    parsed_time = None
    if birth_time and birth_time.strip():
        parsed_time = datetime.strptime(birth_time.strip(), "%H:%M").time()
    return parsed_date, parsed_time


def four_pillars_from_strings(
    birth_date: Optional[str],
    birth_time: Optional[str] = None,
    gender: Optional[str] = None,
) -> Optional[dict[str, Any]]:
    """Best-effort wrapper for request payloads: invalid input yields ``None``."""
    if not birth_date or not birth_date.strip():
        return None
    try:
        parsed_date, parsed_time = parse_birth(birth_date, birth_time)
    except ValueError as e:
        logger.warning("Ignoring invalid birth info date=%r time=%r: %s", birth_date, birth_time, e)
        return None
    return compute_four_pillars(parsed_date, parsed_time, gender).to_dict()
