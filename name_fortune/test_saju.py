from __future__ import annotations

import unittest
from datetime import date, datetime, time, timedelta

from name_fortune import saju


def _moment(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return saju.birth_moment(date(year, month, day), time(hour, minute))


class TestPillars(unittest.TestCase):
    def test_day_epoch(self) -> None:
        self.assertEqual(saju.day_pillar(date(1900, 1, 1)).label, "갑술")

    def test_known_day(self) -> None:
        pillar = saju.day_pillar(date(2000, 1, 1))
        self.assertEqual(pillar.label, "무오")
        self.assertEqual(pillar.hanja, "戊午")

    def test_year_switches_at_ipchun(self) -> None:
        self.assertEqual(saju.year_pillar(_moment(1984, 6, 1)).label, "갑자")
        self.assertEqual(saju.year_pillar(_moment(1984, 2, 5)).label, "갑자")
        self.assertEqual(saju.year_pillar(_moment(1984, 2, 3)).label, "계해")

    def test_month_pillar(self) -> None:
        self.assertEqual(saju.month_pillar(_moment(1984, 6, 1)).label, "기사")
        self.assertEqual(saju.month_pillar(_moment(1984, 2, 5)).label, "병인")

    def test_month_order_wraps_around_new_year(self) -> None:
        self.assertEqual(saju.month_order(_moment(1990, 1, 3)), 10)
        self.assertEqual(saju.month_order(_moment(1990, 1, 10)), 11)
        self.assertEqual(saju.month_order(_moment(1990, 12, 20)), 10)

    def test_hour_pillar(self) -> None:
        day = saju.day_pillar(date(2000, 1, 1))
        self.assertEqual(saju.hour_pillar(day, time(13, 30)).label, "기미")
        self.assertEqual(saju.hour_pillar(day, time(23, 30)).branch, 0)
        self.assertEqual(saju.hour_pillar(day, time(0, 10)).label, "임자")


class TestSolarTermBorders(unittest.TestCase):
    def test_crossing_dates(self) -> None:
        self.assertEqual(saju.solar_term_kst(2025, saju.IPCHUN_LONGITUDE).date(), date(2025, 2, 3))
        self.assertEqual(saju.solar_term_kst(2024, 345.0).date(), date(2024, 3, 5))
        self.assertEqual(saju.solar_term_kst(2024, 345.0).utcoffset(), timedelta(hours=9))

    def test_year_and_month_flip_at_ipchun_moment(self) -> None:
        ipchun = saju.solar_term_kst(2025, saju.IPCHUN_LONGITUDE)
        before = ipchun - timedelta(minutes=10)
        after = ipchun + timedelta(minutes=10)
        self.assertEqual((saju.year_pillar(before).label, saju.month_pillar(before).label), ("갑진", "정축"))
        self.assertEqual((saju.year_pillar(after).label, saju.month_pillar(after).label), ("을사", "무인"))

    def test_border_day_uses_real_crossing(self) -> None:
        # 경칩 2024 falls on Mar 5, a day earlier than the usual civil date.
        self.assertEqual(saju.month_order(_moment(2024, 3, 5, 18)), 1)
        self.assertEqual(saju.month_order(_moment(2024, 3, 4, 18)), 0)

    def test_four_pillars_on_ipchun_evening(self) -> None:
        ipchun = saju.solar_term_kst(2025, saju.IPCHUN_LONGITUDE)
        after = ipchun + timedelta(minutes=10)
        pillars = saju.compute_four_pillars(after.date(), after.time().replace(second=0, microsecond=0))
        self.assertEqual(pillars.year.label, "을사")
        self.assertEqual(pillars.month.label, "무인")

    def test_missing_time_reads_as_noon(self) -> None:
        self.assertEqual(saju.birth_moment(date(2000, 1, 1)), saju.KST.localize(datetime(2000, 1, 1, 12, 0)))


class TestFourPillars(unittest.TestCase):
    def test_element_counts_cover_all_characters(self) -> None:
        with_hour = saju.compute_four_pillars(date(2000, 1, 1), time(13, 30))
        without_hour = saju.compute_four_pillars(date(2000, 1, 1))
        self.assertEqual(sum(with_hour.element_counts().values()), 8)
        self.assertEqual(sum(without_hour.element_counts().values()), 6)
        self.assertIsNone(without_hour.to_dict()["hour"])

    def test_luck_direction(self) -> None:
        yang_year = saju.year_pillar(_moment(1984, 6, 1))
        self.assertEqual(saju.luck_direction(yang_year, "male"), "순행")
        self.assertEqual(saju.luck_direction(yang_year, "female"), "역행")
        self.assertIsNone(saju.luck_direction(yang_year, None))

    def test_gender_normalisation(self) -> None:
        self.assertEqual(saju.normalize_gender("남"), "male")
        self.assertEqual(saju.normalize_gender("F"), "female")
        self.assertIsNone(saju.normalize_gender("other"))


class TestRequestWrapper(unittest.TestCase):
    def test_missing_date_returns_none(self) -> None:
        self.assertIsNone(saju.four_pillars_from_strings(None))
        self.assertIsNone(saju.four_pillars_from_strings("  "))

    def test_invalid_input_returns_none(self) -> None:
        self.assertIsNone(saju.four_pillars_from_strings("2000-13-40"))
        self.assertIsNone(saju.four_pillars_from_strings("2000-01-01", "25:99"))
        self.assertIsNone(saju.four_pillars_from_strings("1850-05-05"))

    def test_valid_input(self) -> None:
        data = saju.four_pillars_from_strings("2000-01-01", "13:30", "여")
        self.assertEqual(data["day"]["label"], "무오")
        self.assertEqual(data["hour"]["label"], "기미")
        self.assertEqual(data["dayMaster"], "무")
        self.assertIn(data["luckDirection"], {"순행", "역행"})


if __name__ == "__main__":
    unittest.main()
