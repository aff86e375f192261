"""
Tests for the exam scheduling window and student eligibility rules
"""
from datetime import datetime, timedelta

import pytest

from examguard.schemas.exam import ExamStatus
from examguard.services import scheduling

START = datetime(2026, 3, 10, 9, 0, 0)
END = datetime(2026, 3, 10, 11, 0, 0)


class TestClassify:

    @pytest.mark.parametrize("now, expected", [
        (START - timedelta(seconds=1), ExamStatus.UPCOMING),
        (START, ExamStatus.LIVE),
        (START + timedelta(minutes=30), ExamStatus.LIVE),
        (END, ExamStatus.LIVE),
        (END + timedelta(seconds=1), ExamStatus.ENDED),
    ])
    def test_window_is_inclusive(self, now, expected):
        assert scheduling.classify(START, END, now) == expected

    def test_students_see_live_and_upcoming_only(self):
        assert scheduling.is_visible_to_students(ExamStatus.LIVE)
        assert scheduling.is_visible_to_students(ExamStatus.UPCOMING)
        assert not scheduling.is_visible_to_students(ExamStatus.ENDED)


class TestEligibility:

    def test_first_year_sees_only_general(self):
        assert scheduling.is_eligible(1, "general", 1, "cse")
        assert not scheduling.is_eligible(1, "cse", 1, "cse")

    def test_first_year_never_sees_other_years(self):
        assert not scheduling.is_eligible(2, "general", 1, "cse")

    def test_other_years_see_own_department_and_general(self):
        assert scheduling.is_eligible(2, "aiml", 2, "aiml")
        assert scheduling.is_eligible(2, "general", 2, "aiml")
        assert not scheduling.is_eligible(2, "cse", 2, "aiml")
        assert not scheduling.is_eligible(3, "aiml", 2, "aiml")

    def test_department_match_is_case_insensitive(self):
        assert scheduling.is_eligible(3, "ece", 3, "  ECE ")


class TestNormalization:

    def test_defaults_to_general(self):
        assert scheduling.normalize_department(None) == "general"
        assert scheduling.normalize_department("   ") == "general"
        assert scheduling.normalize_section("") == "general"

    def test_lower_cases_and_trims(self):
        assert scheduling.normalize_department(" CSE ") == "cse"
        assert scheduling.normalize_section("A") == "a"
