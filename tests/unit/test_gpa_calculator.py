"""
Unit Tests for GPA Calculator

Tests for:
- Credit-weighted SGPA
- CGPA across terms
- Rounding
- Grade point mapping
- Edge cases
"""

import math

import pytest

from result_analyzer.gpa_calculator import (
    GPACalculator,
    grade_point_totals,
    percentage,
    round_half_up,
    weighted_gpa,
)
from result_analyzer.grade_scale import GRADE_POINTS, grade_order, is_failing, is_recognized, point_of


class TestGradeScale:
    """Tests for the letter grade mapping"""

    @pytest.mark.parametrize(
        "grade,points",
        [("O", 10), ("A+", 9), ("A", 8), ("B+", 7), ("B", 6), ("C", 5), ("P", 4), ("U", 0)],
    )
    def test_grade_points(self, grade, points):
        assert point_of(grade) == points

    def test_unrecognized_grade(self):
        assert point_of("AB") is None
        assert point_of("") is None
        assert not is_recognized("W")

    def test_only_u_is_failing(self):
        assert is_failing("U")
        assert not any(is_failing(g) for g in GRADE_POINTS if g != "U")

    def test_grade_order_best_first(self):
        order = grade_order()
        assert order[0] == "O"
        assert order[-1] == "U"
        assert len(order) == 8


class TestRounding:
    """Half away from zero, 2 decimals"""

    def test_half_rounds_up(self):
        assert round_half_up(2.675) == 2.68
        assert round_half_up(0.125) == 0.13
        assert round_half_up(8.345) == 8.35

    def test_plain_values(self):
        assert round_half_up(9.0) == 9.0
        assert round_half_up(67 / 7) == 9.57

    def test_non_finite_values_round_to_zero(self):
        assert round_half_up(math.inf) == 0.0
        assert round_half_up(math.nan) == 0.0

    def test_very_large_values(self):
        assert round_half_up(1e308) == 1e308

    def test_percentage(self):
        assert percentage(2, 3) == 66.67
        assert percentage(1, 3) == 33.33
        assert percentage(0, 0) == 0.0


class TestWeightedGPA:
    """Tests for single-term SGPA"""

    def test_single_record(self, make_record):
        """O grade with 3 credits gives exactly 10.00"""
        assert weighted_gpa([make_record(grade="O", credit_weight=3)]) == 10.0

    def test_credit_weighting(self, make_record):
        records = [
            make_record(subject_code="CS101", grade="O", credit_weight=4),
            make_record(subject_code="CS102", grade="A+", credit_weight=3),
        ]
        # (10*4 + 9*3) / 7 = 9.571...
        assert weighted_gpa(records) == 9.57

    def test_failing_grade_counts_credits(self, make_record):
        records = [
            make_record(subject_code="CS101", grade="B", credit_weight=4),
            make_record(subject_code="CS102", grade="U", credit_weight=3),
        ]
        # 24 / 7
        assert weighted_gpa(records) == 3.43

    def test_zero_credit_records_skipped(self, make_record):
        records = [
            make_record(subject_code="CS101", grade="A", credit_weight=4),
            make_record(subject_code="CS102", grade="U", credit_weight=0),
        ]
        assert weighted_gpa(records) == 8.0

    def test_unrecognized_grades_skipped(self, make_record):
        records = [
            make_record(subject_code="CS101", grade="A", credit_weight=4),
            make_record(subject_code="CS102", grade="AB", credit_weight=3),
        ]
        assert grade_point_totals(records) == (32.0, 4.0)
        assert weighted_gpa(records) == 8.0

    def test_all_zero_credit_gives_zero(self, make_record):
        records = [make_record(grade="O", credit_weight=0), make_record(grade="A", credit_weight=None)]
        assert weighted_gpa(records) == 0.0

    def test_empty_records(self):
        assert weighted_gpa([]) == 0.0

    def test_infinite_credit_counts_as_zero(self, make_record):
        """Credits that parse to inf are treated like missing credits"""
        record = make_record(grade="O", credit_weight="inf")

        assert record.credit_weight == 0.0
        assert weighted_gpa([record]) == 0.0
        assert weighted_gpa([record, make_record(subject_code="CS102", grade="B", credit_weight=3)]) == 6.0

    def test_huge_credits_do_not_overflow(self, make_record):
        records = [
            make_record(subject_code="CS101", grade="O", credit_weight=1e308),
            make_record(subject_code="CS102", grade="B", credit_weight=1e308),
        ]
        assert weighted_gpa(records[:1]) == 10.0
        # (10 + 6) / 2 once rescaled
        assert weighted_gpa(records) == 8.0
        assert grade_point_totals(records) == (math.inf, math.inf)

    def test_order_does_not_matter(self, make_record):
        records = [
            make_record(subject_code=f"CS{i}", grade=g, credit_weight=c)
            for i, (g, c) in enumerate([("O", 0.1), ("A", 0.2), ("B+", 0.3), ("C", 0.7), ("P", 1.1)])
        ]
        assert weighted_gpa(records) == weighted_gpa(list(reversed(records)))


class TestGPACalculator:
    """Tests for GPACalculator class"""

    def test_calculation_log(self, make_record):
        calculator = GPACalculator()
        calculator.calculate_weighted_gpa([make_record(grade="A")], "S1")

        log = calculator.get_calculation_log()
        assert len(log) == 1
        assert "S1" in log[0]
        assert "8.00" in log[0]

    def test_cumulative_is_not_mean_of_terms(self, make_record):
        """CGPA sums points and credits over terms before dividing"""
        calculator = GPACalculator()
        term1 = [make_record(grade="O", credit_weight=1, source_file="sem1.xlsx")]
        term2 = [make_record(grade="B", credit_weight=3, source_file="sem2.xlsx")]

        # (10 + 18) / 4 = 7.0, while the SGPA mean would be 8.0
        assert calculator.calculate_cumulative_gpa([term1, term2], "S1") == 7.0

    def test_cumulative_single_term_matches_sgpa(self, make_record):
        calculator = GPACalculator()
        records = [
            make_record(subject_code="CS101", grade="A+", credit_weight=4),
            make_record(subject_code="CS102", grade="C", credit_weight=2),
        ]
        assert calculator.calculate_cumulative_gpa([records]) == calculator.calculate_weighted_gpa(records)

    def test_cumulative_without_credits(self, make_record):
        calculator = GPACalculator()
        assert calculator.calculate_cumulative_gpa([[make_record(credit_weight=0)], []]) == 0.0
        assert calculator.calculate_cumulative_gpa([]) == 0.0
