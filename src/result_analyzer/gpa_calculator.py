"""
GPA CALCULATOR - Credit-weighted SGPA/CGPA calculations on the 10 point scale

CALCULATION TYPES:
✅ SGPA: Weighted average over one term's qualifying records
✅ CGPA: One weighted average over the union of every term's qualifying
   records (points and credits summed across terms before dividing, so
   CGPA is NOT the mean of the term SGPAs)

QUALIFYING RECORDS:
- Grade must be on the grade scale (unrecognized grades are skipped)
- Credit weight must be > 0 (zero/absent credits are skipped)

EDGE CASES HANDLED:
- No qualifying records: GPA is 0, never an error or NaN
- Rounding: 2 decimals, half away from zero (no banker's rounding)
- Record order never changes the result (exact float summation)
- Credits near the float limit: sums are rescaled by the largest credit
  instead of overflowing to inf
"""

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from .data_models import GradeRecord
from .grade_scale import point_of

# Enough digits to quantize any finite float to 2 places
_ROUNDING_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero, using the shortest decimal form of the float; non-finite -> 0"""
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, context=_ROUNDING_CONTEXT))


def percentage(part: int, whole: int) -> float:
    """Share of part in whole as a 2 decimal percentage, 0 for an empty whole"""
    if whole <= 0:
        return 0.0
    return round_half_up(part / whole * 100)


def exact_sum(values: Iterable[float]) -> float:
    """math.fsum, with overflow reported as inf"""
    try:
        return math.fsum(values)
    except OverflowError:
        return math.inf


def qualifying_pairs(records: Iterable[GradeRecord]) -> List[Tuple[float, float]]:
    """(grade points, credits) for every record that counts toward a GPA"""
    pairs = []
    for record in records:
        grade_points = point_of(record.grade)
        if grade_points is None or not record.has_credit:
            continue
        pairs.append((grade_points, record.credit_weight))
    return pairs


def grade_point_totals(records: Iterable[GradeRecord]) -> Tuple[float, float]:
    """
    Sum weighted grade points and credits over qualifying records

    Returns:
        Tuple of (weighted_points, credits); inf when a sum overflows
    """
    pairs = qualifying_pairs(records)
    return exact_sum(p * c for p, c in pairs), exact_sum(c for _, c in pairs)


def gpa_from_pairs(pairs: Sequence[Tuple[float, float]]) -> float:
    """Weighted average of (grade points, credits) pairs, rounded; 0 without pairs"""
    if not pairs:
        return 0.0
    points = exact_sum(p * c for p, c in pairs)
    credits = exact_sum(c for _, c in pairs)
    if not (math.isfinite(points) and math.isfinite(credits)):
        scale = max(c for _, c in pairs)
        points = exact_sum(p * (c / scale) for p, c in pairs)
        credits = exact_sum(c / scale for _, c in pairs)
    return round_half_up(points / credits)


def weighted_gpa(records: Iterable[GradeRecord]) -> float:
    """SGPA for records already scoped to one student"""
    return gpa_from_pairs(qualifying_pairs(records))


class GPACalculator:
    """Calculate per-student weighted GPAs and keep a readable calculation log"""

    def __init__(self):
        self.calculation_log: List[str] = []

    def calculate_weighted_gpa(
        self, records: Sequence[GradeRecord], student_id: Optional[str] = None
    ) -> float:
        """
        Calculate a single-term GPA

        Args:
            records: Records belonging to one student (caller guarantees scoping)
            student_id: Used only for the calculation log

        Returns:
            GPA rounded to 2 decimals, 0 when no record carries credit
        """
        pairs = qualifying_pairs(records)
        gpa = gpa_from_pairs(pairs)
        credits = exact_sum(c for _, c in pairs)
        self.calculation_log.append(
            f"SGPA {student_id or '?'}: {len(pairs)} of {len(records)} records, "
            f"{credits:g} credits = {gpa:.2f}"
        )
        return gpa

    def calculate_cumulative_gpa(
        self, term_record_sets: Iterable[Sequence[GradeRecord]], student_id: Optional[str] = None
    ) -> float:
        """
        Calculate CGPA across terms

        Args:
            term_record_sets: One record sequence per term, all for one student
            student_id: Used only for the calculation log

        Returns:
            CGPA rounded to 2 decimals, 0 when no record carries credit
        """
        pairs = []
        terms = 0
        for term_records in term_record_sets:
            pairs.extend(qualifying_pairs(term_records))
            terms += 1

        cgpa = gpa_from_pairs(pairs)
        credits = exact_sum(c for _, c in pairs)
        self.calculation_log.append(
            f"CGPA {student_id or '?'}: {len(pairs)} records over {terms} terms, "
            f"{credits:g} credits = {cgpa:.2f}"
        )
        return cgpa

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log for debugging"""
        return self.calculation_log
