"""
GRADE SCALE - Letter grade to grade point mapping (10 point scale)

GRADE MAPPING:
O = 10, A+ = 9, A = 8
B+ = 7, B = 6, C = 5
P = 4, U = 0 (failing / arrear)

Any other grade string is "unrecognized": it is kept in raw row counts but
never contributes to point sums, credit sums or grade histograms.
"""

from typing import List, Optional

# Ordered best first
GRADE_POINTS = {
    "O": 10,
    "A+": 9,
    "A": 8,
    "B+": 7,
    "B": 6,
    "C": 5,
    "P": 4,
    "U": 0,
}

FAILING_GRADE = "U"

GRADE_COLORS = {
    "O": "#10b981",
    "A+": "#34d399",
    "A": "#6ee7b7",
    "B+": "#facc15",
    "B": "#fbbf24",
    "C": "#f97316",
    "P": "#ef4444",
    "U": "#dc2626",
}

DEFAULT_GRADE_COLOR = "#9ca3af"


def point_of(grade: str) -> Optional[float]:
    """Grade points for a letter grade, None if the grade is unrecognized"""
    points = GRADE_POINTS.get(grade)
    if points is None:
        return None
    return float(points)


def is_failing(grade: str) -> bool:
    return grade == FAILING_GRADE


def is_recognized(grade: str) -> bool:
    return grade in GRADE_POINTS


def grade_color(grade: str) -> str:
    return GRADE_COLORS.get(grade, DEFAULT_GRADE_COLOR)


def grade_order() -> List[str]:
    """Recognized grades, best first"""
    return list(GRADE_POINTS.keys())
