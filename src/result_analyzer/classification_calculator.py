"""
CLASSIFICATION CALCULATOR - Academic standing buckets per student

CLASSIFICATION RULES:
With arrears (any U grade in scope):
    GPA >= 6.5 -> First Class with arrears
    GPA >= 5.0 -> Second Class with arrears
    otherwise  -> Fail
Without arrears:
    GPA >= 8.5 -> Distinction
    GPA >= 6.5 -> First Class without arrears
    otherwise  -> Second Class without arrears

SCOPES:
✅ Current term: current sheet students, current-term SGPA, arrears in the current sheet
✅ Cumulative: all students, CGPA, arrears in any sheet

KNOWN INCONSISTENCY:
The summary's `fail` figure is the number of U-grade rows in the scope,
not the number of students in the Fail bucket (that is `failed_students`).
Report consumers have always shown the row count, so it is kept as is.
"""

import logging
from typing import Dict, Iterable, List

from .data_models import ClassificationBucket, ClassificationSummary, GradeRecord
from .gpa_calculator import percentage
from .grade_scale import is_failing

logger = logging.getLogger(__name__)

DISTINCTION_THRESHOLD = 8.5
FIRST_CLASS_THRESHOLD = 6.5
SECOND_CLASS_THRESHOLD = 5.0


def classify(gpa: float, has_arrears: bool) -> ClassificationBucket:
    """Bucket for one student in one scope"""
    if has_arrears:
        if gpa >= FIRST_CLASS_THRESHOLD:
            return ClassificationBucket.FIRST_CLASS_WITH_ARREARS
        elif gpa >= SECOND_CLASS_THRESHOLD:
            return ClassificationBucket.SECOND_CLASS_WITH_ARREARS
        else:
            return ClassificationBucket.FAIL
    if gpa >= DISTINCTION_THRESHOLD:
        return ClassificationBucket.DISTINCTION
    elif gpa >= FIRST_CLASS_THRESHOLD:
        return ClassificationBucket.FIRST_CLASS_WITHOUT_ARREARS
    else:
        return ClassificationBucket.SECOND_CLASS_WITHOUT_ARREARS


def students_with_arrears(records: Iterable[GradeRecord]) -> Dict[str, bool]:
    """Arrear flag per student, students in first-seen order"""
    flags: Dict[str, bool] = {}
    for record in records:
        flags[record.student_id] = flags.get(record.student_id, False) or is_failing(record.grade)
    return flags


class ClassificationCalculator:
    """Build classification summaries for the current-term and cumulative scopes"""

    def __init__(self):
        self.classification_log: List[str] = []

    def classify_scope(
        self,
        scope_records: List[GradeRecord],
        student_gpas: Dict[str, float],
        scope_name: str = "scope",
    ) -> ClassificationSummary:
        """
        Classify every student appearing in the scope's records

        Args:
            scope_records: Full (unselected) records of the scope
            student_gpas: GPA per student id; missing students count as 0
            scope_name: Label used in the classification log

        Returns:
            ClassificationSummary with bucket counts and the per-student map
        """
        arrears = students_with_arrears(scope_records)
        buckets = {
            student_id: classify(student_gpas.get(student_id, 0.0), has_arrears)
            for student_id, has_arrears in arrears.items()
        }

        def count(bucket: ClassificationBucket) -> int:
            return sum(1 for b in buckets.values() if b == bucket)

        fail_rows = sum(1 for r in scope_records if is_failing(r.grade))
        pass_rows = len(scope_records) - fail_rows

        summary = ClassificationSummary(
            distinction=count(ClassificationBucket.DISTINCTION),
            first_class_woa=count(ClassificationBucket.FIRST_CLASS_WITHOUT_ARREARS),
            first_class_wa=count(ClassificationBucket.FIRST_CLASS_WITH_ARREARS),
            second_class_woa=count(ClassificationBucket.SECOND_CLASS_WITHOUT_ARREARS),
            second_class_wa=count(ClassificationBucket.SECOND_CLASS_WITH_ARREARS),
            fail=fail_rows,
            failed_students=count(ClassificationBucket.FAIL),
            total_students=len(buckets),
            pass_percentage=percentage(pass_rows, len(scope_records)),
            student_buckets=buckets,
        )

        self.classification_log.append(
            f"{scope_name}: {summary.total_students} students, distinction {summary.distinction}, "
            f"first class {summary.first_class_woa}/{summary.first_class_wa}, "
            f"second class {summary.second_class_woa}/{summary.second_class_wa}, "
            f"fail rows {summary.fail} ({summary.failed_students} students), "
            f"pass {summary.pass_percentage:.2f}%"
        )
        return summary

    def current_term_classification(
        self, current_group_records: List[GradeRecord], student_sgpas: Dict[str, float]
    ) -> ClassificationSummary:
        return self.classify_scope(current_group_records, student_sgpas, "current term")

    def cumulative_classification(
        self, records: List[GradeRecord], student_cgpas: Dict[str, float]
    ) -> ClassificationSummary:
        return self.classify_scope(records, student_cgpas, "cumulative")

    def get_classification_log(self) -> List[str]:
        return self.classification_log
