"""
Record normalizer: raw sheet rows + subject assignments -> GradeRecord list.

Raw rows use the result sheet column names (REGNO, SCODE, GR, SEM) plus the
source file name added at load time. Credits, display names and the
current-term flag come from the subject assignments.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .data_models import GradeRecord, SubjectAssignment, clean_text

logger = logging.getLogger(__name__)

REGNO_COLUMN = "REGNO"
SUBJECT_COLUMN = "SCODE"
GRADE_COLUMN = "GR"
SEMESTER_COLUMN = "SEM"
SOURCE_COLUMN = "fileSource"

Assignments = Union[Mapping[str, SubjectAssignment], Iterable[SubjectAssignment]]


def index_assignments(assignments: Optional[Assignments]) -> Dict[str, SubjectAssignment]:
    """Key assignments by subject code, keeping their original order"""
    if assignments is None:
        return {}
    if isinstance(assignments, Mapping):
        return {code: a for code, a in assignments.items()}
    return {a.subject_code: a for a in assignments}


def ordered_current_subjects(assignments: Optional[Assignments]) -> List[str]:
    """Subject codes marked as current term, in the order they were assigned"""
    return [code for code, a in index_assignments(assignments).items() if a.is_current_term]


def normalize_grade(value: Any) -> str:
    return clean_text(value).upper()


def normalize_records(
    rows: Iterable[Mapping[str, Any]],
    assignments: Optional[Assignments] = None,
    default_credit_weight: float = 0.0,
    source_file: Optional[str] = None,
) -> List[GradeRecord]:
    """
    Build GradeRecords from raw sheet rows

    Args:
        rows: Parsed sheet rows (dict-like, sheet column names)
        assignments: Subject assignments by code (credits, names, current-term flag)
        default_credit_weight: Credits for subjects with no assignment
        source_file: Overrides the row's own source file name

    Returns:
        One GradeRecord per row with a registration number
    """
    by_code = index_assignments(assignments)
    records: List[GradeRecord] = []
    unassigned: List[str] = []
    skipped = 0

    for row in rows:
        student_id = clean_text(row.get(REGNO_COLUMN))
        if not student_id:
            skipped += 1
            continue

        subject_code = clean_text(row.get(SUBJECT_COLUMN))
        assignment = by_code.get(subject_code)
        if assignment is None and subject_code not in unassigned:
            unassigned.append(subject_code)

        records.append(
            GradeRecord(
                student_id=student_id,
                subject_code=subject_code,
                term_label=row.get(SEMESTER_COLUMN),
                grade=normalize_grade(row.get(GRADE_COLUMN)),
                credit_weight=assignment.credit_weight if assignment else default_credit_weight,
                subject_display_name=assignment.subject_name if assignment else "",
                faculty_display_name=assignment.faculty_name if assignment else "",
                source_file=source_file or row.get(SOURCE_COLUMN),
                is_current_term=assignment.is_current_term if assignment else False,
            )
        )

    if skipped:
        logger.warning(f"⚠️ Skipped {skipped} rows without a registration number")
    if by_code and unassigned:
        logger.warning(
            f"⚠️ No credit assignment for {len(unassigned)} subjects: {', '.join(unassigned)} "
            f"(using {default_credit_weight:g} credits)"
        )

    logger.info(f"✅ Normalized {len(records)} grade records")
    return records
