"""
TERM RESOLVER - Decide which uploaded sheet is the current term and which
records count as current-term work for each student

CURRENT SHEET:
✅ Each sheet's declared term label (first record) is read as a leading integer
✅ Highest number wins; ties keep the first sheet encountered
✅ Unparsable labels never win; if nothing parses the first sheet wins

CURRENT-TERM RECORDS (per student, per sheet):
✅ Explicit: records marked is_current_term, when the student has any
⚠️ Fallback: otherwise every unmarked record of the student. This can count
   arrear re-attempts bundled in the sheet as current coursework, so every
   use of it is logged and reported as a diagnostic.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .data_models import GradeRecord

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class TermSelection:
    """Records chosen as one student's current-term work within one sheet"""
    student_id: str
    records: List[GradeRecord]
    explicit: bool

    @property
    def used_fallback(self) -> bool:
        return not self.explicit


def group_by_source_file(records: Iterable[GradeRecord]) -> Dict[str, List[GradeRecord]]:
    """Partition records into term groups keyed by source file, first-seen order"""
    groups: Dict[str, List[GradeRecord]] = {}
    for record in records:
        groups.setdefault(record.source_file, []).append(record)
    return groups


def declared_term_label(group_records: List[GradeRecord]) -> str:
    """Term label of a sheet, taken from its first record"""
    if not group_records:
        return ""
    return group_records[0].term_label


def parse_term_number(label: str) -> Optional[int]:
    """Leading integer of a term label ("4", " 4", "4th" -> 4), None otherwise"""
    match = _LEADING_INT.match(label or "")
    if not match:
        return None
    return int(match.group(1))


def resolve_current_term_group(groups: Dict[str, List[GradeRecord]]) -> Optional[str]:
    """
    Pick the sheet representing the current term

    Args:
        groups: Term groups in upload order

    Returns:
        Source file name of the current term, None when there are no groups
    """
    if not groups:
        return None

    current = next(iter(groups))
    highest: Optional[int] = None

    for source_file, group_records in groups.items():
        term_number = parse_term_number(declared_term_label(group_records))
        if term_number is None:
            continue
        if highest is None or term_number > highest:
            highest = term_number
            current = source_file

    if highest is None and len(groups) > 1:
        logger.warning(
            f"⚠️ No sheet declares a numeric semester - using first sheet '{current}' as current"
        )
    return current


def select_current_term_records(
    group_records: Iterable[GradeRecord], student_id: str
) -> TermSelection:
    """Current-term records of one student within one sheet"""
    student_records = [r for r in group_records if r.student_id == student_id]
    marked = [r for r in student_records if r.is_current_term]
    if marked:
        return TermSelection(student_id=student_id, records=marked, explicit=True)

    unmarked = [r for r in student_records if not r.is_current_term]
    return TermSelection(student_id=student_id, records=unmarked, explicit=False)


def select_group_current_term_records(
    group_records: List[GradeRecord], source_file: str = ""
) -> Dict[str, TermSelection]:
    """
    Current-term selection for every student of one sheet

    Returns:
        Mapping of student id to TermSelection, students in first-seen order
    """
    by_student: Dict[str, List[GradeRecord]] = {}
    for record in group_records:
        by_student.setdefault(record.student_id, []).append(record)

    selections = {
        student_id: select_current_term_records(student_records, student_id)
        for student_id, student_records in by_student.items()
    }

    fallback_count = sum(1 for s in selections.values() if s.used_fallback)
    if fallback_count:
        logger.warning(
            f"⚠️ {source_file or 'sheet'}: {fallback_count} of {len(selections)} students have no "
            f"subjects marked as current term - using all unmarked subjects"
        )
    return selections


def fallback_students(selections: Dict[str, TermSelection]) -> List[str]:
    return [student_id for student_id, s in selections.items() if s.used_fallback]
