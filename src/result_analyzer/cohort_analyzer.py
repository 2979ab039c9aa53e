"""
COHORT ANALYZER - Cohort-wide distributions, rankings and statistics

ANALYSES:
✅ Grade histogram over every input record
✅ Subject performance and per-subject histograms (current-term records)
✅ Per-student current-term SGPA with arrear flag
✅ Average / highest / lowest SGPA (zero SGPAs excluded)
✅ Top performers (top 6) and needs-improvement list
✅ Pass / fail split over recognized grades
✅ Per-sheet summary (students, average SGPA, declared semester)
✅ CGPA aggregate and toppers (only with more than one sheet)

ZERO POLICY:
A GPA of exactly 0 means "no credited subject", not a real low score.
Such students still count in totals and in the needs-improvement list but
are left out of average/highest/lowest figures.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .data_models import (
    CGPAAnalysis,
    FileSummary,
    GradeCount,
    GradeRecord,
    ImprovementCandidate,
    PassFailSplit,
    StudentCGPA,
    StudentGPADetail,
    SubjectPerformance,
    TopPerformer,
)
from .gpa_calculator import GPACalculator, percentage, round_half_up
from .grade_scale import grade_color, grade_order, is_failing, is_recognized, point_of
from .term_resolver import (
    TermSelection,
    declared_term_label,
    fallback_students,
    select_group_current_term_records,
)

logger = logging.getLogger(__name__)

TOP_PERFORMER_COUNT = 6
CGPA_TOPPER_COUNT = 10
IMPROVEMENT_THRESHOLD = 6.5
DEFAULT_BEST_GRADE = "A"


@dataclass(frozen=True)
class GPAStatistics:
    """Average/highest/lowest over non-zero GPAs"""
    average: float = 0.0
    highest: float = 0.0
    lowest: float = 0.0
    counted: int = 0


@dataclass(frozen=True)
class CohortResults:
    """Everything the cohort pass produces, before classification and assembly"""
    total_students: int
    grade_distribution: List[GradeCount]
    total_grades: int
    subject_performance: List[SubjectPerformance]
    subject_grade_distribution: Dict[str, List[GradeCount]]
    student_gpa_details: List[StudentGPADetail]
    statistics: GPAStatistics
    top_performers: List[TopPerformer]
    needs_improvement: List[ImprovementCandidate]
    pass_fail: PassFailSplit
    file_wise_analysis: Dict[str, FileSummary]
    student_cgpas: Dict[str, float]
    cgpa_analysis: Optional[CGPAAnalysis]
    diagnostics: List[str] = field(default_factory=list)

    @property
    def student_sgpas(self) -> Dict[str, float]:
        return {d.id: d.sgpa for d in self.student_gpa_details}


def summarize_gpas(values: Iterable[float]) -> GPAStatistics:
    """Cohort statistics excluding GPAs of exactly 0; all zero when nothing is left"""
    valid = [v for v in values if v != 0]
    if not valid:
        return GPAStatistics()
    return GPAStatistics(
        average=round_half_up(sum(valid) / len(valid)),
        highest=round_half_up(max(valid)),
        lowest=round_half_up(min(valid)),
        counted=len(valid),
    )


def is_selected(record: GradeRecord, selection: TermSelection) -> bool:
    """Whether a record belongs to its student's current-term selection"""
    if selection.explicit:
        return record.is_current_term
    return not record.is_current_term


def build_histogram(records: Iterable[GradeRecord]) -> List[GradeCount]:
    """Counts of recognized grades, in grade scale order"""
    counts: Dict[str, int] = {}
    for record in records:
        if is_recognized(record.grade):
            counts[record.grade] = counts.get(record.grade, 0) + 1
    return [
        GradeCount(name=grade, count=counts[grade], fill=grade_color(grade))
        for grade in grade_order()
        if grade in counts
    ]


def best_grade(records: Iterable[GradeRecord]) -> Optional[str]:
    """Highest recognized grade, first one wins on ties"""
    best = None
    best_points = None
    for record in records:
        points = point_of(record.grade)
        if points is None:
            continue
        if best_points is None or points > best_points:
            best, best_points = record.grade, points
    return best


def _index_by_student(records: Iterable[GradeRecord]) -> Dict[str, List[GradeRecord]]:
    by_student: Dict[str, List[GradeRecord]] = {}
    for record in records:
        by_student.setdefault(record.student_id, []).append(record)
    return by_student


class CohortAnalyzer:
    """Cohort statistics for one analysis run; every input is read-only"""

    def __init__(
        self,
        records: List[GradeRecord],
        groups: Dict[str, List[GradeRecord]],
        current_file: Optional[str],
    ):
        """
        Args:
            records: All records under analysis (already subject-filtered)
            groups: Term groups keyed by source file, upload order
            current_file: Source file of the current term group
        """
        self.records = records
        self.groups = groups
        self.current_file = current_file
        self.calculator = GPACalculator()
        self.diagnostics: List[str] = []

        self._records_by_student = _index_by_student(records)
        self._group_selections: Dict[str, Dict[str, TermSelection]] = {
            source_file: select_group_current_term_records(group_records, source_file)
            for source_file, group_records in groups.items()
        }
        self._note_fallbacks()

    # Term selections

    @property
    def current_group_records(self) -> List[GradeRecord]:
        if self.current_file is None:
            return []
        return self.groups.get(self.current_file, [])

    @property
    def current_selections(self) -> Dict[str, TermSelection]:
        if self.current_file is None:
            return {}
        return self._group_selections.get(self.current_file, {})

    def selected_current_records(self) -> List[GradeRecord]:
        """Current-term records of the current sheet, in sheet order"""
        selections = self.current_selections
        return [
            r for r in self.current_group_records
            if is_selected(r, selections[r.student_id])
        ]

    def _note_fallbacks(self):
        for source_file, selections in self._group_selections.items():
            students = fallback_students(selections)
            if not students:
                continue
            message = (
                f"{source_file}: {len(students)} of {len(selections)} students have no subjects "
                f"marked as current term; all their unmarked subjects were counted"
            )
            if source_file == self.current_file:
                message += " (arrear re-attempts in this sheet may be counted as current work)"
            self.diagnostics.append(message)

    # Distributions

    def grade_histogram(self) -> Tuple[List[GradeCount], int]:
        """
        Grade histogram over every input record

        Returns:
            Tuple of (histogram, number of recognized grade rows)
        """
        histogram = build_histogram(self.records)
        total = sum(entry.count for entry in histogram)

        unrecognized = len(self.records) - total
        if unrecognized:
            self.diagnostics.append(
                f"{unrecognized} records carry grades outside the grade scale and were left out "
                f"of grade point calculations"
            )
        return histogram, total

    def subject_performance(self) -> List[SubjectPerformance]:
        """Pass/fail percentages per subject over current-term records"""
        stats: Dict[str, Dict] = {}
        for record in self.selected_current_records():
            if not is_recognized(record.grade):
                continue
            entry = stats.setdefault(
                record.subject_code,
                {"pass": 0, "fail": 0, "name": "", "faculty": "", "grades": []},
            )
            if not entry["name"] and record.subject_display_name:
                entry["name"] = record.subject_display_name
            if not entry["faculty"] and record.faculty_display_name:
                entry["faculty"] = record.faculty_display_name
            if is_failing(record.grade):
                entry["fail"] += 1
            else:
                entry["pass"] += 1
            entry["grades"].append(record)

        performance = []
        for subject, entry in stats.items():
            total = entry["pass"] + entry["fail"]
            top = best_grade(entry["grades"]) or ""
            performance.append(
                SubjectPerformance(
                    subject=subject,
                    subject_name=entry["name"],
                    faculty_name=entry["faculty"],
                    pass_percentage=percentage(entry["pass"], total),
                    fail_percentage=percentage(entry["fail"], total),
                    appeared=total,
                    passed=entry["pass"],
                    failed=entry["fail"],
                    highest_grade=top,
                    highest_grade_count=sum(1 for r in entry["grades"] if r.grade == top),
                )
            )
        return performance

    def subject_grade_distribution(self) -> Dict[str, List[GradeCount]]:
        by_subject: Dict[str, List[GradeRecord]] = {}
        for record in self.selected_current_records():
            by_subject.setdefault(record.subject_code, []).append(record)
        return {subject: build_histogram(rs) for subject, rs in by_subject.items()}

    def pass_fail_split(self) -> PassFailSplit:
        """Pass/fail share of recognized grades over every input record"""
        pass_count = sum(1 for r in self.records if is_recognized(r.grade) and not is_failing(r.grade))
        fail_count = sum(1 for r in self.records if is_failing(r.grade))
        total = pass_count + fail_count
        return PassFailSplit(
            pass_percentage=percentage(pass_count, total),
            fail_percentage=percentage(fail_count, total),
            pass_count=pass_count,
            fail_count=fail_count,
        )

    # Current-term GPAs and rankings

    def student_gpa_details(self) -> List[StudentGPADetail]:
        """Current-term SGPA for every student of the current sheet, sorted by id"""
        current_by_student = _index_by_student(self.current_group_records)

        credited = [r for r in self.current_group_records if r.has_credit]
        if self.current_group_records and not credited:
            self.diagnostics.append(
                "No current-term record has credits assigned; every SGPA is 0"
            )
            logger.warning("⚠️ No credits assigned in current sheet - all SGPAs will be 0")

        details = []
        for student_id, selection in self.current_selections.items():
            sgpa = self.calculator.calculate_weighted_gpa(selection.records, student_id)
            details.append(
                StudentGPADetail(
                    id=student_id,
                    sgpa=sgpa,
                    has_arrears=any(is_failing(r.grade) for r in current_by_student[student_id]),
                )
            )
        details.sort(key=lambda d: d.id)
        return details

    def cohort_statistics(self, details: List[StudentGPADetail]) -> GPAStatistics:
        stats = summarize_gpas(d.sgpa for d in details)
        if details and stats.counted == 0:
            self.diagnostics.append("No student has a non-zero SGPA; average/highest/lowest are 0")
        elif stats.counted < len(details):
            self.diagnostics.append(
                f"{len(details) - stats.counted} students with SGPA 0 left out of SGPA statistics"
            )
        return stats

    def top_performers(self, details: List[StudentGPADetail]) -> List[TopPerformer]:
        """Top students by SGPA; equal SGPAs keep registration order"""
        ranked = sorted(details, key=lambda d: d.sgpa, reverse=True)[:TOP_PERFORMER_COUNT]
        return [
            TopPerformer(
                id=d.id,
                sgpa=d.sgpa,
                grade=best_grade(self._records_by_student.get(d.id, [])) or DEFAULT_BEST_GRADE,
            )
            for d in ranked
        ]

    def needs_improvement(self, details: List[StudentGPADetail]) -> List[ImprovementCandidate]:
        """Students below the SGPA threshold or with a failing grade in any sheet"""
        candidates = []
        for d in details:
            failed = [r.subject_code for r in self._records_by_student.get(d.id, []) if is_failing(r.grade)]
            if d.sgpa < IMPROVEMENT_THRESHOLD or failed:
                candidates.append(ImprovementCandidate(id=d.id, sgpa=d.sgpa, subjects=", ".join(failed)))
        return candidates

    # Multi-sheet analyses

    def file_wise_analysis(self) -> Dict[str, FileSummary]:
        """Student count, average SGPA and declared semester per sheet"""
        summaries = {}
        for source_file, group_records in self.groups.items():
            selections = self._group_selections[source_file]
            sgpas = [
                self.calculator.calculate_weighted_gpa(s.records, student_id)
                for student_id, s in selections.items()
            ]
            average = round_half_up(sum(sgpas) / len(sgpas)) if sgpas else 0.0
            summaries[source_file] = FileSummary(
                average_sgpa=average,
                students=len(selections),
                semester_name=declared_term_label(group_records) or None,
            )
        return summaries

    def student_cgpas(self) -> Dict[str, float]:
        """CGPA for every student over current-term selections of all sheets"""
        cgpas = {}
        for student_id in self._records_by_student:
            term_sets = [
                selections[student_id].records
                for selections in self._group_selections.values()
                if student_id in selections
            ]
            cgpas[student_id] = self.calculator.calculate_cumulative_gpa(term_sets, student_id)
        return cgpas

    def cgpa_analysis(self, cgpas: Optional[Dict[str, float]] = None) -> Optional[CGPAAnalysis]:
        """CGPA aggregate; only produced when more than one sheet was uploaded"""
        if len(self.groups) <= 1:
            return None
        if cgpas is None:
            cgpas = self.student_cgpas()

        student_cgpas = [StudentCGPA(id=sid, cgpa=cgpa) for sid, cgpa in cgpas.items()]
        stats = summarize_gpas(cgpas.values())
        if stats.counted < len(student_cgpas):
            self.diagnostics.append(
                f"{len(student_cgpas) - stats.counted} students with CGPA 0 left out of CGPA statistics"
            )

        ranked = sorted((s for s in student_cgpas if s.cgpa != 0), key=lambda s: s.cgpa, reverse=True)
        logger.info(
            f"📊 CGPA - Average: {stats.average:.2f}, Highest: {stats.highest:.2f}, Lowest: {stats.lowest:.2f}"
        )
        return CGPAAnalysis(
            student_cgpas=student_cgpas,
            average_cgpa=stats.average,
            highest_cgpa=stats.highest,
            lowest_cgpa=stats.lowest,
            toppers_list=ranked[:CGPA_TOPPER_COUNT],
            current_semester_file=self.current_file,
        )

    def run(self) -> "CohortResults":
        """Run every cohort analysis once"""
        logger.info(
            f"📊 Analyzing {len(self.records)} records from {len(self.groups)} sheets "
            f"(current: {self.current_file})"
        )
        histogram, total_grades = self.grade_histogram()
        details = self.student_gpa_details()
        cgpas = self.student_cgpas()

        return CohortResults(
            total_students=len(self._records_by_student),
            grade_distribution=histogram,
            total_grades=total_grades,
            subject_performance=self.subject_performance(),
            subject_grade_distribution=self.subject_grade_distribution(),
            student_gpa_details=details,
            statistics=self.cohort_statistics(details),
            top_performers=self.top_performers(details),
            needs_improvement=self.needs_improvement(details),
            pass_fail=self.pass_fail_split(),
            file_wise_analysis=self.file_wise_analysis(),
            student_cgpas=cgpas,
            cgpa_analysis=self.cgpa_analysis(cgpas),
            diagnostics=list(self.diagnostics),
        )

    def get_calculation_log(self) -> List[str]:
        return self.calculator.get_calculation_log()
