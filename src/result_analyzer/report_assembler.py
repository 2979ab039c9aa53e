"""
Report data assembler: shape cohort and classification results into the
ResultAnalysis schema consumed by exporters and renderers.
"""

from typing import Dict, List, Optional

from .cohort_analyzer import CohortResults
from .data_models import ClassificationSummary, ResultAnalysis


def assemble_result_analysis(
    cohort: CohortResults,
    current_term_classification: ClassificationSummary,
    cumulative_classification: ClassificationSummary,
    files_processed: List[str],
    current_term_file: Optional[str],
    ordered_subjects: Optional[List[str]] = None,
    extra_diagnostics: Optional[List[str]] = None,
) -> ResultAnalysis:
    """
    Build the report-ready analysis

    Args:
        cohort: Output of CohortAnalyzer.run()
        current_term_classification: Classification of the current sheet
        cumulative_classification: Classification across every sheet
        files_processed: Source files in upload order
        current_term_file: Source file resolved as the current term
        ordered_subjects: Caller's subject display order, passed through untouched
        extra_diagnostics: Diagnostics raised outside the cohort pass

    Returns:
        ResultAnalysis
    """
    diagnostics = list(extra_diagnostics or []) + list(cohort.diagnostics)

    return ResultAnalysis(
        total_students=cohort.total_students,
        average_gpa=cohort.statistics.average,
        highest_gpa=cohort.statistics.highest,
        lowest_gpa=cohort.statistics.lowest,
        grade_distribution=cohort.grade_distribution,
        total_grades=cohort.total_grades,
        subject_performance=cohort.subject_performance,
        top_performers=cohort.top_performers,
        needs_improvement=cohort.needs_improvement,
        student_gpa_details=cohort.student_gpa_details,
        pass_fail=cohort.pass_fail,
        subject_grade_distribution=cohort.subject_grade_distribution,
        file_count=len(files_processed),
        files_processed=list(files_processed),
        file_wise_analysis=cohort.file_wise_analysis,
        cgpa_analysis=cohort.cgpa_analysis,
        current_term_classification=current_term_classification,
        cumulative_classification=cumulative_classification,
        current_term_file=current_term_file,
        ordered_subjects=list(ordered_subjects) if ordered_subjects else None,
        diagnostics=diagnostics,
    )


def student_status(has_arrears: bool, sgpa: float) -> str:
    """Status label shown next to a student's SGPA in reports"""
    if has_arrears:
        return "Has Arrears"
    if sgpa < 6.5:
        return "SGPA below 6.5"
    return "Good Standing"


def subject_display_order(analysis: ResultAnalysis, subject_codes: List[str]) -> List[str]:
    """Caller's preferred subject order first, then every other subject in first-seen order"""
    ordered: List[str] = []
    for code in (analysis.ordered_subjects or []) + subject_codes:
        if code not in ordered:
            ordered.append(code)
    return ordered


def classification_rows(summary: ClassificationSummary) -> Dict[str, float]:
    """Flat classification figures as printed in the report's classification table"""
    return {
        "Distinction": summary.distinction,
        "First class WOA": summary.first_class_woa,
        "First class WA": summary.first_class_wa,
        "Second class WOA": summary.second_class_woa,
        "Second class WA": summary.second_class_wa,
        "Fail": summary.fail,
        "% of pass": summary.pass_percentage,
    }
