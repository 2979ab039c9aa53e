"""
ANALYZER - Single entry point for a complete result analysis

PIPELINE:
1. Optional filter to the selected subject codes
2. Group records into terms by source file
3. Resolve the current term sheet
4. Cohort pass (SGPA, CGPA, distributions, rankings)
5. Classification for the current term and cumulative scopes
6. Assemble the ResultAnalysis report schema

The call is pure: no state survives between runs and the input records are
never modified. Malformed or missing data degrades to zero-valued results
and diagnostics, never to an exception.
"""

import logging
from typing import Iterable, List, Optional

from .classification_calculator import ClassificationCalculator
from .cohort_analyzer import CohortAnalyzer
from .data_models import GradeRecord, ResultAnalysis
from .report_assembler import assemble_result_analysis
from .term_resolver import group_by_source_file, resolve_current_term_group

logger = logging.getLogger(__name__)


def uncredited_subjects(records: List[GradeRecord]) -> List[str]:
    """
    Subjects whose records all carry zero credits while other subjects carry credit

    When no subject carries credit at all the cohort pass reports it instead.
    """
    credited = {r.subject_code for r in records if r.has_credit}
    if not credited:
        return []
    uncredited: List[str] = []
    for record in records:
        if record.subject_code not in credited and record.subject_code not in uncredited:
            uncredited.append(record.subject_code)
    return uncredited


def analyze(
    records: Iterable[GradeRecord],
    selected_subject_codes: Optional[Iterable[str]] = None,
    ordered_subjects: Optional[List[str]] = None,
) -> ResultAnalysis:
    """
    Analyze grade records

    Args:
        records: Grade records from every uploaded sheet
        selected_subject_codes: Restrict the analysis to these subjects (empty = all)
        ordered_subjects: Preferred subject display order, passed through to the report

    Returns:
        ResultAnalysis ready for export or rendering
    """
    records = list(records)
    diagnostics: List[str] = []

    selected = set(selected_subject_codes or [])
    if selected:
        before = len(records)
        records = [r for r in records if r.subject_code in selected]
        logger.info(f"🔍 Restricted to {len(selected)} subjects: {len(records)} of {before} records")

    if not records:
        diagnostics.append("No grade records to analyze")
        logger.warning("⚠️ No grade records to analyze")

    uncredited = uncredited_subjects(records)
    if uncredited:
        diagnostics.append(
            f"{len(uncredited)} subjects have no credits assigned and were left out of "
            f"GPA calculations: {', '.join(uncredited)}"
        )
        logger.warning(f"⚠️ Subjects without credits: {', '.join(uncredited)}")

    groups = group_by_source_file(records)
    current_file = resolve_current_term_group(groups)
    logger.info(f"📁 {len(groups)} sheets, current term sheet: {current_file}")

    cohort = CohortAnalyzer(records, groups, current_file)
    results = cohort.run()

    classifier = ClassificationCalculator()
    current_classification = classifier.current_term_classification(
        cohort.current_group_records, results.student_sgpas
    )
    cumulative_classification = classifier.cumulative_classification(records, results.student_cgpas)
    for entry in classifier.get_classification_log():
        logger.debug(entry)

    for message in diagnostics + results.diagnostics:
        logger.info(f"ℹ️ {message}")

    return assemble_result_analysis(
        results,
        current_classification,
        cumulative_classification,
        files_processed=list(groups.keys()),
        current_term_file=current_file,
        ordered_subjects=ordered_subjects,
        extra_diagnostics=diagnostics,
    )
