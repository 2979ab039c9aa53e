"""Semester result analysis: SGPA/CGPA, cohort statistics and classification"""

from .analyzer import analyze
from .data_models import (
    ClassificationBucket,
    ClassificationSummary,
    GradeRecord,
    ResultAnalysis,
    SubjectAssignment,
)
from .record_normalizer import normalize_records, ordered_current_subjects

__version__ = "1.0.0"

__all__ = [
    "analyze",
    "normalize_records",
    "ordered_current_subjects",
    "ClassificationBucket",
    "ClassificationSummary",
    "GradeRecord",
    "ResultAnalysis",
    "SubjectAssignment",
]
