"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Grade record factory
- Subject assignments
- Two-semester sample cohort
- Raw result sheet rows
"""

import pytest

from result_analyzer.data_models import GradeRecord, SubjectAssignment


@pytest.fixture
def make_record():
    """Factory for GradeRecords with sensible defaults"""

    def _make(
        student_id="S1",
        subject_code="CS101",
        grade="A",
        credit_weight=3,
        term_label="3",
        source_file="sem3.xlsx",
        is_current_term=False,
        **extra,
    ):
        return GradeRecord(
            student_id=student_id,
            subject_code=subject_code,
            grade=grade,
            credit_weight=credit_weight,
            term_label=term_label,
            source_file=source_file,
            is_current_term=is_current_term,
            **extra,
        )

    return _make


@pytest.fixture
def sample_assignments():
    """Subject assignments for the sample cohort"""
    return {
        "CS301": SubjectAssignment(
            subject_code="CS301",
            credit_weight=4,
            subject_name="Data Structures",
            faculty_name="Dr. Rao",
            is_current_term=True,
        ),
        "CS302": SubjectAssignment(
            subject_code="CS302",
            credit_weight=3,
            subject_name="Operating Systems",
            faculty_name="Dr. Iyer",
            is_current_term=True,
        ),
        "CS201": SubjectAssignment(
            subject_code="CS201",
            credit_weight=3,
            subject_name="Digital Logic",
            faculty_name="Dr. Menon",
            is_current_term=False,
        ),
    }


@pytest.fixture
def sample_rows():
    """Raw result rows: a semester 2 sheet and a semester 3 sheet with one arrear re-attempt"""
    sem2 = [
        {"REGNO": "R001", "SCODE": "CS201", "GR": "A", "SEM": "2", "fileSource": "sem2.xlsx"},
        {"REGNO": "R002", "SCODE": "CS201", "GR": "U", "SEM": "2", "fileSource": "sem2.xlsx"},
        {"REGNO": "R003", "SCODE": "CS201", "GR": "O", "SEM": "2", "fileSource": "sem2.xlsx"},
    ]
    sem3 = [
        {"REGNO": "R001", "SCODE": "CS301", "GR": "O", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R001", "SCODE": "CS302", "GR": "A+", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R002", "SCODE": "CS301", "GR": "B", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R002", "SCODE": "CS302", "GR": "b+", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R002", "SCODE": "CS201", "GR": "C", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R003", "SCODE": "CS301", "GR": "A", "SEM": "3", "fileSource": "sem3.xlsx"},
        {"REGNO": "R003", "SCODE": "CS302", "GR": "U", "SEM": "3", "fileSource": "sem3.xlsx"},
    ]
    return sem2 + sem3


@pytest.fixture
def sample_records(sample_rows, sample_assignments):
    """Normalized records for the two-semester sample cohort"""
    from result_analyzer.record_normalizer import normalize_records

    return normalize_records(sample_rows, sample_assignments)
