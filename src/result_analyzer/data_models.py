"""
DATA MODELS - Pydantic schemas for grade records and result analysis output
Type-safe, immutable data structures shared by every analysis stage

MODELS:
✅ GradeRecord: One (student, subject, source file) grade entry
✅ SubjectAssignment: Credits, display names and current-term flag per subject
✅ ResultAnalysis: Report-ready output consumed by exporters and renderers

ABSENCE SEMANTICS:
- Missing credit weight = 0 (record contributes nothing to weighted sums)
- Missing subject / faculty name = empty string
- Missing source file = "Unknown"
- Missing current-term flag = False

Dependencies: Pydantic for validation
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_SOURCE = "Unknown"


def clean_text(value: Any) -> str:
    """Stringify a cell value, treating None/NaN as empty"""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _as_credit(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        credit = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(credit):
        return 0.0
    return credit


def _as_flag(value: Any) -> bool:
    """Parse Yes/No style flags from sheets"""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().upper() in ("YES", "Y", "TRUE", "1")
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


class ClassificationBucket(str, Enum):
    """Academic standing categories, mutually exclusive per student per scope"""
    DISTINCTION = "Distinction"
    FIRST_CLASS_WITHOUT_ARREARS = "FirstClass-WithoutArrears"
    FIRST_CLASS_WITH_ARREARS = "FirstClass-WithArrears"
    SECOND_CLASS_WITHOUT_ARREARS = "SecondClass-WithoutArrears"
    SECOND_CLASS_WITH_ARREARS = "SecondClass-WithArrears"
    FAIL = "Fail"


class GradeRecord(BaseModel):
    """Individual grade entry for one student, subject and uploaded sheet"""

    model_config = ConfigDict(frozen=True)

    student_id: str = Field(..., description="Registration number")
    subject_code: str = Field(..., description="Subject code")
    term_label: str = Field("", description="Declared semester, may be non-numeric")
    grade: str = Field(..., description="Letter grade as uploaded")

    credit_weight: float = Field(0.0, description="Credits assigned to the subject")
    subject_display_name: str = Field("", description="Subject name for display")
    faculty_display_name: str = Field("", description="Faculty name for display")

    source_file: str = Field(UNKNOWN_SOURCE, description="Sheet the record came from")
    is_current_term: bool = Field(False, description="Subject marked as current term work")

    @field_validator("student_id", "subject_code", "term_label", "grade",
                     "subject_display_name", "faculty_display_name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return clean_text(v)

    @field_validator("source_file", mode="before")
    @classmethod
    def default_source(cls, v):
        return clean_text(v) or UNKNOWN_SOURCE

    @field_validator("credit_weight", mode="before")
    @classmethod
    def parse_credit(cls, v):
        """Absent, unparseable or non-finite credits count as zero"""
        return _as_credit(v)

    @field_validator("is_current_term", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return _as_flag(v)

    @property
    def has_credit(self) -> bool:
        return self.credit_weight > 0


class SubjectAssignment(BaseModel):
    """Per-subject settings chosen before analysis (credits, names, current-term)"""

    model_config = ConfigDict(frozen=True)

    subject_code: str = Field(..., description="Subject code")
    credit_weight: float = Field(0.0, ge=0.0, description="Credits for the subject")
    subject_name: str = Field("", description="Subject display name")
    faculty_name: str = Field("", description="Faculty display name")
    is_current_term: bool = Field(False, description="Counts toward the current term")

    @field_validator("subject_code", "subject_name", "faculty_name", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return clean_text(v)

    @field_validator("credit_weight", mode="before")
    @classmethod
    def parse_credit(cls, v):
        return _as_credit(v)

    @field_validator("is_current_term", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return _as_flag(v)


class ReportModel(BaseModel):
    """Base for report schema models: frozen, camelCase aliases for renderers"""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class GradeCount(ReportModel):
    name: str
    count: int
    fill: str


class SubjectPerformance(ReportModel):
    """Pass/fail statistics for one subject in the current term"""

    subject: str = Field(..., description="Subject code")
    subject_name: str = ""
    faculty_name: str = ""
    pass_percentage: float = Field(0.0, alias="pass")
    fail_percentage: float = Field(0.0, alias="fail")
    appeared: int = 0
    passed: int = 0
    failed: int = 0
    highest_grade: str = ""
    highest_grade_count: int = 0


class StudentGPADetail(ReportModel):
    id: str
    sgpa: float
    has_arrears: bool


class TopPerformer(ReportModel):
    id: str
    sgpa: float
    grade: str


class ImprovementCandidate(ReportModel):
    id: str
    sgpa: float
    subjects: str = ""


class PassFailSplit(ReportModel):
    pass_percentage: float = 0.0
    fail_percentage: float = 0.0
    pass_count: int = 0
    fail_count: int = 0


class FileSummary(ReportModel):
    average_sgpa: float = Field(..., alias="averageSGPA")
    students: int
    semester_name: Optional[str] = None


class StudentCGPA(ReportModel):
    id: str
    cgpa: float


class CGPAAnalysis(ReportModel):
    student_cgpas: List[StudentCGPA] = Field(default_factory=list, alias="studentCGPAs")
    average_cgpa: float = Field(0.0, alias="averageCGPA")
    highest_cgpa: float = Field(0.0, alias="highestCGPA")
    lowest_cgpa: float = Field(0.0, alias="lowestCGPA")
    toppers_list: List[StudentCGPA] = Field(default_factory=list)
    current_semester_file: Optional[str] = None


class ClassificationSummary(ReportModel):
    """
    Classification counts for one scope (current term or cumulative)

    `fail` is the raw number of failing-grade rows in the scope, not a number
    of students; `failed_students` holds the Fail bucket's student count.
    """

    distinction: int = 0
    first_class_woa: int = Field(0, alias="firstClassWOA")
    first_class_wa: int = Field(0, alias="firstClassWA")
    second_class_woa: int = Field(0, alias="secondClassWOA")
    second_class_wa: int = Field(0, alias="secondClassWA")
    fail: int = 0
    failed_students: int = 0
    total_students: int = 0
    pass_percentage: float = 0.0
    student_buckets: Dict[str, ClassificationBucket] = Field(default_factory=dict)

    def bucket_count(self, bucket: ClassificationBucket) -> int:
        """Number of students in a bucket"""
        return sum(1 for b in self.student_buckets.values() if b == bucket)


class ResultAnalysis(ReportModel):
    """Complete analysis output; read-only contract for exporters and renderers"""

    total_students: int = 0
    average_gpa: float = Field(0.0, alias="averageCGPA")
    highest_gpa: float = Field(0.0, alias="highestSGPA")
    lowest_gpa: float = Field(0.0, alias="lowestSGPA")

    grade_distribution: List[GradeCount] = Field(default_factory=list)
    total_grades: int = 0
    subject_performance: List[SubjectPerformance] = Field(default_factory=list)
    top_performers: List[TopPerformer] = Field(default_factory=list)
    needs_improvement: List[ImprovementCandidate] = Field(default_factory=list)
    student_gpa_details: List[StudentGPADetail] = Field(default_factory=list, alias="studentSgpaDetails")
    pass_fail: PassFailSplit = Field(default_factory=PassFailSplit, alias="passFailData")
    subject_grade_distribution: Dict[str, List[GradeCount]] = Field(default_factory=dict)

    file_count: int = 0
    files_processed: List[str] = Field(default_factory=list)
    file_wise_analysis: Dict[str, FileSummary] = Field(default_factory=dict)
    cgpa_analysis: Optional[CGPAAnalysis] = None

    current_term_classification: ClassificationSummary = Field(
        default_factory=ClassificationSummary, alias="singleFileClassification"
    )
    cumulative_classification: ClassificationSummary = Field(
        default_factory=ClassificationSummary, alias="multipleFileClassification"
    )
    current_term_file: Optional[str] = Field(None, alias="currentSemesterFile")
    ordered_subjects: Optional[List[str]] = None

    diagnostics: List[str] = Field(default_factory=list)

    def to_report_dict(self) -> Dict[str, Any]:
        """JSON-ready dump with the camelCase keys renderers expect"""
        return self.model_dump(by_alias=True, mode="json")


__all__ = [
    "UNKNOWN_SOURCE",
    "ClassificationBucket",
    "GradeRecord",
    "SubjectAssignment",
    "GradeCount",
    "SubjectPerformance",
    "StudentGPADetail",
    "TopPerformer",
    "ImprovementCandidate",
    "PassFailSplit",
    "FileSummary",
    "StudentCGPA",
    "CGPAAnalysis",
    "ClassificationSummary",
    "ResultAnalysis",
]
