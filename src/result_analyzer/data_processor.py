"""
DATA PROCESSOR - Result sheet and subject assignment loading
Load uploaded result sheets and per-subject credit assignments with pandas

DATA SOURCES:
✅ Result sheets (.xlsx / .csv, first sheet) - one per semester upload
   Columns: REGNO, SCODE, GR (required), SEM, CNo (optional)
✅ Subject assignments (.csv / .xlsx)
   Columns: subject_code, credits (required), subject_name, faculty_name, current_term

VALIDATION STRATEGY:
1. Unreadable files and missing required columns are recorded as
   validation errors; loading continues with the remaining files
2. Blank registration numbers are dropped with a warning
3. Grade contents are NOT validated here; the analysis handles unknown grades

Dependencies: pandas (openpyxl for .xlsx), pydantic for assignment rows
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from .data_models import GradeRecord, SubjectAssignment, clean_text
from .record_normalizer import (
    GRADE_COLUMN,
    REGNO_COLUMN,
    SOURCE_COLUMN,
    SUBJECT_COLUMN,
    normalize_records,
    ordered_current_subjects,
)

logger = logging.getLogger(__name__)

RESULT_FILE_SUFFIXES = (".xlsx", ".xlsm", ".csv")
REQUIRED_RESULT_COLUMNS = [REGNO_COLUMN, SUBJECT_COLUMN, GRADE_COLUMN]
REQUIRED_ASSIGNMENT_COLUMNS = ["subject_code", "credits"]


def read_table(file_path: Path) -> pd.DataFrame:
    """Read the first sheet of a workbook or a CSV file, every cell as text"""
    if file_path.suffix.lower() == ".csv":
        df = pd.read_csv(file_path, dtype=str, encoding="utf-8-sig")
    else:
        df = pd.read_excel(file_path, sheet_name=0, dtype=str)
    df.columns = [str(c).strip() for c in df.columns]
    return df


class ResultDataProcessor:
    """Load and validate result sheets and subject assignments"""

    def __init__(self, data_dir: Optional[Path] = None):
        if data_dir is None:
            self.data_dir = Path.cwd() / "data"
        else:
            self.data_dir = Path(data_dir)

        # Raw sheet rows in upload order, tagged with fileSource
        self.raw_rows: List[Dict[str, Any]] = []
        self.files_loaded: List[str] = []
        self.assignments: Dict[str, SubjectAssignment] = {}

        # Validation results
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

    def discover_result_files(self) -> List[Path]:
        """Result sheets in the data directory, sorted by name"""
        if not self.data_dir.is_dir():
            return []
        return sorted(
            p for p in self.data_dir.iterdir()
            if p.is_file() and p.suffix.lower() in RESULT_FILE_SUFFIXES
        )

    def load_all_files(self, file_paths: Optional[Iterable[Path]] = None) -> bool:
        """
        Load every result sheet

        Args:
            file_paths: Sheets in upload order; defaults to the data directory contents

        Returns:
            True when every sheet loaded without validation errors
        """
        paths = [Path(p) for p in file_paths] if file_paths is not None else self.discover_result_files()

        logger.info("🔍 LOADING RESULT SHEETS")
        logger.info("=" * 60)

        if not paths:
            self.validation_errors.append(f"No result sheets found in {self.data_dir}")
            logger.error(f"❌ No result sheets found in {self.data_dir}")
            return False

        success = True
        for path in paths:
            success &= self.load_result_file(path)

        if success:
            logger.info(f"✅ Loaded {len(self.raw_rows)} rows from {len(self.files_loaded)} sheets")
        else:
            logger.error("❌ Result sheet loading failed - check validation errors")
        return success

    def load_result_file(self, file_path: Path) -> bool:
        """Load and validate one result sheet"""
        file_path = Path(file_path)

        try:
            logger.info(f"📊 Loading results from: {file_path}")
            df = read_table(file_path)
        except Exception as e:
            self.validation_errors.append(f"Failed to read {file_path.name}: {e}")
            logger.error(f"  ❌ Failed to read {file_path.name}: {e}")
            return False

        missing_columns = [c for c in REQUIRED_RESULT_COLUMNS if c not in df.columns]
        if missing_columns:
            self.validation_errors.append(f"{file_path.name} missing columns: {missing_columns}")
            return False

        blank = df[REGNO_COLUMN].isna() | (df[REGNO_COLUMN].astype(str).str.strip() == "")
        if blank.any():
            self.validation_warnings.append(
                f"{file_path.name}: dropped {int(blank.sum())} rows without a registration number"
            )
            df = df[~blank]

        df = df.astype(object).where(df.notna(), None)
        df[SOURCE_COLUMN] = file_path.name

        self.raw_rows.extend(df.to_dict("records"))
        self.files_loaded.append(file_path.name)
        logger.info(f"  ✅ Loaded {len(df)} grade rows")
        return True

    def load_subject_assignments(self, file_path: Path) -> bool:
        """Load per-subject credits, names and current-term flags"""
        file_path = Path(file_path)

        try:
            logger.info(f"📊 Loading subject assignments from: {file_path}")
            df = read_table(file_path)
        except Exception as e:
            self.validation_errors.append(f"Failed to read subject assignments: {e}")
            logger.error(f"  ❌ Failed to read subject assignments: {e}")
            return False

        df.columns = [c.lower() for c in df.columns]
        missing_columns = [c for c in REQUIRED_ASSIGNMENT_COLUMNS if c not in df.columns]
        if missing_columns:
            self.validation_errors.append(f"Subject assignments missing columns: {missing_columns}")
            return False

        success = True
        for position, row in enumerate(df.to_dict("records"), start=2):
            code = clean_text(row.get("subject_code"))
            if not code:
                continue
            try:
                self.assignments[code] = SubjectAssignment(
                    subject_code=code,
                    credit_weight=row.get("credits"),
                    subject_name=row.get("subject_name"),
                    faculty_name=row.get("faculty_name"),
                    is_current_term=row.get("current_term"),
                )
            except ValidationError as e:
                self.validation_errors.append(f"Subject assignment row {position} ({code}): {e}")
                success = False

        logger.info(f"  ✅ Loaded {len(self.assignments)} subject assignments")
        return success

    def build_records(self, default_credit_weight: float = 0.0) -> List[GradeRecord]:
        """Normalize every loaded row into GradeRecords"""
        return normalize_records(self.raw_rows, self.assignments, default_credit_weight)

    def ordered_subjects(self) -> List[str]:
        return ordered_current_subjects(self.assignments)

    def generate_validation_report(self) -> str:
        """Human readable summary of loaded sheets and validation problems"""
        lines = ["📋 RESULT DATA VALIDATION REPORT", "=" * 60]
        lines.append(f"Sheets loaded: {len(self.files_loaded)}")
        for name in self.files_loaded:
            lines.append(f"  - {name}")
        lines.append(f"Grade rows: {len(self.raw_rows)}")
        lines.append(f"Subject assignments: {len(self.assignments)}")

        if self.validation_errors:
            lines.append(f"\n❌ ERRORS ({len(self.validation_errors)}):")
            lines.extend(f"  - {e}" for e in self.validation_errors)
        if self.validation_warnings:
            lines.append(f"\n⚠️ WARNINGS ({len(self.validation_warnings)}):")
            lines.extend(f"  - {w}" for w in self.validation_warnings)
        if not self.validation_errors and not self.validation_warnings:
            lines.append("\n✅ No validation problems")
        return "\n".join(lines)
