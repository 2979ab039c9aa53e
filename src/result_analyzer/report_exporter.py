"""
REPORT EXPORTER - Write a ResultAnalysis to CSV, Excel and JSON

OUTPUTS:
✅ Student CSV: Registration Number, SGPA, Status
✅ Excel workbook (pandas + openpyxl), one sheet per report table
✅ JSON dump of the report schema (camelCase keys)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd

from .data_models import GradeRecord, ResultAnalysis
from .report_assembler import classification_rows, student_status, subject_display_order

logger = logging.getLogger(__name__)

CATEGORY_ROWS = [
    ("1. Distinction", ">= 8.5 and no history of arrears"),
    ("2. First class", ">= 6.5"),
    ("3. Second class", ">= 5.0"),
    ("4. Fail", "< 5.0"),
]


def _fmt(value: float) -> str:
    return f"{value:.2f}"


class ReportExporter:
    """Render one analysis into downloadable report files"""

    def __init__(self, analysis: ResultAnalysis, records: Iterable[GradeRecord] = ()):
        """
        Args:
            analysis: Output of analyze()
            records: Records the analysis was run on; used for subject order and file details
        """
        self.analysis = analysis
        self.records = list(records)

    # Sheet builders

    def performance_summary(self) -> pd.DataFrame:
        a = self.analysis
        rows = [
            ("Total Students", a.total_students),
            ("Average SGPA", _fmt(a.average_gpa)),
            ("Highest SGPA", _fmt(a.highest_gpa)),
            ("Lowest SGPA", _fmt(a.lowest_gpa)),
        ]
        if a.file_count > 1:
            rows.append(("Number of Files Processed", a.file_count))
            for file_name, summary in a.file_wise_analysis.items():
                rows.append((f"{file_name} Average SGPA", _fmt(summary.average_sgpa)))
                rows.append((f"{file_name} Students", summary.students))
                if summary.semester_name:
                    rows.append((f"{file_name} Semester", summary.semester_name))
        if a.cgpa_analysis is not None:
            rows.append(("Average CGPA", _fmt(a.cgpa_analysis.average_cgpa)))
            rows.append(("Highest CGPA", _fmt(a.cgpa_analysis.highest_cgpa)))
            rows.append(("Lowest CGPA", _fmt(a.cgpa_analysis.lowest_cgpa)))
        return pd.DataFrame(rows, columns=["Metric", "Value"])

    def subject_result_analysis(self) -> pd.DataFrame:
        """End semester result table, subjects in the caller's preferred order"""
        seen: List[str] = []
        for record in self.records:
            if record.subject_code not in seen:
                seen.append(record.subject_code)
        by_subject = {p.subject: p for p in self.analysis.subject_performance}
        order = [code for code in subject_display_order(self.analysis, seen) if code in by_subject]

        rows = []
        for position, code in enumerate(order, start=1):
            p = by_subject[code]
            rows.append({
                "S.No": position,
                "Subject Code": code,
                "Subject Name": p.subject_name or f"Subject {position}",
                "Faculty Name": p.faculty_name,
                "App": p.appeared,
                "Fail": p.failed or "Nil",
                "Passed": p.passed,
                "% of pass": f"{p.pass_percentage:.1f}",
                "Highest Grade": p.highest_grade,
                "No. of students": p.highest_grade_count,
            })
        columns = ["S.No", "Subject Code", "Subject Name", "Faculty Name", "App", "Fail",
                   "Passed", "% of pass", "Highest Grade", "No. of students"]
        return pd.DataFrame(rows, columns=columns)

    def grade_distribution(self) -> pd.DataFrame:
        total = self.analysis.total_grades
        rows = [
            (g.name, g.count, f"{g.count / total * 100:.2f}%" if total > 0 else "0%")
            for g in self.analysis.grade_distribution
        ]
        return pd.DataFrame(rows, columns=["Grade", "Count", "Percentage"])

    def semester_rank(self) -> pd.DataFrame:
        rows = [(i, p.id, _fmt(p.sgpa)) for i, p in enumerate(self.analysis.top_performers, start=1)]
        return pd.DataFrame(rows, columns=["S.No", "Name of the student", "SGPA"])

    def cumulative_rank(self) -> pd.DataFrame:
        toppers = self.analysis.cgpa_analysis.toppers_list if self.analysis.cgpa_analysis else []
        rows = [(i, s.id, _fmt(s.cgpa)) for i, s in enumerate(toppers, start=1)]
        return pd.DataFrame(rows, columns=["S.No", "Name of the student", "CGPA"])

    def classification(self) -> pd.DataFrame:
        current = classification_rows(self.analysis.current_term_classification)
        cumulative = classification_rows(self.analysis.cumulative_classification)
        rows = [(label, current[label], cumulative[label]) for label in current]
        return pd.DataFrame(rows, columns=["Category", "Current semester", "Up to this semester"])

    def categories(self) -> pd.DataFrame:
        return pd.DataFrame(CATEGORY_ROWS, columns=["Category", "Grade Point"])

    def student_sgpa_details(self) -> pd.DataFrame:
        rows = [
            (d.id, _fmt(d.sgpa), student_status(d.has_arrears, d.sgpa))
            for d in self.analysis.student_gpa_details
        ]
        return pd.DataFrame(rows, columns=["Registration Number", "SGPA", "Status"])

    def student_cgpa_details(self) -> pd.DataFrame:
        cgpas = self.analysis.cgpa_analysis.student_cgpas if self.analysis.cgpa_analysis else []
        return pd.DataFrame([(s.id, _fmt(s.cgpa)) for s in cgpas], columns=["Registration Number", "CGPA"])

    def file_details(self) -> pd.DataFrame:
        counts: Dict[str, int] = {}
        semesters: Dict[str, str] = {}
        for record in self.records:
            counts[record.source_file] = counts.get(record.source_file, 0) + 1
            semesters.setdefault(record.source_file, record.term_label)
        rows = [
            (name, counts.get(name, 0), semesters.get(name) or "Unknown")
            for name in self.analysis.files_processed
        ]
        return pd.DataFrame(rows, columns=["File Name", "Record Count", "Semester"])

    def build_sheets(self) -> Dict[str, pd.DataFrame]:
        """Every workbook sheet, in workbook order"""
        sheets = {
            "Performance Summary": self.performance_summary(),
            "End Semester Result Analysis": self.subject_result_analysis(),
            "Grade Distribution": self.grade_distribution(),
            "Rank in this semester": self.semester_rank(),
        }
        if self.analysis.cgpa_analysis is not None:
            sheets["Rank up to this semester"] = self.cumulative_rank()
        sheets["Classification"] = self.classification()
        sheets["Categories"] = self.categories()
        sheets["Student SGPA Details"] = self.student_sgpa_details()
        if self.analysis.cgpa_analysis is not None:
            sheets["Student CGPA Details"] = self.student_cgpa_details()
        if self.analysis.file_count > 1:
            sheets["File Details"] = self.file_details()
        return sheets

    # Writers

    def export_student_csv(self, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.student_sgpa_details().to_csv(output_path, index=False)
        logger.info(f"✅ Student CSV saved: {output_path}")
        return output_path

    def export_excel(self, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        sheets = self.build_sheets()
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            for name, frame in sheets.items():
                frame.to_excel(writer, index=False, sheet_name=name)
        logger.info(f"✅ Excel report saved: {output_path} ({len(sheets)} sheets)")
        return output_path

    def export_json(self, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.analysis.to_report_dict(), f, indent=2)
        logger.info(f"✅ JSON report saved: {output_path}")
        return output_path
