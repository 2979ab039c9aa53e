"""
Command line entry point

Usage: result-analyzer sem3.xlsx sem4.xlsx --subjects subjects.csv --format xlsx json
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import analyze
from .data_models import ResultAnalysis
from .data_processor import ResultDataProcessor
from .report_exporter import ReportExporter
from .settings import get_settings

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "xlsx", "json")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="result-analyzer",
        description="Analyze semester result sheets: SGPA/CGPA, cohort statistics and classification.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Result sheets in upload order (default: every sheet in the data directory)",
    )
    parser.add_argument(
        "--subjects",
        type=Path,
        help="Subject assignment sheet (subject_code, credits, subject_name, faculty_name, current_term)",
    )
    parser.add_argument(
        "--select",
        nargs="+",
        metavar="CODE",
        default=[],
        help="Restrict the analysis to these subject codes",
    )
    parser.add_argument("--data-dir", type=Path, help="Directory searched when no files are given")
    parser.add_argument("--output-dir", type=Path, help="Directory for the generated reports")
    parser.add_argument(
        "--format",
        nargs="+",
        choices=EXPORT_FORMATS,
        default=["xlsx"],
        dest="formats",
        help="Report formats to write (default: xlsx)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: RESULT_ANALYZER_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def print_summary(analysis: ResultAnalysis):
    print("\n📊 RESULT ANALYSIS")
    print("=" * 60)
    print(f"Sheets processed: {analysis.file_count} (current: {analysis.current_term_file})")
    print(f"Students: {analysis.total_students}")
    print(f"Average SGPA: {analysis.average_gpa:.2f}")
    print(f"Highest SGPA: {analysis.highest_gpa:.2f}")
    print(f"Lowest SGPA: {analysis.lowest_gpa:.2f}")
    if analysis.cgpa_analysis is not None:
        print(f"Average CGPA: {analysis.cgpa_analysis.average_cgpa:.2f}")

    summary = analysis.current_term_classification
    print(
        f"Distinction: {summary.distinction}, First class: {summary.first_class_woa} WOA / "
        f"{summary.first_class_wa} WA, Second class: {summary.second_class_woa} WOA / "
        f"{summary.second_class_wa} WA, Fail: {summary.fail}, % of pass: {summary.pass_percentage:.2f}"
    )
    for message in analysis.diagnostics:
        print(f"ℹ️ {message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    settings = get_settings(**overrides)

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    processor = ResultDataProcessor(settings.data_dir)
    loaded = processor.load_all_files(args.files or None)
    if args.subjects is not None:
        loaded = processor.load_subject_assignments(args.subjects) and loaded

    if not loaded:
        print(processor.generate_validation_report(), file=sys.stderr)
        return 1
    if processor.validation_warnings:
        logger.warning(processor.generate_validation_report())

    records = processor.build_records(settings.default_credit_weight)
    analysis = analyze(records, args.select, processor.ordered_subjects())
    print_summary(analysis)

    exporter = ReportExporter(analysis, records)
    base = settings.output_dir / settings.report_basename
    for fmt in args.formats:
        if fmt == "csv":
            path = exporter.export_student_csv(base.with_suffix(".csv"))
        elif fmt == "xlsx":
            path = exporter.export_excel(base.with_suffix(".xlsx"))
        else:
            path = exporter.export_json(base.with_suffix(".json"))
        print(f"✅ Saved: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
