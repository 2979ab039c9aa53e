"""
Unit Tests for Cohort Analyzer

Sample cohort (see conftest): sem2.xlsx holds CS201 for three students,
sem3.xlsx is the current sheet with CS301 (4 cr) and CS302 (3 cr) marked
current plus one unmarked CS201 re-attempt for R002.
"""

import pytest

from result_analyzer.cohort_analyzer import (
    CohortAnalyzer,
    best_grade,
    build_histogram,
    summarize_gpas,
)
from result_analyzer.term_resolver import group_by_source_file, resolve_current_term_group


def make_analyzer(records):
    groups = group_by_source_file(records)
    return CohortAnalyzer(records, groups, resolve_current_term_group(groups))


@pytest.fixture
def analyzer(sample_records):
    return make_analyzer(sample_records)


class TestHelpers:

    def test_summarize_excludes_zero(self):
        stats = summarize_gpas([0.0, 6.0, 9.0])
        assert stats.average == 7.5
        assert stats.highest == 9.0
        assert stats.lowest == 6.0
        assert stats.counted == 2

    def test_summarize_all_zero(self):
        stats = summarize_gpas([0.0, 0.0])
        assert (stats.average, stats.highest, stats.lowest, stats.counted) == (0.0, 0.0, 0.0, 0)

    def test_histogram_in_scale_order(self, make_record):
        histogram = build_histogram([
            make_record(grade="U"),
            make_record(grade="O"),
            make_record(grade="XX"),
            make_record(grade="O"),
        ])
        assert [(g.name, g.count) for g in histogram] == [("O", 2), ("U", 1)]
        assert histogram[0].fill == "#10b981"

    def test_best_grade_first_wins(self, make_record):
        assert best_grade([make_record(grade="B"), make_record(grade="A+")]) == "A+"
        assert best_grade([make_record(grade="W")]) is None


class TestCurrentTerm:

    def test_current_sheet(self, analyzer):
        assert analyzer.current_file == "sem3.xlsx"
        assert len(analyzer.current_group_records) == 7

    def test_unmarked_reattempt_excluded(self, analyzer):
        selected = analyzer.selected_current_records()
        assert ("R002", "CS201") not in [(r.student_id, r.subject_code) for r in selected]
        assert len(selected) == 6

    def test_student_sgpas(self, analyzer):
        details = {d.id: d for d in analyzer.student_gpa_details()}

        assert details["R001"].sgpa == 9.57
        assert details["R002"].sgpa == 6.43
        assert details["R003"].sgpa == 4.57
        assert details["R003"].has_arrears
        assert not details["R002"].has_arrears

    def test_details_sorted_by_id(self, analyzer):
        assert [d.id for d in analyzer.student_gpa_details()] == ["R001", "R002", "R003"]


class TestDistributions:

    def test_grade_histogram_over_all_records(self, analyzer):
        histogram, total = analyzer.grade_histogram()
        assert total == 10
        assert [(g.name, g.count) for g in histogram] == [
            ("O", 2), ("A+", 1), ("A", 2), ("B+", 1), ("B", 1), ("C", 1), ("U", 2),
        ]

    def test_subject_performance(self, analyzer):
        performance = {p.subject: p for p in analyzer.subject_performance()}

        assert list(performance) == ["CS301", "CS302"]
        assert performance["CS301"].pass_percentage == 100.0
        assert performance["CS302"].pass_percentage == 66.67
        assert performance["CS302"].fail_percentage == 33.33
        assert performance["CS302"].highest_grade == "A+"
        assert performance["CS301"].subject_name == "Data Structures"

    def test_pass_fail_split(self, analyzer):
        split = analyzer.pass_fail_split()
        assert (split.pass_count, split.fail_count) == (8, 2)
        assert split.pass_percentage == 80.0

    def test_subject_grade_distribution(self, analyzer):
        distribution = analyzer.subject_grade_distribution()
        assert [(g.name, g.count) for g in distribution["CS302"]] == [("A+", 1), ("B+", 1), ("U", 1)]


class TestRankings:

    def test_statistics(self, analyzer):
        stats = analyzer.cohort_statistics(analyzer.student_gpa_details())
        assert stats.average == 6.86
        assert stats.highest == 9.57
        assert stats.lowest == 4.57

    def test_top_performers(self, analyzer):
        top = analyzer.top_performers(analyzer.student_gpa_details())

        assert [t.id for t in top] == ["R001", "R002", "R003"]
        assert top[0].grade == "O"
        assert top[1].grade == "B+"

    def test_top_performers_limited_to_six(self, make_record):
        records = [make_record(student_id=f"S{i}", grade="A") for i in range(10)]
        analyzer = make_analyzer(records)
        assert len(analyzer.top_performers(analyzer.student_gpa_details())) == 6

    def test_needs_improvement(self, analyzer):
        candidates = {c.id: c for c in analyzer.needs_improvement(analyzer.student_gpa_details())}

        assert set(candidates) == {"R002", "R003"}
        # R002 failed CS201 in the earlier sheet
        assert candidates["R002"].subjects == "CS201"
        assert candidates["R003"].subjects == "CS302"


    def test_needs_improvement_lists_every_failed_subject(self, make_record):
        """Failed subjects from every sheet are joined in record order"""
        records = [
            make_record(student_id="R1", subject_code="CS201", grade="U", term_label="2", source_file="sem2.xlsx"),
            make_record(student_id="R1", subject_code="CS301", grade="O", term_label="3", source_file="sem3.xlsx"),
            make_record(student_id="R1", subject_code="CS302", grade="U", term_label="3", source_file="sem3.xlsx"),
        ]
        analyzer = make_analyzer(records)
        candidates = analyzer.needs_improvement(analyzer.student_gpa_details())

        assert [c.id for c in candidates] == ["R1"]
        assert candidates[0].subjects == "CS201, CS302"


class TestMultipleSheets:

    def test_file_wise_analysis(self, analyzer):
        summaries = analyzer.file_wise_analysis()

        assert list(summaries) == ["sem2.xlsx", "sem3.xlsx"]
        assert summaries["sem2.xlsx"].average_sgpa == 6.0
        assert summaries["sem2.xlsx"].semester_name == "2"
        assert summaries["sem3.xlsx"].students == 3

    def test_student_cgpas(self, analyzer):
        assert analyzer.student_cgpas() == {"R001": 9.1, "R002": 4.5, "R003": 6.2}

    def test_cgpa_analysis(self, analyzer):
        cgpa = analyzer.cgpa_analysis()

        assert cgpa.average_cgpa == 6.6
        assert cgpa.highest_cgpa == 9.1
        assert cgpa.lowest_cgpa == 4.5
        assert [s.id for s in cgpa.toppers_list] == ["R001", "R003", "R002"]
        assert cgpa.current_semester_file == "sem3.xlsx"

    def test_no_cgpa_for_single_sheet(self, make_record):
        analyzer = make_analyzer([make_record()])
        assert analyzer.cgpa_analysis() is None

    def test_fallback_diagnostic(self, analyzer):
        assert any(d.startswith("sem2.xlsx: 3 of 3 students") for d in analyzer.diagnostics)


class TestRun:

    def test_run_collects_everything(self, analyzer):
        results = analyzer.run()

        assert results.total_students == 3
        assert results.total_grades == 10
        assert results.student_sgpas == {"R001": 9.57, "R002": 6.43, "R003": 4.57}
        assert results.cgpa_analysis is not None

    def test_empty_input(self):
        results = CohortAnalyzer([], {}, None).run()

        assert results.total_students == 0
        assert results.student_gpa_details == []
        assert results.statistics.average == 0.0
        assert results.cgpa_analysis is None
