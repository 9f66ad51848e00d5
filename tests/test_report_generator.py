"""
Tests for the report generator module.
"""

import json

import pytest
from certprep.core.file_io import FileIO
from certprep.core.models import Quiz
from certprep.reporter.metrics import score_attempt
from certprep.reporter.report_generator import ReportGenerator, save_results

from conftest import make_question


def build_quiz(questions, **metadata):
    base = {
        "exam_name": "Mini Exam",
        "composition": "mini-exam",
        "mode": "full_practice",
        "requested_count": len(questions),
        "allocation": {"d1": 3, "d2": 2},
        "breakdown": {"d1": 3, "d2": 2},
        "partial_supply": False,
    }
    base.update(metadata)
    return Quiz(title="Mini Exam - Full Practice Exam",
                description=f"{len(questions)} questions covering all exam domains",
                questions=questions, metadata=base)


@pytest.fixture
def quiz_questions():
    return [
        make_question("q1", "d1"),
        make_question("q2", "d1"),
        make_question("q3", "d1"),
        make_question("q4", "d2"),
        make_question("q5", "d2"),
    ]


@pytest.fixture
def sample_results_file(tmp_path, quiz_questions, small_composition):
    """Create a results file for an attempt that misses two questions."""
    quiz = build_quiz(quiz_questions)
    result = score_attempt(quiz_questions, {"q1": 0, "q2": 0, "q3": 2, "q4": 0},
                           small_composition, time_taken=125)

    path = tmp_path / "results.jsonl"
    save_results(str(path), quiz, result, small_composition.passing_score)
    return path


class TestSaveResults:
    """Test cases for save_results."""

    def test_results_file_layout(self, sample_results_file):
        metadata, responses = FileIO.read_jsonl(str(sample_results_file))

        assert metadata["title"] == "Mini Exam - Full Practice Exam"
        assert metadata["passing_score"] == 750
        assert metadata["allocation"] == {"d1": 3, "d2": 2}
        assert metadata["result"]["score"] == 3
        assert metadata["result"]["weighted_score"] == 600
        assert metadata["result"]["passed"] is False
        assert len(metadata["result"]["domain_scores"]) == 2
        assert [r["question_id"] for r in responses] == ["q1", "q2", "q3", "q4", "q5"]


class TestReportGenerator:
    """Test cases for ReportGenerator."""

    def test_init(self, sample_results_file):
        """Test ReportGenerator initialization."""
        generator = ReportGenerator(str(sample_results_file))

        assert len(generator.responses) == 5
        assert generator.result["percentage"] == 60
        assert [d.domain_name for d in generator.domain_scores] == ["Fundamentals", "Advanced Topics"]

    def test_init_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReportGenerator(str(tmp_path / "missing.jsonl"))

    def test_init_without_responses(self, tmp_path):
        path = tmp_path / "empty.jsonl"
        path.write_text(json.dumps({"metadata": {"result": {}}}) + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="No responses"):
            ReportGenerator(str(path))

    def test_init_without_summary(self, tmp_path):
        path = tmp_path / "plain.jsonl"
        FileIO.write_jsonl(str(path), [{"question_id": "q1", "is_correct": True}],
                           metadata={"title": "Quiz"})

        with pytest.raises(ValueError, match="No result summary"):
            ReportGenerator(str(path))

    def test_generate_report(self, sample_results_file, tmp_path):
        """Test complete report generation."""
        output = tmp_path / "reports" / "report.html"

        ReportGenerator(str(sample_results_file)).generate_report(str(output))

        content = output.read_text(encoding="utf-8")
        assert content.startswith("<!DOCTYPE html>")
        assert "Mini Exam - Full Practice Exam" in content
        assert "NOT PASSED" in content
        assert "600/1000" in content
        assert "Passing: 750" in content
        assert "2m 5s" in content
        assert 'id="allocation-chart"' in content
        assert 'id="domain-score-chart"' in content
        assert "Showing 2 of 2 missed questions." in content
        assert "Explanation for q3" in content
        assert "Unanswered" in content

    def test_review_limited(self, sample_results_file, tmp_path):
        output = tmp_path / "report.html"

        ReportGenerator(str(sample_results_file)).generate_report(str(output), incorrect_examples=1)

        assert "Showing 1 of 2 missed questions." in output.read_text(encoding="utf-8")

    def test_performance_section(self, sample_results_file, tmp_path):
        """The 60% attempt is reported as Average with topic and difficulty tables."""
        output = tmp_path / "report.html"

        ReportGenerator(str(sample_results_file)).generate_report(str(output))

        content = output.read_text(encoding="utf-8")
        assert "Performance: Average" in content
        assert "Focus on understanding core concepts." in content
        assert "<th>Topic</th>" in content
        assert "<td>general</td>" in content
        assert "<th>Difficulty</th>" in content
        assert "3/5" in content

    def test_performance_saved_in_summary(self, sample_results_file):
        metadata, _ = FileIO.read_jsonl(str(sample_results_file))

        assert metadata["result"]["performance_level"] == "Average"
        assert metadata["result"]["topic_performance"] == {
            "general": {"correct": 3, "total": 5, "percentage": 60},
        }

    def test_passed_report(self, tmp_path, quiz_questions, small_composition):
        quiz = build_quiz(quiz_questions)
        result = score_attempt(quiz_questions, {q.id: 0 for q in quiz_questions}, small_composition)
        results_path = tmp_path / "results.jsonl"
        save_results(str(results_path), quiz, result, small_composition.passing_score)
        output = tmp_path / "report.html"

        ReportGenerator(str(results_path)).generate_report(str(output))

        content = output.read_text(encoding="utf-8")
        assert "PASSED" in content
        assert "NOT PASSED" not in content
        assert "Every question was answered correctly." in content

    def test_partial_supply_warning(self, tmp_path, quiz_questions):
        quiz = build_quiz(quiz_questions, requested_count=8, partial_supply=True,
                          allocation={"d1": 5, "d2": 3})
        result = score_attempt(quiz_questions, {"q1": 0})
        results_path = tmp_path / "results.jsonl"
        save_results(str(results_path), quiz, result)
        output = tmp_path / "report.html"

        ReportGenerator(str(results_path)).generate_report(str(output))

        assert "5 of 8 were sampled" in output.read_text(encoding="utf-8")

    def test_unknown_question_in_review(self, tmp_path, quiz_questions):
        quiz = build_quiz(quiz_questions)
        answers = {q.id: 0 for q in quiz_questions}
        answers["ghost<1>"] = 0
        result = score_attempt(quiz_questions, answers)
        results_path = tmp_path / "results.jsonl"
        save_results(str(results_path), quiz, result)
        output = tmp_path / "report.html"

        ReportGenerator(str(results_path)).generate_report(str(output))

        content = output.read_text(encoding="utf-8")
        assert "Question not found" in content
        assert "ghost&lt;1&gt;" in content
