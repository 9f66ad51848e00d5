"""
Tests for the metrics calculation module.
"""

import pytest
from certprep.reporter.metrics import (
    calculate_domain_scores,
    calculate_percentage,
    calculate_performance_by,
    determine_performance_level,
    calculate_weighted_score,
    score_attempt,
    score_question,
)

from conftest import make_question


@pytest.fixture
def quiz_questions():
    """Five questions across two domains; the correct option is always A."""
    return [
        make_question("q1", "d1"),
        make_question("q2", "d1"),
        make_question("q3", "d1"),
        make_question("q4", "d2"),
        make_question("q5", "d2"),
    ]


class TestCalculatePercentage:
    """Test cases for calculate_percentage and calculate_weighted_score."""

    def test_exact(self):
        assert calculate_percentage(3, 4) == 75
        assert calculate_weighted_score(3, 4) == 750

    def test_rounds_half_up(self):
        assert calculate_percentage(1, 8) == 13  # 12.5
        assert calculate_weighted_score(1, 16) == 63  # 62.5

    def test_rounds_down_below_half(self):
        assert calculate_percentage(1, 3) == 33
        assert calculate_weighted_score(2, 3) == 667

    def test_empty_total(self):
        assert calculate_percentage(0, 0) == 0
        assert calculate_weighted_score(0, 0) == 0


class TestScoreQuestion:
    """Test cases for score_question."""

    def test_correct_answer(self):
        response = score_question(make_question("q1", "d1", correct=2), 2)

        assert response["is_correct"] is True
        assert response["selected_answer"] == "Option C"
        assert response["correct_answer"] == "Option C"
        assert response["group"] == "d1"

    def test_wrong_answer(self):
        response = score_question(make_question("q1", "d1"), 1)

        assert response["is_correct"] is False
        assert response["selected_index"] == 1
        assert response["correct_index"] == 0

    @pytest.mark.parametrize("selected", [None, -1, 4, True, "0"])
    def test_unanswered_or_invalid(self, selected):
        response = score_question(make_question("q1", "d1"), selected)

        assert response["is_correct"] is False
        assert response["selected_index"] is None
        assert response["selected_answer"] is None


class TestScoreAttempt:
    """Test cases for score_attempt."""

    def test_all_correct(self, quiz_questions):
        answers = {q.id: 0 for q in quiz_questions}

        result = score_attempt(quiz_questions, answers)

        assert result.score == 5
        assert result.total_questions == 5
        assert result.percentage == 100
        assert result.weighted_score == 1000
        assert result.passed is True

    def test_unanswered_questions_count_as_wrong(self, quiz_questions):
        result = score_attempt(quiz_questions, {"q1": 0, "q2": 0, "q4": 0})

        assert result.score == 3
        assert result.total_questions == 5
        assert result.weighted_score == 600
        assert result.passed is False

    def test_passing_score_from_composition(self, quiz_questions, small_composition):
        answers = {"q1": 0, "q2": 0, "q3": 0, "q4": 0, "q5": 1}

        result = score_attempt(quiz_questions, answers, small_composition)

        assert result.weighted_score == 800
        assert result.passed is True

    def test_default_passing_score(self, quiz_questions):
        """Without a composition the attempt passes at 700."""
        answers = {"q1": 0, "q2": 0, "q3": 0, "q4": 1, "q5": 1}

        result = score_attempt(quiz_questions, answers)

        assert result.weighted_score == 600
        assert result.passed is False

    def test_unknown_question_id(self, quiz_questions):
        answers = {q.id: 0 for q in quiz_questions}
        answers["ghost"] = 1

        result = score_attempt(quiz_questions, answers)

        assert result.total_questions == 6
        assert result.score == 5
        assert result.responses[-1] == {
            "question_id": "ghost",
            "is_correct": False,
            "error": "Question not found",
        }

    def test_no_answers(self, quiz_questions):
        with pytest.raises(ValueError, match="No answers provided"):
            score_attempt(quiz_questions, {})

    def test_time_taken(self, quiz_questions):
        result = score_attempt(quiz_questions, {"q1": 0}, time_taken=95)

        assert result.time_taken == 95
        assert result.to_dict()["time_taken"] == 95

    def test_responses_in_quiz_order(self, quiz_questions):
        result = score_attempt(quiz_questions, {"q5": 0, "q1": 0})

        assert [r["question_id"] for r in result.responses] == ["q1", "q2", "q3", "q4", "q5"]


class TestDomainScores:
    """Test cases for calculate_domain_scores."""

    def test_domain_breakdown(self, quiz_questions, small_composition):
        answers = {"q1": 0, "q2": 1, "q3": 0, "q4": 0}

        result = score_attempt(quiz_questions, answers, small_composition)
        fundamentals, advanced = result.domain_scores

        assert fundamentals.domain_name == "Fundamentals"
        assert (fundamentals.score, fundamentals.total_questions) == (2, 3)
        assert fundamentals.percentage == 67
        assert fundamentals.weight == 60
        assert advanced.domain_name == "Advanced Topics"
        assert advanced.percentage == 50

    def test_composition_order(self, small_composition):
        responses = [
            {"group": "d2", "is_correct": True},
            {"group": "d1", "is_correct": False},
        ]

        scores = calculate_domain_scores(responses, small_composition)

        assert [d.domain_id for d in scores] == ["d1", "d2"]

    def test_unknown_groups_appended(self, small_composition):
        responses = [
            {"group": "extra", "is_correct": True},
            {"group": "d2", "is_correct": True},
            {"question_id": "ghost", "is_correct": False, "error": "Question not found"},
        ]

        scores = calculate_domain_scores(responses, small_composition)

        assert [d.domain_id for d in scores] == ["d2", "extra"]
        assert scores[1].domain_name == "extra"
        assert scores[1].weight is None

    def test_without_composition(self):
        responses = [{"group": "g", "is_correct": True}, {"group": "g", "is_correct": False}]

        scores = calculate_domain_scores(responses)

        assert len(scores) == 1
        assert scores[0].percentage == 50


class TestPerformance:
    """Test cases for topic, difficulty and performance level breakdowns."""

    @pytest.fixture
    def mixed_questions(self):
        return [
            make_question("q1", "d1", topic="basics", difficulty=1),
            make_question("q2", "d1", topic="basics", difficulty=3),
            make_question("q3", "d2", topic="advanced", difficulty=5),
            make_question("q4", "d2", topic="advanced", difficulty=5),
        ]

    def test_topic_performance(self, mixed_questions):
        result = score_attempt(mixed_questions, {"q1": 0, "q2": 1, "q3": 0, "q4": 0})

        assert result.topic_performance == {
            "basics": {"correct": 1, "total": 2, "percentage": 50},
            "advanced": {"correct": 2, "total": 2, "percentage": 100},
        }

    def test_difficulty_performance(self, mixed_questions):
        result = score_attempt(mixed_questions, {"q1": 0, "q2": 1, "q3": 0})

        assert result.difficulty_performance == {
            "1": {"correct": 1, "total": 1, "percentage": 100},
            "3": {"correct": 0, "total": 1, "percentage": 0},
            "5": {"correct": 1, "total": 2, "percentage": 50},
        }

    def test_unknown_questions_left_out(self, mixed_questions):
        answers = {q.id: 0 for q in mixed_questions}
        answers["ghost"] = 0

        result = score_attempt(mixed_questions, answers)

        assert sum(e["total"] for e in result.topic_performance.values()) == 4
        assert sum(e["total"] for e in result.difficulty_performance.values()) == 4

    @pytest.mark.parametrize("percentage,level", [
        (100, "Excellent"),
        (85, "Excellent"),
        (84, "Good"),
        (70, "Good"),
        (69, "Average"),
        (60, "Average"),
        (59, "Needs Improvement"),
        (0, "Needs Improvement"),
    ])
    def test_performance_levels(self, percentage, level):
        assert determine_performance_level(percentage)[0] == level

    def test_recommendations(self):
        _, weak = determine_performance_level(10)
        _, strong = determine_performance_level(90)

        assert len(weak) == 3
        assert len(strong) == 2
        assert weak != strong

    def test_attempt_carries_level(self, mixed_questions):
        result = score_attempt(mixed_questions, {"q1": 0, "q2": 0, "q3": 0, "q4": 1})

        assert result.percentage == 75
        assert result.performance_level == "Good"
        assert result.recommendations
        summary = result.to_dict()
        assert summary["performance_level"] == "Good"
        assert summary["recommendations"] == result.recommendations
        assert summary["topic_performance"] == result.topic_performance

    def test_breakdown_by_arbitrary_field(self):
        responses = [
            {"group": "g", "is_correct": True},
            {"group": "g", "is_correct": False},
            {"group": "", "is_correct": True},
        ]

        assert calculate_performance_by(responses, "group") == {
            "g": {"correct": 1, "total": 2, "percentage": 50},
        }
