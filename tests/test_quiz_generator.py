"""
Tests for the QuizGenerator class.
"""

import random

import pytest

from certprep.core.errors import InvalidRequest, UnknownGroup
from certprep.core.models import Composition, Group
from certprep.generator.quiz_generator import QUIZ_MODES, QuizGenerator
from certprep.sampler.sampling import get_sampler


@pytest.fixture
def exam_composition(exam_weights):
    """Composition matching exam_pool."""
    names = {
        "domain1": "Evaluate",
        "domain2": "Prepare",
        "domain3": "Design",
        "domain4": "Govern",
    }
    return Composition(
        id="sample-exam",
        exam_name="Sample Exam",
        total_questions=60,
        passing_score=750,
        groups=[
            Group(id=group_id, display_name=names[group_id], target_weight_percent=weight)
            for group_id, weight in exam_weights.items()
        ],
    )


@pytest.fixture
def generator(exam_pool, exam_composition):
    return QuizGenerator(exam_pool, exam_composition,
                         sampler=get_sampler("stratified", seed=7),
                         random_sampler=get_sampler("random", seed=7))


class TestBuildRequest:
    """Test cases for mode to request translation."""

    def test_full_practice_defaults_to_exam_size(self, generator):
        request = generator.build_request("full_practice")

        assert request.total_requested == 60
        assert request.group_ids is None
        assert request.equal_weights is False

    def test_quick_review_uses_equal_weights(self, generator):
        request = generator.build_request("quick_review")

        assert request.total_requested == 20
        assert request.equal_weights is True

    def test_domain_focus_requires_groups(self, generator):
        with pytest.raises(InvalidRequest, match="domain_focus"):
            generator.build_request("domain_focus")

    def test_custom_requires_groups(self, generator):
        with pytest.raises(InvalidRequest):
            generator.build_request("custom", num_questions=10, selected_groups=[])

    def test_unknown_mode(self, generator):
        with pytest.raises(InvalidRequest, match="Unsupported quiz mode"):
            generator.build_request("marathon")

    def test_filters_passed_through(self, generator):
        request = generator.build_request(
            "custom", num_questions=12, selected_groups=["domain1", "domain3"],
            difficulties=[3], exclude_topics=["domain1-bank"],
            fallback_to_all_groups=True,
        )

        assert request.group_ids == ["domain1", "domain3"]
        assert request.difficulties == [3]
        assert request.exclude_topics == ["domain1-bank"]
        assert request.fallback_to_all_groups is True


class TestGenerateQuiz:
    """Test cases for quiz generation."""

    def test_full_practice(self, generator):
        quiz = generator.generate_quiz("full_practice")

        assert quiz.title == "Sample Exam - Full Practice Exam"
        assert quiz.description == "60 questions covering all exam domains with proper weightings"
        assert len(quiz.questions) == 60
        assert len({q.id for q in quiz.questions}) == 60
        assert quiz.metadata["allocation"] == {
            "domain1": 13, "domain2": 13, "domain3": 24, "domain4": 10,
        }
        assert quiz.metadata["breakdown"] == quiz.metadata["allocation"]
        assert quiz.metadata["section_breakdown"] == {
            "Evaluate": 13, "Prepare": 13, "Design": 24, "Govern": 10,
        }

    def test_metadata(self, generator):
        quiz = generator.generate_quiz("full_practice", num_questions=24)
        metadata = quiz.metadata

        assert metadata["composition"] == "sample-exam"
        assert metadata["exam_name"] == "Sample Exam"
        assert metadata["mode"] == "full_practice"
        assert metadata["requested_count"] == 24
        assert metadata["total_questions"] == 24
        assert metadata["available_questions"] == 120
        assert metadata["partial_supply"] is False
        assert metadata["shortfall"] == 0
        assert metadata["difficulty_breakdown"] == {"3": 24}
        assert sum(metadata["topic_breakdown"].values()) == 24
        assert "generated_at" in metadata

    def test_domain_focus(self, generator):
        quiz = generator.generate_quiz("domain_focus", selected_groups=["domain3"])

        assert quiz.title == "Sample Exam - Design Focus"
        assert len(quiz.questions) == 15
        assert {q.group_key for q in quiz.questions} == {"domain3"}
        assert quiz.metadata["selected_groups"] == ["domain3"]

    def test_domain_focus_several_groups(self, generator):
        quiz = generator.generate_quiz("domain_focus", num_questions=10,
                                       selected_groups=["domain1", "domain4"])

        assert quiz.title == "Sample Exam - Evaluate, Govern Focus"
        assert {q.group_key for q in quiz.questions} <= {"domain1", "domain4"}

    def test_focus_shortfall_stays_in_focus(self, generator):
        quiz = generator.generate_quiz("domain_focus", num_questions=25,
                                       selected_groups=["domain4"])

        assert len(quiz.questions) == 20
        assert quiz.description.startswith("20 questions (limited by available question banks)")
        assert quiz.metadata["partial_supply"] is True
        assert quiz.metadata["shortfall"] == 5

    def test_focus_fallback_to_all_groups(self, generator):
        quiz = generator.generate_quiz("domain_focus", num_questions=25,
                                       selected_groups=["domain4"],
                                       fallback_to_all_groups=True)

        assert len(quiz.questions) == 25
        assert quiz.metadata["breakdown"]["domain4"] == 20

    def test_quick_review_splits_evenly(self, generator):
        quiz = generator.generate_quiz("quick_review")

        assert quiz.title == "Sample Exam - Quick Review"
        assert quiz.metadata["allocation"] == {
            "domain1": 5, "domain2": 5, "domain3": 5, "domain4": 5,
        }

    def test_custom(self, generator):
        quiz = generator.generate_quiz("custom", num_questions=8,
                                       selected_groups=["domain2", "domain3"])

        assert quiz.title == "Sample Exam - Custom Practice"
        assert quiz.description == "8 questions covering custom selection of topics"
        assert len(quiz.questions) == 8

    def test_random_mode(self, generator):
        quiz = generator.generate_quiz("random")

        assert quiz.title == "Sample Exam Practice Quiz"
        assert len(quiz.questions) == 10
        assert quiz.description.endswith("randomly selected questions from all domains")

    def test_unknown_group(self, generator):
        with pytest.raises(UnknownGroup):
            generator.generate_quiz("domain_focus", selected_groups=["domain9"])

    def test_rng_makes_quiz_reproducible(self, generator):
        first = generator.generate_quiz("full_practice", rng=random.Random(3))
        second = generator.generate_quiz("full_practice", rng=random.Random(3))

        assert [q.id for q in first.questions] == [q.id for q in second.questions]

    def test_default_samplers(self, exam_pool, exam_composition):
        generator = QuizGenerator(exam_pool, exam_composition)

        for mode in ("full_practice", "quick_review", "random"):
            assert generator.generate_quiz(mode).questions

    def test_modes_listed(self):
        assert set(QUIZ_MODES) == {"full_practice", "domain_focus", "quick_review",
                                   "custom", "random"}


class TestSaveAndLoad:
    """Test cases for quiz files."""

    def test_round_trip(self, generator, tmp_path):
        quiz = generator.generate_quiz("full_practice", num_questions=12)
        path = tmp_path / "quiz.jsonl"

        QuizGenerator.save_quiz(quiz, str(path))
        loaded = QuizGenerator.load_quiz(str(path))

        assert loaded.title == quiz.title
        assert loaded.description == quiz.description
        assert loaded.questions == quiz.questions
        assert loaded.metadata["allocation"] == quiz.metadata["allocation"]

    def test_load_empty_quiz(self, tmp_path):
        path = tmp_path / "empty.jsonl"
        path.write_text('{"metadata": {"title": "Empty"}}\n', encoding="utf-8")

        with pytest.raises(ValueError, match="No questions"):
            QuizGenerator.load_quiz(str(path))

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            QuizGenerator.load_quiz(str(tmp_path / "missing.jsonl"))
