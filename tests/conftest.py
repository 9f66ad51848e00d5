"""Shared fixtures for certprep tests."""

import pytest

from certprep.core.models import Composition, Group, Question
from certprep.pool.question_pool import QuestionPool


def make_question(question_id, group_key, topic="general", difficulty=3, correct=0):
    """Build a four-option question."""
    return Question(
        id=question_id,
        group_key=group_key,
        content=f"Question {question_id}?",
        options=("Option A", "Option B", "Option C", "Option D"),
        correct_option_index=correct,
        explanation=f"Explanation for {question_id}",
        difficulty=difficulty,
        topic=topic,
    )


def make_pool(sizes, weights=None):
    """Build a pool with sizes[group] questions per group, in the given order."""
    weights = weights or {}
    groups = [
        Group(id=group_id, display_name=f"Domain {group_id}",
              target_weight_percent=weights.get(group_id, 0))
        for group_id in sizes
    ]
    questions = [
        make_question(f"{group_id}-q{i}", group_id, topic=f"{group_id}-bank")
        for group_id, count in sizes.items()
        for i in range(count)
    ]
    return QuestionPool(questions, groups)


def make_bank(title, domain, questions, difficulty="intermediate"):
    """Build a raw question bank document."""
    return {
        "title": title,
        "metadata": {
            "domain": domain,
            "difficulty": difficulty,
            "sourceUrl": f"https://help.example.com/{title}",
            "generatedDate": "2025-01-01",
        },
        "questions": questions,
    }


def make_record(question_id, difficulty=None, correct=1):
    """Build a raw question record as found in bank files."""
    record = {
        "id": question_id,
        "question": f"What does {question_id} cover?",
        "options": ["First", "Second", "Third", "Fourth"],
        "correctAnswer": correct,
        "explanation": f"{question_id} covers the second option.",
        "tags": ["sample"],
    }
    if difficulty is not None:
        record["difficulty"] = difficulty
    return record


@pytest.fixture
def exam_weights():
    """Weights of the four Tableau Consultant domains."""
    return {"domain1": 22, "domain2": 22, "domain3": 40, "domain4": 16}


@pytest.fixture
def exam_pool(exam_weights):
    """Pool with plenty of questions in each of four weighted domains."""
    return make_pool(
        {"domain1": 30, "domain2": 30, "domain3": 40, "domain4": 20},
        exam_weights,
    )


@pytest.fixture
def small_composition():
    """Two-domain composition with one shared bank."""
    return Composition(
        id="mini-exam",
        exam_name="Mini Exam",
        total_questions=10,
        passing_score=750,
        time_limit=30,
        groups=[
            Group(id="d1", display_name="Fundamentals", target_weight_percent=60,
                  topics=["basics", "shared"]),
            Group(id="d2", display_name="Advanced Topics", target_weight_percent=40,
                  topics=["advanced", "shared"]),
        ],
    )


@pytest.fixture
def small_banks():
    """Raw banks matching small_composition."""
    return {
        "basics": make_bank("basics", "d1", [make_record(f"b{i}") for i in range(6)]),
        "advanced": make_bank(
            "advanced", "d2",
            [make_record(f"a{i}", difficulty="advanced") for i in range(4)],
            difficulty="advanced",
        ),
        "shared": make_bank("shared", "d1", [make_record(f"s{i}", difficulty="beginner") for i in range(3)]),
    }
