"""
Metrics calculation module for scoring quiz attempts.

This module provides functions to score a submitted attempt against the
quiz questions: per-question correctness, per-domain scores, the score
scaled to 1000 and the pass/fail decision against the composition's
passing score.
"""

import math
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from ..core.models import Composition, DomainScore, Question, QuizResult


DEFAULT_PASSING_SCORE = 700
MAX_SCALED_SCORE = 1000

# (minimum percentage, level, recommendations), highest first
PERFORMANCE_LEVELS = [
    (85, "Excellent", [
        "Great job! You demonstrate strong understanding of the exam topics.",
        "Consider taking the certification exam if you haven't already.",
    ]),
    (70, "Good", [
        "Good performance! Review the topics where you missed questions.",
        "Practice more questions in your weaker areas.",
    ]),
    (60, "Average", [
        "You're on the right track. Focus on understanding core concepts.",
        "Review explanations carefully and practice regularly.",
    ]),
    (0, "Needs Improvement", [
        "Consider reviewing the fundamental concepts of each domain.",
        "Focus on understanding rather than memorization.",
        "Take your time with each question and read explanations.",
    ]),
]


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def calculate_percentage(correct: int, total: int) -> int:
    """
    Calculate the rounded percentage of correct answers.

    Args:
        correct: Number of correct answers
        total: Number of scored questions

    Returns:
        Percentage as an integer between 0 and 100
    """
    if total <= 0:
        return 0
    return _round_half_up(Fraction(correct * 100, total))


def calculate_weighted_score(correct: int, total: int) -> int:
    """
    Scale the number of correct answers to a score out of 1000.

    Args:
        correct: Number of correct answers
        total: Number of scored questions

    Returns:
        Score between 0 and 1000
    """
    if total <= 0:
        return 0
    return _round_half_up(Fraction(correct * MAX_SCALED_SCORE, total))


def score_question(question: Question, selected_index: Optional[int]) -> Dict:
    """
    Build the response record for one question.

    Args:
        question: Quiz question
        selected_index: Index of the chosen option, or None if unanswered

    Returns:
        Response dictionary with is_correct and the chosen/correct options
    """
    answered = (
        isinstance(selected_index, int)
        and not isinstance(selected_index, bool)
        and 0 <= selected_index < len(question.options)
    )
    return {
        "question_id": question.id,
        "group": question.group_key,
        "topic": question.topic,
        "question": question.content,
        "options": list(question.options),
        "selected_index": selected_index if answered else None,
        "selected_answer": question.options[selected_index] if answered else None,
        "correct_index": question.correct_option_index,
        "correct_answer": question.correct_option,
        "is_correct": answered and selected_index == question.correct_option_index,
        "explanation": question.explanation,
        "difficulty": question.difficulty,
    }


def calculate_domain_scores(responses: List[Dict],
                            composition: Optional[Composition] = None) -> List[DomainScore]:
    """
    Calculate per-domain scores from response records.

    Domains follow the composition's order; groups the composition does
    not know are appended in the order they first appear.

    Args:
        responses: Response dictionaries from score_question
        composition: Optional composition supplying names and weights

    Returns:
        List of DomainScore, one per domain that has questions
    """
    totals: Dict[str, List[int]] = {}
    for response in responses:
        group_id = response.get("group")
        if group_id is None:
            continue
        counts = totals.setdefault(group_id, [0, 0])
        counts[1] += 1
        if response.get("is_correct"):
            counts[0] += 1

    order = composition.group_ids() if composition else []
    order = [g for g in order if g in totals] + [g for g in totals if g not in order]

    domain_scores = []
    for group_id in order:
        correct, total = totals[group_id]
        group = composition.get_group(group_id) if composition else None
        domain_scores.append(DomainScore(
            domain_id=group_id,
            domain_name=group.display_name if group else group_id,
            score=correct,
            total_questions=total,
            percentage=calculate_percentage(correct, total),
            weight=group.target_weight_percent if group else None,
        ))
    return domain_scores


def calculate_performance_by(responses: List[Dict], key: str) -> Dict[str, Dict[str, int]]:
    """
    Group response outcomes by a response field such as "topic" or "difficulty".

    Responses without the field (answers to unknown questions) are left out.
    Keys are converted to strings so the result survives a JSON round trip.

    Returns:
        Mapping of key to {"correct", "total", "percentage"}, in first-seen order
    """
    performance: Dict[str, Dict[str, int]] = {}
    for response in responses:
        value = response.get(key)
        if value is None or value == "":
            continue
        entry = performance.setdefault(str(value), {"correct": 0, "total": 0})
        entry["total"] += 1
        if response.get("is_correct"):
            entry["correct"] += 1

    for entry in performance.values():
        entry["percentage"] = calculate_percentage(entry["correct"], entry["total"])
    return performance


def determine_performance_level(percentage: int) -> Tuple[str, List[str]]:
    """Map a percentage to its performance level and recommendations."""
    for minimum, level, recommendations in PERFORMANCE_LEVELS:
        if percentage >= minimum:
            return level, list(recommendations)
    _, level, recommendations = PERFORMANCE_LEVELS[-1]
    return level, list(recommendations)


def score_attempt(questions: List[Question], answers: Dict[str, Optional[int]],
                  composition: Optional[Composition] = None,
                  time_taken: Optional[int] = None) -> QuizResult:
    """
    Score a submitted quiz attempt.

    Every quiz question is scored; an unanswered question counts as
    incorrect. Answers for question ids that are not in the quiz are
    reported as incorrect with an error and count towards the total.

    Args:
        questions: Questions of the quiz, in quiz order
        answers: Mapping of question id to the selected option index
        composition: Composition supplying domain names, weights and the
            passing score (defaults to 700 out of 1000 without one)
        time_taken: Optional time taken in seconds

    Returns:
        QuizResult with per-question responses and domain scores

    Raises:
        ValueError: If no answers were provided
    """
    if not answers:
        raise ValueError("No answers provided")

    responses = [score_question(q, answers.get(q.id)) for q in questions]

    known_ids = {q.id for q in questions}
    for question_id in answers:
        if question_id not in known_ids:
            responses.append({
                "question_id": question_id,
                "is_correct": False,
                "error": "Question not found",
            })

    correct = sum(1 for r in responses if r["is_correct"])
    total = len(responses)
    weighted_score = calculate_weighted_score(correct, total)
    passing_score = composition.passing_score if composition else DEFAULT_PASSING_SCORE

    percentage = calculate_percentage(correct, total)
    level, recommendations = determine_performance_level(percentage)

    return QuizResult(
        score=correct,
        total_questions=total,
        percentage=percentage,
        weighted_score=weighted_score,
        passed=weighted_score >= passing_score,
        domain_scores=calculate_domain_scores(responses, composition),
        responses=responses,
        time_taken=time_taken,
        topic_performance=calculate_performance_by(responses, "topic"),
        difficulty_performance=calculate_performance_by(responses, "difficulty"),
        performance_level=level,
        recommendations=recommendations,
    )
