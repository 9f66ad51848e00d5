"""
Quiz generator core logic for certprep.

This module provides the QuizGenerator class that turns a quiz mode
(full practice exam, domain focus, quick review, custom, random) into a
sampling request, runs the sampler against the question pool, and
assembles the quiz with its title, description and metadata.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..core.compositions import preset_question_count
from ..core.errors import InvalidRequest
from ..core.file_io import FileIO
from ..core.models import Composition, Question, Quiz, SamplingRequest, SamplingResult
from ..pool.question_pool import QuestionPool
from ..sampler.sampling import QuestionSampler, get_sampler


logger = logging.getLogger(__name__)


QUIZ_MODES = ("full_practice", "domain_focus", "quick_review", "custom", "random")


class QuizGenerator:
    """
    Main class for generating practice quizzes.

    Orchestrates the pipeline: building the sampling request for a quiz
    mode, sampling questions, describing the quiz, and saving it.
    """

    def __init__(
        self,
        pool: QuestionPool,
        composition: Composition,
        sampler: QuestionSampler = None,
        random_sampler: QuestionSampler = None
    ):
        """
        Initialize the QuizGenerator.

        Args:
            pool: Loaded question pool.
            composition: Exam composition the pool was built for.
            sampler: Sampler for weighted modes. If None, creates a stratified sampler.
            random_sampler: Sampler for the random mode. If None, creates one.
        """
        self.pool = pool
        self.composition = composition
        self.sampler = sampler or get_sampler("stratified")
        self.random_sampler = random_sampler or get_sampler("random")

    def build_request(
        self,
        mode: str,
        num_questions: Optional[int] = None,
        selected_groups: Optional[List[str]] = None,
        difficulties: Optional[List[int]] = None,
        exclude_topics: Optional[List[str]] = None,
        weights: Optional[Dict[str, float]] = None,
        fallback_to_all_groups: bool = False
    ) -> SamplingRequest:
        """
        Translate a quiz mode into a sampling request.

        Args:
            mode: One of QUIZ_MODES.
            num_questions: Question count. If None, uses the mode's preset.
            selected_groups: Groups to focus on (required for domain_focus and custom).
            difficulties: Optional difficulty levels to keep.
            exclude_topics: Question banks to leave out.
            weights: Optional explicit weights per group.
            fallback_to_all_groups: Let a focused quiz borrow from other groups.

        Returns:
            SamplingRequest for the sampler.

        Raises:
            InvalidRequest: If the mode is unknown or a focus mode has no groups.
        """
        if mode not in QUIZ_MODES:
            raise InvalidRequest(
                f"Unsupported quiz mode: {mode}. Available modes: {', '.join(QUIZ_MODES)}"
            )

        if num_questions is None:
            num_questions = preset_question_count(mode, self.composition)

        group_ids = None
        if mode in ("domain_focus", "custom"):
            if not selected_groups:
                raise InvalidRequest(f"selected groups are required for {mode} quizzes")
            group_ids = list(selected_groups)
        elif selected_groups:
            group_ids = list(selected_groups)

        return SamplingRequest(
            total_requested=num_questions,
            group_ids=group_ids,
            weights=weights,
            difficulties=difficulties,
            exclude_topics=exclude_topics,
            equal_weights=(mode == "quick_review"),
            fallback_to_all_groups=fallback_to_all_groups,
        )

    def generate_quiz(
        self,
        mode: str = "full_practice",
        num_questions: Optional[int] = None,
        selected_groups: Optional[List[str]] = None,
        difficulties: Optional[List[int]] = None,
        exclude_topics: Optional[List[str]] = None,
        weights: Optional[Dict[str, float]] = None,
        fallback_to_all_groups: bool = False,
        rng: Optional[random.Random] = None
    ) -> Quiz:
        """
        Main entry point for quiz generation.

        Args:
            mode: Quiz mode, see QUIZ_MODES.
            num_questions: Question count. If None, uses the mode's preset.
            selected_groups: Groups to focus on.
            difficulties: Optional difficulty levels to keep.
            exclude_topics: Question banks to leave out.
            weights: Optional explicit weights per group.
            fallback_to_all_groups: Let a focused quiz borrow from other groups.
            rng: Optional random source for this quiz.

        Returns:
            Generated Quiz.

        Raises:
            InvalidRequest, UnknownGroup, NoQuestionsAvailable: From the sampler.
        """
        request = self.build_request(
            mode,
            num_questions=num_questions,
            selected_groups=selected_groups,
            difficulties=difficulties,
            exclude_topics=exclude_topics,
            weights=weights,
            fallback_to_all_groups=fallback_to_all_groups,
        )

        logger.info(
            f"Generating {mode} quiz: {request.total_requested} questions "
            f"from {len(self.pool)} available"
        )

        sampler = self.random_sampler if mode == "random" else self.sampler
        result = sampler.sample(self.pool, request, rng=rng)

        logger.info(f"Sampled {len(result)}/{request.total_requested} questions")

        return Quiz(
            title=self._quiz_title(mode, request.group_ids),
            description=self._quiz_description(mode, request.total_requested, len(result)),
            questions=list(result.questions),
            metadata=self._quiz_metadata(mode, request, result),
        )

    def _group_name(self, group_id: str) -> str:
        group = self.composition.get_group(group_id) or self.pool.get_group(group_id)
        return group.display_name if group else group_id

    def _quiz_title(self, mode: str, group_ids: Optional[List[str]]) -> str:
        exam = self.composition.exam_name
        if mode == "full_practice":
            return f"{exam} - Full Practice Exam"
        if mode == "domain_focus":
            names = ", ".join(self._group_name(group_id) for group_id in group_ids or [])
            return f"{exam} - {names} Focus"
        if mode == "quick_review":
            return f"{exam} - Quick Review"
        if mode == "custom":
            return f"{exam} - Custom Practice"
        return f"{exam} Practice Quiz"

    @staticmethod
    def _quiz_description(mode: str, requested: int, actual: int) -> str:
        if actual == requested:
            question_text = f"{actual} questions"
        else:
            question_text = f"{actual} questions (limited by available question banks)"

        covering = {
            "full_practice": "all exam domains with proper weightings",
            "domain_focus": "selected domains for focused practice",
            "quick_review": "key concepts from all domains",
            "custom": "custom selection of topics",
        }.get(mode, "randomly selected questions from all domains")

        return f"{question_text} covering {covering}"

    def _quiz_metadata(self, mode: str, request: SamplingRequest, result: SamplingResult) -> Dict:
        section_breakdown: Dict[str, int] = {}
        topic_breakdown: Dict[str, int] = {}
        difficulty_breakdown: Dict[str, int] = {}

        for question in result.questions:
            section = self._group_name(question.group_key)
            section_breakdown[section] = section_breakdown.get(section, 0) + 1
            topic_breakdown[question.topic] = topic_breakdown.get(question.topic, 0) + 1
            level = str(question.difficulty)
            difficulty_breakdown[level] = difficulty_breakdown.get(level, 0) + 1

        return {
            "composition": self.composition.id,
            "exam_name": self.composition.exam_name,
            "mode": mode,
            "requested_count": request.total_requested,
            "total_questions": len(result),
            "available_questions": self.pool.total_available(),
            "selected_groups": request.group_ids,
            "allocation": result.allocation,
            "breakdown": result.breakdown,
            "partial_supply": result.partial_supply,
            "shortfall": result.shortfall,
            "section_breakdown": section_breakdown,
            "topic_breakdown": topic_breakdown,
            "difficulty_breakdown": difficulty_breakdown,
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def save_quiz(quiz: Quiz, output_path: str) -> None:
        """
        Save a quiz as JSONL: metadata line first, then one question per line.

        Args:
            quiz: Quiz to save.
            output_path: Output file path.
        """
        metadata = dict(quiz.metadata)
        metadata["title"] = quiz.title
        metadata["description"] = quiz.description

        FileIO.write_jsonl(
            output_path,
            [question.to_dict() for question in quiz.questions],
            metadata=metadata,
        )
        logger.info(f"Quiz saved to {output_path}")

    @staticmethod
    def load_quiz(quiz_path: str) -> Quiz:
        """
        Load a quiz saved with save_quiz.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file holds no questions.
        """
        metadata, records = FileIO.read_jsonl(quiz_path)
        if not records:
            raise ValueError(f"No questions found in {quiz_path}")

        questions: List[Question] = [Question.from_dict(record) for record in records]
        return Quiz(
            title=metadata.get("title", ""),
            description=metadata.get("description", ""),
            questions=questions,
            metadata=metadata,
        )
