"""
Sampling strategies for selecting quiz questions from a question pool.

This module provides the strategies used to assemble a quiz: proportional
stratified sampling across exam domains, and plain uniform sampling.
Both draw without replacement and keep all per-call state local. Each call
draws from its own random source derived from the sampler's seeded one, so
one sampler instance can serve concurrent quiz generations and a seeded
sampler yields the same set of quizzes however the calls interleave.
"""

import logging
import random
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..core.errors import NoQuestionsAvailable
from ..core.models import Question, SamplingRequest, SamplingResult
from ..pool.question_pool import QuestionPool
from .allocation import allocate, select_groups, validate_total


logger = logging.getLogger(__name__)


class QuestionSampler(ABC):
    """Abstract base class for question sampling strategies."""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None,
                 restricted_fallback: bool = False):
        """
        Initialize the sampler.

        Args:
            rng: Random source each call derives its own source from. If None,
                one is created from seed.
            seed: Seed for the created random source (ignored when rng is given)
            restricted_fallback: Let group-restricted requests make up a
                shortfall from groups outside the restriction
        """
        self.rng = rng or random.Random(seed)
        self.restricted_fallback = restricted_fallback
        self._rng_lock = threading.Lock()

    @abstractmethod
    def sample(self, pool: QuestionPool, request: SamplingRequest,
               rng: Optional[random.Random] = None) -> SamplingResult:
        """
        Select questions from the pool.

        Args:
            pool: Question pool to draw from; never modified
            request: Sampling request
            rng: Optional random source overriding the sampler's own

        Returns:
            SamplingResult with no duplicate questions
        """
        pass

    def _call_rng(self, rng: Optional[random.Random] = None) -> random.Random:
        """Random source for one sample() call."""
        if rng is not None:
            return rng
        with self._rng_lock:
            return random.Random(self.rng.getrandbits(64))

    def _fallback_group_ids(self, pool: QuestionPool, request: SamplingRequest,
                            scope_ids: List[str]) -> List[str]:
        """Groups a shortfall may be drawn from."""
        if not request.is_restricted or request.fallback_to_all_groups or self.restricted_fallback:
            return pool.group_ids()
        return scope_ids

    @staticmethod
    def _breakdown(questions: List[Question], group_ids: List[str]) -> Dict[str, int]:
        breakdown = {group_id: 0 for group_id in group_ids}
        for question in questions:
            breakdown[question.group_key] = breakdown.get(question.group_key, 0) + 1
        return breakdown

    @staticmethod
    def _finish(questions: List[Question], request: SamplingRequest,
                allocation: Dict[str, int], breakdown: Dict[str, int]) -> SamplingResult:
        shortfall = request.total_requested - len(questions)
        if shortfall > 0:
            logger.warning(
                f"Partial supply: returning {len(questions)} of "
                f"{request.total_requested} requested questions"
            )
        return SamplingResult(
            questions=questions,
            total_requested=request.total_requested,
            allocation=allocation,
            breakdown=breakdown,
            partial_supply=shortfall > 0,
            shortfall=max(0, shortfall),
        )


class StratifiedSampler(QuestionSampler):
    """
    Proportional stratified sampling across groups.

    The requested total is apportioned across groups by weight with the
    largest-remainder method, each group is drawn from without replacement,
    any group shortfall is made up from the remaining questions in scope,
    and the combined selection is shuffled so group membership cannot be
    read from question order.
    """

    def sample(self, pool: QuestionPool, request: SamplingRequest,
               rng: Optional[random.Random] = None) -> SamplingResult:
        """
        Sample questions using proportional stratified sampling.

        Args:
            pool: Question pool to draw from; never modified
            request: Sampling request
            rng: Optional random source overriding the sampler's own

        Returns:
            SamplingResult whose size is min(requested, available in scope)

        Raises:
            InvalidRequest: If the count or the explicit weights are invalid
            UnknownGroup: If the request names an unconfigured group
            NoQuestionsAvailable: If nothing in scope matches the request
        """
        rng = self._call_rng(rng)

        # Steps 1-4 are deterministic and independent of the random source
        allocation = allocate(pool.all_groups(), request)
        scope_ids = list(allocation)
        fallback_ids = self._fallback_group_ids(pool, request, scope_ids)

        working = pool.filter(request.to_filter())
        available = sum(working.total_available(group_id) for group_id in fallback_ids)
        if available == 0:
            raise NoQuestionsAvailable("No questions available for the selected configuration")

        sampled_ids = set()
        selected: List[Question] = []
        shortfall = 0

        for group_id in scope_ids:
            wanted = allocation[group_id]
            candidates = [
                q for q in working.questions_in_group(group_id)
                if q.id not in sampled_ids
            ]
            rng.shuffle(candidates)
            taken = candidates[:min(wanted, len(candidates))]

            sampled_ids.update(q.id for q in taken)
            selected.extend(taken)
            shortfall += wanted - len(taken)

            logger.debug(f"Group '{group_id}': {len(taken)}/{wanted} questions")

        if shortfall > 0:
            remaining = [
                q for group_id in fallback_ids
                for q in working.questions_in_group(group_id)
                if q.id not in sampled_ids
            ]
            rng.shuffle(remaining)
            extra = remaining[:shortfall]
            logger.info(
                f"Group shortfall of {shortfall}: drew {len(extra)} extra questions "
                f"from {len(fallback_ids)} group(s)"
            )
            sampled_ids.update(q.id for q in extra)
            selected.extend(extra)

        rng.shuffle(selected)

        return self._finish(selected, request, dict(allocation), self._breakdown(selected, scope_ids))


class RandomSampler(QuestionSampler):
    """
    Uniform sampling over every question in the request's scope,
    ignoring group weights.
    """

    def sample(self, pool: QuestionPool, request: SamplingRequest,
               rng: Optional[random.Random] = None) -> SamplingResult:
        """
        Sample questions uniformly at random.

        Args:
            pool: Question pool to draw from; never modified
            request: Sampling request; weights are ignored
            rng: Optional random source overriding the sampler's own

        Returns:
            SamplingResult whose size is min(requested, available in scope)

        Raises:
            InvalidRequest: If the count is not positive
            UnknownGroup: If the request names an unconfigured group
            NoQuestionsAvailable: If nothing in scope matches the request
        """
        rng = self._call_rng(rng)
        total = validate_total(request.total_requested)

        scope_ids = [group.id for group in select_groups(pool.all_groups(), request.group_ids)]
        working = pool.filter(request.to_filter())

        candidates = [q for group_id in scope_ids for q in working.questions_in_group(group_id)]
        if not candidates:
            raise NoQuestionsAvailable("No questions available for the selected configuration")

        selected = rng.sample(candidates, min(total, len(candidates)))

        return self._finish(selected, request, {}, self._breakdown(selected, scope_ids))


def get_sampler(strategy_name: str, **kwargs) -> QuestionSampler:
    """
    Factory function to get a sampler by name.

    Args:
        strategy_name: Name of the strategy ("stratified" or "random")
        **kwargs: Additional arguments to pass to the sampler constructor

    Returns:
        An instance of the requested sampler

    Raises:
        ValueError: If strategy_name is not recognized
    """
    strategies = {
        "stratified": StratifiedSampler,
        "random": RandomSampler,
    }

    strategy_name_lower = strategy_name.lower()

    if strategy_name_lower not in strategies:
        raise ValueError(
            f"Unknown sampling strategy: {strategy_name}. "
            f"Available strategies: {', '.join(strategies.keys())}"
        )

    return strategies[strategy_name_lower](**kwargs)
