"""Question sampling module."""

from .allocation import (
    allocate,
    apportion,
    resolve_weights,
    select_groups,
    validate_total,
)
from .sampling import (
    QuestionSampler,
    StratifiedSampler,
    RandomSampler,
    get_sampler,
)

__all__ = [
    "allocate",
    "apportion",
    "resolve_weights",
    "select_groups",
    "validate_total",
    "QuestionSampler",
    "StratifiedSampler",
    "RandomSampler",
    "get_sampler",
]
