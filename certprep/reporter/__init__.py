"""Scoring and report generator module."""

from .metrics import (
    calculate_percentage,
    calculate_weighted_score,
    calculate_domain_scores,
    calculate_performance_by,
    determine_performance_level,
    score_question,
    score_attempt
)

from .visualization import (
    create_allocation_chart,
    create_domain_score_chart
)

from .report_generator import (
    ReportGenerator,
    save_results
)

__all__ = [
    "calculate_percentage",
    "calculate_weighted_score",
    "calculate_domain_scores",
    "calculate_performance_by",
    "determine_performance_level",
    "score_question",
    "score_attempt",
    "create_allocation_chart",
    "create_domain_score_chart",
    "ReportGenerator",
    "save_results",
]
