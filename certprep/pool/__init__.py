"""Question pool and bank loading module."""

from .question_pool import QuestionPool
from .loader import (
    BankLoader,
    build_bundle,
    build_pool,
    parse_question,
    pool_from_records,
)

__all__ = [
    "QuestionPool",
    "BankLoader",
    "build_bundle",
    "build_pool",
    "parse_question",
    "pool_from_records",
]
