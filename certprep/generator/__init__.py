"""Quiz generator module."""

from .quiz_generator import QUIZ_MODES, QuizGenerator

__all__ = [
    "QUIZ_MODES",
    "QuizGenerator",
]
