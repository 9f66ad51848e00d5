"""certprep: weighted question sampling for certification practice exams."""

__version__ = "0.1.0"
