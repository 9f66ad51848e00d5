"""Question validator for question bank records."""

from typing import Dict, Iterable, List, Tuple

from .models import DIFFICULTY_LEVELS


class QuestionValidator:
    """Validates raw question records as they appear in question bank files."""

    REQUIRED_FIELDS = {"id", "question", "options", "correctAnswer"}
    MIN_OPTIONS = 2

    @staticmethod
    def validate_structure(question: Dict) -> Tuple[bool, str]:
        """Validate JSON structure of a question record.

        Args:
            question: Question dictionary to validate.

        Returns:
            Tuple of (is_valid, error_message). If valid, error_message is empty.
        """
        if not isinstance(question, dict):
            return False, "Question must be a dictionary"

        missing_fields = QuestionValidator.REQUIRED_FIELDS - set(question.keys())
        if missing_fields:
            return False, f"Missing required fields: {', '.join(sorted(missing_fields))}"

        question_id = question.get("id")
        if not isinstance(question_id, (str, int)) or isinstance(question_id, bool) or str(question_id).strip() == "":
            return False, "Field 'id' must be a non-empty string or integer"

        if not isinstance(question.get("question"), str) or not question["question"].strip():
            return False, "Field 'question' must be a non-empty string"

        if not isinstance(question.get("options"), list):
            return False, "Field 'options' must be a list"

        if len(question["options"]) < QuestionValidator.MIN_OPTIONS:
            return False, f"Field 'options' must contain at least {QuestionValidator.MIN_OPTIONS} options"

        for index, option in enumerate(question["options"]):
            if not isinstance(option, str):
                return False, f"Option {index} must be a string"

        answer = question.get("correctAnswer")
        if not isinstance(answer, int) or isinstance(answer, bool):
            return False, "Field 'correctAnswer' must be an integer"

        explanation = question.get("explanation")
        if explanation is not None and not isinstance(explanation, str):
            return False, "Field 'explanation' must be a string"

        return True, ""

    @staticmethod
    def validate_content(question: Dict) -> Tuple[bool, str]:
        """Validate content quality of a question record.

        Args:
            question: Question dictionary to validate.

        Returns:
            Tuple of (is_valid, error_message). If valid, error_message is empty.
        """
        options = [option.strip() for option in question["options"]]

        if any(not option for option in options):
            return False, "Options must be non-empty strings"

        if len(set(options)) != len(options):
            return False, "Options must be distinct"

        difficulty = question.get("difficulty")
        if difficulty is not None:
            if isinstance(difficulty, str) and difficulty.strip().lower() not in DIFFICULTY_LEVELS:
                valid = ", ".join(DIFFICULTY_LEVELS.keys())
                return False, f"Invalid difficulty '{difficulty}'. Must be one of: {valid}"
            if isinstance(difficulty, bool) or (isinstance(difficulty, int) and difficulty <= 0):
                return False, "Field 'difficulty' must be a positive level"

        return True, ""

    @staticmethod
    def validate_answer_choices(question: Dict) -> Tuple[bool, str]:
        """Validate that the correct answer points at an existing option.

        Args:
            question: Question dictionary to validate.

        Returns:
            Tuple of (is_valid, error_message). If valid, error_message is empty.
        """
        answer = question["correctAnswer"]
        option_count = len(question["options"])

        if answer < 0 or answer >= option_count:
            return False, (
                f"Field 'correctAnswer' is {answer}, "
                f"must be between 0 and {option_count - 1}"
            )

        return True, ""

    @staticmethod
    def validate(question: Dict) -> Tuple[bool, str]:
        """Perform complete validation of a question record.

        This method runs all validation checks in sequence.

        Args:
            question: Question dictionary to validate.

        Returns:
            Tuple of (is_valid, error_message). If valid, error_message is empty.
        """
        is_valid, error = QuestionValidator.validate_structure(question)
        if not is_valid:
            return False, error

        is_valid, error = QuestionValidator.validate_content(question)
        if not is_valid:
            return False, error

        is_valid, error = QuestionValidator.validate_answer_choices(question)
        if not is_valid:
            return False, error

        return True, ""


def validate_banks(banks: Dict[str, Dict], required_topics: Iterable[str] = ()) -> List[str]:
    """Check loaded question banks for gaps and malformed content.

    Args:
        banks: Mapping of topic to bank document.
        required_topics: Topics a composition expects to be loaded.

    Returns:
        List of human readable issues; empty when everything is in order.
    """
    issues = []

    for topic in sorted(set(required_topics)):
        if topic not in banks:
            issues.append(f"Missing question bank file: \"{topic}.json\"")

    for topic, bank in sorted(banks.items()):
        questions = bank.get("questions") if isinstance(bank, dict) else None
        if not questions:
            issues.append(f"Question bank \"{topic}\" has no questions")
            continue

        for question in questions:
            is_valid, error = QuestionValidator.validate(question)
            if not is_valid:
                issues.append(f"Question bank \"{topic}\" has malformed questions: {error}")
                break

    return issues
