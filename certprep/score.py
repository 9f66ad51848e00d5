#!/usr/bin/env python3
"""
Quiz Scoring CLI for certprep.

This script scores a submitted attempt at a generated quiz. It reports the
per-domain scores, the score out of 1000 and the pass/fail result, writes
the scored responses as JSONL, and optionally renders an HTML report.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

from .core.compositions import get_composition, load_compositions
from .core.file_io import FileIO
from .generator.quiz_generator import QuizGenerator
from .reporter.metrics import DEFAULT_PASSING_SCORE, score_attempt
from .reporter.report_generator import ReportGenerator, save_results


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Score a quiz attempt and optionally render an HTML report.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score an attempt
  certprep-score --quiz data/quiz.jsonl --answers data/answers.json --output data/results.jsonl

  # Score and render a report
  certprep-score --quiz data/quiz.jsonl --answers data/answers.json \\
      --output data/results.jsonl --report reports/results.html

Answers file formats:
  {"q-1": 0, "q-2": 3}
  {"answers": [{"questionId": "q-1", "answerIndex": 0}], "timeTaken": 1800}
        """
    )

    parser.add_argument(
        '--quiz',
        type=str,
        required=True,
        help='Path to the quiz JSONL file'
    )

    parser.add_argument(
        '--answers',
        type=str,
        required=True,
        help='Path to the answers JSON file'
    )

    parser.add_argument(
        '--output',
        type=str,
        required=True,
        help='Output path for scored responses (JSONL format)'
    )

    parser.add_argument(
        '--report',
        type=str,
        default=None,
        help='Optional output path for an HTML report'
    )

    parser.add_argument(
        '--compositions_file',
        type=str,
        default=None,
        help='JSON file with additional exam compositions'
    )

    parser.add_argument(
        '--incorrect_examples',
        type=int,
        default=20,
        help='Number of missed questions to review in the report (default: 20)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def validate_args(args):
    """Validate command-line arguments.

    Args:
        args: Parsed arguments from argparse.

    Raises:
        ValueError: If arguments are invalid.
    """
    for label, path in (("Quiz", args.quiz), ("Answers", args.answers)):
        if not Path(path).is_file():
            raise ValueError(f"{label} file not found: {path}")

    if args.incorrect_examples < 0:
        raise ValueError("incorrect_examples must be non-negative")

    for path in filter(None, (args.output, args.report)):
        output_path = Path(path)
        if output_path.exists() and not output_path.is_file():
            raise ValueError(f"Output path exists but is not a file: {path}")
        output_path.parent.mkdir(parents=True, exist_ok=True)


def load_answers(answers_path: str) -> Tuple[Dict[str, Optional[int]], Optional[int]]:
    """Load submitted answers.

    Args:
        answers_path: Path to the answers JSON file.

    Returns:
        Tuple of (question id to selected option index, time taken in seconds).

    Raises:
        ValueError: If the file is not a recognized answers document.
    """
    data = FileIO.read_json(answers_path)
    time_taken = None

    if isinstance(data, dict) and "answers" in data:
        time_taken = data.get("timeTaken")
        data = data["answers"]

    if isinstance(data, list):
        answers = {}
        for entry in data:
            if not isinstance(entry, dict) or "questionId" not in entry:
                raise ValueError(f"Answer entry must have a questionId: {entry!r}")
            answers[str(entry["questionId"])] = entry.get("answerIndex")
        return answers, time_taken

    if isinstance(data, dict):
        return {str(k): v for k, v in data.items()}, time_taken

    raise ValueError(f"Unrecognized answers format in {answers_path}")


def main(argv=None):
    """Main entry point for scoring."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        logger.info("Validating arguments...")
        validate_args(args)

        if args.compositions_file:
            load_compositions(args.compositions_file)

        quiz = QuizGenerator.load_quiz(args.quiz)
        answers, time_taken = load_answers(args.answers)

        composition = None
        composition_id = quiz.metadata.get("composition")
        if composition_id:
            try:
                composition = get_composition(composition_id)
            except ValueError:
                logger.warning(
                    f"Unknown composition '{composition_id}', "
                    f"using default passing score {DEFAULT_PASSING_SCORE}"
                )

        result = score_attempt(quiz.questions, answers, composition, time_taken)
        passing_score = composition.passing_score if composition else DEFAULT_PASSING_SCORE
        save_results(args.output, quiz, result, passing_score)

        logger.info("=" * 60)
        logger.info(f"Results: {quiz.title}")
        logger.info(f"  Correct: {result.score}/{result.total_questions} ({result.percentage}%)")
        logger.info(f"  Score: {result.weighted_score}/1000 (passing: {passing_score})")
        logger.info(f"  Result: {'PASSED' if result.passed else 'NOT PASSED'}")
        for domain in result.domain_scores:
            logger.info(
                f"  {domain.domain_name}: {domain.score}/{domain.total_questions} "
                f"({domain.percentage}%)"
            )
        logger.info(f"  Performance: {result.performance_level}")
        for recommendation in result.recommendations:
            logger.info(f"    - {recommendation}")
        for level, entry in result.difficulty_performance.items():
            logger.debug(f"  Difficulty {level}: {entry['correct']}/{entry['total']} ({entry['percentage']}%)")
        for topic, entry in result.topic_performance.items():
            logger.debug(f"  Topic {topic}: {entry['correct']}/{entry['total']} ({entry['percentage']}%)")
        logger.info(f"  Responses saved to: {args.output}")
        logger.info("=" * 60)

        if args.report:
            logger.info("Generating HTML report...")
            try:
                ReportGenerator(args.output).generate_report(
                    output_path=args.report,
                    incorrect_examples=args.incorrect_examples
                )
            except IOError as e:
                logger.error(f"Failed to write report file: {e}")
                return 1
            logger.info(f"Report saved to: {args.report}")

        return 0

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 1

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1

    except Exception as e:
        logger.error(f"Unexpected error during scoring: {e}", exc_info=True)
        return 1


def cli_main():
    """CLI entry point wrapper for console script."""
    sys.exit(main())


if __name__ == '__main__':
    cli_main()
