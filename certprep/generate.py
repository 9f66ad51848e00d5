#!/usr/bin/env python3
"""
Quiz Generator CLI for certprep.

This script assembles a practice quiz or mock exam from question banks.
It loads the banks from a directory, a bundle file, a bundle URL or a
base URL serving one file per bank. It then samples questions across the
exam domains by their weights and writes the quiz as JSONL.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .core.compositions import get_composition, load_compositions
from .core.config import Config
from .core.errors import BankLoadError, SamplingError
from .core.models import parse_difficulty
from .generator.quiz_generator import QUIZ_MODES, QuizGenerator
from .pool.loader import BankLoader
from .sampler.sampling import get_sampler


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Generate a practice quiz from certification question banks.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full 60-question practice exam from a directory of banks
  certprep-generate --banks data/question-banks --output data/quiz.jsonl

  # 15 questions focused on two domains, reproducible
  certprep-generate --bundle data/question-banks-bundle.json --mode domain_focus \\
      --sections domain1,domain3 --question_nums 15 --seed 42 --output data/quiz.jsonl

  # 20 questions split evenly between two domains
  certprep-generate --banks data/question-banks --mode custom --sections domain1,domain3 \\
      --weights domain1=50,domain3=50 --question_nums 20 --output data/quiz.jsonl
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--banks',
        type=str,
        default=None,
        help='Directory of per-topic question bank JSON files'
    )
    source.add_argument(
        '--bundle',
        type=str,
        default=None,
        help='Path to a question bank bundle JSON file'
    )
    source.add_argument(
        '--bundle_url',
        type=str,
        default=None,
        help='URL of a question bank bundle'
    )
    source.add_argument(
        '--bank_base_url',
        type=str,
        default=None,
        help='URL prefix of per-topic bank files (<url>/<topic>.json)'
    )

    parser.add_argument(
        '--composition',
        type=str,
        default=None,
        help='Exam composition id (default: CERTPREP_COMPOSITION or tableau-consultant)'
    )

    parser.add_argument(
        '--compositions_file',
        type=str,
        default=None,
        help='JSON file with additional exam compositions'
    )

    parser.add_argument(
        '--mode',
        type=str,
        default='full_practice',
        choices=list(QUIZ_MODES),
        help='Quiz mode (default: full_practice)'
    )

    parser.add_argument(
        '--question_nums',
        type=int,
        default=None,
        help='Number of questions (default: the preset for the mode)'
    )

    parser.add_argument(
        '--sections',
        type=str,
        default=None,
        help='Comma-separated domain ids to draw from'
    )

    parser.add_argument(
        '--weights',
        type=str,
        default=None,
        help='Explicit domain weights summing to 100, e.g. domain1=50,domain3=50'
    )

    parser.add_argument(
        '--difficulty',
        type=str,
        default=None,
        help='Comma-separated difficulty labels or levels to keep'
    )

    parser.add_argument(
        '--exclude_topics',
        type=str,
        default=None,
        help='Comma-separated question banks to leave out'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible quizzes (default: SAMPLING_SEED)'
    )

    parser.add_argument(
        '--restricted_fallback',
        action='store_true',
        help='Let a domain-restricted quiz fill a shortfall from other domains'
    )

    parser.add_argument(
        '--output',
        type=str,
        required=True,
        help='Output path for the quiz (JSONL format)'
    )

    parser.add_argument(
        '--env',
        type=str,
        default=None,
        help='Path to .env file (default: .env in current directory)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def split_list(value):
    """Split a comma-separated argument into a list, or None if empty."""
    if not value:
        return None
    items = [item.strip() for item in value.split(',') if item.strip()]
    return items or None


def parse_weights(value):
    """Parse "domain1=50,domain3=50" into a weight mapping, or None if empty.

    Raises:
        ValueError: If an entry is not a domain=number pair.
    """
    entries = split_list(value)
    if not entries:
        return None

    weights = {}
    for entry in entries:
        group_id, sep, raw_weight = entry.partition('=')
        group_id = group_id.strip()
        if not sep or not group_id:
            raise ValueError(f"Invalid weight '{entry}', expected domain=weight")
        if group_id in weights:
            raise ValueError(f"Weight for '{group_id}' given more than once")
        try:
            weights[group_id] = float(raw_weight)
        except ValueError:
            raise ValueError(f"Invalid weight for '{group_id}': {raw_weight.strip()}") from None
    return weights


def validate_args(args):
    """Validate command-line arguments.

    Args:
        args: Parsed arguments from argparse.

    Raises:
        ValueError: If arguments are invalid.
    """
    if args.question_nums is not None and args.question_nums <= 0:
        raise ValueError("question_nums must be positive")

    if args.banks and not Path(args.banks).is_dir():
        raise ValueError(f"Question bank directory not found: {args.banks}")

    if args.bundle and not Path(args.bundle).exists():
        raise ValueError(f"Bundle file not found: {args.bundle}")

    if args.seed is not None and args.seed < 0:
        raise ValueError("seed must be non-negative")

    output_path = Path(args.output)
    if output_path.exists() and not output_path.is_file():
        raise ValueError(f"Output path exists but is not a file: {args.output}")

    output_path.parent.mkdir(parents=True, exist_ok=True)


def apply_source_args(args, config):
    """Let command-line bank sources override the configured ones."""
    if args.banks or args.bundle or args.bundle_url or args.bank_base_url:
        config["bank_dir"] = args.banks or ""
        config["bundle_path"] = args.bundle or ""
        config["bundle_url"] = args.bundle_url or ""
        config["bank_base_url"] = args.bank_base_url or ""
    if args.composition:
        config["composition"] = args.composition
    if args.compositions_file:
        config["compositions_file"] = args.compositions_file
    return config


async def main(argv=None):
    """Main entry point for quiz generation."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        logger.info("Validating arguments...")
        validate_args(args)

        logger.info("Loading configuration...")
        config = apply_source_args(args, Config.load_from_env(args.env))
        Config.validate_config(config)

        if config["compositions_file"]:
            load_compositions(config["compositions_file"])
        composition = get_composition(config["composition"])

        seed = args.seed if args.seed is not None else config["seed"]
        restricted_fallback = args.restricted_fallback or config["restricted_fallback"]
        weights = parse_weights(args.weights)
        difficulties = split_list(args.difficulty)
        if difficulties:
            difficulties = [parse_difficulty(level) for level in difficulties]

        logger.info("Loading question banks...")
        loader = BankLoader(Config.get_loader_config(config))
        pool = await loader.load_pool(config, composition)

        generator = QuizGenerator(
            pool=pool,
            composition=composition,
            sampler=get_sampler("stratified", seed=seed, restricted_fallback=restricted_fallback),
            random_sampler=get_sampler("random", seed=seed),
        )

        logger.info("=" * 60)
        logger.info("Quiz Generation Parameters:")
        logger.info(f"  Exam: {composition.exam_name}")
        logger.info(f"  Mode: {args.mode}")
        logger.info(f"  Questions available: {len(pool)}")
        logger.info(f"  Requested questions: {args.question_nums or 'preset'}")
        logger.info(f"  Sections: {args.sections or 'all'}")
        if weights:
            logger.info(f"  Weights: {args.weights}")
        logger.info(f"  Seed: {seed if seed is not None else 'random'}")
        logger.info(f"  Output: {args.output}")
        logger.info("=" * 60)

        quiz = generator.generate_quiz(
            mode=args.mode,
            num_questions=args.question_nums,
            selected_groups=split_list(args.sections),
            difficulties=difficulties,
            exclude_topics=split_list(args.exclude_topics),
            weights=weights,
            fallback_to_all_groups=restricted_fallback,
        )
        quiz.metadata["seed"] = seed
        generator.save_quiz(quiz, args.output)

        logger.info("=" * 60)
        logger.info("Generation Summary:")
        logger.info(f"  {quiz.title}")
        logger.info(f"  {quiz.description}")
        for section, count in quiz.metadata["section_breakdown"].items():
            logger.info(f"  {section}: {count}")
        logger.info(f"  Output saved to: {args.output}")
        logger.info("=" * 60)

        if quiz.metadata["partial_supply"]:
            logger.warning(
                f"Generated {quiz.metadata['total_questions']} questions, "
                f"which is less than the requested {quiz.metadata['requested_count']}. "
                f"Add question banks or widen the selection."
            )

        logger.info("Quiz generation completed successfully!")
        return 0

    except SamplingError as e:
        logger.error(f"Sampling error: {e}")
        return 1

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 1

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1

    except BankLoadError as e:
        logger.error(f"Failed to load question banks: {e}")
        return 1

    except Exception as e:
        logger.error(f"Unexpected error during generation: {e}", exc_info=True)
        return 1


def cli_main():
    """CLI entry point wrapper for console script."""
    exit_code = asyncio.run(main())
    sys.exit(exit_code)


if __name__ == '__main__':
    cli_main()
