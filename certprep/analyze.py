#!/usr/bin/env python3
"""
Question Bank Analysis CLI for certprep.

This script checks loaded question banks against an exam composition and
prints:
1. Coverage of every domain (banks loaded, questions available)
2. The per-domain question allocation for a quiz of a given size
3. Missing, empty or malformed question banks
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List

from .core.compositions import get_composition, load_compositions
from .core.config import Config
from .core.errors import BankLoadError
from .core.models import Composition, SamplingRequest
from .core.validator import validate_banks
from .pool.loader import BankLoader, build_pool
from .sampler.allocation import allocate, ideal_shares, resolve_weights


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Analyze question bank coverage for an exam composition.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a directory of banks against the default composition
  certprep-analyze --banks data/question-banks

  # Show the allocation of a 30 question quiz and fail on any issue
  certprep-analyze --bundle data/question-banks-bundle.json --question_nums 30 --strict
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--banks', type=str, default=None,
                        help='Directory of per-topic question bank JSON files')
    source.add_argument('--bundle', type=str, default=None,
                        help='Path to a question bank bundle JSON file')
    source.add_argument('--bundle_url', type=str, default=None,
                        help='URL of a question bank bundle')
    source.add_argument('--bank_base_url', type=str, default=None,
                        help='URL prefix of per-topic bank files (<url>/<topic>.json)')

    parser.add_argument('--composition', type=str, default=None,
                        help='Exam composition id (default: CERTPREP_COMPOSITION or tableau-consultant)')
    parser.add_argument('--compositions_file', type=str, default=None,
                        help='JSON file with additional exam compositions')
    parser.add_argument('--question_nums', type=int, default=None,
                        help='Quiz size to show the allocation for (default: the full exam)')
    parser.add_argument('--strict', action='store_true',
                        help='Exit with status 1 when any bank issue is found')
    parser.add_argument('--env', type=str, default=None,
                        help='Path to .env file (default: .env in current directory)')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable verbose logging')

    return parser.parse_args(argv)


def analyze_banks(banks: Dict[str, Dict], composition: Composition,
                  question_nums: int = None) -> List[str]:
    """Print a coverage and allocation report and return bank issues."""
    pool = build_pool(banks, composition)
    question_nums = question_nums or composition.total_questions

    print("\n" + "=" * 70)
    print(f"QUESTION BANK ANALYSIS: {composition.exam_name}")
    print("=" * 70)
    print(f"\nBanks loaded: {len(banks)}")
    print(f"Questions available: {len(pool):,}")

    print("\n" + "-" * 70)
    print("DOMAIN COVERAGE")
    print("-" * 70)
    print(f"{'Domain':<40} {'Weight':>7} {'Banks':>8} {'Questions':>10}")
    print("-" * 70)
    for name, entry in pool.coverage(composition).items():
        group = pool.get_group(entry["group_id"])
        banks_text = f"{entry['topics_loaded']}/{entry['topics_total']}"
        print(f"{name[:40]:<40} {group.target_weight_percent:>6g}% {banks_text:>8} {entry['total_questions']:>10}")

    print("\n" + "-" * 70)
    print(f"ALLOCATION FOR {question_nums} QUESTIONS")
    print("-" * 70)
    print(f"{'Domain':<40} {'Ideal':>8} {'Allocated':>10} {'Available':>10}")
    print("-" * 70)
    request = SamplingRequest(total_requested=question_nums)
    allocation = allocate(pool.all_groups(), request)
    shares = ideal_shares(question_nums, resolve_weights(pool.all_groups(), request))
    short = 0
    for group_id, count in allocation.items():
        available = pool.total_available(group_id)
        short += max(0, count - available)
        marker = "" if available >= count else "  (short)"
        name = pool.get_group(group_id).display_name
        print(f"{name[:40]:<40} {shares[group_id]:>8.2f} {count:>10} {available:>10}{marker}")
    print("-" * 70)
    if short:
        print(f"Domains are {short} question(s) short; the gap is filled from other domains.")
    if question_nums > len(pool):
        print(f"Only {len(pool)} questions exist; a {question_nums} question quiz will be partial.")

    issues = validate_banks(banks, pool.required_vs_loaded()["required"])

    print("\n" + "=" * 70)
    print("ISSUES")
    print("=" * 70)
    if issues:
        for issue in issues:
            print(f"  - {issue}")
    else:
        print("  None found.")
    print("\n" + "=" * 70)

    return issues


async def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.question_nums is not None and args.question_nums <= 0:
            raise ValueError("question_nums must be positive")

        config = Config.load_from_env(args.env)
        if args.banks or args.bundle or args.bundle_url or args.bank_base_url:
            config["bank_dir"] = args.banks or ""
            config["bundle_path"] = args.bundle or ""
            config["bundle_url"] = args.bundle_url or ""
            config["bank_base_url"] = args.bank_base_url or ""
        if args.composition:
            config["composition"] = args.composition
        Config.validate_config(config)

        compositions_file = args.compositions_file or config["compositions_file"]
        if compositions_file:
            load_compositions(compositions_file)
        composition = get_composition(config["composition"])

        loader = BankLoader(Config.get_loader_config(config))
        banks = await loader.load_for_config(config, composition.topics())

        issues = analyze_banks(banks, composition, args.question_nums)
        if issues and args.strict:
            logger.error(f"Found {len(issues)} question bank issue(s)")
            return 1
        return 0

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
        logger.error(f"Error analyzing question banks: {e}", exc_info=True)
        return 1


def cli_main():
    """CLI entry point wrapper."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    cli_main()
