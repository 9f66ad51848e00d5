#!/usr/bin/env python3
"""
Question Bank Bundler CLI for certprep.

This script merges a directory of per-topic question bank files into a
single bundle document that can be shipped or served as one file.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core.errors import BankLoadError
from .pool.loader import BUNDLE_FILE_NAME, build_bundle


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Bundle question bank files into one JSON document.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Write the bundle next to the banks
  certprep-bundle --banks data/question-banks

  # Write the bundle somewhere else
  certprep-bundle --banks data/question-banks --output public/{BUNDLE_FILE_NAME}
        """
    )

    parser.add_argument(
        '--banks',
        type=str,
        required=True,
        help='Directory of per-topic question bank JSON files'
    )

    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help=f'Output path for the bundle (default: <banks>/{BUNDLE_FILE_NAME})'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for bundling."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if not Path(args.banks).is_dir():
            raise ValueError(f"Question bank directory not found: {args.banks}")

        output_path = args.output or str(Path(args.banks) / BUNDLE_FILE_NAME)

        logger.info(f"Bundling question banks from {args.banks}...")
        bundle = build_bundle(args.banks, output_path)

        if not bundle["questionBanks"]:
            logger.warning(f"No question bank files found in {args.banks}")

        logger.info(f"Bundle saved to: {output_path}")
        return 0

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 1

    except BankLoadError as e:
        logger.error(f"Bundling failed: {e}")
        return 1

    except Exception as e:
        logger.error(f"Unexpected error during bundling: {e}", exc_info=True)
        return 1


def cli_main():
    """CLI entry point wrapper for console script."""
    sys.exit(main())


if __name__ == '__main__':
    cli_main()
