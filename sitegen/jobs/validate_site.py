"""CLI that validates a directory of generated site data files."""

import argparse
import logging
from typing import List, Optional

from sitegen.core.validator import ValidationResult, validate_directory

logger = logging.getLogger(__name__)


def report(results: List[ValidationResult]) -> bool:
    for result in results:
        logger.info("%s %s", "PASS" if result.passed else "FAIL", result.filename)
        for error in result.errors:
            logger.error("  %s: %s", result.filename, error)
        for warning in result.warnings:
            logger.warning("  %s: %s", result.filename, warning)

    passed = sum(1 for r in results if r.passed)
    logger.info(
        "Files: %d/%d passed, errors=%d, warnings=%d",
        passed,
        len(results),
        sum(len(r.errors) for r in results),
        sum(len(r.warnings) for r in results),
    )
    return passed == len(results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate generated site data files")
    parser.add_argument("directory", help="Directory containing the JSON data files")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)
    logger.info("Validating %s", args.directory)
    return 0 if report(validate_directory(args.directory)) else 1


if __name__ == "__main__":
    raise SystemExit(main())
