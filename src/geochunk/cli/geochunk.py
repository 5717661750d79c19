"""Command-line entry point for building and querying geochunks."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path

from geochunk.chunks.classifier import Classifier
from geochunk.chunks.report import summarize_chunks, write_frame, write_mapping
from geochunk.core.config import GeochunkConfig, load_config
from geochunk.core.errors import GeochunkError, InvalidCodeError, err
from geochunk.core.logging import configure_logging, log_to_file, parse_level
from geochunk.population.loader import load_population_frame
from geochunk.population.table import PrefixPopulation

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, default=None, help="Optional geochunk YAML config")
    parser.add_argument("--population", type=Path, default=None, help="CSV or Parquet population table")
    parser.add_argument("--target", type=int, default=None, help="Approximate population per chunk")
    parser.add_argument("--code-length", type=int, default=None, help="Digits in a full postal code")
    parser.add_argument("--code-column", default=None, help="Column holding the postal code")
    parser.add_argument("--population-column", default=None, help="Column holding the population")


def _resolve_config(args: argparse.Namespace) -> GeochunkConfig:
    base = load_config(args.config) if args.config is not None else GeochunkConfig()
    config = base.with_overrides(
        target_population=args.target,
        code_length=args.code_length,
        population_path=args.population,
        code_column=args.code_column,
        population_column=args.population_column,
    )
    if config.population_path is None:
        raise err("E303_CONFIG_INVALID", "a population table is required (--population or config population_path)")
    return config


def _load(config: GeochunkConfig) -> tuple[Classifier, PrefixPopulation]:
    frame = load_population_frame(
        config.population_path,
        code_column=config.code_column,
        population_column=config.population_column,
        code_length=config.code_length,
    )
    population = PrefixPopulation.from_frame(frame, code_length=config.code_length)
    classifier = Classifier.build(config.target_population, population)
    logger.info("Chunk mapping digest: %s", classifier.digest())
    return classifier, population


def _run_classify(config: GeochunkConfig, codes: list[str]) -> int:
    classifier, _ = _load(config)
    status = 0
    for code in codes:
        try:
            print(f"{code}\t{classifier.chunk_for(code)}")
        except InvalidCodeError as exc:
            print(f"{code}\t{exc}", file=sys.stderr)
            status = 2
    return status


def _run_export(config: GeochunkConfig, output: Path) -> int:
    classifier, _ = _load(config)
    path = write_mapping(classifier, output)
    print(f"chunk mapping written to: {path}")
    return 0


def _run_summary(config: GeochunkConfig, output: Path | None) -> int:
    classifier, population = _load(config)
    summary = summarize_chunks(classifier, population)
    if output is not None:
        path = write_frame(summary, output)
        print(f"chunk summary written to: {path}")
    else:
        print(summary.write_csv(separator="\t"), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Population-weighted postal-code chunking")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG traces every mapping)")
    parser.add_argument("--log-file", type=Path, default=None, help="Optional file mirroring log output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    classify_parser = subparsers.add_parser("classify", help="Print the geochunk of each code")
    _add_common_arguments(classify_parser)
    classify_parser.add_argument("codes", nargs="+", help="Postal codes to classify")

    export_parser = subparsers.add_parser("export", help="Write the prefix -> chunk mapping")
    _add_common_arguments(export_parser)
    export_parser.add_argument("--output", type=Path, required=True, help="CSV or Parquet destination")

    summary_parser = subparsers.add_parser("summary", help="Summarise chunk sizes")
    _add_common_arguments(summary_parser)
    summary_parser.add_argument("--output", type=Path, default=None, help="Optional CSV or Parquet destination")

    args = parser.parse_args(argv)

    try:
        level = parse_level(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(level=level)

    with ExitStack() as stack:
        if args.log_file is not None:
            stack.enter_context(log_to_file(args.log_file, level=level))
        try:
            config = _resolve_config(args)
            if args.command == "classify":
                return _run_classify(config, args.codes)
            if args.command == "export":
                return _run_export(config, args.output)
            if args.command == "summary":
                return _run_summary(config, args.output)
        except (GeochunkError, ValueError) as exc:
            logger.error("%s", exc)
            return 1

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":
    sys.exit(main())
