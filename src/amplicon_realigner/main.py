#!/usr/bin/env python3
"""
Main pipeline module for the amplicon realigner.

This module provides the command line entry point and walks the targets,
routing every overlapping read through the primer filter and realignment.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger as core_logger

from . import __version__
from .config import (
    ARG_MAPPING,
    ErrorPolicy,
    RealignerConfig,
    load_yaml_settings,
    normalize_settings,
)
from .core.alignment import PairwiseAligner
from .core.io import (
    AlignmentSink,
    AlignmentSource,
    ReferenceLookup,
    build_output_header,
)
from .core.primers import PrimerMatcher
from .core.realign import RealignmentEngine
from .core.targets import TargetCatalog
from .exceptions import ConfigurationError, LengthMismatch, RealignerError
from .models import ReadOutcome, ReferenceWindow, RunSummary


def setup_logging(log_level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )
    core_logger.remove()
    core_logger.add(sys.stderr, level=log_level.upper())


def run_pipeline(config: RealignerConfig, command_line: str = "") -> RunSummary:
    """
    Run the realigner over every target.

    Args:
        config: Realigner configuration
        command_line: Invoking command line, recorded in the output header

    Returns:
        Counters for the whole run
    """
    logger = logging.getLogger(__name__)

    logger.info(
        f"Running with settings: min_score={config.min_score} gap_open={config.gap_open} "
        f"gap_extend={config.gap_extend} primer_similarity={config.primer_similarity}"
    )

    try:
        # Step 1: Read targets
        logger.info(f"Reading BED file: {config.targets_file} ...")
        catalog = TargetCatalog.from_bed(config.targets_file)

        # Step 2: Open inputs and output
        logger.info(f"Reading BAM file: {config.input_file} ...")
        engine = RealignmentEngine(
            PairwiseAligner(),
            min_score=config.min_score,
            gap_open=config.gap_open,
            gap_extend=config.gap_extend,
        )
        summary = RunSummary()

        with ReferenceLookup(config.reference_file) as reference, \
                AlignmentSource(config.input_file, config.reference_file) as source:

            header = build_output_header(source.header, __version__, command_line)

            logger.info(f"Processing reads, writing to {config.output_file} ...")
            with AlignmentSink(config.output_file, header, config.reference_file) as sink:

                # Step 3: Process each target
                for target in catalog:
                    if config.verbose:
                        logger.info(f"Inspecting region: {target} ...")

                    window = reference.window(target, config.padding)
                    process_target(window, source, sink, engine, config, summary)
                    summary.targets += 1

        logger.info(
            f"Processed {summary.targets} targets: {summary.reads_inspected} reads inspected, "
            f"{summary.emitted} written "
            f"({summary.outcomes[ReadOutcome.REALIGNED]} realigned, "
            f"{summary.outcomes[ReadOutcome.PASSTHROUGH]} passed through, "
            f"{summary.outcomes[ReadOutcome.REJECTED]} kept after rejected realignment, "
            f"{summary.outcomes[ReadOutcome.FILTERED_OUT]} filtered out)"
        )
        return summary

    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        raise


def process_target(
    window: ReferenceWindow,
    source: AlignmentSource,
    sink: AlignmentSink,
    engine: RealignmentEngine,
    config: RealignerConfig,
    summary: RunSummary,
) -> None:
    """
    Route every read overlapping one target and write the kept ones.

    A read overlapping several targets is handled, and written, once per target.

    Args:
        window: Reference window of the target
        source: Alignment input
        sink: Alignment output
        engine: Realignment engine
        config: Realigner configuration
        summary: Counters updated in place
    """
    logger = logging.getLogger(__name__)

    matcher = PrimerMatcher(
        window.upstream_primer,
        window.downstream_primer,
        config.primer_similarity,
    )

    if config.verbose:
        logger.debug(f"Reference sequence: {window.sequence}")
        logger.debug(f"Upstream primer: {matcher.upstream_primer}")
        logger.debug(f"Downstream primer: {matcher.downstream_primer}")

    for read in source.overlapping(window.target):
        outcome = process_read(read, window, matcher, engine, config.error_policy)
        summary.record(outcome)

        if outcome.emitted:
            sink.write(read)


def process_read(
    read,
    window: ReferenceWindow,
    matcher: PrimerMatcher,
    engine: RealignmentEngine,
    error_policy: ErrorPolicy = ErrorPolicy.REJECT,
) -> ReadOutcome:
    """
    Filter one read and, if it survives, realign it.

    Returns:
        The read's outcome for this target
    """
    if read.is_unmapped or read.is_secondary or read.is_supplementary:
        return ReadOutcome.FILTERED_OUT

    sequence = read.query_sequence
    if not sequence:
        return ReadOutcome.FILTERED_OUT

    try:
        if not matcher.matches(sequence):
            return ReadOutcome.FILTERED_OUT
    except LengthMismatch as e:
        if error_policy is ErrorPolicy.ABORT:
            raise
        logging.getLogger(__name__).warning(
            f"Skipping read {read.query_name} for target {window.target.name}: {e}"
        )
        return ReadOutcome.FILTERED_OUT

    return engine.realign(read, window)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amplicon-realigner",
        description="Realign soft-clipped amplicon reads against their target windows"
    )

    parser.add_argument("-I", "--input", type=Path, help="Path to indexed input BAM file")
    parser.add_argument("-T", "--targets", type=Path, help="Path to amplicon BED file")
    parser.add_argument("-O", "--output", type=Path, help="Path to output BAM file")
    parser.add_argument("-R", "--reference", type=Path, help="Path to indexed FASTA file")

    parser.add_argument(
        "-S", "--min-score",
        type=float,
        help="Minimum alignment score (default: 50)"
    )

    parser.add_argument(
        "-P", "--primer-similarity",
        type=float,
        help="Primer similarity threshold (default: 0.8)"
    )

    parser.add_argument(
        "--gap-open",
        type=float,
        help="Read alignment gap open penalty (default: -14)"
    )

    parser.add_argument(
        "--gap-extend",
        type=float,
        help="Read alignment gap extend penalty (default: -4)"
    )

    parser.add_argument(
        "--padding",
        type=int,
        help="Bases of reference added on each side of a target (default: 0)"
    )

    parser.add_argument(
        "--error-policy",
        choices=[policy.value for policy in ErrorPolicy],
        help="Reads shorter than a primer: reject them or abort the run (default: reject)"
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="YAML file with default settings; command-line options take precedence"
    )

    parser.add_argument(
        "-V", "--verbose",
        action="store_true",
        default=None,
        help="Verbose logging"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for command line interface."""
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        base = normalize_settings(load_yaml_settings(args.config)) if args.config else {}
    except ConfigurationError as e:
        parser.error(str(e))

    settings = dict(base)
    for arg_name, config_name in ARG_MAPPING.items():
        if getattr(args, arg_name, None) is not None:
            settings[config_name] = getattr(args, arg_name)
    missing = [arg_name for arg_name, config_name in ARG_MAPPING.items()
               if config_name.endswith("_file") and config_name not in settings]
    if missing:
        parser.error(f"Missing required options: {', '.join('--' + name for name in missing)}")

    setup_logging("DEBUG" if settings.get("verbose") else settings.get("log_level", "INFO"))

    try:
        config = RealignerConfig.from_args(vars(args), base=base)
        run_pipeline(config, command_line=" ".join(argv))
    except RealignerError as e:
        logging.error(f"Pipeline failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Pipeline interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
