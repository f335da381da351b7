"""CLI entry point for the K-Medoids trainer."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger("MedoidClustering")


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
    )


def _add_train_parser(subparsers: argparse._SubParsersAction) -> None:
    from MedoidClustering.pipeline.train import METRICS
    from MedoidClustering.shared import config

    default_k = int(os.environ.get("KMEDOIDS_K", str(config.DEFAULT_K)))
    default_max_iterations = int(
        os.environ.get("KMEDOIDS_MAX_ITERATIONS", str(config.DEFAULT_MAX_ITERATIONS))
    )
    default_sample_size = int(
        os.environ.get("KMEDOIDS_SAMPLE_SIZE", str(config.DEFAULT_SAMPLE_SIZE))
    )
    default_threads = int(
        os.environ.get("KMEDOIDS_THREADS", str(config.DEFAULT_NUM_THREADS))
    )
    default_seed = int(os.environ.get("KMEDOIDS_SEED", str(config.DEFAULT_SEED)))

    p = subparsers.add_parser("train", help="Train a K-Medoids model on a CSV file")
    p.add_argument("--input", required=True, type=Path, help="Numeric CSV file")
    p.add_argument(
        "--k", type=int, default=default_k,
        help="Number of clusters (0 selects k by MDL)",
    )
    p.add_argument(
        "--max-iterations", type=int, default=default_max_iterations,
        help="Maximum refinement iterations",
    )
    p.add_argument(
        "--epsilon", type=float, default=config.DEFAULT_EPSILON,
        help="Absolute cost improvement halting threshold",
    )
    p.add_argument(
        "--fraction-epsilon", type=float, default=config.DEFAULT_FRACTION_EPSILON,
        help="Relative cost improvement halting threshold",
    )
    p.add_argument(
        "--sample-size", type=int, default=default_sample_size,
        help="Target size of the working sample",
    )
    p.add_argument("--threads", type=int, default=default_threads, help="Worker threads")
    p.add_argument("--seed", type=int, default=default_seed, help="Random seed")
    p.add_argument(
        "--metric", default="euclidean", choices=METRICS, help="Distance metric",
    )
    p.add_argument("--delimiter", default=",", help="CSV field delimiter")
    p.set_defaults(func=_cmd_train)


def _cmd_train(args: argparse.Namespace) -> int:
    from MedoidClustering.pipeline.train import run_train
    from MedoidClustering.shared.config import KMedoidsConfig, PipelineConfig

    try:
        config = PipelineConfig(
            input_file=args.input,
            metric=args.metric,
            delimiter=args.delimiter,
            kmedoids=KMedoidsConfig(
                k=args.k,
                max_iterations=args.max_iterations,
                epsilon=args.epsilon,
                fraction_epsilon=args.fraction_epsilon,
                sample_size=args.sample_size,
                num_threads=args.threads,
                seed=args.seed,
            ),
        )
        summary = run_train(config)
    except Exception as exc:
        logger.error("[KMEDOIDS] Training failed: %s", exc)
        return 2

    logger.info(
        "[KMEDOIDS] Trained %d medoids (cost=%.6g)",
        summary.result.model.k,
        summary.result.cost,
    )
    print(json.dumps(summary.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="medoid-cluster",
        description="K-Medoids clustering over arbitrary distance metrics",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    _add_train_parser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(getattr(args, "verbose", False))

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
