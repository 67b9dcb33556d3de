import os
import sys
import argparse

from ..errors import OverlapMRError
from ..logging import critical, info
from .config import parse_config
from .driver import run_sweep


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="overlap-mr simulate"
    )

    parser.add_argument(
        "configuration",
        type=str,
        help="Path to the JSON configuration file of the sweep."
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="overlap_mr_summary.csv",
        help="Output filename for the summary table (CSV)."
    )

    parser.add_argument(
        "--n-workers",
        type=int,
        default=max((os.cpu_count() or 1) - 2, 1)
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=10,
        help="Number of replicates simulated by a worker in a single task."
    )

    return parser.parse_args(argv)


def main():
    args = parse_args(sys.argv[2:])

    try:
        conf = parse_config(args.configuration)
    except (OverlapMRError, OSError, ValueError) as e:
        critical(f"Invalid configuration: {e}")
        sys.exit(1)

    conf.print()

    summary = run_sweep(conf, args.n_workers, args.chunk_size)
    summary.to_csv(args.output, index=False)
    info(f"Wrote summary of {summary.shape[0]} cell(s) to '{args.output}'.")
