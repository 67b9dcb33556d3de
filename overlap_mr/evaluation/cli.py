"""
Command-line interface to summarize the results of a simulation sweep.

# overlap-mr report
#     overlap_mr_summary.csv \
#     --output bias.csv

"""

import sys
import argparse

import pandas as pd

from ..logging import critical, info
from .report import bias_table, bias_by_overlap


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="overlap-mr report"
    )

    parser.add_argument(
        "summary",
        type=str,
        help="Summary table (CSV) written by 'overlap-mr simulate'."
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        type=str,
        help="Output filename for the long format bias table (CSV)."
    )

    parser.add_argument(
        "--estimator",
        default="mr",
        type=str,
        help="Estimator shown in the bias by overlap table."
    )

    return parser.parse_args(argv)


def main():
    args = parse_args(sys.argv[2:])

    try:
        summary = pd.read_csv(args.summary)
        table = bias_table(summary)
    except (OSError, ValueError) as e:
        critical(f"Could not read summary table: {e}")
        sys.exit(1)

    if args.output is not None:
        table.to_csv(args.output, index=False)
        info(f"Wrote bias table to '{args.output}'.")

    print(bias_by_overlap(summary, args.estimator).to_string())
