import sys
from .sweep.cli import main as simulate_main
from .evaluation.cli import main as report_main


def main():
    """Main entry point for overlap-mr.

    Example:

        overlap-mr simulate sweep.json --n-workers 4
        overlap-mr report overlap_mr_summary.csv

    """

    if len(sys.argv) < 2:
        return print_usage()

    mode = sys.argv[1]

    if mode == "simulate":
        return simulate_main()

    elif mode == "report":
        return report_main()

    else:
        print(
            f"Unknown mode '{mode}'.",
            file=sys.stderr
        )
        return print_usage()


def print_usage():
    print(
        "usage: overlap-mr {simulate,report} [-h]",
        file=sys.stderr
    )
    sys.exit(1)
