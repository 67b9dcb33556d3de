"""Logging utilities."""


import os
import sys


def _quiet() -> bool:
    return os.environ.get("OVERLAP_MR_QUIET", "0") == "1"


def warn(message):
    print(message, file=sys.stderr)


def critical(message):
    print("***", message, file=sys.stderr)


def info(message):
    if not _quiet():
        print(message)


def debug(message):
    if not _quiet():
        print(f"[DEBUG] {message}", file=sys.stderr)
