#!/usr/bin/env python
"""
Bias of 2SMR estimates as a function of the overlap between the exposure and
outcome samples, with and without selection of the instruments on their
genome-wide significance.

40,000 individuals split in two GWAS samples of 20,000 (plus a replication
sample), causal effect of 0.2 and a sweep over the confounding strength.
"""

import os

from overlap_mr.sweep import parse_config, run_sweep
from overlap_mr.evaluation import bias_table, bias_by_overlap


HERE = os.path.dirname(os.path.abspath(__file__))


def main():
    conf = parse_config(os.path.join(HERE, "..", "sweep.json"))
    conf.print()

    summary = run_sweep(conf, n_workers=max((os.cpu_count() or 1) - 2, 1))
    summary.to_csv("overlap_winners_curse_summary.csv", index=False)

    bias_table(summary).to_csv("overlap_winners_curse_bias.csv", index=False)
    print(bias_by_overlap(summary).to_string())


if __name__ == "__main__":
    main()
