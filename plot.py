import argparse
import os
import sys

import pandas as pd

import configs
from plot_functions import *


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot a run_all.py summary")
    parser.add_argument("--results-dir", default=configs.results_dir)
    parser.add_argument("--bandwidth", type=int, default=configs.bandwidth)
    args = parser.parse_args(argv)

    df = pd.read_csv(os.path.join(args.results_dir, "summary.csv"))
    plots_dir = "%s/plots" %(args.results_dir)
    os.makedirs(plots_dir, exist_ok=True)

    plot_throughput(df, fname="%s/throughput.png" %(plots_dir))
    plot_fairness(df, fname="%s/fairness.png" %(plots_dir))
    plot_rtt_share(df, args.bandwidth, fname="%s/rtt_share.png" %(plots_dir))
    for flows, (bdps, fairness) in fairness_by_bdp(df).items():
        for b, f in zip(bdps, fairness):
            print(flows, "BDP:", b, "Fairness:", f)
    return plots_dir


if __name__ == '__main__':
    main(sys.argv[1:])
