import argparse
import logging
import os
import subprocess
import sys

import pandas as pd

import configs
from flow_plan import derive
from exp import parse_rtts
from report import artifact_key, read_artifact

log = logging.getLogger("run_all")

exp_script = os.path.join(os.path.dirname(os.path.abspath(__file__)), "exp.py")


def exp_command(flows, bdp, results_dir, engine, extra=[]):
    return [sys.executable, exp_script, "--flows", flows, "--bdp", str(bdp),
            "--output-dir", results_dir, "--engine", engine] + list(extra)


def run_sweep(flow_patterns, bdps, results_dir, engine, extra=[]):
    os.makedirs(results_dir, exist_ok=True)
    for flows in flow_patterns:
        for bdp in bdps:
            cmd = exp_command(flows, bdp, results_dir, engine, extra)
            log.info("running %s", " ".join(cmd))
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                  universal_newlines=True)
            if proc.returncode != 0 or "done" not in proc.stdout:
                for l in proc.stderr.split("\n"):
                    log.error("%s", l)
                raise RuntimeError("experiment %s failed (exit status %d)"
                                   %(artifact_key(flows, bdp), proc.returncode))
            log.info("%s done", artifact_key(flows, bdp))


def summarize(results_dir, flow_patterns, bdps, rtts=configs.rtts):
    rows = []
    for flows in flow_patterns:
        specs = derive(flows, rtts)
        for bdp in bdps:
            tpts = read_artifact(os.path.join(results_dir, artifact_key(flows, bdp)))
            if len(tpts) != len(specs):
                raise ValueError("%s: %d throughputs for %d flows"
                                 %(artifact_key(flows, bdp), len(tpts), len(specs)))
            for i in range(len(specs)):
                rows.append({"flows": flows, "bdp": bdp, "flow": i, "protocol": specs[i].protocol,
                             "rtt": specs[i].rtt, "throughput": tpts[i]})
    return pd.DataFrame(rows, columns=["flows", "bdp", "flow", "protocol", "rtt", "throughput"])


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run every flow pattern / BDP combination")
    parser.add_argument("--flows", nargs="+", default=configs.sweep_flows)
    parser.add_argument("--bdp", nargs="+", type=float, default=configs.sweep_bdps)
    parser.add_argument("--rtts", default=",".join([str(r) for r in configs.rtts]))
    parser.add_argument("--results-dir", default=configs.results_dir)
    parser.add_argument("--engine", choices=["ns3", "fluid"], default=configs.engine)
    parser.add_argument("--stop-time", type=float, default=configs.stop_time)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    extra = ["--rtts", args.rtts, "--stop-time", str(args.stop_time)]
    run_sweep(args.flows, args.bdp, args.results_dir, args.engine, extra)
    rtts = parse_rtts(args.rtts)
    df = summarize(args.results_dir, args.flows, args.bdp, rtts)
    fname = os.path.join(args.results_dir, "summary.csv")
    df.to_csv(fname, index=False)
    log.info("summary written to %s", fname)
    print("done")
    return df


if __name__ == '__main__':
    main(sys.argv[1:])
