import logging
import os
from collections import namedtuple

import numpy as np

log = logging.getLogger(__name__)

FlowResult = namedtuple("FlowResult", ["flow_index", "total_bytes_received", "throughput_mbps"])


def throughput_mbps(total_bytes, start_time, stop_time):
    return total_bytes * 8 / (stop_time - start_time) / 10**6


def artifact_key(flows, bdp):
    """'BC', 2.0 -> 'BC_2'"""
    return "%s_%g" %(flows, bdp)


def jains(throughputs):
    """Jain's fairness index over the flows that received anything."""
    tpts = np.array([t for t in throughputs if t > 0], dtype=float)
    if len(tpts) == 0:
        return 0.0
    return float(tpts.sum()**2 / (len(tpts) * (tpts**2).sum()))


def read_artifact(fname):
    with open(fname, "r") as f:
        return [float(t) for t in f.read().split()]


class ResultReporter():
    def __init__(self, output_dir=".", flow_specs=None):
        self.output_dir = output_dir
        self.flow_specs = flow_specs

    def report(self, results, key):
        for r in results:
            if self.flow_specs is not None:
                spec = self.flow_specs[r.flow_index]
                log.info("----------------- Flow %d: %s, RTT %dms ------------------------",
                         r.flow_index, spec.protocol, spec.rtt)
            else:
                log.info("----------------- Flow %d ------------------------", r.flow_index)
            log.info("Total bytes received: %d", r.total_bytes_received)
            log.info("Throughput: %f Mb/s", r.throughput_mbps)
        log.info("Fairness: %f", jains([r.throughput_mbps for r in results]))

        fname = os.path.join(self.output_dir, key)
        with open(fname, "w") as f:
            f.write(" ".join(["%f" %(r.throughput_mbps) for r in results]))
        log.info("Results written to %s", fname)
        return fname
