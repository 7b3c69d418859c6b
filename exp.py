import argparse
import logging
import os
import sys

import configs
from configs import ConfigurationError
from experiment import ExperimentRunner
from flow_plan import derive
from queue_sizing import compute_capacity_packets
from report import ResultReporter, artifact_key
from topology import LinkParams, TopologyBuilder

log = logging.getLogger("exp")


def parse_rtts(text):
    try:
        return [int(r) for r in text.split(",") if r.strip()]
    except ValueError:
        raise ConfigurationError("rtts", "expected comma separated integers, got %r" %(text))


def build_parser():
    parser = argparse.ArgumentParser(description="Dumbbell BBR vs Cubic experiment")
    parser.add_argument("--flows", default=configs.flows,
                        help="Flow combinations of BBR (B) and Cubic (C) (default: %(default)s)")
    parser.add_argument("--bdp", type=float, default=configs.bdp,
                        help="Bottleneck queue size in BDPs of the max RTT (default: %(default)s)")
    parser.add_argument("--bandwidth", type=int, default=configs.bandwidth,
                        help="Bottleneck bandwidth in Mbps (default: %(default)s)")
    parser.add_argument("--rtts", default=",".join([str(r) for r in configs.rtts]),
                        help="RTTs in ms, comma separated (default: %(default)s)")
    parser.add_argument("--packet-size", type=int, default=configs.packet_size,
                        help="Packet size in bytes (default: %(default)s)")
    parser.add_argument("--start-time", type=float, default=configs.start_time)
    parser.add_argument("--stop-time", type=float, default=configs.stop_time)
    parser.add_argument("--output-dir", default=".",
                        help="Directory for the results file (default: %(default)s)")
    parser.add_argument("--engine", choices=["ns3", "fluid"], default=configs.engine,
                        help="Simulator backend (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    return parser


def build_engine(name, packet_size):
    if name == "ns3":
        from ns3_engine import Ns3Engine
        return Ns3Engine(packet_size)
    from engine import FluidEngine
    return FluidEngine()


def run_experiment(args):
    rtts = parse_rtts(args.rtts)
    flow_specs = derive(args.flows, rtts)
    queue_size = compute_capacity_packets(args.bdp, args.bandwidth, rtts, args.packet_size)

    log.info("Flow: %s", args.flows)
    log.info("RTTs: %s", ", ".join(["%dms" %(r) for r in rtts]))
    log.info("Server to Router Bwdth: %s", configs.access_bandwidth)
    log.info("Router to Router Bwdth: %dMbps", args.bandwidth)
    log.info("Router to Router Delay: %dms", configs.bottleneck_delay)
    log.info("Packet size (bytes): %d", args.packet_size)
    log.info("Queue Size (packets): %d", queue_size)

    bottleneck = LinkParams("%dMbps" %(args.bandwidth), configs.bottleneck_delay, configs.mtu)
    access = LinkParams(configs.access_bandwidth, None, configs.mtu)

    engine = build_engine(args.engine, args.packet_size)
    try:
        builder = TopologyBuilder(engine)
        topology = builder.build(flow_specs, bottleneck, access, queue_size)
        runner = ExperimentRunner(engine, builder, send_size=args.packet_size)
        results = runner.run(topology, flow_specs, args.start_time, args.stop_time)
    finally:
        engine.destroy()

    os.makedirs(args.output_dir, exist_ok=True)
    reporter = ResultReporter(args.output_dir, flow_specs)
    return reporter.report(results, artifact_key(args.flows, args.bdp)), results


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        run_experiment(args)
    except ConfigurationError as e:
        parser.error(str(e))
    print("done")


if __name__ == '__main__':
    main(sys.argv[1:])
