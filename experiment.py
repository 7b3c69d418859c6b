import logging

import configs
from configs import ConfigurationError
from report import FlowResult, throughput_mbps

log = logging.getLogger(__name__)

CONFIGURING = "configuring"
RUNNING = "running"
COLLECTING = "collecting"
DONE = "done"


class ExperimentRunner():
    """Installs stacks and applications on a built topology, runs the
    engine over [start_time, stop_time] and reads back per-flow bytes.

    One run per runner: configuring -> running -> collecting -> done.
    """

    def __init__(self, engine, builder, port=configs.port, send_size=configs.packet_size):
        self.engine = engine
        self.builder = builder
        self.port = port
        self.send_size = send_size
        self.state = None
        self.sinks = []
        self.results = None

    def enter(self, state):
        log.debug("runner: %s -> %s", self.state, state)
        self.state = state

    def run(self, topology, flow_specs, start_time, stop_time):
        if self.state is not None:
            raise RuntimeError("runner already used (state: %s)" %(self.state))
        if len(flow_specs) != topology.n_sender:
            raise ValueError("%d flow specs for a topology with %d senders"
                             %(len(flow_specs), topology.n_sender))
        if stop_time <= start_time:
            raise ConfigurationError("stop_time", "must be after start_time (%r <= %r)"
                                     %(stop_time, start_time))

        self.enter(CONFIGURING)
        self.configure(topology, flow_specs)

        self.enter(RUNNING)
        self.start(topology, start_time, stop_time)
        log.info("Simulation time: [%s,%s]", start_time, stop_time)
        self.engine.run(stop_time)

        self.enter(COLLECTING)
        results = self.collect(start_time, stop_time)

        self.enter(DONE)
        self.results = tuple(results)
        return self.results

    def configure(self, topology, flow_specs):
        for router in topology.routers:
            self.engine.install_stack(router)
        # flow by flow, each pair gets its own protocol
        for i, spec in enumerate(flow_specs):
            self.engine.install_stack(topology.senders[i], spec.protocol)
            self.engine.install_stack(topology.receivers[i], spec.protocol)
        self.builder.finalize(topology)

    def start(self, topology, start_time, stop_time):
        self.sinks = []
        for i in range(topology.n_sender):
            self.engine.bulk_send(topology.senders[i], topology.receiver_addresses[i], self.port,
                                  self.send_size, start_time, stop_time)
            self.sinks.append(self.engine.packet_sink(topology.receivers[i], self.port,
                                                      start_time, stop_time))

    def collect(self, start_time, stop_time):
        results = []
        for i, sink in enumerate(self.sinks):
            rx = self.engine.total_rx(sink)
            results.append(FlowResult(i, rx, throughput_mbps(rx, start_time, stop_time)))
        return results
