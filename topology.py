"""
Dumbbell topology.

    sender 0 --\                                /-- receiver 0
    sender 1 ---- router 0 ===bottleneck=== router 1 ---- receiver 1
    sender n --/                                \-- receiver n

Access link delay is rtt / 2 on both sides of a flow, so a round trip
crosses rtt worth of access delay plus twice the bottleneck delay.
"""
import ipaddress
import logging
from collections import namedtuple

from configs import ConfigurationError

log = logging.getLogger(__name__)

LinkParams = namedtuple("LinkParams", ["data_rate", "delay_ms", "mtu"])

bottleneck_network = "172.16.1.0/24"
left_network = "10.1.%d.0/24"
right_network = "192.168.%d.0/24"


def address_plan(n_sender):
    """Subnets in allocation order: bottleneck, then sender side and
    receiver side of flow 0, flow 1, ..."""
    if n_sender > 256:
        raise ConfigurationError("flows", "at most 256 flows fit the address plan, got %d" %(n_sender))
    networks = [ipaddress.ip_network(bottleneck_network)]
    for i in range(n_sender):
        networks.append(ipaddress.ip_network(left_network %(i)))
        networks.append(ipaddress.ip_network(right_network %(i)))
    return networks


class Topology():
    def __init__(self):
        self.routers = []
        self.senders = []
        self.receivers = []
        self.bottleneck = None
        self.left_links = []
        self.right_links = []
        self.queue_capacity = None
        self.networks = []
        self.addresses = []
        self.receiver_addresses = []

    @property
    def n_sender(self):
        return len(self.senders)

    @property
    def nodes(self):
        return self.routers + self.senders + self.receivers

    @property
    def links(self):
        links = [self.bottleneck]
        for left, right in zip(self.left_links, self.right_links):
            links += [left, right]
        return links


class TopologyBuilder():
    def __init__(self, engine):
        self.engine = engine

    def build(self, flow_specs, bottleneck, access, queue_capacity):
        """Create routers, hosts and links for `flow_specs`.

        `bottleneck` is a LinkParams; `access` is a LinkParams whose delay
        is replaced per flow by rtt / 2 (integer ms, odd RTTs round down).
        """
        if not flow_specs:
            raise ConfigurationError("flows", "no flows to build a topology for")
        n_sender = len(flow_specs)
        topology = Topology()
        topology.networks = address_plan(n_sender)
        topology.queue_capacity = queue_capacity

        topology.routers = self.engine.create_nodes(2)
        topology.senders = self.engine.create_nodes(n_sender)
        topology.receivers = self.engine.create_nodes(n_sender)

        left_router, right_router = topology.routers
        topology.bottleneck = self.engine.install_link(left_router, right_router, bottleneck)
        for i, spec in enumerate(flow_specs):
            params = access._replace(delay_ms=spec.rtt // 2)
            topology.left_links.append(self.engine.install_link(topology.senders[i], left_router, params))
            topology.right_links.append(self.engine.install_link(right_router, topology.receivers[i], params))
            log.debug("flow %d: access delay %dms", i, params.delay_ms)
        return topology

    def finalize(self, topology):
        """Bottleneck queue, addresses and routes. Needs stacks on every node."""
        self.engine.install_queue_disc(topology.bottleneck, topology.queue_capacity)
        topology.addresses = []
        for link, network in zip(topology.links, topology.networks):
            topology.addresses.append(self.engine.assign_addresses(link, network))
            log.debug("assigned %s", network)
        # receiver side links sit at 2, 4, ...
        topology.receiver_addresses = [topology.addresses[2 + 2 * i][1] for i in range(topology.n_sender)]
        self.engine.populate_routes()
        return topology
