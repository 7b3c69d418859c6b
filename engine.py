"""
Simulator collaborators.

Engine is the set of operations the harness needs from a discrete-event
network simulator: nodes, point-to-point links, a queue discipline on the
bottleneck, per-node transport stacks, addressing, routing, bulk send and
sink applications, and a run-until primitive. Ns3Engine (ns3_engine.py)
drives ns-3; FluidEngine below is a deterministic in-memory stand-in used
for tests and dry runs.
"""
import ipaddress
import logging
import re
from collections import deque

log = logging.getLogger(__name__)

RATE_UNITS = {"bps": 1, "kbps": 10**3, "Kbps": 10**3, "Mbps": 10**6, "Gbps": 10**9,
              "Bps": 8, "KBps": 8 * 10**3, "MBps": 8 * 10**6, "GBps": 8 * 10**9}
RATE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([A-Za-z]+)\s*$")


def parse_data_rate(text):
    """'20Mbps' -> 20000000 (bits per second)."""
    m = RATE_RE.match(str(text))
    if not m or m.group(2) not in RATE_UNITS:
        raise ValueError("invalid data rate %r" %(text))
    return float(m.group(1)) * RATE_UNITS[m.group(2)]


def check_link(params):
    if parse_data_rate(params.data_rate) <= 0:
        raise ValueError("invalid data rate %r" %(params.data_rate))
    if params.delay_ms is None or params.delay_ms < 0:
        raise ValueError("invalid delay %r ms" %(params.delay_ms))
    if params.mtu is None or params.mtu <= 0:
        raise ValueError("invalid mtu %r" %(params.mtu))


class Engine():
    def create_nodes(self, n):
        raise NotImplementedError

    def install_link(self, a, b, params):
        raise NotImplementedError

    def install_queue_disc(self, link, capacity):
        raise NotImplementedError

    def install_stack(self, node, protocol=None):
        raise NotImplementedError

    def assign_addresses(self, link, network):
        """Give both ends of `link` an address out of `network`, returns (a, b)."""
        raise NotImplementedError

    def populate_routes(self):
        raise NotImplementedError

    def bulk_send(self, node, address, port, send_size, start, stop):
        raise NotImplementedError

    def packet_sink(self, node, port, start, stop):
        raise NotImplementedError

    def total_rx(self, sink):
        raise NotImplementedError

    def run(self, stop):
        raise NotImplementedError

    def destroy(self):
        pass


class FluidEngine(Engine):
    """Deterministic in-memory engine.

    Nodes and links are integer indexes. On run() every bulk source gets a
    share of the narrowest link on its path, split between the sources
    crossing that link in inverse proportion to their path RTT. There is
    no congestion control, loss or queueing here; it only exercises the
    harness.
    """

    def __init__(self):
        self.destroy()

    def destroy(self):
        self.num_nodes = 0
        self.links = []
        self.stacks = {}
        self.networks = []
        self.addresses = {}
        self.routed = False
        self.sources = []
        self.sinks = []
        self.now = 0.0

    def create_nodes(self, n):
        nodes = list(range(self.num_nodes, self.num_nodes + n))
        self.num_nodes += n
        return nodes

    def install_link(self, a, b, params):
        check_link(params)
        for node in (a, b):
            if node >= self.num_nodes:
                raise ValueError("unknown node %r" %(node))
        self.links.append({"ends": (a, b), "rate": parse_data_rate(params.data_rate),
                           "delay": params.delay_ms / 1000.0, "mtu": params.mtu, "queue": None})
        return len(self.links) - 1

    def install_queue_disc(self, link, capacity):
        if capacity < 1:
            raise ValueError("queue capacity must be at least one packet, got %r" %(capacity))
        for i, l in enumerate(self.links):
            if l["queue"] is not None:
                raise RuntimeError("queue discipline already installed on link %d" %(i))
        self.links[link]["queue"] = capacity

    def install_stack(self, node, protocol=None):
        if node in self.stacks:
            raise RuntimeError("stack already installed on node %d" %(node))
        self.stacks[node] = protocol

    def assign_addresses(self, link, network):
        network = ipaddress.ip_network(network)
        for other in self.networks:
            if network.overlaps(other):
                raise ValueError("network %s overlaps %s" %(network, other))
        a, b = self.links[link]["ends"]
        for node in (a, b):
            if node not in self.stacks:
                raise RuntimeError("node %d has no stack installed" %(node))
        self.networks.append(network)
        addr_a, addr_b = str(network.network_address + 1), str(network.network_address + 2)
        self.addresses[addr_a] = a
        self.addresses[addr_b] = b
        return addr_a, addr_b

    def populate_routes(self):
        self.routed = True

    def bulk_send(self, node, address, port, send_size, start, stop):
        if node not in self.stacks:
            raise RuntimeError("node %d has no stack installed" %(node))
        if address not in self.addresses:
            raise ValueError("no node has address %s" %(address))
        self.sources.append({"node": node, "dst": self.addresses[address], "port": port,
                             "send_size": send_size, "start": start, "stop": stop})

    def packet_sink(self, node, port, start, stop):
        if node not in self.stacks:
            raise RuntimeError("node %d has no stack installed" %(node))
        self.sinks.append({"node": node, "port": port, "start": start, "stop": stop, "rx": 0})
        return len(self.sinks) - 1

    def total_rx(self, sink):
        return self.sinks[sink]["rx"]

    def path(self, src, dst):
        """Link indexes from src to dst, shortest hop count."""
        adjacent = {}
        for i, l in enumerate(self.links):
            a, b = l["ends"]
            adjacent.setdefault(a, []).append((b, i))
            adjacent.setdefault(b, []).append((a, i))
        previous = {src: None}
        pending = deque([src])
        while pending:
            node = pending.popleft()
            if node == dst:
                break
            for nxt, link in adjacent.get(node, []):
                if nxt not in previous:
                    previous[nxt] = (node, link)
                    pending.append(nxt)
        if dst not in previous:
            raise RuntimeError("no route from node %d to node %d" %(src, dst))
        hops = []
        node = dst
        while previous[node] is not None:
            node, link = previous[node]
            hops.append(link)
        return hops[::-1]

    def run(self, stop):
        if self.sources and not self.routed:
            raise RuntimeError("routes not populated")
        flows = []
        for s in self.sources:
            sink = None
            for k in self.sinks:
                if k["node"] == s["dst"] and k["port"] == s["port"]:
                    sink = k
            if sink is None:
                continue
            hops = self.path(s["node"], s["dst"])
            rtt = 2 * sum([self.links[h]["delay"] for h in hops])
            narrowest = min(hops, key=lambda h: self.links[h]["rate"])
            active = min(s["stop"], sink["stop"], stop) - max(s["start"], sink["start"], self.now)
            flows.append((sink, narrowest, max(rtt, 1e-6), max(active, 0.0)))

        weights = {}
        for _, link, rtt, _ in flows:
            weights[link] = weights.get(link, 0.0) + 1.0 / rtt
        for sink, link, rtt, active in flows:
            share = self.links[link]["rate"] * (1.0 / rtt) / weights[link]
            sink["rx"] += int(share * active / 8)
        log.debug("fluid run to %.3fs, %d flows", stop, len(flows))
        self.now = max(self.now, stop)
