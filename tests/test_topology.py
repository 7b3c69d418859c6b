import ipaddress

import pytest

from configs import ConfigurationError
from conftest import install_stacks
from engine import FluidEngine
from flow_plan import derive
from topology import LinkParams, TopologyBuilder, address_plan


@pytest.mark.parametrize("n", [1, 2, 3, 6, 12])
def test_node_and_link_counts(engine, bottleneck, access, n):
    specs = derive("B" * n, [20])
    topology = TopologyBuilder(engine).build(specs, bottleneck, access, 100)
    assert engine.num_nodes == 2 + 2 * n
    assert len(engine.links) == 1 + 2 * n
    assert len(topology.nodes) == 2 + 2 * n
    assert len(topology.links) == 1 + 2 * n
    assert topology.n_sender == n


def test_dumbbell_wiring(engine, build):
    _, _, topology = build("BCB", (20, 50, 80))
    left, right = topology.routers
    assert engine.links[topology.bottleneck]["ends"] == (left, right)
    for i in range(3):
        assert engine.links[topology.left_links[i]]["ends"] == (topology.senders[i], left)
        assert engine.links[topology.right_links[i]]["ends"] == (right, topology.receivers[i])


def test_link_attributes(engine, build):
    _, _, topology = build("BCB", (20, 50, 80))
    b = engine.links[topology.bottleneck]
    assert b["rate"] == 20e6
    assert b["delay"] == pytest.approx(0.001)
    assert b["mtu"] == 2000
    for i, rtt in enumerate([20, 50, 80]):
        for link in (topology.left_links[i], topology.right_links[i]):
            assert engine.links[link]["rate"] == 1e9
            assert engine.links[link]["delay"] == pytest.approx(rtt / 2 / 1000.0)


def test_odd_rtt_truncates(engine, build):
    _, _, topology = build("B", (25,))
    assert engine.links[topology.left_links[0]]["delay"] == pytest.approx(0.012)


def test_address_plan_order():
    networks = address_plan(2)
    assert [str(n) for n in networks] == [
        "172.16.1.0/24", "10.1.0.0/24", "192.168.0.0/24", "10.1.1.0/24", "192.168.1.0/24"]


def test_address_plan_disjoint():
    networks = address_plan(256)
    assert len(networks) == 1 + 2 * 256
    assert len(set(networks)) == len(networks)
    seen = []
    for n in networks:
        assert not any([n.overlaps(s) for s in seen])
        seen.append(n)


def test_address_plan_limit():
    with pytest.raises(ConfigurationError) as e:
        address_plan(257)
    assert e.value.parameter == "flows"


def test_finalize(engine, build):
    builder, specs, topology = build("BC", (20, 50))
    install_stacks(engine, topology, specs)
    builder.finalize(topology)
    assert engine.networks == [ipaddress.ip_network(n) for n in
                               ["172.16.1.0/24", "10.1.0.0/24", "192.168.0.0/24", "10.1.1.0/24", "192.168.1.0/24"]]
    assert topology.receiver_addresses == ["192.168.0.2", "192.168.1.2"]
    assert topology.addresses[0] == ("172.16.1.1", "172.16.1.2")
    assert engine.routed


def test_single_shared_bottleneck_queue(engine, build):
    builder, specs, topology = build("BCBCBC", (20, 50, 80), queue_capacity=400)
    install_stacks(engine, topology, specs)
    builder.finalize(topology)
    queues = [l["queue"] for l in engine.links if l["queue"] is not None]
    assert queues == [400]
    assert engine.links[topology.bottleneck]["queue"] == 400


def test_second_bottleneck_queue_rejected(engine, build):
    builder, specs, topology = build()
    install_stacks(engine, topology, specs)
    builder.finalize(topology)
    with pytest.raises(RuntimeError):
        engine.install_queue_disc(topology.left_links[0], 10)


def test_finalize_needs_stacks(engine, build):
    builder, _, topology = build()
    with pytest.raises(RuntimeError):
        builder.finalize(topology)


def test_same_parameters_same_addressing(bottleneck, access):
    allocations = []
    for _ in range(2):
        engine = FluidEngine()
        specs = derive("BCBC", [20, 50])
        builder = TopologyBuilder(engine)
        topology = builder.build(specs, bottleneck, access, 400)
        install_stacks(engine, topology, specs)
        builder.finalize(topology)
        allocations.append((list(engine.networks), list(topology.addresses)))
    assert allocations[0] == allocations[1]


@pytest.mark.parametrize("params", [
    LinkParams("0Mbps", 1, 2000),
    LinkParams("-5Mbps", 1, 2000),
    LinkParams("20Mbps", -1, 2000),
    LinkParams("20Mbps", 1, 0),
    LinkParams("20 furlongs", 1, 2000),
])
def test_invalid_bottleneck_is_fatal(engine, access, params):
    with pytest.raises(ValueError):
        TopologyBuilder(engine).build(derive("BC", [20]), params, access, 400)


def test_no_flows(engine, bottleneck, access):
    with pytest.raises(ConfigurationError):
        TopologyBuilder(engine).build((), bottleneck, access, 400)
