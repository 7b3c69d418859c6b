import pytest

from engine import Engine, FluidEngine, parse_data_rate
from topology import LinkParams


@pytest.mark.parametrize("text,bps", [
    ("20Mbps", 20e6),
    ("1000Mbps", 1e9),
    ("1.5Gbps", 1.5e9),
    ("500kbps", 5e5),
    ("100bps", 100),
    ("1MBps", 8e6),
])
def test_parse_data_rate(text, bps):
    assert parse_data_rate(text) == bps


@pytest.mark.parametrize("text", ["", "Mbps", "20", "20 parsecs"])
def test_parse_data_rate_rejects(text):
    with pytest.raises(ValueError):
        parse_data_rate(text)


def test_interface_is_abstract():
    with pytest.raises(NotImplementedError):
        Engine().run(1.0)


def line(engine, rate="10Mbps", delays=(5, 5)):
    """a -- b -- c"""
    a, b, c = engine.create_nodes(3)
    engine.install_link(a, b, LinkParams("1Gbps", delays[0], 1500))
    engine.install_link(b, c, LinkParams(rate, delays[1], 1500))
    for n in (a, b, c):
        engine.install_stack(n)
    addrs = engine.assign_addresses(1, "10.0.0.0/24")
    engine.assign_addresses(0, "10.0.1.0/24")
    engine.populate_routes()
    return a, c, addrs[1]


def test_single_flow_gets_narrowest_link():
    engine = FluidEngine()
    a, c, addr = line(engine)
    engine.bulk_send(a, addr, 9, 1000, 0.0, 10.0)
    sink = engine.packet_sink(c, 9, 0.0, 10.0)
    engine.run(10.0)
    assert engine.total_rx(sink) == pytest.approx(10e6 * 10 / 8, abs=1)


def test_inverse_rtt_split():
    engine = FluidEngine()
    left, right = engine.create_nodes(2)
    s1, s2, r1, r2 = engine.create_nodes(4)
    links = [engine.install_link(left, right, LinkParams("30Mbps", 0, 1500)),
             engine.install_link(s1, left, LinkParams("1Gbps", 10, 1500)),
             engine.install_link(right, r1, LinkParams("1Gbps", 10, 1500)),
             engine.install_link(s2, left, LinkParams("1Gbps", 20, 1500)),
             engine.install_link(right, r2, LinkParams("1Gbps", 20, 1500))]
    for n in range(6):
        engine.install_stack(n)
    addrs = [engine.assign_addresses(l, "10.0.%d.0/24" %(i)) for i, l in enumerate(links)]
    engine.populate_routes()
    engine.bulk_send(s1, addrs[2][1], 9, 1000, 0.0, 8.0)
    engine.bulk_send(s2, addrs[4][1], 9, 1000, 0.0, 8.0)
    k1 = engine.packet_sink(r1, 9, 0.0, 8.0)
    k2 = engine.packet_sink(r2, 9, 0.0, 8.0)
    engine.run(8.0)
    # RTT 40ms vs 80ms -> 2:1
    assert engine.total_rx(k1) == pytest.approx(20e6, abs=1)
    assert engine.total_rx(k2) == pytest.approx(10e6, abs=1)


def test_late_start_counts_active_time_only():
    engine = FluidEngine()
    a, c, addr = line(engine)
    engine.bulk_send(a, addr, 9, 1000, 4.0, 10.0)
    sink = engine.packet_sink(c, 9, 0.0, 10.0)
    engine.run(10.0)
    assert engine.total_rx(sink) == pytest.approx(10e6 * 6 / 8, abs=1)


def test_run_needs_routes():
    engine = FluidEngine()
    a, b = engine.create_nodes(2)
    link = engine.install_link(a, b, LinkParams("1Mbps", 1, 1500))
    engine.install_stack(a)
    engine.install_stack(b)
    addrs = engine.assign_addresses(link, "10.0.0.0/24")
    engine.bulk_send(a, addrs[1], 9, 1000, 0.0, 1.0)
    with pytest.raises(RuntimeError):
        engine.run(1.0)


def test_overlapping_networks():
    engine = FluidEngine()
    a, b, c = engine.create_nodes(3)
    l1 = engine.install_link(a, b, LinkParams("1Mbps", 1, 1500))
    l2 = engine.install_link(b, c, LinkParams("1Mbps", 1, 1500))
    for n in (a, b, c):
        engine.install_stack(n)
    engine.assign_addresses(l1, "10.0.0.0/16")
    with pytest.raises(ValueError):
        engine.assign_addresses(l2, "10.0.1.0/24")


def test_stack_installed_once():
    engine = FluidEngine()
    (a,) = engine.create_nodes(1)
    engine.install_stack(a, "bbr")
    with pytest.raises(RuntimeError):
        engine.install_stack(a, "cubic")
    assert engine.stacks[a] == "bbr"


def test_zero_queue_rejected():
    engine = FluidEngine()
    a, b = engine.create_nodes(2)
    link = engine.install_link(a, b, LinkParams("1Mbps", 1, 1500))
    with pytest.raises(ValueError):
        engine.install_queue_disc(link, 0)


def test_destroy_resets():
    engine = FluidEngine()
    line(engine)
    engine.destroy()
    assert engine.num_nodes == 0
    assert engine.links == []
    assert not engine.routed
