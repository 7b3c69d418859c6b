import pytest

from engine import FluidEngine
from flow_plan import derive
from topology import LinkParams, TopologyBuilder


@pytest.fixture
def engine():
    return FluidEngine()


@pytest.fixture
def bottleneck():
    return LinkParams("20Mbps", 1, 2000)


@pytest.fixture
def access():
    return LinkParams("1000Mbps", None, 2000)


@pytest.fixture
def build(engine, bottleneck, access):
    def build(flows="BC", rtts=(20, 50), queue_capacity=400):
        specs = derive(flows, list(rtts))
        builder = TopologyBuilder(engine)
        return builder, specs, builder.build(specs, bottleneck, access, queue_capacity)
    return build


def install_stacks(engine, topology, specs):
    for router in topology.routers:
        engine.install_stack(router)
    for i, spec in enumerate(specs):
        engine.install_stack(topology.senders[i], spec.protocol)
        engine.install_stack(topology.receivers[i], spec.protocol)
