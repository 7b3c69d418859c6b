"""
ns-3 backend, through the ns-3 Python bindings (pip install ns3).
"""
import logging

from ns import ns

from engine import Engine, check_link

log = logging.getLogger(__name__)

socket_types = {"bbr": "ns3::TcpBbr", "cubic": "ns3::TcpCubic"}


class Ns3Engine(Engine):
    def __init__(self, packet_size):
        # segment size defaults to 536 otherwise
        ns.Config.SetDefault("ns3::TcpSocket::SegmentSize", ns.UintegerValue(packet_size))
        # ack every segment
        ns.Config.SetDefault("ns3::TcpSocket::DelAckCount", ns.UintegerValue(0))
        self.internet = ns.InternetStackHelper()
        self.containers = []
        self.interfaces = []
        self.apps = []

    def create_nodes(self, n):
        nodes = ns.NodeContainer()
        nodes.Create(n)
        self.containers.append(nodes)
        return [nodes.Get(i) for i in range(n)]

    def install_link(self, a, b, params):
        check_link(params)
        p2p = ns.PointToPointHelper()
        p2p.SetDeviceAttribute("DataRate", ns.StringValue(params.data_rate))
        p2p.SetChannelAttribute("Delay", ns.StringValue("%dms" %(params.delay_ms)))
        p2p.SetDeviceAttribute("Mtu", ns.UintegerValue(params.mtu))
        # buffering happens in the queue disc above the device
        p2p.SetQueue("ns3::DropTailQueue", "MaxSize", ns.StringValue("1p"))
        return p2p.Install(a, b)

    def install_queue_disc(self, link, capacity):
        tch = ns.TrafficControlHelper()
        tch.SetRootQueueDisc("ns3::PfifoFastQueueDisc", "MaxSize", ns.StringValue("%dp" %(capacity)))
        tch.Install(link)

    def install_stack(self, node, protocol=None):
        self.internet.Install(node)
        if protocol is None:
            return
        if protocol not in socket_types:
            raise ValueError("no ns-3 socket type for protocol %r" %(protocol))
        tid = ns.TypeId.LookupByName(socket_types[protocol])
        path = "/NodeList/%d/$ns3::TcpL4Protocol/SocketType" %(node.GetId())
        ns.Config.Set(path, ns.TypeIdValue(tid))

    def assign_addresses(self, link, network):
        ipv4 = ns.Ipv4AddressHelper()
        ipv4.SetBase(ns.Ipv4Address(str(network.network_address)), ns.Ipv4Mask(str(network.netmask)))
        interfaces = ipv4.Assign(link)
        self.interfaces.append(interfaces)
        return interfaces.GetAddress(0), interfaces.GetAddress(1)

    def populate_routes(self):
        ns.Ipv4GlobalRoutingHelper.PopulateRoutingTables()

    def bulk_send(self, node, address, port, send_size, start, stop):
        remote = ns.InetSocketAddress(address, port).ConvertTo()
        source = ns.BulkSendHelper("ns3::TcpSocketFactory", remote)
        # 0 for unlimited
        source.SetAttribute("MaxBytes", ns.UintegerValue(0))
        source.SetAttribute("SendSize", ns.UintegerValue(send_size))
        apps = source.Install(node)
        apps.Start(ns.Seconds(start))
        apps.Stop(ns.Seconds(stop))
        self.apps.append(apps)

    def packet_sink(self, node, port, start, stop):
        local = ns.InetSocketAddress(ns.Ipv4Address.GetAny(), port).ConvertTo()
        sink = ns.PacketSinkHelper("ns3::TcpSocketFactory", local)
        apps = sink.Install(node)
        apps.Start(ns.Seconds(start))
        apps.Stop(ns.Seconds(stop))
        self.apps.append(apps)
        return ns.DynamicCast[ns.PacketSink](apps.Get(0))

    def total_rx(self, sink):
        return sink.GetTotalRx()

    def run(self, stop):
        ns.Simulator.Stop(ns.Seconds(stop))
        ns.Simulator.Run()

    def destroy(self):
        ns.Simulator.Destroy()
