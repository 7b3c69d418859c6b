from configs import ConfigurationError


def bdp_bytes(bandwidth, rtt):
    """Bandwidth-delay product in bytes for a bandwidth in Mbps and an RTT in ms."""
    return bandwidth * rtt * 1000 / 8


def compute_capacity_packets(bdp, bandwidth, rtts, packet_size):
    """Bottleneck queue size in packets.

    The queue holds `bdp` times the bandwidth-delay product of the slowest
    (largest RTT) flow, for every flow. One value for the single shared
    bottleneck queue.
    """
    if bandwidth <= 0:
        raise ConfigurationError("bandwidth", "must be positive, got %r" %(bandwidth))
    if packet_size <= 0:
        raise ConfigurationError("packet_size", "must be positive, got %r" %(packet_size))
    if not rtts:
        raise ConfigurationError("rtts", "RTT set is empty")
    if bdp < 0:
        raise ConfigurationError("bdp", "must not be negative, got %r" %(bdp))

    queue_size_bytes = bdp * bdp_bytes(bandwidth, max(rtts))
    return int(queue_size_bytes // packet_size)
