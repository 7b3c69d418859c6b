# exp logistics config

# flow pattern, one token per flow
flows = "BCBCBC"
protocols = {"B": "bbr", "C": "cubic"}

# round trip times in ms, flows are split into len(rtts) equal groups
rtts = [20, 50, 80]

# bottleneck
bdp = 2 # queue size as a multiple of the max RTT's BDP
bandwidth = 20 # Mbps
bottleneck_delay = 1 # ms

# access links (sender -> left router, right router -> receiver)
access_bandwidth = "1000Mbps"

mtu = 2000 # bytes
packet_size = 1000 # bytes, also the TCP segment size and bulk send size
port = 911

start_time = 0.0 # seconds
stop_time = 120.0 # seconds

# simulator backend: ns3 or fluid
engine = "ns3"

# sweeps (run_all.py)
sweep_flows = ["BC", "BBBCCC", "BCBCBC"]
sweep_bdps = [0.5, 1, 2, 4]

# logs directory
results_dir = "results"


class ConfigurationError(ValueError):
    def __init__(self, parameter, message):
        ValueError.__init__(self, "%s: %s" %(parameter, message))
        self.parameter = parameter
