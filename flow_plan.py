import logging
from collections import namedtuple

import configs
from configs import ConfigurationError

log = logging.getLogger(__name__)

FlowSpec = namedtuple("FlowSpec", ["protocol", "rtt"])


def map_token(token, protocols=None):
    protocols = protocols or configs.protocols
    if token not in protocols:
        raise ConfigurationError("flows", "unknown protocol token %r (expected one of %s)"
                                 %(token, ", ".join(sorted(protocols))))
    return protocols[token]


def group_size(n_sender, n_rtts):
    """Number of consecutive flows sharing one RTT.

    Integer division, so when n_sender is not a multiple of n_rtts the
    trailing flows spill past the last group (see rtt_index). Never less
    than one.
    """
    return max(1, n_sender // n_rtts)


def rtt_index(i, n_sender, n_rtts):
    # flows that fall past the last group keep the last RTT
    return min(i // group_size(n_sender, n_rtts), n_rtts - 1)


def derive(flows, rtts, protocols=None):
    """Turn a flow pattern ("BCBC...") and an RTT list into FlowSpecs, one per flow."""
    if not flows:
        raise ConfigurationError("flows", "flow pattern is empty")
    if not rtts:
        raise ConfigurationError("rtts", "RTT set is empty")
    for rtt in rtts:
        if rtt <= 0:
            raise ConfigurationError("rtts", "RTT must be positive, got %r" %(rtt))

    n_sender = len(flows)
    if n_sender % len(rtts) != 0:
        log.warning("%d flows do not split evenly over %d RTTs, group size truncated to %d",
                    n_sender, len(rtts), group_size(n_sender, len(rtts)))

    specs = []
    for i, token in enumerate(flows):
        specs.append(FlowSpec(map_token(token, protocols), rtts[rtt_index(i, n_sender, len(rtts))]))
    return tuple(specs)
