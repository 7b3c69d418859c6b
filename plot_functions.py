import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from report import jains

sns.set_style("whitegrid")

SMALL_SIZE = 13
MEDIUM_SIZE = 16

plt.rc('font', size=SMALL_SIZE)          # controls default text sizes
plt.rc('axes', labelsize=MEDIUM_SIZE)    # fontsize of the x and y labels
plt.rc('legend', fontsize=SMALL_SIZE)    # legend fontsize

matplotlib.rcParams['pdf.fonttype'] = 42
matplotlib.rcParams['ps.fonttype'] = 42

labels = {"bbr": "BBR", "cubic": "Cubic"}


def fairness_by_bdp(df):
    """{flows: ([bdp, ...], [fairness, ...])} from a sweep summary."""
    ret = {}
    for flows, group in df.groupby("flows", sort=False):
        bdps = sorted(group["bdp"].unique())
        ret[flows] = (bdps, [jains(group[group["bdp"] == b]["throughput"]) for b in bdps])
    return ret


def plot_fairness(df, fname=""):
    plt.figure(figsize=(5,3))
    lines = ["--", "-", ":", "-."]
    i = 0
    for flows, (bdps, fairness) in fairness_by_bdp(df).items():
        plt.plot(bdps, fairness, lines[i % len(lines)], marker="o", label=flows)
        i+=1
    plt.ylabel("Fairness Index")
    plt.xlabel("Queue size (BDP)")
    plt.ylim(0, 1.05)
    plt.legend()
    if fname != "":
        plt.savefig(fname, bbox_inches="tight")
    plt.close()


def plot_throughput(df, fname=""):
    """Mean per-flow throughput of each protocol, one group of bars per BDP."""
    means = df.groupby(["bdp", "protocol"])["throughput"].mean().reset_index()
    means["protocol"] = [labels.get(p, p) for p in means["protocol"]]
    plt.figure(figsize=(6,3))
    sns.barplot(data=means, x="bdp", y="throughput", hue="protocol", palette="cubehelix")
    plt.ylabel("Throughput (Mbps)")
    plt.xlabel("Queue size (BDP)")
    if fname != "":
        plt.savefig(fname, bbox_inches="tight")
    plt.close()


def rtt_shares(df):
    """Fraction of the total throughput each RTT group got, per BDP."""
    totals = df.groupby("bdp")["throughput"].sum()
    shares = df.groupby(["bdp", "rtt"])["throughput"].sum().reset_index()
    shares["share"] = [t / totals[b] if totals[b] > 0 else 0.0
                       for b, t in zip(shares["bdp"], shares["throughput"])]
    return shares


def plot_rtt_share(df, bandwidth, fname=""):
    shares = rtt_shares(df)
    plt.figure(figsize=(6,3))
    rtts = sorted(shares["rtt"].unique())
    bdps = sorted(shares["bdp"].unique())
    bar_width = 0.8 / len(rtts)
    for i, rtt in enumerate(rtts):
        ys = [shares[(shares["bdp"] == b) & (shares["rtt"] == rtt)]["share"].sum() for b in bdps]
        x_pos = np.arange(len(bdps)) + (i - 0.5 * (len(rtts) - 1)) * bar_width
        plt.bar(x_pos, ys, width=bar_width, label="RTT = %d ms" %(rtt))
    plt.xticks(np.arange(len(bdps)), ["%g" %(b) for b in bdps])
    plt.ylabel("Share of %d Mbps" %(bandwidth))
    plt.xlabel("Queue size (BDP)")
    plt.legend(loc='upper left', bbox_to_anchor=(1, 1))
    if fname != "":
        plt.savefig(fname, bbox_inches="tight")
    plt.close()
