import argparse
import logging
import os
import random
import sys
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from src.topology import DEFAULT_SPARSENESS, check_feasible, load_topology, save_topology
from src.network import build_network, network_from_graph
from src.simulation import DeadEndError, simulate
from src.export import DotExporter, PngExporter, export_graph
from src.metrics import MetricsRecord, append_metrics
from src.experiment import TRIALS, run_grid

# Directory to save all generated plots
PLOT_DIR = Path("data/plots")

DEFAULT_NETWORK_SIZE = 20
DEFAULT_PACKETS = 3
RANDOMNESS_VALUES = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]  # swept by --sweep


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Random routing versus a surveillance node on the shortest path"
    )
    parser.add_argument("network_size", type=int, nargs="?", default=DEFAULT_NETWORK_SIZE, help="Number of nodes")
    parser.add_argument("packets", type=int, nargs="?", default=DEFAULT_PACKETS, help="Packets sent from Start")
    parser.add_argument("randomness", type=float, nargs="?", default=0.0,
                        help="Probability a node forwards a packet to a random neighbour")
    parser.add_argument("--graph", action="store_true", help="Write graph.dot for Graphviz")
    parser.add_argument("--png", action="store_true", help="Render graph.png with matplotlib")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: process id)")
    parser.add_argument("--sparseness", type=float, default=DEFAULT_SPARSENESS,
                        help="Lower = more connected network, higher = longer optimal paths")
    parser.add_argument("--csv", default="data.csv", help="Metrics file, one row appended per run")
    parser.add_argument("--no-csv", dest="csv", action="store_const", const=None, help="Do not append metrics")
    parser.add_argument("--topology", help="Replay a saved topology instead of generating one")
    parser.add_argument("--save-topology", help="Save the generated topology as an edge list")
    parser.add_argument("--sweep", action="store_true", help="Sweep randomness probabilities and plot the results")
    parser.add_argument("--trials", type=int, default=TRIALS, help="Trials per randomness value with --sweep")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


# Shows how routing randomness trades security against delivery time
def plot_security_vs_randomness(results, prefix):
    probs = sorted(results)
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(probs, [results[r].security for r in probs], "o-", color="tab:green")
    ax.set_xlabel("Randomness probability"); ax.set_ylabel("Mean security (%)")
    ax.set_ylim(-5, 105); ax.grid(True, linestyle="--", alpha=0.4)
    ax.set_title(f"{prefix}: Security vs randomness")
    plt.tight_layout(); plt.savefig(PLOT_DIR / f"{prefix}_security_vs_randomness.png", dpi=200); plt.close(fig)


def plot_ticks_vs_randomness(results, prefix):
    # Ticks grow quickly as packets wander, compare against the optimal path length
    probs = sorted(results)
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(probs, [results[r].ticks for r in probs], "o-", color="tab:blue", label="Ticks to deliver all packets")
    ax.plot(probs, [results[r].path_length for r in probs], "s--", color="tab:orange", label="Optimal path length")
    ax.set_xlabel("Randomness probability"); ax.set_ylabel("Ticks")
    ax.set_yscale("log"); ax.grid(True, linestyle="--", alpha=0.4); ax.legend()
    ax.set_title(f"{prefix}: Delivery time vs randomness")
    plt.tight_layout(); plt.savefig(PLOT_DIR / f"{prefix}_ticks_vs_randomness.png", dpi=200); plt.close(fig)


def sweep(args) -> int:
    PLOT_DIR.mkdir(parents=True, exist_ok=True)
    print(f"Sweeping {len(RANDOMNESS_VALUES)} randomness values, {args.trials} trials each...")
    results = run_grid(args.network_size, args.packets, RANDOMNESS_VALUES,
                       trials=args.trials, seed=args.seed, sparseness=args.sparseness)
    prefix = f"n{args.network_size}_p{args.packets}"
    plot_security_vs_randomness(results, prefix)
    plot_ticks_vs_randomness(results, prefix)

    # Print summary table for checking
    print(f"{'r':>5}  {'Security %':>10}  {'Ticks':>10}  {'Copied':>8}  {'Path len':>8}")
    for r in RANDOMNESS_VALUES:
        s = results[r]
        print(f"{r:>5.2f}  {s.security:>10.1f}  {s.ticks:>10.1f}  {s.intercepted:>8.2f}  {s.path_length:>8.2f}")
    print(f"\nDone! Plots saved to {PLOT_DIR}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.packets < 1:
        parser.error(f"packets must be at least 1, got {args.packets}")
    if not 0.0 <= args.randomness <= 1.0:
        parser.error(f"randomness must be within [0, 1], got {args.randomness}")
    if args.seed is None:
        args.seed = os.getpid()  # rerun with --seed to reproduce an odd result

    if args.sweep:
        try:
            check_feasible(args.network_size, args.sparseness)
        except ValueError as e:
            parser.error(str(e))
        return sweep(args)

    rng = random.Random(args.seed)
    try:
        if args.topology:
            net = network_from_graph(load_topology(args.topology), rng)
            args.network_size = net.graph.number_of_nodes()
        else:
            net = build_network(args.network_size, args.sparseness, rng)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    if args.save_topology:
        try:
            save_topology(net.graph, args.save_topology)
        except OSError as e:
            print(f"couldn't save topology: {e}", file=sys.stderr)

    try:
        result = simulate(net, args.packets, args.randomness, rng)
    except DeadEndError as e:
        print(f"Error, reached a sink node (no outlet): {e}", file=sys.stderr)
        return 1

    if args.csv:
        append_metrics(args.csv, MetricsRecord.from_result(args.network_size, args.randomness, result))

    print()
    print(f"took {result.ticks} ticks to send {result.packets} packets.")
    print(f"{result.intercepted} packets captured by insecure node meaning")
    print(f"{result.security:g}% security in a network with an optimal path of length {result.path_length}")
    print(f"(seed {args.seed})")

    if args.graph:
        export_graph(net, "graph.dot", DotExporter())
    if args.png:
        export_graph(net, "graph.png", PngExporter())
    return 0


if __name__ == "__main__":
    sys.exit(main())
