import random
from dataclasses import dataclass
from src.topology import DEFAULT_SPARSENESS
from src.network import build_network
from src.simulation import SimulationResult, simulate

TRIALS = 30  # independent networks per randomness value


def run_trial(
    size: int,
    packets: int,
    randomness: float,
    seed: int,
    sparseness: float = DEFAULT_SPARSENESS,
) -> SimulationResult:
    """
    One simulation trial on a freshly generated network.

    A single Random seeded once drives topology generation, surveillance
    placement and packet forwarding, so the same seed reproduces the trial.
    """
    rng = random.Random(seed)
    net = build_network(size, sparseness, rng)
    return simulate(net, packets, randomness, rng)


@dataclass
class Stats:
    security: float      # mean security (%)
    ticks: float         # mean ticks for all packets to reach End
    intercepted: float   # mean packets copied by the surveillance node
    path_length: float   # mean optimal path length


def summarize(results: list[SimulationResult]) -> Stats:
    n = len(results)
    return Stats(
        security    = sum(r.security for r in results) / n,
        ticks       = sum(r.ticks for r in results) / n,
        intercepted = sum(r.intercepted for r in results) / n,
        path_length = sum(r.path_length for r in results) / n,
    )


def run_grid(
    size: int,
    packets: int,
    randomness_values: list[float],
    trials: int = TRIALS,
    seed: int = 0,
    sparseness: float = DEFAULT_SPARSENESS,
) -> dict[float, Stats]:
    """Run trials for every randomness probability. Returns dict keyed by probability."""
    if trials < 1:
        raise ValueError(f"Need at least one trial, got {trials}")
    rng = random.Random(seed)
    results: dict[float, Stats] = {}

    for r in randomness_values:
        runs = []
        for _ in range(trials):
            s = rng.randint(0, 10**9)
            runs.append(run_trial(size, packets, r, seed=s, sparseness=sparseness))
        results[r] = summarize(runs)

    return results
