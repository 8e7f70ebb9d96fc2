import random
import networkx as nx
import pytest
from src.network import Network, build_network
from src.simulation import (
    DeadEndError, PacketSimulator, SimulationResult, advance, is_captured, simulate,
)
from src.experiment import run_trial

MAX_TEST_TICKS = 200_000  # harness cap for random walks, never used by the simulator itself


def test_advance_keeps_sign():
    assert advance(0) == 1
    assert advance(4) == 5
    assert advance(-4) == -5
    assert not is_captured(0)
    assert is_captured(-1)


def test_security_percentage():
    assert SimulationResult(ticks=9, packets=4, intercepted=1, path_length=5).security == 75.0
    assert SimulationResult(ticks=9, packets=4, intercepted=4, path_length=5).security == 0.0


def test_packets_start_at_start(net, rng):
    sim = PacketSimulator(net, packets=4, randomness=0.0, rng=rng)
    assert sim.queues[0] == [0, 0, 0, 0]
    assert sim.tick == 0 and sim.intercepted == 0
    assert not sim.finished


@pytest.mark.parametrize("packets, randomness", [(0, 0.0), (1, -0.1), (1, 1.5)])
def test_rejects_bad_parameters(net, packets, randomness):
    with pytest.raises(ValueError):
        PacketSimulator(net, packets, randomness)


def test_single_packet_follows_optimal_path(net, rng):
    # Without randomness one packet moves one hop per tick and is always copied
    result = simulate(net, packets=1, randomness=0.0, rng=rng)
    assert result.ticks == net.path_length == 5
    assert result.intercepted == 1
    assert result.security == 0.0


def test_single_packet_trace(net, rng):
    sim = PacketSimulator(net, packets=1, randomness=0.0, rng=rng)
    seen = []
    while not sim.finished:
        sim.step()
        seen.append({n: list(q) for n, q in sim.queues.items() if q})
    assert seen == [
        {1: [1]},
        {2: [2]},
        {3: [-3]},   # copied by the surveillance node
        {5: [-4]},
        {6: [-5]},
    ]


def test_one_packet_per_node_per_tick(net, rng):
    sim = PacketSimulator(net, packets=3, randomness=0.0, rng=rng)
    sim.step()
    # One packet left Start, the other two aged in place
    assert sim.queues[1] == [1]
    assert sim.queues[0] == [1, 1]
    result = sim.run()
    # Packets leave Start one tick apart and pipeline along the path
    assert result.ticks == net.path_length + 3 - 1
    assert result.intercepted == 3


def test_captured_packet_is_not_counted_twice(net, rng):
    sim = PacketSimulator(net, packets=1, randomness=0.0, rng=rng)
    sim.queues[0].clear()
    sim.tick = 4
    sim.queues[3].append(-4)
    sim.step()
    assert sim.intercepted == 0
    assert sim.queues[5] == [-5]


def test_packets_not_due_are_untouched(net, rng):
    sim = PacketSimulator(net, packets=1, randomness=0.0, rng=rng)
    sim.queues[2].extend([7, -9])
    sim.step()
    assert sim.queues[2] == [7, -9]


def test_dead_end_is_fatal(rng):
    G = nx.Graph()
    G.add_nodes_from(range(3))
    dead = Network(graph=G, start=0, end=2, next_hops={}, path=[], surveillance=1)
    sim = PacketSimulator(dead, packets=1, randomness=0.0, rng=rng)
    with pytest.raises(DeadEndError):
        sim.step()


def test_end_never_forwards(net, rng):
    sim = PacketSimulator(net, packets=1, randomness=1.0, rng=rng)
    assert net.end not in sim.order
    assert sim.order == sorted(sim.order, reverse=True)


@pytest.mark.parametrize("seed", range(5))
def test_interceptions_stay_in_bounds(seed):
    rng = random.Random(seed)
    net = build_network(15, 3, rng)
    result = simulate(net, packets=6, randomness=0.4, rng=rng)
    assert 0 <= result.intercepted <= 6
    assert 0.0 <= result.security <= 100.0
    assert result.ticks >= net.path_length


def test_same_seed_same_run():
    a = run_trial(15, 5, 0.0, seed=2024, sparseness=3)
    b = run_trial(15, 5, 0.0, seed=2024, sparseness=3)
    assert (a.ticks, a.intercepted) == (b.ticks, b.intercepted)
    assert a.intercepted == 5


def test_same_seed_same_run_with_randomness():
    a = run_trial(15, 5, 0.5, seed=7, sparseness=3)
    b = run_trial(15, 5, 0.5, seed=7, sparseness=3)
    assert a == b


@pytest.mark.parametrize("seed", range(3))
def test_fully_random_walk_still_arrives(seed):
    rng = random.Random(seed)
    net = build_network(12, 3, rng)
    sim = PacketSimulator(net, packets=3, randomness=1.0, rng=rng)
    while not sim.finished and sim.tick < MAX_TEST_TICKS:
        sim.step()
    assert sim.finished
    assert sim.delivered == 3
