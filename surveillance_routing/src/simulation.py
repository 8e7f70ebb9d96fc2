import logging
import random
from dataclasses import dataclass
from src.network import Network

PACKET_CAPACITY = 1  # packets each node can forward per tick

logger = logging.getLogger("Simulator")

'''
Packet tokens:
- Each packet is a single signed int, owned by the queue currently holding it
    magnitude = processing steps completed, also the tick it is next due
    sign      = capture status (>= 0 never seen by surveillance, < 0 copied)

Per tick, at every node except End:
    for each token w with |w| == tick:
        advance w one step (keeping its sign)
        if the node still has capacity:
            if node is the surveillance node and w >= 0:
                count an interception, w = -w
            with probability r: move w to a random neighbour
            otherwise:          move w to the node's forwarding target
        else:
            w stays queued and is due again next tick
'''


class DeadEndError(RuntimeError):
    """A node holding a due packet has nowhere to send it."""


def advance(token: int) -> int:
    # One step further away from zero, in the direction of the token's sign
    if token == 0:
        return 1
    return token + (1 if token > 0 else -1)


def is_captured(token: int) -> bool:
    return token < 0


@dataclass(frozen=True)
class SimulationResult:
    ticks: int
    packets: int
    intercepted: int
    path_length: int

    @property
    def security(self) -> float:
        # Share of packets (in %) that reached End without being copied
        return (self.packets - self.intercepted) * 100.0 / self.packets


class PacketSimulator:
    def __init__(self, network: Network, packets: int, randomness: float, rng: random.Random | None = None):
        if packets < 1:
            raise ValueError(f"Need at least one packet, got {packets}")
        if not 0.0 <= randomness <= 1.0:
            raise ValueError(f"Randomness probability must be within [0, 1], got {randomness}")
        self.network = network
        self.packets = packets
        self.randomness = randomness
        self.rng = rng or random.Random()

        self.tick = 0
        self.intercepted = 0
        self.queues: dict[int, list[int]] = {n: [] for n in network.graph.nodes}
        # Every packet starts at Start, unprocessed and uncaptured
        self.queues[network.start].extend([0] * packets)
        # Fixed sweep order: highest id first, End never forwards
        self.order = [n for n in sorted(network.graph.nodes, reverse=True) if n != network.end]

    @property
    def delivered(self) -> int:
        return len(self.queues[self.network.end])

    @property
    def finished(self) -> bool:
        return self.delivered == self.packets

    def _next_hop(self, node: int, neighbours: list[int]) -> int:
        if self.rng.random() < self.randomness:
            return neighbours[self.rng.randrange(len(neighbours))]
        return self.network.next_hops[node]

    def _process_node(self, node: int) -> None:
        queue = self.queues[node]
        neighbours = list(self.network.graph[node])
        forwarded = 0
        kept: list[int] = []

        for token in queue:
            if abs(token) != self.tick:
                kept.append(token)
                continue
            token = advance(token)
            if forwarded >= PACKET_CAPACITY:
                # Over capacity: the packet ages in place and retries later
                kept.append(token)
                continue
            if not neighbours:
                raise DeadEndError(f"Node {node} holds a packet at tick {self.tick} but has no links")
            forwarded += 1
            if node == self.network.surveillance and not is_captured(token):
                self.intercepted += 1
                token = -token
            self.queues[self._next_hop(node, neighbours)].append(token)

        queue[:] = kept

    def step(self) -> None:
        # One synchronous sweep over every forwarding node, then the clock advances
        for node in self.order:
            if self.queues[node]:
                self._process_node(node)
        self.tick += 1

    def run(self) -> SimulationResult:
        # Always runs at least one tick, then stops once End holds every packet
        self.step()
        while not self.finished:
            self.step()
        logger.info(
            f"{self.packets} packet(s) delivered in {self.tick} ticks, "
            f"{self.intercepted} intercepted at node {self.network.surveillance}"
        )
        return self.result()

    def result(self) -> SimulationResult:
        return SimulationResult(
            ticks=self.tick,
            packets=self.packets,
            intercepted=self.intercepted,
            path_length=self.network.path_length,
        )


def simulate(network: Network, packets: int, randomness: float, rng: random.Random | None = None) -> SimulationResult:
    return PacketSimulator(network, packets, randomness, rng).run()
