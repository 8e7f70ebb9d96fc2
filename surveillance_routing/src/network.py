import logging
import random
from dataclasses import dataclass
import networkx as nx
from src.topology import (
    START, DEFAULT_SPARSENESS,
    end_of, check_feasible, generate_topology, validate_topology,
)
from src.routing import compute_routes, path_length
from src.surveillance import PathTooShortError, choose_surveillance_node

logger = logging.getLogger("Network")


@dataclass(frozen=True)
class Network:
    graph: nx.Graph
    start: int
    end: int
    next_hops: dict[int, int]
    path: list[int]     # optimal path, Start and End excluded
    surveillance: int   # interior router copying every packet it forwards

    @property
    def path_length(self) -> int:
        return path_length(self.path)


def network_from_graph(G: nx.Graph, rng: random.Random) -> Network:
    # Routes and surveillance placement for an already accepted topology
    # Raises PathTooShortError when the optimal path is too short
    validate_topology(G)
    routes = compute_routes(G)
    bad = choose_surveillance_node(routes.path, rng)
    return Network(
        graph=G,
        start=START,
        end=end_of(G),
        next_hops=routes.next_hops,
        path=routes.path,
        surveillance=bad,
    )


def build_network(
    size: int,
    sparseness: float = DEFAULT_SPARSENESS,
    rng: random.Random | None = None,
) -> Network:
    """
    Generate topologies until one has a long enough optimal path.

    generate_topology already guarantees the structural invariants; a topology
    whose optimal path cannot host a surveillance node is discarded whole and
    a new one generated from scratch.
    """
    check_feasible(size, sparseness)
    rng = rng or random.Random()
    while True:
        G = generate_topology(size, sparseness, rng)
        try:
            net = network_from_graph(G, rng)
        except PathTooShortError as e:
            logger.debug(f"{e}, regenerating")
            continue
        logger.info(
            f"Network ready: {size} nodes, {G.number_of_edges()} edges, "
            f"optimal path {[net.start] + net.path + [net.end]}, surveillance node {net.surveillance}"
        )
        return net
