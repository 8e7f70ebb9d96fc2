import logging
import random
import networkx as nx

START = 0  # Node 0 is always the packet source
DEFAULT_SPARSENESS = 6  # Lower = more edges (short optimal paths), higher = fewer edges (long paths)
MIN_NETWORK_SIZE = 5  # Start, End and at least 3 interior hops on the optimal path

logger = logging.getLogger("Topology")


def end_of(G: nx.Graph) -> int:
    # End is always the last created node
    return G.number_of_nodes() - 1


def edge_budget(size: int, sparseness: float = DEFAULT_SPARSENESS) -> int:
    # Number of undirected edges wired before Start and End are pruned
    return int((size * size - size) // 2 / sparseness)


def check_feasible(size: int, sparseness: float = DEFAULT_SPARSENESS) -> None:
    # Reject parameters for which no attempt could ever be accepted,
    # otherwise the generation loop would never terminate
    if size < MIN_NETWORK_SIZE:
        raise ValueError(f"Network size must be at least {MIN_NETWORK_SIZE}, got {size}")
    if sparseness <= 0:
        raise ValueError(f"Sparseness must be positive, got {sparseness}")
    edges = edge_budget(size, sparseness)
    if edges < size - 1:
        raise ValueError(
            f"{edges} edges cannot connect {size} nodes; lower the sparseness ({sparseness})"
        )
    if edges >= size * (size - 1) // 2:
        raise ValueError(
            f"{edges} edges make the network complete, so no optimal path is long enough; "
            f"raise the sparseness ({sparseness})"
        )


def new_graph(size: int) -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(range(size))
    return G


def wire_random_edges(G: nx.Graph, count: int, rng: random.Random) -> None:
    # Keep sampling ordered pairs until `count` distinct edges exist
    # Self loops and already connected pairs are rejected and redrawn
    n = G.number_of_nodes()
    made = 0
    while made < count:
        u = rng.randrange(n)
        v = rng.randrange(n)
        if u == v or G.has_edge(u, v):
            continue
        G.add_edge(u, v)
        made += 1


def prune_to_single_edge(G: nx.Graph, node: int) -> None:
    # Keep only the first adjacency of node, neighbours forget node as well
    extra = list(G[node])[1:]
    G.remove_edges_from((node, other) for other in extra)


def can_reach(G: nx.Graph, source: int, target: int) -> bool:
    # Depth-first search with an explicit stack
    # A node already visited is never descended into again, so cycles are safe
    visited: set[int] = set()
    stack = [source]
    while stack:
        u = stack.pop()
        if u == target:
            return True
        if u in visited:
            continue
        visited.add(u)
        stack.extend(v for v in G[u] if v not in visited)
    return False


def isolated_nodes(G: nx.Graph) -> list[int]:
    return [n for n in G.nodes if G.degree(n) == 0]


def generate_topology(
    size: int,
    sparseness: float = DEFAULT_SPARSENESS,
    rng: random.Random | None = None,
) -> nx.Graph:
    """
    Build a random undirected network that satisfies every topology invariant.

    Each attempt starts from an empty graph:
      - wire edge_budget(size, sparseness) random edges
      - reject if any node has no adjacency
      - prune Start and End down to a single edge each
      - reject if pruning isolated a node or End is unreachable from Start

    Rejected attempts are thrown away whole; there is no retry limit.
    """
    check_feasible(size, sparseness)
    rng = rng or random.Random()
    end = size - 1
    edges = edge_budget(size, sparseness)

    attempt = 0
    while True:
        attempt += 1
        G = new_graph(size)
        wire_random_edges(G, edges, rng)

        lonely = isolated_nodes(G)
        if lonely:
            logger.debug(f"Attempt {attempt}: nodes without edges {lonely}, regenerating")
            continue

        prune_to_single_edge(G, START)
        prune_to_single_edge(G, end)

        lonely = isolated_nodes(G)
        if lonely:
            logger.debug(f"Attempt {attempt}: pruning isolated {lonely}, regenerating")
            continue

        if not can_reach(G, START, end):
            logger.debug(f"Attempt {attempt}: End {end} unreachable from Start, regenerating")
            continue

        logger.debug(f"Topology accepted after {attempt} attempt(s): {G.number_of_edges()} edges")
        return G


def validate_topology(G: nx.Graph) -> None:
    # Must follow all constraints before running a simulation
    if START not in G.nodes:
        raise ValueError("Start node 0 must exist")
    if G.number_of_nodes() < MIN_NETWORK_SIZE:
        raise ValueError(f"Need at least {MIN_NETWORK_SIZE} nodes, found {G.number_of_nodes()}")
    # Ids must be exactly 0..N-1 so End is the last node
    if set(G.nodes) != set(range(G.number_of_nodes())):
        raise ValueError("Node ids must be consecutive integers starting at 0")
    lonely = isolated_nodes(G)
    if lonely:
        raise ValueError(f"Every node needs at least one edge, isolated: {lonely}")
    end = end_of(G)
    for role, node in (("Start", START), ("End", end)):
        if G.degree(node) != 1:
            raise ValueError(f"{role} node {node} must have exactly one edge, has {G.degree(node)}")
    if not can_reach(G, START, end):
        raise ValueError(f"End node {end} is not reachable from Start")


def load_topology(path: str) -> nx.Graph:
    # Read topology file and build an undirected graph
    # Each line is "u v" meaning routers u and v are linked
    G = nx.Graph()
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            u, v = map(int, line.split())
            G.add_edge(u, v)
    if G.number_of_nodes():
        G.add_nodes_from(range(max(G.nodes) + 1))
    return G


def save_topology(G: nx.Graph, path: str) -> None:
    # Inverse of load_topology, one "u v" line per undirected edge
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"# {G.number_of_nodes()} nodes, {G.number_of_edges()} edges\n")
        for u, v in G.edges():
            f.write(f"{u} {v}\n")
