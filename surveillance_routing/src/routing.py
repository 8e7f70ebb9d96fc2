from collections import deque
from dataclasses import dataclass
import networkx as nx
from src.topology import START, end_of


@dataclass(frozen=True)
class Routes:
    next_hops: dict[int, int]  # node -> neighbour one hop closer to End
    path: list[int]            # optimal path from Start to End, both excluded


def compute_next_hops(G: nx.Graph, end: int) -> dict[int, int]:
    """
    Breadth-first search seeded at End.

    When a node is dequeued, every neighbour that has no forwarding target yet
    gets the dequeued node as its target and joins the queue. Targets are
    first-writer-wins and never overwritten, and because BFS visits nodes in
    level order each target lies on a shortest path toward End.

    End is the root and gets no target. Nodes outside End's component get none either.
    """
    next_hops: dict[int, int] = {}
    visited: set[int] = set()
    q = deque([end])
    while q:
        n = q.popleft()
        if n in visited:
            continue
        for nb in G[n]:
            if nb != end and nb not in next_hops:
                next_hops[nb] = n
                q.append(nb)
        visited.add(n)
    return next_hops


def optimal_path(G: nx.Graph, next_hops: dict[int, int], start: int, end: int) -> list[int]:
    # Walk the forwarding targets from Start's only neighbour until End
    # Returned list holds interior routers only, Start and End are excluded
    path, cur = [], next(iter(G[start]))
    while cur != end:
        path.append(cur)
        cur = next_hops[cur]
    return path


def path_length(path: list[int]) -> int:
    # Hops from Start to End for an interior-only path
    return len(path) + 1


def compute_routes(G: nx.Graph) -> Routes:
    end = end_of(G)
    next_hops = compute_next_hops(G, end)
    return Routes(next_hops=next_hops, path=optimal_path(G, next_hops, START, end))
