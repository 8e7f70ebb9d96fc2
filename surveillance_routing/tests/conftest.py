import random
import networkx as nx
import pytest
from src.network import Network
from src.routing import compute_routes

# Hand wired 7 node network
#
#   0 - 1 - 2 - 3 - 5 - 6
#        \     /
#          4
#
# Two optimal routes from 1 to 5 (via 2 or via 4); BFS from End settles on 1-2-3-5
HAND_EDGES = [(0, 1), (1, 2), (2, 3), (3, 5), (5, 6), (1, 4), (4, 3)]


def hand_graph() -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(range(7))
    G.add_edges_from(HAND_EDGES)
    return G


def hand_network(surveillance: int = 3) -> Network:
    G = hand_graph()
    routes = compute_routes(G)
    return Network(graph=G, start=0, end=6, next_hops=routes.next_hops,
                   path=routes.path, surveillance=surveillance)


@pytest.fixture
def net() -> Network:
    return hand_network()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
