import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import networkx as nx
from src.network import Network

logger = logging.getLogger("Export")

ENDPOINT_COLOR = "green"
PATH_COLOR = "yellow"
SURVEILLANCE_COLOR = "red"
PLAIN_COLOR = "white"


def directed_edge_pairs(G: nx.Graph) -> list[tuple[int, int]]:
    # Every undirected link appears twice, once from each side
    return [(u, v) for u in G.nodes for v in G[u]]


@dataclass(frozen=True)
class Highlights:
    endpoints: tuple[int, int]   # Start and End, always highlighted
    path: tuple[int, ...]        # optimal path routers
    surveillance: int | None = None

    @classmethod
    def of(cls, network: Network) -> "Highlights":
        return cls(
            endpoints=(network.start, network.end),
            path=tuple(network.path),
            surveillance=network.surveillance,
        )

    def color_of(self, node: int) -> str | None:
        # Surveillance overrides the path highlight
        if node == self.surveillance:
            return SURVEILLANCE_COLOR
        if node in self.endpoints:
            return ENDPOINT_COLOR
        if node in self.path:
            return PATH_COLOR
        return None


class GraphExporter(ABC):
    @abstractmethod
    def export(self, network: Network, path: Path) -> None:
        """Write a rendering of the network to path. May raise OSError."""


class DotExporter(GraphExporter):
    """Graphviz description, render it with e.g. `dot -Tpng graph.dot > graph.png`."""

    def export(self, network: Network, path: Path) -> None:
        hl = Highlights.of(network)
        lines = ["digraph G {"]
        lines += [f"{u} -> {v};" for u, v in directed_edge_pairs(network.graph)]
        # Later statements win in Graphviz, surveillance goes last
        styled = [(n, ENDPOINT_COLOR) for n in hl.endpoints] + [(n, PATH_COLOR) for n in hl.path]
        if hl.surveillance is not None:
            styled.append((hl.surveillance, SURVEILLANCE_COLOR))
        for node, color in styled:
            lines.append(f"{node} [shape=circle, style=filled, fillcolor={color}];")
        lines.append("}")
        Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")


class PngExporter(GraphExporter):
    def __init__(self, seed: int = 42, dpi: int = 200):
        self.seed = seed  # layout seed only, independent from the simulation
        self.dpi = dpi

    def export(self, network: Network, path: Path) -> None:
        G = network.graph
        hl = Highlights.of(network)
        fig, ax = plt.subplots(figsize=(10, 8))
        try:
            pos = nx.spring_layout(G, seed=self.seed)
            colors = [hl.color_of(n) or PLAIN_COLOR for n in G.nodes]
            nx.draw_networkx_edges(G, pos, ax=ax, alpha=0.4, edge_color="gray")
            route = [network.start] + network.path + [network.end]
            nx.draw_networkx_edges(G, pos, ax=ax, edgelist=list(zip(route, route[1:])), width=2.5, edge_color="orange")
            nx.draw_networkx_nodes(G, pos, ax=ax, node_color=colors, edgecolors="black", node_size=450)
            nx.draw_networkx_labels(G, pos, ax=ax, font_size=9)
            ax.legend(handles=[
                mpatches.Patch(color=ENDPOINT_COLOR, label="Start / End"),
                mpatches.Patch(color=PATH_COLOR, label="Optimal path"),
                mpatches.Patch(color=SURVEILLANCE_COLOR, label="Surveillance node"),
            ], loc="best")
            ax.set_title(f"{G.number_of_nodes()} nodes, optimal path length {network.path_length}")
            ax.axis("off")
            plt.tight_layout()
            fig.savefig(path, dpi=self.dpi)
        finally:
            plt.close(fig)


def export_graph(network: Network, path: str | Path, exporter: GraphExporter) -> bool:
    # A failed export only loses this artifact, the simulation results stand
    try:
        exporter.export(network, Path(path))
    except OSError as e:
        logger.error(f"couldn't write graph file {path}: {e}")
        return False
    logger.info(f"Graph written to {path}")
    return True
