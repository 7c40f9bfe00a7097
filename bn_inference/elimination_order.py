"""
Elimination-order heuristics for variable elimination.

``LexicographicOrder`` is the default and reproduces the classical operation
counts. ``MinDegreeOrder`` and ``MinFillOrder`` greedily simulate elimination
on the interaction graph of the current factors (one node per non-evidence
variable, an edge between variables sharing a factor), adding fill-in edges
between the neighbours of each eliminated node.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Type

import networkx as nx

from bn_inference.factor import Factor


class BaseEliminationOrder(ABC):
    name = "base"

    @abstractmethod
    def get_elimination_order(
        self,
        variables: Iterable[str],
        factors: Sequence[Factor],
        evidence: Iterable[str] = (),
    ) -> List[str]:
        """Return ``variables`` in the order they should be summed out."""


class LexicographicOrder(BaseEliminationOrder):
    name = "lexicographic"

    def get_elimination_order(self, variables, factors, evidence=()):
        return sorted(variables)


def interaction_graph(factors: Sequence[Factor], evidence: Iterable[str] = ()) -> nx.Graph:
    observed = set(evidence)
    G = nx.Graph()
    for factor in factors:
        names = [n for n in factor.variable_names if n not in observed]
        G.add_nodes_from(names)
        G.add_edges_from(combinations(names, 2))
    return G


class _GreedyOrder(BaseEliminationOrder):
    """Pick the cheapest remaining variable, connect its neighbours, remove it."""

    @abstractmethod
    def cost(self, graph: nx.Graph, node: str) -> int:
        ...

    def get_elimination_order(self, variables, factors, evidence=()):
        graph = interaction_graph(factors, evidence)
        remaining = set(variables)
        graph.add_nodes_from(remaining)

        order: List[str] = []
        while remaining:
            node = min(remaining, key=lambda n: (self.cost(graph, n), n))
            nbrs = list(graph.neighbors(node))
            graph.add_edges_from(combinations(nbrs, 2))
            graph.remove_node(node)
            remaining.discard(node)
            order.append(node)
        return order


class MinDegreeOrder(_GreedyOrder):
    name = "min_degree"

    def cost(self, graph, node):
        return graph.degree(node)


class MinFillOrder(_GreedyOrder):
    name = "min_fill"

    def cost(self, graph, node):
        nbrs = list(graph.neighbors(node))
        return sum(1 for u, v in combinations(nbrs, 2) if not graph.has_edge(u, v))


ELIMINATION_ORDERS: Dict[str, Type[BaseEliminationOrder]] = {
    LexicographicOrder.name: LexicographicOrder,
    MinDegreeOrder.name: MinDegreeOrder,
    MinFillOrder.name: MinFillOrder,
}


def get_elimination_order(name: str) -> BaseEliminationOrder:
    try:
        return ELIMINATION_ORDERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown elimination order '{name}'. Choose one of {sorted(ELIMINATION_ORDERS)}"
        ) from None


__all__ = [
    "BaseEliminationOrder",
    "LexicographicOrder",
    "MinDegreeOrder",
    "MinFillOrder",
    "interaction_graph",
    "ELIMINATION_ORDERS",
    "get_elimination_order",
]
