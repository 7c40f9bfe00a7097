from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from bn_inference.network import NetworkGraph
from bn_inference.query import Query


def _shortest_undirected_distance(UG: nx.Graph, a: str, b: str) -> int:
    try:
        return nx.shortest_path_length(UG, a, b)
    except nx.NetworkXNoPath:
        return 10**9


def _choose_state(rng: np.random.Generator, network: NetworkGraph, node: str) -> str:
    outcomes = network.get_variable(node).outcomes
    return str(outcomes[int(rng.integers(len(outcomes)))])


def generate_queries(
    network: NetworkGraph,
    *,
    num_queries: int = 20,
    evidence_counts: Sequence[int] = (0, 1, 2, 3),
    # Distance buckets in the undirected graph between target and evidence nodes
    distance_buckets: Sequence[Tuple[int, int]] = ((0, 1), (2, 3), (4, 99)),
    algorithm: str = "2",
    seed: Optional[int] = None,
) -> List[Query]:
    """Generate single-target queries with varying evidence size and target/evidence distance.

    Evidence nodes are drawn near the target when a node at the bucket's distance exists,
    otherwise uniformly from the remaining nodes.
    """
    rng = np.random.default_rng(seed)
    UG = network.to_nx_dag().to_undirected()
    nodes = network.variable_names
    bucket_cycle = list(distance_buckets) or [(0, 99)]

    results: List[Query] = []
    for i in range(num_queries):
        ek = min(int(rng.choice(evidence_counts)), len(nodes) - 1)
        dmin, dmax = bucket_cycle[i % len(bucket_cycle)]

        target = nodes[int(rng.integers(len(nodes)))]
        pool = [n for n in nodes if n != target]
        near = [n for n in pool if dmin <= _shortest_undirected_distance(UG, target, n) <= dmax]

        e_nodes: List[str] = []
        for candidates in (near, pool):
            candidates = [n for n in candidates if n not in e_nodes]
            take = min(ek - len(e_nodes), len(candidates))
            if take > 0:
                e_nodes.extend(str(n) for n in rng.choice(candidates, size=take, replace=False))

        evidence: Dict[str, str] = {n: _choose_state(rng, network, n) for n in e_nodes}
        results.append(Query((target, _choose_state(rng, network, target)), evidence, algorithm))

    return results


__all__ = ["generate_queries"]
