"""
Random discrete networks over a given DAG.

Each variable gets ``s0, s1, ...`` as outcomes, with a cardinality drawn from an
``ArityStrategy``. Every CPT column (one per parent assignment) is either a
Dirichlet(alpha) sample or, for a ``determinism_fraction`` of the columns, a
one-hot vector. Small alphas give skewed tables, large alphas near-uniform ones.

Example:
    >>> from bn_inference.graph_generation import generate_dag_with_treewidth
    >>> dag, _, _ = generate_dag_with_treewidth(6, 2, seed=7)
    >>> net, meta = generate_network_from_dag(dag, {"min": 2, "max": 3}, dirichlet_alpha=0.5, seed=7)
    >>> net.check_model()
    True

CLI:
    python -m bn_inference.bn_generation --n-nodes 8 --target-treewidth 2 --arity range:2-3
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np

from bn_inference.graph_generation import generate_dag_with_treewidth
from bn_inference.network import NetworkGraph
from bn_inference.xml_parser import write_network_xml


# ------------------------------
# Arity
# ------------------------------

@dataclass(frozen=True)
class ArityStrategy:
    """Cardinalities drawn uniformly from ``[low, high]``; ``low == high`` fixes them."""

    low: int = 2
    high: int = 2

    def __post_init__(self):
        if self.low < 2 or self.high < self.low:
            raise ValueError(f"Arity needs 2 <= low <= high, got low={self.low}, high={self.high}")

    @classmethod
    def fixed(cls, k: int) -> "ArityStrategy":
        return cls(k, k)

    @classmethod
    def from_config(cls, config: Mapping[str, int]) -> "ArityStrategy":
        """Accept ``{"fixed": k}`` or ``{"min": lo, "max": hi}``."""
        if "fixed" in config:
            return cls.fixed(int(config["fixed"]))
        if "min" in config and "max" in config:
            return cls(int(config["min"]), int(config["max"]))
        raise ValueError(f"Arity config needs 'fixed' or 'min'/'max' keys, got {dict(config)}")

    @classmethod
    def parse(cls, text: str) -> "ArityStrategy":
        """``fixed:3`` or ``range:2-4``."""
        kind, _, value = text.partition(":")
        try:
            if kind == "fixed":
                return cls.fixed(int(value))
            if kind == "range":
                lo, hi = value.split("-", 1)
                return cls(int(lo), int(hi))
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"Invalid arity '{text}': {e}") from None
        raise argparse.ArgumentTypeError(f"Arity must look like 'fixed:<k>' or 'range:<min>-<max>', got '{text}'")

    def draw(self, nodes: Sequence[str], rng: np.random.Generator) -> Dict[str, int]:
        if self.low == self.high:
            return {n: self.low for n in nodes}
        return {n: int(rng.integers(self.low, self.high + 1)) for n in nodes}

    def __str__(self) -> str:
        return f"fixed:{self.low}" if self.low == self.high else f"range:{self.low}-{self.high}"


# ------------------------------
# CPT sampling
# ------------------------------

def sample_cpt_columns(
    card: int,
    num_columns: int,
    dirichlet_alpha: float,
    determinism_fraction: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Array of shape ``(num_columns, card)``; every row is a distribution over the child."""
    columns = rng.dirichlet(np.full(card, dirichlet_alpha), size=num_columns)

    num_onehot = int(round(determinism_fraction * num_columns))
    if num_onehot > 0:
        picked = rng.choice(num_columns, size=num_onehot, replace=False)
        columns[picked] = 0.0
        columns[picked, rng.integers(0, card, size=num_onehot)] = 1.0
    return columns


def generate_network_from_dag(
    dag: nx.DiGraph,
    arity: Union[ArityStrategy, Mapping[str, int]] = ArityStrategy(2, 3),
    dirichlet_alpha: float = 1.0,
    determinism_fraction: float = 0.0,
    seed: Optional[int] = None,
    name: str = "generated",
) -> Tuple[NetworkGraph, Dict[str, Any]]:
    """Sample CPTs for every node of ``dag``.

    Variables are declared in topological order; parents keep the order in which
    ``dag.predecessors`` lists them. Returns the network and a metadata dict with
    the drawn cardinalities and the sampling parameters.
    """
    if not nx.is_directed_acyclic_graph(dag):
        raise ValueError(f"Cannot build network '{name}': graph is not a DAG")
    if not 0.0 <= determinism_fraction <= 1.0:
        raise ValueError(f"determinism_fraction must be in [0, 1], got {determinism_fraction}")

    strategy = arity if isinstance(arity, ArityStrategy) else ArityStrategy.from_config(arity)
    rng = np.random.default_rng(seed)

    order = [str(n) for n in nx.topological_sort(dag)]
    cards = strategy.draw(order, rng)

    tables: List[Tuple[str, List[str], List[float]]] = []
    for node in order:
        parents = [str(p) for p in dag.predecessors(node)]
        num_columns = int(np.prod([cards[p] for p in parents])) if parents else 1
        columns = sample_cpt_columns(cards[node], num_columns, dirichlet_alpha, determinism_fraction, rng)
        # Row-major flattening puts the child outcome fastest
        tables.append((node, parents, columns.ravel().tolist()))

    network = NetworkGraph.from_tables(
        name,
        [(node, [f"s{i}" for i in range(cards[node])]) for node in order],
        tables,
    )
    return network, {
        "cardinalities": cards,
        "arity": str(strategy),
        "dirichlet_alpha": dirichlet_alpha,
        "determinism_fraction": determinism_fraction,
        "seed": seed,
    }


def generate_variants_for_dag(
    dag: nx.DiGraph,
    variants: Sequence[Mapping[str, Any]],
    base_seed: int = 0,
    name_prefix: str = "variant",
) -> List[Tuple[NetworkGraph, Dict[str, Any]]]:
    """One network per keyword dict in ``variants``, all sharing ``dag``.

    Missing seeds default to ``base_seed + 9973 * index``.
    """
    networks = []
    for idx, kwargs in enumerate(variants):
        kwargs = {"seed": base_seed + 9973 * idx, "name": f"{name_prefix}_{idx}", **kwargs}
        net, meta = generate_network_from_dag(dag, **kwargs)
        networks.append((net, {**meta, "variant_index": idx}))
    return networks


# ------------------------------
# CLI
# ------------------------------

def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Write random discrete networks sharing one DAG as XML files")
    parser.add_argument("--n-nodes", type=int, default=8, help="Number of variables")
    parser.add_argument("--target-treewidth", type=int, default=2, help="Treewidth the DAG skeleton should reach")
    parser.add_argument("--variants", type=int, default=3, help="How many CPT samples to draw for the DAG")
    parser.add_argument("--arity", type=ArityStrategy.parse, default=ArityStrategy(2, 3), help="fixed:<k> or range:<min>-<max>")
    parser.add_argument("--alpha", type=float, default=1.0, help="Dirichlet concentration of each CPT column")
    parser.add_argument("--determinism", type=float, default=0.0, help="Fraction of one-hot CPT columns")
    parser.add_argument("--naming", type=str, default="simple", choices=["simple", "letters", "semantic"], help="Variable naming strategy")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output-dir", type=Path, default=Path("generated_networks"))

    args = parser.parse_args(argv)

    dag, achieved_tw, _ = generate_dag_with_treewidth(
        args.n_nodes, args.target_treewidth, node_naming=args.naming, seed=args.seed
    )
    variants = [
        {"arity": args.arity, "dirichlet_alpha": args.alpha, "determinism_fraction": args.determinism}
    ] * args.variants
    networks = generate_variants_for_dag(dag, variants, base_seed=args.seed)

    print(f"DAG: {dag.number_of_nodes()} nodes, {dag.number_of_edges()} edges, treewidth {achieved_tw}")
    for net, meta in networks:
        path = write_network_xml(net, args.output_dir / f"{net.name}.xml")
        print(f"  {net.name} (seed={meta['seed']}, arity={meta['arity']}) -> {path}")


if __name__ == "__main__":
    main()
