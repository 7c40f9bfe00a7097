"""
Conversion between ``NetworkGraph`` and pgmpy's ``DiscreteBayesianNetwork``.

pgmpy stores a CPD as a ``(variable_card, prod(evidence_card))`` array whose
columns enumerate parent assignments with the first parent slowest, which is
the transpose of our flat ordering reshaped to ``(parent combos, card)``.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np
from pgmpy.factors.discrete import TabularCPD
from pgmpy.inference import VariableElimination
from pgmpy.models import DiscreteBayesianNetwork

from bn_inference.cpd_utils import flatten_cpt_entries
from bn_inference.network import NetworkGraph


def definition_to_cpd(network: NetworkGraph, name: str) -> TabularCPD:
    definition = network.get_definition(name)
    var = network.get_variable(name)
    parents = [network.get_variable(p) for p in definition.parents]

    flat = flatten_cpt_entries(definition, network)
    n_parent_combos = int(np.prod([p.cardinality for p in parents])) if parents else 1
    values = np.array(flat, dtype=float).reshape(n_parent_combos, var.cardinality).T

    state_names = {name: list(var.outcomes)}
    for p in parents:
        state_names[p.name] = list(p.outcomes)

    return TabularCPD(
        variable=name,
        variable_card=var.cardinality,
        values=values,
        evidence=[p.name for p in parents] or None,
        evidence_card=[p.cardinality for p in parents] or None,
        state_names=state_names,
    )


def to_pgmpy(network: NetworkGraph) -> DiscreteBayesianNetwork:
    model = DiscreteBayesianNetwork()
    # Isolated nodes are not created by add_edges_from
    model.add_nodes_from(network.variable_names)
    model.add_edges_from(network.to_nx_dag().edges())
    model.add_cpds(*[definition_to_cpd(network, name) for name in network.variable_names])
    model.check_model()
    return model


def from_pgmpy(model: DiscreteBayesianNetwork, name: str = "pgmpy_model") -> NetworkGraph:
    variables = []
    tables = []
    for node in model.nodes():
        cpd = model.get_cpds(node)
        if cpd is None:
            raise ValueError(f"Node '{node}' has no CPD in the pgmpy model")
        parents = [str(p) for p in cpd.variables[1:]]
        flat = np.asarray(cpd.get_values()).T.flatten().tolist()
        variables.append((str(node), [str(s) for s in cpd.state_names[node]]))
        tables.append((str(node), parents, flat))
    return NetworkGraph.from_tables(name, variables, tables)


def pgmpy_query_probability(
    model: DiscreteBayesianNetwork,
    variable: str,
    value: str,
    evidence: Optional[Dict[str, str]] = None,
) -> float:
    """Exact P(variable=value | evidence) from pgmpy's VariableElimination."""
    infer = VariableElimination(model)
    result = infer.query(variables=[variable], evidence=evidence or None, show_progress=False)
    return float(result.values[result.state_names[variable].index(value)])


__all__ = ["definition_to_cpd", "to_pgmpy", "from_pgmpy", "pgmpy_query_probability"]
