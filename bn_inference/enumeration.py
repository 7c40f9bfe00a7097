"""
Inference by enumeration (algorithm "1").

P(Q=q | e) = sum_h P(q, e, h) / sum_q' sum_h P(q', e, h), where every joint is
the chain-rule product over all network variables.
"""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

from bn_inference.exceptions import QueryError
from bn_inference.factor import OperationCounter
from bn_inference.network import NetworkGraph
from bn_inference.query import BaseInference, JointQuery, QueryResult


def chain_rule_product(
    network: NetworkGraph, assignment: Mapping[str, str], counter: OperationCounter
) -> float:
    """Joint probability of a full assignment; costs N - 1 multiplications."""
    if len(network) > 1:
        counter.multiply(len(network) - 1)
    joint = 1.0
    for definition in network.definitions:
        prob = definition.probability(assignment[definition.name], assignment)
        if not prob:
            return 0.0
        joint *= prob
    return joint


class EnumerationEngine(BaseInference):
    name = "enumeration"

    def _sum_hidden(
        self,
        network: NetworkGraph,
        hidden: Sequence[str],
        assignment: Dict[str, str],
        counter: OperationCounter,
    ) -> float:
        if not hidden:
            return chain_rule_product(network, assignment, counter)

        name, rest = hidden[0], hidden[1:]
        total = 0.0
        for i, outcome in enumerate(network.get_variable(name).outcomes):
            total += self._sum_hidden(network, rest, {**assignment, name: outcome}, counter)
            if i > 0:
                counter.add()
        return total

    def _answer(self, classification, network, counter):
        query_name = classification.variable.name
        hidden = list(classification.hidden)
        evidence = classification.evidence

        if not evidence:
            # The requested sum already is the marginal.
            return self._sum_hidden(
                network, hidden, {query_name: classification.outcome}, counter
            )

        sums: Dict[str, float] = {}
        for outcome in classification.variable.outcomes:
            sums[outcome] = self._sum_hidden(network, hidden, {**evidence, query_name: outcome}, counter)

        total = 0.0
        for i, value in enumerate(sums.values()):
            total += value
            if i > 0:
                counter.add()

        if self.verbose:
            print(f"Unnormalised sums for {query_name}: {sums}")
        if total == 0.0:
            return 0.0
        return sums[classification.outcome] / total


def joint_probability(query: JointQuery, network: NetworkGraph) -> QueryResult:
    """Chain-rule product over the listed variables; n - 1 multiplications, no additions.

    Every parent of a listed variable must be listed too.
    """
    assignment: Dict[str, str] = {}
    for name, outcome in query.assignments:
        if name not in network:
            raise QueryError(f"Variable '{name}' not defined in network '{network.name}'")
        if name in assignment:
            raise QueryError(f"Variable '{name}' assigned twice in {query}")
        if outcome not in network.get_variable(name).outcomes:
            raise QueryError(
                f"Outcome '{outcome}' is not an outcome of '{name}'; "
                f"expected one of {list(network.get_variable(name).outcomes)}"
            )
        assignment[name] = outcome

    probability = 1.0
    for name, outcome in assignment.items():
        definition = network.get_definition(name)
        missing = [p for p in definition.parents if p not in assignment]
        if missing:
            raise QueryError(f"Joint query {query} does not assign parents {missing} of '{name}'")
        probability *= definition.probability(outcome, assignment)

    return QueryResult(probability, 0, max(len(assignment) - 1, 0))


__all__ = ["chain_rule_product", "EnumerationEngine", "joint_probability"]
