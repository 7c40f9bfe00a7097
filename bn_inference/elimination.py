"""
Variable elimination (algorithm "2").

Only the query variable, the evidence and their ancestors take part. Factors
are restricted by the evidence, hidden variables are summed out one at a time
(joining the factors that mention them, two smallest first), the remainder is
joined and normalised, and the requested row is read off.
"""

from __future__ import annotations

from typing import List, Set, Union

from bn_inference.elimination_order import BaseEliminationOrder, get_elimination_order
from bn_inference.factor import Factor, OperationCounter, join_all, normalize, sum_out
from bn_inference.network import NetworkGraph
from bn_inference.query import BaseInference, QueryClassification


class EliminationEngine(BaseInference):
    name = "variable_elimination"

    def __init__(
        self,
        order: Union[str, BaseEliminationOrder] = "lexicographic",
        use_cpt_shortcut: bool = True,
        drop_evidence_only_factors: bool = True,
        verbose: bool = False,
    ):
        super().__init__(use_cpt_shortcut=use_cpt_shortcut, verbose=verbose)
        self.order = get_elimination_order(order) if isinstance(order, str) else order
        self.drop_evidence_only_factors = drop_evidence_only_factors

    def relevant_variables(self, classification: QueryClassification, network: NetworkGraph) -> Set[str]:
        relevant: Set[str] = set()
        for name in [classification.variable.name, *classification.evidence]:
            relevant |= network.ancestors(name)
        return relevant

    def _answer(self, classification, network, counter):
        query_name = classification.variable.name
        evidence = classification.evidence

        # Relevance pruning
        relevant = self.relevant_variables(classification, network)
        factors = [
            Factor.from_definition(d, network) for d in network.definitions if d.name in relevant
        ]
        if self.verbose:
            print(f"Relevant variables: {sorted(relevant)} ({len(factors)} factors)")

        # Evidence
        restricted: List[Factor] = []
        for factor in factors:
            for ev_name, ev_value in evidence.items():
                factor = factor.restrict(ev_name, ev_value)
                if factor.is_empty():
                    break
            if factor.is_empty():
                if self.verbose:
                    print(f"Factor over {list(factor.variable_names)} became empty after restriction")
                continue
            restricted.append(factor)

        if self.drop_evidence_only_factors:
            kept: List[Factor] = []
            for factor in restricted:
                if set(factor.variable_names) <= set(evidence):
                    if factor.total() == 0.0:
                        if self.verbose:
                            print(f"Evidence has zero mass in factor over {list(factor.variable_names)}")
                        return 0.0
                    if self.verbose:
                        print(f"Setting aside evidence-only factor over {list(factor.variable_names)}")
                    continue
                kept.append(factor)
            restricted = kept
        factors = restricted

        # Elimination loop
        hidden = [h for h in classification.hidden if h in relevant]
        order = self.order.get_elimination_order(hidden, factors, evidence)
        if self.verbose:
            print(f"Elimination order ({self.order.name}): {order}")

        for var in order:
            to_join = [f for f in factors if var in f]
            if not to_join:
                continue
            rest = [f for f in factors if var not in f]
            joined = join_all(to_join, counter, evidence)
            summed = sum_out(joined, var, counter)
            if self.verbose:
                print(f"Eliminated {var}: joined {len(to_join)} factor(s) into {joined!r} -> {summed!r}")
            factors = rest
            if not summed.is_empty():
                factors.append(summed)

        final = join_all(factors, counter, evidence)
        if final is None:
            return 0.0

        normalized = normalize(final, counter)
        if self.verbose:
            print(normalized.to_ascii_table())

        return normalized.value({query_name: classification.outcome, **evidence})


__all__ = ["EliminationEngine"]
