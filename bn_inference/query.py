"""
Queries, results and the common engine interface.

``classify_query`` checks a ``Query`` against a network and splits its
variables into target, evidence and hidden. ``BaseInference.answer`` runs that
check, tries the CPT short-circuit, and otherwise hands a fresh
``OperationCounter`` to the engine's ``_answer``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from bn_inference.exceptions import QueryError
from bn_inference.factor import OperationCounter
from bn_inference.network import NetworkGraph, Variable


def format_probability_query(variable, value, evidence=None):
    """Generate formatted query string like P(dysp=no | smoke=yes, asia=no)"""
    if evidence:
        evidence_str = ', '.join([f"{k}={v}" for k, v in evidence.items()])
        return f"P({variable}={value} | {evidence_str})"
    return f"P({variable}={value})"


@dataclass
class Query:
    # (variable, requested outcome)
    target: Tuple[str, str]
    # Observed evidence as mapping variable -> outcome
    evidence: Dict[str, str] = field(default_factory=dict)
    # "1" enumeration, "2" variable elimination
    algorithm: str = "2"

    @property
    def variable(self) -> str:
        return self.target[0]

    @property
    def outcome(self) -> str:
        return self.target[1]

    def __str__(self) -> str:
        return format_probability_query(self.variable, self.outcome, self.evidence)


@dataclass
class JointQuery:
    """P(A=a, B=b, ...) evaluated directly with the chain rule."""

    assignments: List[Tuple[str, str]]

    def __str__(self) -> str:
        return "P(" + ",".join(f"{v}={o}" for v, o in self.assignments) + ")"


@dataclass(frozen=True)
class QueryResult:
    probability: float
    additions: int
    multiplications: int

    def format(self, precision: int = 5) -> str:
        return f"{self.probability:.{precision}f},{self.additions},{self.multiplications}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class QueryClassification:
    variable: Variable
    outcome: str
    evidence: Dict[str, str]
    # Every network variable that is neither target nor evidence, in network order
    hidden: Tuple[str, ...]


def classify_query(query: Query, network: NetworkGraph) -> QueryClassification:
    """Validate ``query`` against ``network`` and split variables into target/evidence/hidden."""
    name, outcome = query.target
    if name not in network:
        raise QueryError(f"Query variable '{name}' not defined in network '{network.name}'")
    variable = network.get_variable(name)
    if outcome not in variable.outcomes:
        raise QueryError(
            f"Outcome '{outcome}' is not an outcome of '{name}'; expected one of {list(variable.outcomes)}"
        )

    evidence: Dict[str, str] = {}
    for ev_name, ev_value in query.evidence.items():
        if ev_name not in network:
            raise QueryError(f"Evidence variable '{ev_name}' not defined in network '{network.name}'")
        if ev_name == name:
            raise QueryError(f"Variable '{name}' cannot be both the query variable and evidence")
        ev_var = network.get_variable(ev_name)
        if ev_value not in ev_var.outcomes:
            raise QueryError(
                f"Evidence value '{ev_value}' is not an outcome of '{ev_name}'; expected one of {list(ev_var.outcomes)}"
            )
        evidence[ev_name] = ev_value

    hidden = tuple(v for v in network.variable_names if v != name and v not in evidence)
    return QueryClassification(variable, outcome, evidence, hidden)


def cpt_shortcut(classification: QueryClassification, network: NetworkGraph) -> Optional[float]:
    """Read P(query | evidence) straight from the query variable's CPT when that is exact.

    Applies when the evidence set equals the parent set and P(evidence) is known to be
    positive: either there is no evidence, or every evidence variable is a root whose
    prior for the observed value is non-zero.
    """
    definition = network.get_definition(classification.variable.name)
    evidence = classification.evidence
    if set(definition.parents) != set(evidence):
        return None
    for ev_name, ev_value in evidence.items():
        ev_def = network.get_definition(ev_name)
        if ev_def.parents:
            return None
        prior = ev_def.probability(ev_value, {})
        if not prior:
            return None
    return definition.probability(classification.outcome, evidence)


class BaseInference(ABC):
    """Common entry point of the exact inference strategies."""

    name = "base"

    def __init__(self, use_cpt_shortcut: bool = True, verbose: bool = False):
        self.use_cpt_shortcut = use_cpt_shortcut
        self.verbose = verbose

    def answer(self, query: Query, network: NetworkGraph) -> QueryResult:
        classification = classify_query(query, network)

        if self.use_cpt_shortcut:
            direct = cpt_shortcut(classification, network)
            if direct is not None:
                if self.verbose:
                    print(f"[{self.name}] {query}: evidence equals parents, read from CPT = {direct}")
                return QueryResult(direct, 0, 0)

        counter = OperationCounter()
        probability = self._answer(classification, network, counter)
        if self.verbose:
            print(
                f"[{self.name}] {query} = {probability:.5f} "
                f"(additions={counter.additions}, multiplications={counter.multiplications})"
            )
        return QueryResult(probability, counter.additions, counter.multiplications)

    @abstractmethod
    def _answer(
        self,
        classification: QueryClassification,
        network: NetworkGraph,
        counter: OperationCounter,
    ) -> float:
        raise NotImplementedError


__all__ = [
    "format_probability_query",
    "Query",
    "JointQuery",
    "QueryResult",
    "QueryClassification",
    "classify_query",
    "cpt_shortcut",
    "BaseInference",
]
