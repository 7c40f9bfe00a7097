"""
Inference functions for discrete Bayesian Networks.

This module maps the query algorithm selector to an inference engine and provides
small helpers to run a query and fetch a single probability.
"""

from __future__ import annotations

from typing import Dict, Optional, Type, Union

from bn_inference.elimination import EliminationEngine
from bn_inference.elimination_order import BaseEliminationOrder
from bn_inference.enumeration import EnumerationEngine, joint_probability
from bn_inference.exceptions import QueryError
from bn_inference.network import NetworkGraph
from bn_inference.query import BaseInference, JointQuery, Query, QueryResult

INFERENCE_OBJS: Dict[str, Type[BaseInference]] = {
    "1": EnumerationEngine,
    "2": EliminationEngine,
}


def choose_inference_obj(algorithm: str) -> Type[BaseInference]:
    try:
        return INFERENCE_OBJS[str(algorithm).strip()]
    except KeyError:
        raise QueryError(
            f"Unknown inference algorithm '{algorithm}'. Choose one of {sorted(INFERENCE_OBJS)}"
        ) from None


def make_engine(
    algorithm: str,
    order: Union[str, BaseEliminationOrder] = "lexicographic",
    use_cpt_shortcut: bool = True,
    verbose: bool = False,
) -> BaseInference:
    engine_cls = choose_inference_obj(algorithm)
    if issubclass(engine_cls, EliminationEngine):
        return engine_cls(order=order, use_cpt_shortcut=use_cpt_shortcut, verbose=verbose)
    return engine_cls(use_cpt_shortcut=use_cpt_shortcut, verbose=verbose)


def answer_query(
    query: Union[Query, JointQuery],
    network: NetworkGraph,
    order: Union[str, BaseEliminationOrder] = "lexicographic",
    use_cpt_shortcut: bool = True,
    verbose: bool = False,
) -> QueryResult:
    if isinstance(query, JointQuery):
        return joint_probability(query, network)
    engine = make_engine(query.algorithm, order=order, use_cpt_shortcut=use_cpt_shortcut, verbose=verbose)
    return engine.answer(query, network)


def query_probability(
    inference_engine: BaseInference,
    network: NetworkGraph,
    variable: str,
    value: str,
    evidence: Optional[Dict[str, str]] = None,
) -> float:
    """Run inference and return the probability of ``variable=value`` given ``evidence``."""
    query = Query((variable, value), dict(evidence or {}))
    return inference_engine.answer(query, network).probability


__all__ = ["INFERENCE_OBJS", "choose_inference_obj", "make_engine", "answer_query", "query_probability"]
