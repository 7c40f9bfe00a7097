from __future__ import annotations

from itertools import product
from typing import Iterator, List, Sequence, Tuple

from bn_inference.exceptions import CPTSizeError, NetworkDefinitionError
from bn_inference.network import Definition, NetworkGraph, ProbabilityEntry, Variable


def expected_table_size(child: Variable, parents: Sequence[Variable]) -> int:
    size = child.cardinality
    for parent in parents:
        size *= parent.cardinality
    return size


def _parent_assignments(parents: Sequence[Variable]) -> Iterator[Tuple[Tuple[str, str], ...]]:
    """Yield parent assignments with the first parent varying slowest.

    Each level extends an immutable tuple, so no state is undone on the way back up.
    """

    def _extend(depth: int, assigned: Tuple[Tuple[str, str], ...]):
        if depth == len(parents):
            yield assigned
            return
        parent = parents[depth]
        for outcome in parent.outcomes:
            yield from _extend(depth + 1, assigned + ((parent.name, outcome),))

    return _extend(0, ())


def build_cpt_entries(
    probabilities: Sequence[float],
    child: Variable,
    parents: Sequence[Variable],
) -> List[ProbabilityEntry]:
    """Turn a flat probability list into CPT entries.

    Ordering: parents in declared order (first slowest), child outcomes fastest.
    For A -> B with both binary, ``[0.9, 0.1, 0.2, 0.8]`` reads as
    P(B=T|A=T), P(B=F|A=T), P(B=T|A=F), P(B=F|A=F).
    """
    expected = expected_table_size(child, parents)
    if len(probabilities) != expected:
        raise CPTSizeError(child.name, expected, len(probabilities))

    entries: List[ProbabilityEntry] = []
    values = iter(probabilities)
    for assigned in _parent_assignments(parents):
        for outcome in child.outcomes:
            entries.append(ProbabilityEntry(assigned, float(next(values)), outcome))

    if len(entries) != expected:
        raise CPTSizeError(child.name, expected, len(entries))
    return entries


def flatten_cpt_entries(definition: Definition, network: NetworkGraph) -> List[float]:
    """Inverse of ``build_cpt_entries``: the definition's probabilities in flat order."""
    child = network.get_variable(definition.name)
    parents = [network.get_variable(p) for p in definition.parents]

    flat: List[float] = []
    for assigned in _parent_assignments(parents):
        states = dict(assigned)
        for outcome in child.outcomes:
            prob = definition.probability(outcome, states)
            if prob is None:
                raise NetworkDefinitionError(
                    f"Definition of '{definition.name}' has no entry for outcome '{outcome}' given {states}"
                )
            flat.append(prob)
    return flat


# ------------------------------
# Text rendering
# ------------------------------


def format_table(rows: List[List[str]]) -> str:
    widths: List[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            if i >= len(widths):
                widths.append(len(cell))
            else:
                widths[i] = max(widths[i], len(cell))

    def horiz() -> str:
        return "".join("+" + "-" * (w + 2) for w in widths) + "+"

    def fmt_row(row: List[str]) -> str:
        return "|" + "|".join(f" {cell.ljust(w)} " for cell, w in zip(row, widths)) + "|"

    out: List[str] = [horiz()]
    for r in rows:
        out.append(fmt_row(r))
        out.append(horiz())
    return "\n".join(out)


def cpd_to_ascii_table(definition: Definition, network: NetworkGraph) -> str:
    """Render a definition with parent assignments as columns and child outcomes as rows."""
    var = definition.name
    var_states = network.get_variable(var).outcomes
    parents = list(definition.parents)

    rows: List[List[str]] = []
    if not parents:
        rows.append(["Node(Value)", "Probability"])
        for s in var_states:
            rows.append([f"{var}({s})", f"{definition.probability(s, {}):.4f}"])
        return format_table(rows)

    parent_assigns = list(product(*(network.get_variable(p).outcomes for p in parents)))

    for i, p in enumerate(parents):
        rows.append([p] + [f"{p}({assign[i]})" for assign in parent_assigns])

    for s in var_states:
        row = [f"{var}({s})"]
        for assign in parent_assigns:
            prob = definition.probability(s, dict(zip(parents, assign)))
            row.append("-" if prob is None else f"{prob:.4f}")
        rows.append(row)

    return format_table(rows)


__all__ = ["expected_table_size", "build_cpt_entries", "flatten_cpt_entries", "format_table", "cpd_to_ascii_table"]
