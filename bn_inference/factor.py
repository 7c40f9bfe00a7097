"""
Factor algebra for exact inference.

A ``Factor`` maps complete assignments of its domain (outcome tuples aligned
with the domain) to non-negative values. The operations used by variable
elimination are ``restrict``, ``join``, ``sum_out`` and ``normalize``; the
counted ones record their work on an ``OperationCounter`` owned by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from bn_inference.cpd_utils import format_table
from bn_inference.network import Definition, NetworkGraph, Variable


@dataclass
class OperationCounter:
    additions: int = 0
    multiplications: int = 0

    def add(self, n: int = 1) -> None:
        self.additions += n

    def multiply(self, n: int = 1) -> None:
        self.multiplications += n


Assignment = Tuple[str, ...]


class Factor:
    """Immutable table over a tuple of variables."""

    __slots__ = ("_domain", "_names", "_table")

    def __init__(self, domain: Sequence[Variable], table: Mapping[Assignment, float]):
        domain = tuple(domain)
        names = tuple(v.name for v in domain)
        if len(set(names)) != len(names):
            raise ValueError(f"Factor domain has duplicate variables: {list(names)}")
        rows: Dict[Assignment, float] = {}
        for key, value in table.items():
            key = tuple(key)
            if len(key) != len(domain):
                raise ValueError(f"Assignment {key} does not match factor domain {list(names)}")
            rows[key] = float(value)
        self._domain: Tuple[Variable, ...] = domain
        self._names: Tuple[str, ...] = names
        self._table: Dict[Assignment, float] = rows

    @classmethod
    def from_definition(cls, definition: Definition, network: NetworkGraph) -> "Factor":
        """Domain ``(variable, *parents)``, one row per CPT entry."""
        domain = [network.get_variable(definition.name)]
        domain += [network.get_variable(p) for p in definition.parents]
        table: Dict[Assignment, float] = {}
        for entry in definition.entries:
            states = entry.parent_assignment
            key = (entry.outcome,) + tuple(states[p] for p in definition.parents)
            table[key] = entry.probability
        return cls(domain, table)

    # ------------------------------
    # Accessors
    # ------------------------------

    @property
    def domain(self) -> Tuple[Variable, ...]:
        return self._domain

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def table(self) -> Mapping[Assignment, float]:
        return MappingProxyType(self._table)

    @property
    def size(self) -> int:
        return len(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def is_empty(self) -> bool:
        return not self._table

    def index_of(self, name: str) -> int:
        return self._names.index(name)

    def value(self, assignment: Mapping[str, str]) -> float:
        """Value for a (possibly larger) assignment; a missing row reads as 0."""
        key = tuple(assignment.get(n) for n in self._names)
        return self._table.get(key, 0.0)

    def items(self) -> Iterator[Tuple[Assignment, float]]:
        return iter(self._table.items())

    def total(self) -> float:
        return sum(self._table.values())

    def sort_key(self) -> Tuple[int, int]:
        """Row count, then the sum of character codes of the domain names."""
        return len(self._table), sum(ord(c) for n in self._names for c in n)

    # ------------------------------
    # Uncounted operations
    # ------------------------------

    def restrict(self, variable: str, value: str) -> "Factor":
        """Keep the domain, drop rows where ``variable`` is not ``value``."""
        if variable not in self._names:
            return self
        idx = self._names.index(variable)
        rows = {k: v for k, v in self._table.items() if k[idx] == value}
        return Factor(self._domain, rows)

    def __repr__(self) -> str:
        return f"Factor({list(self._names)}, rows={len(self._table)})"

    def to_ascii_table(self, precision: int = 6) -> str:
        rows: List[List[str]] = [list(self._names) + [f"phi({','.join(self._names)})"]]
        for key, value in self._table.items():
            rows.append(list(key) + [f"{value:.{precision}f}"])
        return format_table(rows)


# ------------------------------
# Counted operations
# ------------------------------


def generate_assignments(
    domain: Sequence[Variable], evidence: Optional[Mapping[str, str]] = None
) -> Iterator[Assignment]:
    """Cross product over ``domain`` with evidence variables pinned to their observed value."""
    evidence = evidence or {}
    choices = [
        (evidence[var.name],) if var.name in evidence else var.outcomes
        for var in domain
    ]
    return product(*choices)


def join(
    f1: Factor,
    f2: Factor,
    counter: OperationCounter,
    evidence: Optional[Mapping[str, str]] = None,
) -> Factor:
    """Pointwise product over the name-sorted union of both domains.

    One multiplication is counted per row written.
    """
    by_name: Dict[str, Variable] = {}
    for var in f1.domain + f2.domain:
        by_name.setdefault(var.name, var)
    domain = tuple(by_name[n] for n in sorted(by_name))
    names = [v.name for v in domain]

    pos1 = [names.index(n) for n in f1.variable_names]
    pos2 = [names.index(n) for n in f2.variable_names]
    t1, t2 = f1.table, f2.table

    rows: Dict[Assignment, float] = {}
    for assignment in generate_assignments(domain, evidence):
        v1 = t1.get(tuple(assignment[i] for i in pos1), 0.0)
        v2 = t2.get(tuple(assignment[i] for i in pos2), 0.0)
        rows[assignment] = v1 * v2
        counter.multiply()
    return Factor(domain, rows)


def sum_out(factor: Factor, variable: str, counter: OperationCounter) -> Factor:
    """Marginalise ``variable``; a group of n rows costs n - 1 additions."""
    if variable not in factor:
        return factor
    idx = factor.index_of(variable)
    domain = factor.domain[:idx] + factor.domain[idx + 1:]

    groups: Dict[Assignment, List[float]] = {}
    for key, value in factor.items():
        groups.setdefault(key[:idx] + key[idx + 1:], []).append(value)

    rows: Dict[Assignment, float] = {}
    for key, values in groups.items():
        rows[key] = sum(values)
        counter.add(len(values) - 1)
    return Factor(domain, rows)


def normalize(factor: Factor, counter: OperationCounter) -> Factor:
    """Scale rows to sum to one. A zero total leaves the factor unchanged."""
    if factor.is_empty():
        return factor
    total = factor.total()
    counter.add(factor.size - 1)
    if total == 0.0:
        return factor
    return Factor(factor.domain, {k: v / total for k, v in factor.items()})


def pick_smallest_pair(factors: Sequence[Factor]) -> Tuple[int, int]:
    """Indices of the two smallest factors by ``Factor.sort_key`` (stable on ties)."""
    ranked = sorted(range(len(factors)), key=lambda i: factors[i].sort_key())
    return ranked[0], ranked[1]


def join_all(
    factors: Sequence[Factor],
    counter: OperationCounter,
    evidence: Optional[Mapping[str, str]] = None,
) -> Optional[Factor]:
    """Repeatedly join the two smallest factors until one remains."""
    pool = list(factors)
    if not pool:
        return None
    while len(pool) > 1:
        i, j = pick_smallest_pair(pool)
        joined = join(pool[i], pool[j], counter, evidence)
        pool = [f for k, f in enumerate(pool) if k not in (i, j)]
        pool.append(joined)
    return pool[0]


__all__ = [
    "OperationCounter",
    "Factor",
    "generate_assignments",
    "join",
    "sum_out",
    "normalize",
    "pick_smallest_pair",
    "join_all",
]
