"""
Discrete Bayesian network model.

A network is an immutable collection of named discrete variables and one
conditional probability table (a ``Definition``) per variable. Parents are
referenced by name; the graph they induce must be a DAG.

Example:
    >>> net = NetworkGraph.from_tables(
    ...     "two_nodes",
    ...     variables=[("A", ["T", "F"]), ("B", ["T", "F"])],
    ...     tables=[("A", [], [0.6, 0.4]), ("B", ["A"], [0.9, 0.1, 0.2, 0.8])],
    ... )
    >>> sorted(net.ancestors("B"))
    ['A', 'B']
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import networkx as nx

from bn_inference.exceptions import CPTSizeError, NetworkDefinitionError


@dataclass(frozen=True)
class Variable:
    name: str
    outcomes: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "outcomes", tuple(self.outcomes))
        if not self.name:
            raise NetworkDefinitionError("Variable name must be non-empty")
        if not self.outcomes:
            raise NetworkDefinitionError(f"Variable '{self.name}' must have at least one outcome")
        if len(set(self.outcomes)) != len(self.outcomes):
            raise NetworkDefinitionError(f"Variable '{self.name}' has duplicate outcomes: {list(self.outcomes)}")

    @property
    def cardinality(self) -> int:
        return len(self.outcomes)

    def __str__(self) -> str:
        return f"Variable{{name='{self.name}', outcomes={list(self.outcomes)}}}"


@dataclass(frozen=True)
class ProbabilityEntry:
    """One CPT row: P(outcome | parent_states) = probability.

    ``parent_states`` holds ``(parent, outcome)`` pairs in the declared parent order.
    """

    parent_states: Tuple[Tuple[str, str], ...]
    probability: float
    outcome: str

    def __post_init__(self):
        object.__setattr__(self, "parent_states", tuple(tuple(p) for p in self.parent_states))
        if not 0.0 <= self.probability <= 1.0:
            raise NetworkDefinitionError(
                f"Probability must be between 0 and 1, got {self.probability} for outcome '{self.outcome}'"
            )

    @property
    def parent_assignment(self) -> Dict[str, str]:
        return dict(self.parent_states)

    def __str__(self) -> str:
        if not self.parent_states:
            return f"P({self.outcome}) = {self.probability}"
        parents = ", ".join(f"{p}={v}" for p, v in self.parent_states)
        return f"P({self.outcome} | {parents}) = {self.probability}"


@dataclass(frozen=True)
class Definition:
    """The CPT of one variable together with its ordered parent names."""

    name: str
    parents: Tuple[str, ...]
    entries: Tuple[ProbabilityEntry, ...]
    _index: Dict[Tuple[Tuple[str, ...], str], float] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self):
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "entries", tuple(self.entries))
        index = {}
        for entry in self.entries:
            states = entry.parent_assignment
            key = (tuple(states.get(p) for p in self.parents), entry.outcome)
            index[key] = entry.probability
        object.__setattr__(self, "_index", index)

    def probability(self, outcome: str, assignment: Mapping[str, str]) -> Optional[float]:
        """Look up P(outcome | parents as set in ``assignment``); None if no entry matches."""
        key = (tuple(assignment.get(p) for p in self.parents), outcome)
        return self._index.get(key)


class NetworkGraph:
    """Immutable set of variables and definitions forming a DAG (parent -> child)."""

    def __init__(self, name: str, variables: Sequence[Variable], definitions: Sequence[Definition]):
        self.name = name
        self._variables: Tuple[Variable, ...] = tuple(variables)
        self._definitions: Tuple[Definition, ...] = tuple(definitions)

        self._variable_map: Dict[str, Variable] = {}
        for var in self._variables:
            if var.name in self._variable_map:
                raise NetworkDefinitionError(f"Duplicate variable name found: {var.name}")
            self._variable_map[var.name] = var

        self._definition_map: Dict[str, Definition] = {}
        for definition in self._definitions:
            if definition.name not in self._variable_map:
                raise NetworkDefinitionError(
                    f"Variable '{definition.name}' has a definition but was not declared"
                )
            if definition.name in self._definition_map:
                raise NetworkDefinitionError(f"Duplicate definition for variable '{definition.name}'")
            for parent in definition.parents:
                if parent not in self._variable_map:
                    raise NetworkDefinitionError(
                        f"Variable '{parent}' given as parent of '{definition.name}' was not declared"
                    )
            self._check_entries(definition)
            self._definition_map[definition.name] = definition

        missing = [v.name for v in self._variables if v.name not in self._definition_map]
        if missing:
            raise NetworkDefinitionError(f"Missing definitions for variables: {missing}")

        if not nx.is_directed_acyclic_graph(self.to_nx_dag()):
            raise NetworkDefinitionError(f"Network '{name}' is not a directed acyclic graph (DAG)")

    def _check_entries(self, definition: Definition) -> None:
        var = self._variable_map[definition.name]
        expected = var.cardinality
        for parent in definition.parents:
            expected *= self._variable_map[parent].cardinality
        if len(definition.entries) != expected:
            raise CPTSizeError(definition.name, expected, len(definition.entries))

        seen = set()
        for entry in definition.entries:
            if entry.outcome not in var.outcomes:
                raise NetworkDefinitionError(
                    f"Entry outcome '{entry.outcome}' is not an outcome of '{definition.name}'"
                )
            states = entry.parent_assignment
            if set(states) != set(definition.parents):
                raise NetworkDefinitionError(
                    f"Entry {entry} of '{definition.name}' does not assign exactly the parents {list(definition.parents)}"
                )
            for parent, value in states.items():
                if value not in self._variable_map[parent].outcomes:
                    raise NetworkDefinitionError(
                        f"Entry {entry} of '{definition.name}' uses unknown outcome '{value}' for parent '{parent}'"
                    )
            key = (tuple(states[p] for p in definition.parents), entry.outcome)
            if key in seen:
                raise NetworkDefinitionError(f"Duplicate CPT entry {entry} for variable '{definition.name}'")
            seen.add(key)

    # ------------------------------
    # Construction helpers
    # ------------------------------

    @classmethod
    def from_tables(
        cls,
        name: str,
        variables: Sequence[Tuple[str, Sequence[str]]],
        tables: Sequence[Tuple[str, Sequence[str], Sequence[float]]],
    ) -> "NetworkGraph":
        """Build a network from ``(name, outcomes)`` pairs and flat ``(name, parents, probabilities)`` tables.

        Probabilities follow the flattening order of ``cpd_utils.build_cpt_entries``.
        """
        from bn_inference.cpd_utils import build_cpt_entries

        var_objs = [Variable(var_name, tuple(outcomes)) for var_name, outcomes in variables]
        by_name: Dict[str, Variable] = {}
        for var in var_objs:
            if var.name in by_name:
                raise NetworkDefinitionError(f"Duplicate variable name found: {var.name}")
            by_name[var.name] = var

        definitions: List[Definition] = []
        for var_name, parents, probabilities in tables:
            if var_name not in by_name:
                raise NetworkDefinitionError(f"Variable '{var_name}' has a table but was not declared")
            parent_vars = []
            for parent in parents:
                if parent not in by_name:
                    raise NetworkDefinitionError(
                        f"Variable '{parent}' given as parent of '{var_name}' was not declared"
                    )
                parent_vars.append(by_name[parent])
            entries = build_cpt_entries(probabilities, by_name[var_name], parent_vars)
            definitions.append(Definition(var_name, tuple(parents), tuple(entries)))

        return cls(name, var_objs, definitions)

    # ------------------------------
    # Accessors
    # ------------------------------

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._variables

    @property
    def definitions(self) -> Tuple[Definition, ...]:
        return self._definitions

    @property
    def variable_names(self) -> List[str]:
        return [v.name for v in self._variables]

    def __contains__(self, name: object) -> bool:
        return name in self._variable_map

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def get_variable(self, name: str) -> Variable:
        try:
            return self._variable_map[name]
        except KeyError:
            raise KeyError(f"Variable '{name}' not defined in network '{self.name}'") from None

    def get_definition(self, name: str) -> Definition:
        try:
            return self._definition_map[name]
        except KeyError:
            raise KeyError(f"No definition for variable '{name}' in network '{self.name}'") from None

    def get_parents(self, name: str) -> List[str]:
        return list(self.get_definition(name).parents)

    def get_children(self, name: str) -> List[str]:
        return [d.name for d in self._definitions if name in d.parents]

    def ancestors(self, name: str) -> Set[str]:
        """Names reachable from ``name`` through parent edges, ``name`` included.

        Breadth-first with a visited set; unknown names give an empty set.
        """
        if name not in self._variable_map:
            return set()

        visited = {name}
        queue = deque([name])
        while queue:
            current = queue.popleft()
            definition = self._definition_map.get(current)
            if definition is None:
                continue
            for parent in definition.parents:
                if parent not in visited:
                    visited.add(parent)
                    queue.append(parent)
        return visited

    def to_nx_dag(self) -> nx.DiGraph:
        G = nx.DiGraph()
        G.add_nodes_from(self.variable_names)
        for definition in self._definitions:
            G.add_edges_from((parent, definition.name) for parent in definition.parents)
        return G

    def topological_order(self) -> List[str]:
        return list(nx.topological_sort(self.to_nx_dag()))

    def check_model(self, tolerance: float = 1e-6) -> bool:
        """Verify that every CPT column sums to 1 within ``tolerance``."""
        for definition in self._definitions:
            sums: Dict[Tuple[Tuple[str, str], ...], float] = {}
            for entry in definition.entries:
                sums[entry.parent_states] = sums.get(entry.parent_states, 0.0) + entry.probability
            for states, total in sums.items():
                if abs(total - 1.0) > tolerance:
                    given = ", ".join(f"{p}={v}" for p, v in states) or "no parents"
                    raise NetworkDefinitionError(
                        f"Probabilities of '{definition.name}' given {given} sum to {total}, not 1"
                    )
        return True

    def __repr__(self) -> str:
        return f"NetworkGraph(name={self.name!r}, variables={self.variable_names})"

    def __str__(self) -> str:
        from bn_inference.cpd_utils import cpd_to_ascii_table

        lines = [f"Bayesian Network: {self.name}"]
        for var in self._variables:
            lines.append(str(var))
        for definition in self._definitions:
            lines.append(cpd_to_ascii_table(definition, self))
        return "\n".join(lines)


__all__ = ["Variable", "ProbabilityEntry", "Definition", "NetworkGraph"]
