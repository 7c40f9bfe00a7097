from __future__ import annotations

import pytest

from bn_inference.cpd_utils import (
    build_cpt_entries,
    cpd_to_ascii_table,
    expected_table_size,
    format_table,
    flatten_cpt_entries,
)
from bn_inference.exceptions import CPTSizeError, NetworkDefinitionError
from bn_inference.network import Variable


def test_build_cpt_entries_child_varies_fastest():
    a = Variable("A", ("T", "F"))
    b = Variable("B", ("T", "F"))
    entries = build_cpt_entries([0.9, 0.1, 0.2, 0.8], b, [a])

    got = [(e.parent_assignment, e.outcome, e.probability) for e in entries]
    assert got == [
        ({"A": "T"}, "T", 0.9),
        ({"A": "T"}, "F", 0.1),
        ({"A": "F"}, "T", 0.2),
        ({"A": "F"}, "F", 0.8),
    ]


def test_build_cpt_entries_first_parent_slowest():
    x = Variable("X", ("x0", "x1"))
    y = Variable("Y", ("y0", "y1", "y2"))
    c = Variable("C", ("c0", "c1"))
    entries = build_cpt_entries([i / 12 for i in range(12)], c, [x, y])

    assert expected_table_size(c, [x, y]) == 12
    assert entries[0].parent_states == (("X", "x0"), ("Y", "y0"))
    assert entries[2].parent_states == (("X", "x0"), ("Y", "y1"))
    assert entries[6].parent_states == (("X", "x1"), ("Y", "y0"))
    assert entries[11].parent_states == (("X", "x1"), ("Y", "y2"))
    assert entries[11].outcome == "c1"


def test_build_cpt_entries_wrong_size():
    child = Variable("C", ("a", "b", "c"))
    parent = Variable("P", ("T", "F"))

    with pytest.raises(CPTSizeError) as exc_info:
        build_cpt_entries([0.2] * 5, child, [parent])
    assert exc_info.value.expected == 6
    assert exc_info.value.actual == 5
    assert exc_info.value.variable == "C"
    assert isinstance(exc_info.value, NetworkDefinitionError)


def test_flatten_is_inverse_of_build(alarm_net):
    definition = alarm_net.get_definition("A")
    assert flatten_cpt_entries(definition, alarm_net) == [0.95, 0.05, 0.94, 0.06, 0.29, 0.71, 0.001, 0.999]


def test_cpd_to_ascii_table(two_node_net):
    root = cpd_to_ascii_table(two_node_net.get_definition("A"), two_node_net)
    assert "A(T)" in root and "0.6000" in root

    child = cpd_to_ascii_table(two_node_net.get_definition("B"), two_node_net)
    lines = child.splitlines()
    assert lines[0].startswith("+")
    assert "B(F)" in child and "0.8000" in child


def test_format_table_pads_columns():
    text = format_table([["name", "p"], ["A", "0.5000"]])
    lines = text.splitlines()
    assert lines[0] == "+------+--------+"
    assert lines[1] == "| name | p      |"
    assert lines[3] == "| A    | 0.5000 |"
    assert len({len(line) for line in lines}) == 1
