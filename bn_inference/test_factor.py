from __future__ import annotations

import pytest

from bn_inference.enumeration import EnumerationEngine
from bn_inference.factor import (
    Factor,
    OperationCounter,
    generate_assignments,
    join,
    join_all,
    normalize,
    pick_smallest_pair,
    sum_out,
)
from bn_inference.network import Variable
from bn_inference.query import Query

A = Variable("A", ("T", "F"))
B = Variable("B", ("T", "F"))
C = Variable("C", ("c0", "c1", "c2"))


@pytest.fixture
def prior_a(two_node_net):
    return Factor.from_definition(two_node_net.get_definition("A"), two_node_net)


@pytest.fixture
def cpt_b(two_node_net):
    return Factor.from_definition(two_node_net.get_definition("B"), two_node_net)


def test_from_definition_domain(cpt_b):
    assert cpt_b.variable_names == ("B", "A")
    assert cpt_b.size == 4
    assert cpt_b.value({"A": "F", "B": "T"}) == pytest.approx(0.2)


def test_restrict_keeps_domain(cpt_b):
    restricted = cpt_b.restrict("A", "T")
    assert restricted.variable_names == ("B", "A")
    assert dict(restricted.table) == {("T", "T"): 0.9, ("F", "T"): 0.1}
    assert cpt_b.restrict("Z", "T") is cpt_b


def test_restrict_is_idempotent(cpt_b):
    once = cpt_b.restrict("B", "F")
    twice = once.restrict("B", "F")
    assert dict(once.table) == dict(twice.table)


def test_restrict_to_empty(cpt_b):
    empty = cpt_b.restrict("A", "T").restrict("A", "F")
    assert empty.is_empty()
    assert empty.value({"A": "T", "B": "T"}) == 0.0


def test_join_counts_one_multiplication_per_row(prior_a, cpt_b):
    counter = OperationCounter()
    joined = join(prior_a, cpt_b, counter)

    assert joined.variable_names == ("A", "B")
    assert counter.multiplications == 4
    assert counter.additions == 0
    assert joined.value({"A": "T", "B": "T"}) == pytest.approx(0.54)
    assert joined.value({"A": "F", "B": "T"}) == pytest.approx(0.08)


def test_join_is_commutative(prior_a, cpt_b):
    left = join(prior_a, cpt_b, OperationCounter())
    right = join(cpt_b, prior_a, OperationCounter())
    assert left.variable_names == right.variable_names
    assert dict(left.table) == pytest.approx(dict(right.table))


def test_join_with_evidence_pins_rows(prior_a, cpt_b):
    counter = OperationCounter()
    joined = join(prior_a, cpt_b.restrict("B", "T"), counter, {"B": "T"})
    assert counter.multiplications == 2
    assert set(joined.table) == {("T", "T"), ("F", "T")}


def test_sum_out_counts_additions(prior_a, cpt_b):
    counter = OperationCounter()
    joined = join(prior_a, cpt_b, counter)
    marginal = sum_out(joined, "A", counter)

    assert marginal.variable_names == ("B",)
    assert counter.additions == 2
    assert marginal.value({"B": "T"}) == pytest.approx(0.62)
    assert marginal.value({"B": "F"}) == pytest.approx(0.38)


def test_sum_out_ternary():
    factor = Factor([C, A], {(c, a): 0.1 for c in C.outcomes for a in A.outcomes})
    counter = OperationCounter()
    summed = sum_out(factor, "C", counter)
    assert counter.additions == 4
    assert summed.value({"A": "T"}) == pytest.approx(0.3)


def test_sum_out_absent_variable_is_free(prior_a):
    counter = OperationCounter()
    assert sum_out(prior_a, "B", counter) is prior_a
    assert counter.additions == 0


def test_normalize(prior_a):
    scaled = Factor(prior_a.domain, {k: v * 2 for k, v in prior_a.items()})
    counter = OperationCounter()
    normalized = normalize(scaled, counter)
    assert normalized.total() == pytest.approx(1.0)
    assert normalized.value({"A": "T"}) == pytest.approx(0.6)
    assert counter.additions == 1


def test_normalize_zero_total_unchanged():
    zeros = Factor([A], {("T",): 0.0, ("F",): 0.0})
    counter = OperationCounter()
    result = normalize(zeros, counter)
    assert dict(result.table) == {("T",): 0.0, ("F",): 0.0}
    assert counter.additions == 1


def test_generate_assignments_pins_evidence():
    rows = list(generate_assignments([A, C], {"A": "F"}))
    assert rows == [("F", "c0"), ("F", "c1"), ("F", "c2")]


def test_pick_smallest_pair_and_join_all(prior_a, cpt_b):
    big = Factor([A, C], {(a, c): 1.0 for a in A.outcomes for c in C.outcomes})
    assert pick_smallest_pair([big, cpt_b, prior_a]) == (2, 1)

    counter = OperationCounter()
    result = join_all([big, cpt_b, prior_a], counter)
    assert result.variable_names == ("A", "B", "C")
    # A x B(4 rows) then with A,C -> 12 rows
    assert counter.multiplications == 4 + 12
    assert join_all([], counter) is None


def test_duplicate_domain_rejected():
    with pytest.raises(ValueError):
        Factor([A, A], {})


@pytest.mark.parametrize(
    "target, evidence",
    [
        (("B", "T"), {"J": "T", "M": "T"}),
        (("E", "F"), {"J": "T"}),
        (("A", "T"), {}),
    ],
)
def test_full_join_sum_out_normalize_matches_enumeration(alarm_net, target, evidence):
    counter = OperationCounter()
    factors = []
    for definition in alarm_net.definitions:
        factor = Factor.from_definition(definition, alarm_net)
        for name, value in evidence.items():
            factor = factor.restrict(name, value)
        factors.append(factor)

    joint = join_all(factors, counter, evidence)
    assert set(joint.variable_names) == set(alarm_net.variable_names)
    for name in alarm_net.variable_names:
        if name != target[0] and name not in evidence:
            joint = sum_out(joint, name, counter)
    posterior = normalize(joint, counter)

    expected = EnumerationEngine(use_cpt_shortcut=False).answer(Query(target, evidence, "1"), alarm_net)
    assert posterior.value({target[0]: target[1], **evidence}) == pytest.approx(expected.probability, abs=1e-12)
