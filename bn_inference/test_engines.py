from __future__ import annotations

import pytest

from bn_inference.bn_generation import generate_network_from_dag
from bn_inference.elimination import EliminationEngine
from bn_inference.enumeration import EnumerationEngine, joint_probability
from bn_inference.exceptions import QueryError
from bn_inference.graph_generation import generate_dag_with_treewidth
from bn_inference.inference_discrete import answer_query, choose_inference_obj, make_engine, query_probability
from bn_inference.network import NetworkGraph
from bn_inference.pgmpy_utils import from_pgmpy, pgmpy_query_probability, to_pgmpy
from bn_inference.query import JointQuery, Query
from bn_inference.query_generation import generate_queries

TF = ["T", "F"]


def test_two_node_marginal(two_node_net):
    q = Query(("B", "T"), {}, "1")
    assert answer_query(q, two_node_net).format() == "0.62000,1,2"

    q = Query(("B", "T"), {}, "2")
    assert answer_query(q, two_node_net).format() == "0.62000,3,4"


def test_two_node_joint(two_node_net):
    result = answer_query(JointQuery([("A", "T"), ("B", "T")]), two_node_net)
    assert result.format() == "0.54000,0,1"


def test_joint_requires_parents(two_node_net):
    with pytest.raises(QueryError, match="does not assign parents"):
        joint_probability(JointQuery([("B", "T")]), two_node_net)


def test_joint_single_root(two_node_net):
    result = joint_probability(JointQuery([("A", "F")]), two_node_net)
    assert result.probability == pytest.approx(0.4)
    assert (result.additions, result.multiplications) == (0, 0)


def test_alarm_enumeration(alarm_net):
    result = answer_query(Query(("B", "T"), {"J": "T", "M": "T"}, "1"), alarm_net)
    assert result.format() == "0.28417,7,32"


def test_alarm_variable_elimination(alarm_net):
    result = answer_query(Query(("B", "T"), {"J": "T", "M": "T"}, "2"), alarm_net)
    assert result.format() == "0.28417,7,16"


def test_alarm_evidence_only_factor_dropped(alarm_net):
    result = answer_query(Query(("J", "T"), {"B": "T"}, "2"), alarm_net)
    assert result.format() == "0.84902,7,12"


def test_algorithms_agree_on_alarm(alarm_net):
    queries = [
        (("B", "T"), {"J": "T", "M": "T"}),
        (("E", "F"), {"J": "T"}),
        (("A", "T"), {"M": "F", "E": "T"}),
        (("M", "T"), {}),
        (("J", "F"), {"B": "F", "E": "T"}),
    ]
    enumeration = EnumerationEngine()
    for order in ("lexicographic", "min_degree", "min_fill"):
        elimination = EliminationEngine(order=order)
        for target, evidence in queries:
            q = Query(target, evidence)
            assert elimination.answer(q, alarm_net).probability == pytest.approx(
                enumeration.answer(q, alarm_net).probability, abs=1e-12
            )


def test_keeping_evidence_only_factors_gives_same_probability(alarm_net):
    q = Query(("J", "T"), {"B": "T"})
    kept = EliminationEngine(drop_evidence_only_factors=False).answer(q, alarm_net)
    dropped = EliminationEngine().answer(q, alarm_net)
    assert kept.probability == pytest.approx(dropped.probability)
    assert kept.multiplications >= dropped.multiplications


@pytest.mark.parametrize(
    "algorithm, use_cpt_shortcut, expected",
    [
        ("1", True, "0.94000,0,0"),
        ("2", True, "0.94000,0,0"),
        ("1", False, "0.94000,7,32"),
        # P(B) and P(E) hold only evidence and are set aside; P(A|B,E) needs no join
        ("2", False, "0.94000,1,0"),
    ],
)
def test_evidence_equal_to_parents(alarm_net, algorithm, use_cpt_shortcut, expected):
    q = Query(("A", "T"), {"B": "T", "E": "F"}, algorithm)
    result = answer_query(q, alarm_net, use_cpt_shortcut=use_cpt_shortcut)
    assert result.format() == expected
    assert result.probability == pytest.approx(0.94)


def test_cpt_shortcut_without_evidence(alarm_net):
    for algorithm in ("1", "2"):
        prior = answer_query(Query(("B", "T"), {}, algorithm), alarm_net)
        assert prior.format() == "0.00100,0,0"


def test_shortcut_skipped_when_evidence_parent_has_parents(alarm_net):
    # A is J's parent but not a root, so P(J | A) still has to be computed
    result = answer_query(Query(("J", "T"), {"A": "T"}, "1"), alarm_net)
    assert result.probability == pytest.approx(0.9)
    assert result.multiplications > 0


def test_zero_probability_evidence():
    net = NetworkGraph.from_tables(
        "deterministic",
        variables=[("A", TF), ("B", TF)],
        tables=[("A", [], [1.0, 0.0]), ("B", ["A"], [0.9, 0.1, 0.2, 0.8])],
    )
    for algorithm in ("1", "2"):
        result = answer_query(Query(("B", "T"), {"A": "F"}, algorithm), net)
        assert result.probability == 0.0


def test_unknown_algorithm(two_node_net):
    with pytest.raises(QueryError, match="Unknown inference algorithm"):
        answer_query(Query(("B", "T"), {}, "3"), two_node_net)
    with pytest.raises(QueryError):
        choose_inference_obj("3")


def test_invalid_queries(two_node_net):
    engine = make_engine("2")
    with pytest.raises(QueryError, match="not defined"):
        engine.answer(Query(("Z", "T")), two_node_net)
    with pytest.raises(QueryError, match="not an outcome"):
        engine.answer(Query(("B", "maybe")), two_node_net)
    with pytest.raises(QueryError, match="both the query variable and evidence"):
        engine.answer(Query(("B", "T"), {"B": "T"}), two_node_net)
    with pytest.raises(QueryError, match="Evidence value"):
        engine.answer(Query(("B", "T"), {"A": "maybe"}), two_node_net)


def test_query_probability_helper(two_node_net):
    engine = make_engine("2", order="min_fill")
    assert query_probability(engine, two_node_net, "A", "T", {"B": "T"}) == pytest.approx(0.54 / 0.62)


def test_verbose_prints(two_node_net, capsys):
    make_engine("2", verbose=True).answer(Query(("B", "T")), two_node_net)
    out = capsys.readouterr().out
    assert "Elimination order" in out
    assert "additions=3" in out


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_engines_match_pgmpy_on_random_networks(seed):
    dag, _, _ = generate_dag_with_treewidth(7, 2, seed=seed)
    net, _ = generate_network_from_dag(dag, {"min": 2, "max": 3}, seed=seed, name=f"rand{seed}")
    model = to_pgmpy(net)

    enumeration = EnumerationEngine(use_cpt_shortcut=False)
    elimination = EliminationEngine(order="min_fill", use_cpt_shortcut=False)
    for q in generate_queries(net, num_queries=8, evidence_counts=(0, 1, 2), seed=seed):
        expected = pgmpy_query_probability(model, q.variable, q.outcome, q.evidence)
        assert enumeration.answer(q, net).probability == pytest.approx(expected, abs=1e-9)
        assert elimination.answer(q, net).probability == pytest.approx(expected, abs=1e-9)


def test_pgmpy_round_trip(alarm_net):
    back = from_pgmpy(to_pgmpy(alarm_net), name="alarm_net")
    for name in alarm_net.variable_names:
        assert back.get_parents(name) == alarm_net.get_parents(name)
        for entry in alarm_net.get_definition(name).entries:
            got = back.get_definition(name).probability(entry.outcome, entry.parent_assignment)
            assert got == pytest.approx(entry.probability)
