from __future__ import annotations

import pytest

from bn_inference.network import NetworkGraph

TF = ["T", "F"]


@pytest.fixture
def two_node_net() -> NetworkGraph:
    """A -> B with P(A=T)=0.6, P(B=T|A=T)=0.9, P(B=T|A=F)=0.2."""
    return NetworkGraph.from_tables(
        "two_nodes",
        variables=[("A", TF), ("B", TF)],
        tables=[
            ("A", [], [0.6, 0.4]),
            ("B", ["A"], [0.9, 0.1, 0.2, 0.8]),
        ],
    )


@pytest.fixture
def alarm_net() -> NetworkGraph:
    """Burglary/earthquake alarm network with the textbook parameters."""
    return NetworkGraph.from_tables(
        "alarm_net",
        variables=[("B", TF), ("E", TF), ("A", TF), ("J", TF), ("M", TF)],
        tables=[
            ("B", [], [0.001, 0.999]),
            ("E", [], [0.002, 0.998]),
            ("A", ["B", "E"], [0.95, 0.05, 0.94, 0.06, 0.29, 0.71, 0.001, 0.999]),
            ("J", ["A"], [0.9, 0.1, 0.05, 0.95]),
            ("M", ["A"], [0.7, 0.3, 0.01, 0.99]),
        ],
    )


ALARM_XML = """<NETWORK>
  <VARIABLE><NAME>B</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
  <VARIABLE><NAME>E</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
  <VARIABLE><NAME>A</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
  <VARIABLE><NAME>J</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
  <VARIABLE><NAME>M</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
  <DEFINITION><FOR>B</FOR><TABLE>0.001 0.999</TABLE></DEFINITION>
  <DEFINITION><FOR>E</FOR><TABLE>0.002 0.998</TABLE></DEFINITION>
  <DEFINITION>
    <FOR>A</FOR><GIVEN>B</GIVEN><GIVEN>E</GIVEN>
    <TABLE>0.95 0.05 0.94 0.06 0.29 0.71 0.001 0.999</TABLE>
  </DEFINITION>
  <DEFINITION><FOR>J</FOR><GIVEN>A</GIVEN><TABLE>0.9 0.1 0.05 0.95</TABLE></DEFINITION>
  <DEFINITION><FOR>M</FOR><GIVEN>A</GIVEN><TABLE>0.7 0.3 0.01 0.99</TABLE></DEFINITION>
</NETWORK>
"""


@pytest.fixture
def alarm_xml() -> str:
    return ALARM_XML
