"""
Reader/writer for the XML network format::

    <NETWORK>
      <VARIABLE><NAME>A</NAME><OUTCOME>T</OUTCOME><OUTCOME>F</OUTCOME></VARIABLE>
      <DEFINITION><FOR>B</FOR><GIVEN>A</GIVEN><TABLE>0.9 0.1 0.2 0.8</TABLE></DEFINITION>
    </NETWORK>

The network name is the file stem.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Tuple, Union

from bn_inference.cpd_utils import flatten_cpt_entries
from bn_inference.exceptions import NetworkDefinitionError
from bn_inference.network import NetworkGraph


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_variable(element: ET.Element) -> Tuple[str, List[str]]:
    name = _child_text(element, "NAME")
    if not name:
        raise NetworkDefinitionError("<VARIABLE> tag must contain a non-empty <NAME> tag")
    outcome_nodes = element.findall("OUTCOME")
    if not outcome_nodes:
        raise NetworkDefinitionError(f"Variable '{name}' must have at least one <OUTCOME>")
    outcomes = []
    for node in outcome_nodes:
        outcome = (node.text or "").strip()
        if not outcome:
            raise NetworkDefinitionError(f"Variable '{name}' has an empty <OUTCOME> tag")
        outcomes.append(outcome)
    return name, outcomes


def _parse_definition(element: ET.Element) -> Tuple[str, List[str], List[float]]:
    for_name = _child_text(element, "FOR")
    if not for_name:
        raise NetworkDefinitionError("<DEFINITION> tag must contain a non-empty <FOR> tag")

    parents = []
    for node in element.findall("GIVEN"):
        parent = (node.text or "").strip()
        if not parent:
            raise NetworkDefinitionError(f"<DEFINITION> for '{for_name}' has an empty <GIVEN> tag")
        parents.append(parent)

    table = _child_text(element, "TABLE")
    if not table:
        raise NetworkDefinitionError(
            f"<DEFINITION> tag for variable '{for_name}' must contain a non-empty <TABLE> tag"
        )
    probabilities = []
    for token in table.split():
        try:
            probabilities.append(float(token))
        except ValueError:
            raise NetworkDefinitionError(
                f"Invalid number format in <TABLE> for variable {for_name}: '{token}'"
            ) from None
    return for_name, parents, probabilities


def parse_network_xml(text: str, name: str = "network", verbose: bool = False) -> NetworkGraph:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise NetworkDefinitionError(f"Malformed XML for network '{name}': {e}") from e
    if root.tag != "NETWORK":
        raise NetworkDefinitionError(f"Root element must be <NETWORK>, got <{root.tag}>")

    variables = [_parse_variable(el) for el in root.iter("VARIABLE")]
    tables = [_parse_definition(el) for el in root.iter("DEFINITION")]
    if verbose:
        print(f"Parsed {len(variables)} variables and {len(tables)} definitions for '{name}'")
    return NetworkGraph.from_tables(name, variables, tables)


def read_network_xml(path: Union[str, Path], verbose: bool = False) -> NetworkGraph:
    path = Path(path)
    return parse_network_xml(path.read_text(encoding="utf-8"), name=path.stem, verbose=verbose)


def network_to_xml(network: NetworkGraph) -> str:
    root = ET.Element("NETWORK")
    for var in network.variables:
        el = ET.SubElement(root, "VARIABLE")
        ET.SubElement(el, "NAME").text = var.name
        for outcome in var.outcomes:
            ET.SubElement(el, "OUTCOME").text = outcome
    for definition in network.definitions:
        el = ET.SubElement(root, "DEFINITION")
        ET.SubElement(el, "FOR").text = definition.name
        for parent in definition.parents:
            ET.SubElement(el, "GIVEN").text = parent
        flat = flatten_cpt_entries(definition, network)
        ET.SubElement(el, "TABLE").text = " ".join(repr(p) for p in flat)
    ET.indent(root)
    return ET.tostring(root, encoding="unicode") + "\n"


def write_network_xml(network: NetworkGraph, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(network_to_xml(network), encoding="utf-8")
    return path


__all__ = ["parse_network_xml", "read_network_xml", "network_to_xml", "write_network_xml"]
