"""
Query-line syntax.

Conditional:  ``P(B=T|J=T,M=T),2``  (``P(B=T|),1`` and ``P(B=T),1`` have no evidence)
Joint:        ``P(A=T,B=T)``        (no algorithm suffix)
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple, Union

from bn_inference.exceptions import QueryError
from bn_inference.query import JointQuery, Query

_QUERY_RE = re.compile(r"^P\s*\((?P<body>.*)\)\s*(?:,\s*(?P<algorithm>[^,\s]+))?$")


def _parse_pair(text: str, line: str) -> Tuple[str, str]:
    name, sep, value = text.partition("=")
    name, value = name.strip(), value.strip()
    if not sep or not name or not value or "=" in value:
        raise QueryError(f"Malformed assignment '{text.strip()}' in query '{line}'")
    return name, value


def _parse_pairs(text: str, line: str) -> List[Tuple[str, str]]:
    if not text.strip():
        return []
    return [_parse_pair(part, line) for part in text.split(",")]


def parse_query_line(line: str) -> Union[Query, JointQuery]:
    text = line.strip()
    match = _QUERY_RE.match(text)
    if match is None:
        raise QueryError(f"Cannot parse query '{text}'")

    body = match.group("body")
    algorithm = match.group("algorithm")

    if "|" in body:
        if algorithm is None:
            raise QueryError(f"Conditional query '{text}' has no algorithm selector")
        target_text, _, evidence_text = body.partition("|")
        if "|" in evidence_text:
            raise QueryError(f"Query '{text}' has more than one '|'")
    elif algorithm is not None:
        target_text, evidence_text = body, ""
    else:
        pairs = _parse_pairs(body, text)
        if not pairs:
            raise QueryError(f"Joint query '{text}' assigns no variables")
        return JointQuery(pairs)

    targets = _parse_pairs(target_text, text)
    if len(targets) != 1:
        raise QueryError(f"Query '{text}' must have exactly one query variable, got {len(targets)}")

    evidence: Dict[str, str] = {}
    for name, value in _parse_pairs(evidence_text, text):
        if name in evidence:
            raise QueryError(f"Evidence variable '{name}' given twice in query '{text}'")
        evidence[name] = value

    return Query(targets[0], evidence, algorithm)


def format_query_line(query: Union[Query, JointQuery]) -> str:
    """Inverse of ``parse_query_line``."""
    if isinstance(query, JointQuery):
        return str(query).replace(" ", "")
    evidence = ",".join(f"{k}={v}" for k, v in query.evidence.items())
    return f"P({query.variable}={query.outcome}|{evidence}),{query.algorithm}"


__all__ = ["parse_query_line", "format_query_line"]
