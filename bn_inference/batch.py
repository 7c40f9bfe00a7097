"""
Batch driver: answer every query of an input file.

Input file layout::

    alarm_net.xml
    P(B=T|J=T,M=T),1
    P(B=T|J=T,M=T),2
    P(J=T,M=T,A=T,B=F,E=F)

The first non-empty line names the network XML (relative to the input file's
directory); each further non-empty line is one query. The output file gets one
``probability,additions,multiplications`` line per query.

CLI:
    python -m bn_inference.batch input.txt -o output.txt --config batch.yaml
"""

from __future__ import annotations

import argparse
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from bn_inference.elimination_order import ELIMINATION_ORDERS
from bn_inference.inference_discrete import answer_query
from bn_inference.network import NetworkGraph
from bn_inference.query_parsing import parse_query_line
from bn_inference.xml_parser import read_network_xml
from bn_inference.yaml_utils import load_yaml


@dataclass
class BatchConfig:
    elimination_order: str = "lexicographic"
    use_cpt_shortcut: bool = True
    precision: int = 5
    verbose: bool = False
    output: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BatchConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown batch configuration keys: {unknown}. Expected a subset of {sorted(known)}")
        config = cls(**data)
        if config.elimination_order not in ELIMINATION_ORDERS:
            raise ValueError(
                f"Unknown elimination order '{config.elimination_order}'. Choose one of {sorted(ELIMINATION_ORDERS)}"
            )
        return config


def read_input_file(path: Union[str, Path]) -> Tuple[Path, List[str]]:
    """Return the resolved network path and the query lines."""
    path = Path(path)
    lines = [line.strip() for line in path.read_text(encoding="utf-8").splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise ValueError(f"Input file {path} is empty; expected a network file name on the first line")
    network_path = Path(lines[0])
    if not network_path.is_absolute():
        network_path = path.parent / network_path
    return network_path, lines[1:]


def answer_lines(network: NetworkGraph, query_lines: Sequence[str], config: BatchConfig) -> List[str]:
    results: List[str] = []
    for line in tqdm(query_lines, desc=f"Queries on {network.name}", disable=not config.verbose):
        query = parse_query_line(line)
        result = answer_query(
            query,
            network,
            order=config.elimination_order,
            use_cpt_shortcut=config.use_cpt_shortcut,
            verbose=False,
        )
        formatted = result.format(config.precision)
        if config.verbose:
            tqdm.write(f"{line} -> {formatted}")
        results.append(formatted)
    return results


def run_input_file(input_path: Union[str, Path], config: Optional[BatchConfig] = None) -> List[str]:
    config = config or BatchConfig()
    network_path, query_lines = read_input_file(input_path)
    network = read_network_xml(network_path, verbose=config.verbose)
    return answer_lines(network, query_lines, config)


def _build_config(args: argparse.Namespace) -> BatchConfig:
    data: Dict[str, Any] = load_yaml(args.config) if args.config else {}
    config = BatchConfig.from_dict(data)
    overrides = asdict(config)
    if args.order is not None:
        overrides["elimination_order"] = args.order
    if args.no_shortcut:
        overrides["use_cpt_shortcut"] = False
    if args.verbose:
        overrides["verbose"] = True
    if args.output is not None:
        overrides["output"] = str(args.output)
    return BatchConfig.from_dict(overrides)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Answer the queries of an input file with exact inference")
    parser.add_argument("input", type=Path, help="Input file: network XML name, then one query per line")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output file (default: output.txt beside the input)")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with batch settings")
    parser.add_argument("--order", type=str, default=None, choices=sorted(ELIMINATION_ORDERS), help="Elimination order for algorithm 2")
    parser.add_argument("--no-shortcut", action="store_true", help="Always run the full algorithm, never read the answer from a CPT")
    parser.add_argument("--verbose", action="store_true", help="Print progress and per-query results")

    args = parser.parse_args(argv)
    config = _build_config(args)

    results = run_input_file(args.input, config)

    output = Path(config.output) if config.output else args.input.parent / "output.txt"
    output.write_text("".join(f"{r}\n" for r in results), encoding="utf-8")
    if config.verbose:
        print(f"Wrote {len(results)} results to {output}")


if __name__ == "__main__":
    main()
