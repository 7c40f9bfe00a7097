from __future__ import annotations

import pytest

from bn_inference.batch import BatchConfig, main, read_input_file, run_input_file
from bn_inference.exceptions import QueryError
from bn_inference.yaml_utils import load_yaml

INPUT = """alarm_net.xml
P(B=T|J=T,M=T),1
P(B=T|J=T,M=T),2

P(J=T,M=T,A=T,B=F,E=F)
"""


@pytest.fixture
def input_file(tmp_path, alarm_xml):
    (tmp_path / "alarm_net.xml").write_text(alarm_xml)
    path = tmp_path / "input.txt"
    path.write_text(INPUT)
    return path


def test_read_input_file(input_file):
    network_path, queries = read_input_file(input_file)
    assert network_path == input_file.parent / "alarm_net.xml"
    assert queries == ["P(B=T|J=T,M=T),1", "P(B=T|J=T,M=T),2", "P(J=T,M=T,A=T,B=F,E=F)"]


def test_empty_input_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("\n\n")
    with pytest.raises(ValueError, match="empty"):
        read_input_file(path)


def test_run_input_file(input_file):
    lines = run_input_file(input_file)
    assert lines[0] == "0.28417,7,32"
    assert lines[1] == "0.28417,7,16"
    assert lines[2] == "0.00063,0,4"


def test_run_input_file_bad_algorithm(tmp_path, alarm_xml):
    (tmp_path / "alarm_net.xml").write_text(alarm_xml)
    path = tmp_path / "input.txt"
    path.write_text("alarm_net.xml\nP(B=T|J=T),3\n")
    with pytest.raises(QueryError):
        run_input_file(path)


def test_batch_config_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown batch configuration keys"):
        BatchConfig.from_dict({"elimination_ordr": "min_fill"})
    with pytest.raises(ValueError, match="Unknown elimination order"):
        BatchConfig.from_dict({"elimination_order": "random"})


def test_load_yaml_empty(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_yaml(path) == {}


def test_main_writes_default_output(input_file):
    main([str(input_file)])
    output = input_file.parent / "output.txt"
    assert output.read_text().splitlines() == ["0.28417,7,32", "0.28417,7,16", "0.00063,0,4"]


def test_main_with_config_and_overrides(input_file, tmp_path):
    config = tmp_path / "batch.yaml"
    config.write_text("precision: 3\nelimination_order: min_degree\nuse_cpt_shortcut: true\n")
    output = tmp_path / "results" / "out.txt"
    output.parent.mkdir()

    main([str(input_file), "--config", str(config), "-o", str(output), "--order", "min_fill"])
    lines = output.read_text().splitlines()
    assert lines[0] == "0.284,7,32"
    assert lines[1].startswith("0.284,")
