"""
Tests for the rest-spec-gen command line entry point.
"""
import json
import textwrap

import pytest
import yaml

from rest_spec_generator import cli
from rest_spec_generator.graph import SchemaGraph


GRAPH_MODULE = textwrap.dedent(
    """
    from rest_spec_generator.graph import FieldInfo, SchemaGraph, SchemaInfo

    graph = SchemaGraph([SchemaInfo("Book", fields=[FieldInfo("title", filter=["GROUP_CONTAINS"])])])

    def make_graph():
        return graph

    not_a_graph = 42
    """
)


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep the CLI from replacing pytest's log handlers."""
    monkeypatch.setattr(cli, "setup_colored_logging", lambda **kwargs: None)


@pytest.fixture
def graph_module(tmp_path, monkeypatch):
    (tmp_path / "library_graph.py").write_text(GRAPH_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "library_graph"


def test_validate_prints_normalized_config(tmp_path, capsys):
    config_file = tmp_path / "rest.yaml"
    config_file.write_text("itemsPerPage: 500\nmaxItemsPerPage: 50\n", encoding="utf-8")

    assert cli.main(["validate", "-c", str(config_file)]) == 0

    printed = yaml.safe_load(capsys.readouterr().out)
    assert printed["itemsPerPage"] == 50
    assert printed["minItemsPerPage"] == 1
    assert printed["defaultOperations"] == ["create", "read", "update", "delete", "list"]


def test_validate_reports_config_errors(tmp_path):
    config_file = tmp_path / "rest.yaml"
    config_file.write_text("handler: chi\n", encoding="utf-8")

    assert cli.main(["validate", "-c", str(config_file)]) == 1


def test_generate_writes_spec(tmp_path, graph_module):
    out_dir = tmp_path / "out"

    code = cli.main(["--no-color", "generate", "-g", f"{graph_module}:graph", "-o", str(out_dir)])

    assert code == 0
    doc = json.loads((out_dir / "openapi.json").read_text(encoding="utf-8"))
    names = [p["name"] for p in doc["paths"]["/books"]["get"]["parameters"]]
    assert "title.contains" in names
    assert "title.null" in names


def test_output_dir_flag_overrides_config(tmp_path, graph_module):
    config_file = tmp_path / "rest.yaml"
    config_file.write_text(f"outputDir: {tmp_path / 'from_file'}\n", encoding="utf-8")

    cli.main(["generate", "-c", str(config_file), "-g", f"{graph_module}:graph", "-o", str(tmp_path / "from_flag")])

    assert (tmp_path / "from_flag" / "openapi.json").is_file()
    assert not (tmp_path / "from_file").exists()


def test_generate_reports_bad_graph_reference(graph_module, tmp_path):
    out = str(tmp_path)
    assert cli.main(["generate", "-g", f"{graph_module}:not_a_graph", "-o", out]) == 1
    assert cli.main(["generate", "-g", f"{graph_module}:missing", "-o", out]) == 1
    assert cli.main(["generate", "-g", "no_such_module_here:graph", "-o", out]) == 1


def test_generation_bugs_are_not_reported_as_graph_errors(graph_module, tmp_path, monkeypatch):
    """Only the graph import is guarded; failures inside generation propagate."""
    def broken_generate(graph, config):
        raise AttributeError("'NoneType' object has no attribute 'name'")

    monkeypatch.setattr(cli, "generate", broken_generate)

    with pytest.raises(AttributeError):
        cli.main(["generate", "-g", f"{graph_module}:graph", "-o", str(tmp_path)])


def test_load_graph_accepts_factories(graph_module):
    graph = cli.load_graph(f"{graph_module}:make_graph")
    assert isinstance(graph, SchemaGraph)
    assert graph.get("Book") is not None


def test_load_graph_requires_attribute():
    with pytest.raises(ValueError):
        cli.load_graph("just_a_module")
