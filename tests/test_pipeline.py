"""
Tests for the generation pipeline: hook ordering, abort semantics and writing.
"""
import io
import json
from unittest.mock import Mock

import pytest
import yaml

from rest_spec_generator.config import GenerationConfig
from rest_spec_generator.exceptions import ConfigurationError, HookError, SpecWriteError
from rest_spec_generator.pipeline import generate, serialize_spec, write_spec


def test_hooks_run_in_order_against_the_same_document(pet_graph):
    calls = []
    seen = {}

    def pre_generate(graph, doc):
        calls.append("pre_generate")
        seen["pre_has_users"] = "/users" in doc["paths"]
        doc["paths"]["/health"] = {"get": {"operationId": "health", "responses": {"200": {"description": "OK"}}}}

    def post_generate(graph, doc):
        calls.append("post_generate")
        seen["post_has_users"] = "/users" in doc["paths"]
        seen["post_read_has_404"] = "404" in doc["paths"]["/users/{id}"]["get"]["responses"]
        doc["paths"]["/status"] = {"get": {"operationId": "status", "responses": {}}}

    def pre_write(doc):
        calls.append("pre_write")
        seen["status_has_500"] = "500" in doc["paths"]["/status"]["get"]["responses"]
        doc["info"]["x-generated"] = True

    writer = io.StringIO()
    config = GenerationConfig(
        writer=writer,
        pre_generate_hook=pre_generate,
        post_generate_hook=post_generate,
        pre_write_hook=pre_write,
    )

    doc = generate(pet_graph, config)

    assert calls == ["pre_generate", "post_generate", "pre_write"]
    assert seen == {
        "pre_has_users": False,
        "post_has_users": True,
        "post_read_has_404": False,
        "status_has_500": True,
    }
    written = json.loads(writer.getvalue())
    assert written == doc
    assert written["info"]["x-generated"] is True
    assert "/health" in written["paths"]
    assert "404" in written["paths"]["/health"]["get"]["responses"]


@pytest.mark.parametrize("failing", ["pre_generate_hook", "post_generate_hook", "pre_write_hook"])
def test_hook_failure_aborts_without_writing(pet_graph, failing):
    writer = io.StringIO()
    later = Mock()
    cause = RuntimeError("boom")

    def fail(*args):
        raise cause

    hooks = {"pre_generate_hook": later, "post_generate_hook": later, "pre_write_hook": later}
    hooks[failing] = fail
    config = GenerationConfig(writer=writer, **hooks)

    with pytest.raises(HookError) as excinfo:
        generate(pet_graph, config)

    assert excinfo.value.__cause__ is cause
    assert excinfo.value.context["hook"] == failing
    assert writer.getvalue() == ""
    # Hooks after the failing one never run.
    order = list(hooks)
    assert later.call_count == order.index(failing)


def test_invalid_config_writes_nothing(pet_graph, tmp_path):
    config = GenerationConfig(output_dir=str(tmp_path), global_error_responses={302: {"description": "Found"}})

    with pytest.raises(ConfigurationError):
        generate(pet_graph, config)

    assert list(tmp_path.iterdir()) == []


def test_writes_json_to_output_dir(pet_graph, tmp_path):
    config = GenerationConfig(output_dir=str(tmp_path / "rest"))

    doc = generate(pet_graph, config)

    path = tmp_path / "rest" / "openapi.json"
    assert path.is_file()
    assert json.loads(path.read_text(encoding="utf-8")) == doc


def test_writes_yaml_for_yaml_filename(pet_graph, tmp_path):
    config = GenerationConfig(output_dir=str(tmp_path), spec_filename="openapi.yaml")

    doc = generate(pet_graph, config)

    loaded = yaml.safe_load((tmp_path / "openapi.yaml").read_text(encoding="utf-8"))
    assert loaded["paths"].keys() == doc["paths"].keys()


def test_writer_failure_is_reported(pet_graph):
    writer = Mock()
    writer.write.side_effect = OSError("disk full")

    with pytest.raises(SpecWriteError):
        generate(pet_graph, GenerationConfig(writer=writer))


def test_write_spec_returns_path(tmp_path):
    config = GenerationConfig(output_dir=str(tmp_path)).validate()
    assert write_spec({"openapi": "3.0.3"}, config) == tmp_path / "openapi.json"


def test_serialize_spec_keeps_key_order():
    text = serialize_spec({"openapi": "3.0.3", "info": {}, "paths": {}}, "yaml")
    assert text.splitlines()[0] == "openapi: 3.0.3"


def test_renderer_called_only_with_handler(pet_graph):
    renderer = Mock()

    generate(pet_graph, GenerationConfig(writer=io.StringIO()), renderer=renderer)
    renderer.render.assert_not_called()

    config = GenerationConfig(writer=io.StringIO(), handler="fastapi", with_testing=True)
    doc = generate(pet_graph, config, renderer=renderer)
    renderer.render.assert_called_once_with(pet_graph, config, doc)
    assert config.with_testing is True


def test_missing_renderer_is_not_fatal(pet_graph):
    writer = io.StringIO()
    generate(pet_graph, GenerationConfig(writer=writer, handler="generic"))
    assert "/openapi.json" in json.loads(writer.getvalue())["paths"]
