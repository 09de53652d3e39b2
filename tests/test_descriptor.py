"""Tests for descriptor parsing and file loading."""

import json
import tempfile
from pathlib import Path

import pytest

from mcp_server.contexts.descriptor import (
    DescriptorError,
    definition_to_dict,
    is_descriptor_file,
    load_descriptor_file,
    parse_descriptor,
)
from mcp_server.contexts.models import ContextDefinition, ContextType

EXAMPLE_DIR = Path(__file__).resolve().parent.parent / "contexts"


def test_parse_minimal_descriptor_fills_defaults():
    ctx = parse_descriptor({"id": "x", "name": "X", "type": "oracle"})

    assert ctx.id == "x"
    assert ctx.type == ContextType.ORACLE
    assert ctx.description == ""
    assert ctx.capabilities == []
    assert ctx.endpoint is None
    assert ctx.pubkey is None
    assert ctx.auth_required is False
    assert ctx.schema is None


def test_parse_full_descriptor():
    ctx = parse_descriptor(
        {
            "id": "jupiter-dex-v4",
            "name": "Jupiter Aggregator",
            "description": "A liquidity aggregator",
            "type": "DEX",
            "capabilities": ["token_swaps"],
            "endpoint": "https://quote-api.jup.ag/v4",
            "pubkey": "JUP4Fb2cqiRUcaTHdrPC8h2gNsA2ETXiPDD33WcGuJB",
            "authRequired": True,
            "schema": {"swap": {"inputMint": "string"}},
            "unexpected": "ignored",
        }
    )

    assert ctx.type == ContextType.DEX
    assert ctx.auth_required is True
    assert ctx.schema == {"swap": {"inputMint": "string"}}
    assert ctx.pubkey.startswith("JUP4")


def test_parse_accepts_python_field_names():
    ctx = parse_descriptor({"id": "x", "name": "X", "type": "dex", "auth_required": True})
    assert ctx.auth_required is True


def test_parse_null_optionals():
    ctx = parse_descriptor(
        {"id": "x", "name": "X", "type": "dex", "description": None, "capabilities": None}
    )
    assert ctx.description == ""
    assert ctx.capabilities == []


@pytest.mark.parametrize(
    "data",
    [
        {"name": "X", "type": "dex"},
        {"id": "", "name": "X", "type": "dex"},
        {"id": "x", "type": "dex"},
        {"id": "x", "name": "X"},
        {"id": "x", "name": "X", "type": "casino"},
        {"id": "x", "name": "X", "type": "dex", "capabilities": "token_swaps"},
    ],
)
def test_parse_rejects_invalid(data):
    with pytest.raises(DescriptorError):
        parse_descriptor(data)


def test_parse_rejects_non_mapping():
    with pytest.raises(DescriptorError, match="mapping"):
        parse_descriptor(["id", "x"])


def test_load_yaml_and_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        yml = Path(tmpdir) / "a.yml"
        yml.write_text("id: a\nname: A\ntype: storage\ncapabilities:\n  - pinning\n")
        js = Path(tmpdir) / "b.json"
        js.write_text(json.dumps({"id": "b", "name": "B", "type": "identity"}))

        assert load_descriptor_file(yml).capabilities == ["pinning"]
        assert load_descriptor_file(js).type == ContextType.IDENTITY


def test_load_error_names_the_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "bad.json"
        path.write_text("{")

        with pytest.raises(DescriptorError, match="bad.json"):
            load_descriptor_file(path)


def test_load_empty_yaml_is_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "empty.yaml"
        path.write_text("")

        with pytest.raises(DescriptorError):
            load_descriptor_file(path)


def test_load_unsupported_suffix():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "ctx.toml"
        path.write_text("id = 'x'")

        with pytest.raises(DescriptorError, match="unsupported"):
            load_descriptor_file(path)


def test_load_missing_file():
    with pytest.raises(DescriptorError, match="cannot read"):
        load_descriptor_file("/nonexistent/ctx.yaml")


def test_is_descriptor_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        for name in ("a.yaml", "b.YML", "c.json", "d.txt"):
            (Path(tmpdir) / name).write_text("")
        (Path(tmpdir) / "dir.yaml").mkdir()

        found = sorted(p.name for p in Path(tmpdir).iterdir() if is_descriptor_file(p))
        assert found == ["a.yaml", "b.YML", "c.json"]


def test_definition_to_dict_uses_wire_keys():
    ctx = ContextDefinition(id="x", name="X", type=ContextType.SOCIAL, auth_required=True)
    data = definition_to_dict(ctx)

    assert data == {
        "id": "x",
        "name": "X",
        "description": "",
        "type": "social",
        "capabilities": [],
        "authRequired": True,
    }
    assert parse_descriptor(data) == ctx


def test_shipped_descriptors_are_valid():
    paths = sorted(p for p in EXAMPLE_DIR.iterdir() if is_descriptor_file(p))
    assert paths
    ids = {load_descriptor_file(p).id for p in paths}
    assert {"jupiter-dex-v4", "magiceden-v2"} <= ids
