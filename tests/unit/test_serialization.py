"""
Unit tests for document persistence (JSON layer list).
"""

import json

import pytest

from pcs.core.serialization import (
    dumps_layers,
    layers_from_data,
    load_layers,
    loads_layers,
    save_layers,
)
from pcs.core.version import SCHEMA_VERSION
from pcs.utils.errors import PcsIOError, PcsValidationError


class TestSaveLoad:
    """Tests for save_layers / load_layers."""

    def test_roundtrip(self, temp_dir, simple_layer, line_layer, compound_layer):
        layers = [simple_layer, line_layer, compound_layer]
        path = save_layers(layers, temp_dir / "doc.json")
        assert path.exists()
        assert load_layers(path) == layers

    def test_adds_json_suffix(self, temp_dir, simple_layer):
        path = save_layers([simple_layer], temp_dir / "doc")
        assert path.suffix == ".json"
        assert not path.with_suffix(".json.tmp").exists()

    def test_envelope(self, simple_layer):
        data = json.loads(dumps_layers([simple_layer]))
        assert data["schema_version"] == SCHEMA_VERSION
        assert data["app"]["name"] == "PolyCurveStudio"
        assert data["layers"][0]["id"] == "sq"

    def test_missing_file(self, temp_dir):
        with pytest.raises(PcsIOError):
            load_layers(temp_dir / "nope.json")

    def test_malformed_json_in_file(self, temp_dir):
        p = temp_dir / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(PcsValidationError) as exc:
            load_layers(p)
        assert "bad.json" in str(exc.value)


class TestParse:
    """Tests for loads_layers / layers_from_data."""

    def test_bare_array(self, line_layer):
        raw = json.dumps([line_layer.to_dict()])
        assert loads_layers(raw) == [line_layer]

    def test_malformed(self):
        with pytest.raises(PcsValidationError):
            loads_layers("[1, 2")

    def test_duplicate_ids(self, simple_layer):
        d = simple_layer.to_dict()
        with pytest.raises(PcsValidationError):
            layers_from_data([d, d])

    def test_future_schema(self):
        with pytest.raises(PcsValidationError):
            layers_from_data({"schema_version": SCHEMA_VERSION + 1, "layers": []})

    def test_missing_layers_key(self):
        with pytest.raises(PcsValidationError):
            layers_from_data({"schema_version": SCHEMA_VERSION})

    def test_bad_root(self):
        with pytest.raises(PcsValidationError):
            layers_from_data("layers")

    def test_empty_document(self):
        assert loads_layers(dumps_layers([])) == []
