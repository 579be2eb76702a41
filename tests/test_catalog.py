"""Unit tests for catalog models and loading."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from conftool.catalog import Catalog, CatalogEntry, EntryType
from conftool.errors import (
    CatalogError,
    CycleDetectedError,
    DuplicateNodeError,
    IncompleteGraphError,
    NotASwitchError,
    SelfDependencyError,
)


@pytest.fixture
def catalog_document(entry) -> dict:
    """Fixture providing a raw catalog document."""
    return {
        "entries": [
            entry("CONFIG_NET", ["CONFIG_BASE"], help="Networking"),
            entry("CONFIG_BASE", default="y"),
            entry("CONFIG_PORT", ["CONFIG_NET"], entrytype="integer", default=8080),
        ],
    }


class TestCatalogEntry:
    """Tests for CatalogEntry model."""

    def test_valid_switch_entry(self, entry):
        """Test creating a switch entry."""
        ent = CatalogEntry(**entry("CONFIG_TEST", ["CONFIG_A"], default="y", help="Test"))

        assert ent.entrytype is EntryType.SWITCH
        assert ent.is_switch
        assert ent.depends == ["CONFIG_A"]
        assert ent.is_enabled_by_default()
        assert ent.default_value() == "y"

    def test_integer_default_value_rendered_as_string(self, entry):
        """Test that integer defaults are written as plain digits."""
        ent = CatalogEntry(**entry("CONFIG_PORT", entrytype="integer", default=8080))

        assert not ent.is_switch
        assert ent.default_value() == "8080"

    def test_invalid_switch_default(self, entry):
        """Test that switch defaults must be y or n."""
        with pytest.raises(ValidationError, match="Invalid switch default"):
            CatalogEntry(**entry("CONFIG_TEST", default="maybe"))

    def test_integer_default_must_be_integer(self, entry):
        """Test that integer options reject string defaults."""
        with pytest.raises(ValidationError, match="non-negative integer default"):
            CatalogEntry(**entry("CONFIG_PORT", entrytype="integer", default="8080"))

    def test_integer_default_must_be_non_negative(self, entry):
        """Test that integer defaults must be unsigned."""
        with pytest.raises(ValidationError, match="non-negative integer default"):
            CatalogEntry(**entry("CONFIG_PORT", entrytype="integer", default=-1))

    def test_string_default_must_be_string(self, entry):
        """Test that string options reject integer defaults."""
        with pytest.raises(ValidationError, match="needs a string default"):
            CatalogEntry(**entry("CONFIG_HOST", entrytype="string", default=5))

    def test_default_must_be_a_choice(self, entry):
        """Test that the default must belong to the choice set."""
        with pytest.raises(ValidationError, match="not one of its choices"):
            CatalogEntry(
                **entry("CONFIG_MODE", entrytype="string", default="slow", choices=["fast", "safe"]),
            )

    def test_unknown_entry_type(self, entry):
        """Test that unsupported entry types are rejected."""
        with pytest.raises(ValidationError):
            CatalogEntry(**entry("CONFIG_TEST", entrytype="float", default="1.0"))

    def test_invalid_name(self, entry):
        """Test that option names are restricted to identifier characters."""
        with pytest.raises(ValidationError):
            CatalogEntry(**entry("CONFIG TEST"))

    def test_is_enabled_by_default_requires_switch(self, entry):
        """Test that non-switch entries have no enabled state."""
        ent = CatalogEntry(**entry("CONFIG_HOST", entrytype="string", default="localhost"))

        with pytest.raises(NotASwitchError):
            ent.is_enabled_by_default()


class TestCatalog:
    """Tests for Catalog lookup and graph construction."""

    def test_lookup(self, catalog_document):
        """Test looking up entries by name."""
        catalog = Catalog(**catalog_document)

        assert len(catalog) == 3
        assert "CONFIG_NET" in catalog
        assert "CONFIG_MISSING" not in catalog
        assert catalog.get("CONFIG_PORT").entrytype is EntryType.INTEGER
        assert catalog.get("CONFIG_MISSING") is None
        assert catalog.names() == ["CONFIG_NET", "CONFIG_BASE", "CONFIG_PORT"]

    def test_build_graph_with_forward_references(self, catalog_document):
        """Test that the graph resolves dependencies declared later."""
        graph = Catalog(**catalog_document).build_graph()

        assert graph.is_sealed
        assert graph.dependencies_of("CONFIG_PORT") == ["CONFIG_NET", "CONFIG_BASE"]
        assert graph.dependent_vertices("CONFIG_BASE") == ["CONFIG_NET", "CONFIG_PORT"]

    def test_build_graph_duplicate_names(self, entry):
        """Test that duplicate option names are rejected."""
        catalog = Catalog(entries=[entry("A"), entry("A")])

        with pytest.raises(DuplicateNodeError):
            catalog.build_graph()

    def test_build_graph_self_dependency(self, entry):
        """Test that an option depending on itself is rejected."""
        catalog = Catalog(entries=[entry("A", ["A"])])

        with pytest.raises(SelfDependencyError):
            catalog.build_graph()

    def test_build_graph_undefined_dependency(self, entry):
        """Test that a dependency on an undeclared option is rejected."""
        catalog = Catalog(entries=[entry("A", ["UNDECLARED"])])

        with pytest.raises(IncompleteGraphError):
            catalog.build_graph()

    def test_build_graph_cycle(self, entry):
        """Test that cyclic declarations are rejected."""
        catalog = Catalog(entries=[entry("A", ["B"]), entry("B", ["C"]), entry("C", ["A"])])

        with pytest.raises(CycleDetectedError):
            catalog.build_graph()


class TestCatalogLoading:
    """Tests for Catalog.from_file."""

    def test_load_json(self, tmp_path: Path, catalog_document):
        """Test loading a JSON catalog."""
        path = tmp_path / ".conftool.json"
        path.write_text(json.dumps(catalog_document, indent="\t"))

        catalog = Catalog.from_file(path)

        assert catalog.names() == ["CONFIG_NET", "CONFIG_BASE", "CONFIG_PORT"]
        assert catalog.get("CONFIG_NET").help == "Networking"

    def test_load_yaml(self, tmp_path: Path, catalog_document):
        """Test loading a YAML catalog."""
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.dump(catalog_document))

        catalog = Catalog.from_file(path)

        assert len(catalog) == 3

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing catalog raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="does not exist"):
            Catalog.from_file(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path: Path):
        """Test that unparsable documents raise CatalogError."""
        path = tmp_path / "broken.json"
        path.write_text('{"entries": [')

        with pytest.raises(CatalogError, match="Invalid catalog document"):
            Catalog.from_file(path)

    def test_document_not_a_mapping(self, tmp_path: Path):
        """Test that a top-level list is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[]")

        with pytest.raises(CatalogError, match="must be a mapping"):
            Catalog.from_file(path)

    def test_invalid_entry(self, tmp_path: Path, entry):
        """Test that schema violations are reported as CatalogError."""
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps({"entries": [entry("A", default="maybe")]}))

        with pytest.raises(CatalogError, match="Invalid switch default"):
            Catalog.from_file(path)

    def test_invalid_utf8(self, tmp_path: Path):
        """Test that undecodable documents raise CatalogError."""
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"entries": [{"name": "\xff"}]}')

        with pytest.raises(CatalogError, match="Invalid catalog document"):
            Catalog.from_file(path)
